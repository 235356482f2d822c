"""Tests for reporting table/summary reshaping."""
from __future__ import annotations

import pytest

from src.models.envelope import to_jsonable
from src.services.mock_data import RAW_REPORTING_SUMMARY, RAW_REPORTING_TABLE
from src.services.reporting import ratio, transform, transform_row, transform_summary


class TestRatio:
    @pytest.mark.parametrize("num,den,scale,expected", [
        (62, 1420, 100, "4.37"),
        (2790.0, 1420, 1, "1.96"),
        (1, 3, 1, "0.33"),
        (5, 0, 100, "0.00"),
        (0, 0, 1, "0.00"),
    ])
    def test_ratio(self, num, den, scale, expected):
        assert ratio(num, den, scale) == expected


class TestTransformRow:
    def test_ratios_and_dimensions(self):
        row = transform_row(RAW_REPORTING_TABLE["table"][0])
        assert row.total_clicks == 1420
        assert row.conversions == 62
        assert row.conversion_rate == "4.37"
        assert row.ctr == "7.80"
        assert row.epc == "1.96"
        assert row.rpc == "2.84"
        assert row.offer.id == "3"
        assert row.affiliate.id == "4"
        assert row.advertiser is None
        assert set(row.dimensions) == {"offer", "affiliate"}

    def test_zero_clicks_read_zero(self):
        row = transform_row(RAW_REPORTING_TABLE["table"][-1])
        assert (row.conversion_rate, row.ctr, row.epc, row.rpc) == ("0.00", "0.00", "0.00", "0.00")

    def test_unnamed_dimension_kept_in_dimensions(self):
        row = transform_row({
            "columns": [{"column_type": "country", "id": "US", "label": "United States"}],
            "reporting": {"total_click": 10, "cv": 1},
        })
        assert row.dimensions["country"].name == "United States"
        assert row.offer is None
        assert row.conversion_rate == "10.00"

    def test_malformed_row(self):
        row = transform_row("junk")
        assert row.total_clicks == 0
        assert row.dimensions == {}

    def test_serialized_with_camel_case_rate(self):
        data = to_jsonable(transform_row(RAW_REPORTING_TABLE["table"][0]))
        assert data["conversionRate"] == "4.37"
        assert data["offer"] == {"id": "3", "name": data["dimensions"]["offer"]["name"]}


class TestTransform:
    def test_table(self):
        rows = transform(RAW_REPORTING_TABLE)
        assert len(rows) == 5

    @pytest.mark.parametrize("raw", [None, {}, {"table": None}, {"table": "x"}, []])
    def test_malformed_table(self, raw):
        assert transform(raw) == []


class TestSummary:
    def test_conversion_rate_from_cvr(self):
        summary = transform_summary(RAW_REPORTING_SUMMARY)
        assert summary.metrics.conversion_rate == "4.02"
        assert summary.metrics.total_clicks == 5670
        assert summary.metrics.profit == pytest.approx(2714.0)
        assert summary.raw == RAW_REPORTING_SUMMARY

    def test_missing_cvr(self):
        assert transform_summary({"total_click": 5}).metrics.conversion_rate == "0.00"

    def test_serialized_keys(self):
        data = to_jsonable(transform_summary(RAW_REPORTING_SUMMARY))
        metrics = data["metrics"]
        assert metrics["totalClicks"] == 5670
        assert metrics["uniqueClicks"] == 5107
        assert metrics["grossSales"] == pytest.approx(27702.4)
        assert "mediaBuyingCost" in metrics

    def test_non_dict(self):
        assert transform_summary(None).metrics.total_clicks == 0

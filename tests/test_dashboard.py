"""Tests for dashboard KPIs and the two-period concurrent fetch."""
from __future__ import annotations

import asyncio
import json
from datetime import date

import httpx
import pytest

from src.services import mock_data
from src.services.dashboard import build_summary, dashboard_summary, date_ranges, trend
from src.upstream.client import UpstreamClient
from tests.conftest import NO_KEY_CREDENTIAL, TEST_CREDENTIAL

TODAY = date(2025, 1, 15)


def _cv(offer_id, revenue, payout, affiliate_id=1):
    return {
        "revenue": revenue,
        "payout": payout,
        "relationship": {
            "offer": {"network_offer_id": offer_id, "name": f"Offer {offer_id}"},
            "affiliate": {"network_affiliate_id": affiliate_id, "name": f"Affiliate {affiliate_id}"},
        },
    }


CURRENT = [_cv(1, 100, 60), _cv(2, 50, 60)]
PREVIOUS = [_cv(1, 50, 35)]


def test_date_ranges():
    assert date_ranges(TODAY) == {
        "current": {"from": "2025-01-08", "to": "2025-01-15"},
        "previous": {"from": "2025-01-01", "to": "2025-01-08"},
    }


class TestTrend:
    def test_percent_change(self):
        assert trend(150, 100) == pytest.approx(50.0)
        assert trend(50, 100) == pytest.approx(-50.0)

    def test_zero_baseline(self):
        assert trend(10, 0) == 100.0
        assert trend(0, 0) == 0.0


class TestBuildSummary:
    def test_kpis(self):
        summary = build_summary(CURRENT, PREVIOUS)
        assert summary["totalRevenue"] == 150
        assert summary["totalPayout"] == 120
        assert summary["totalProfit"] == 30
        assert summary["totalConversions"] == 2
        assert summary["profitMargin"] == 20.0
        assert summary["eCPA"] == 60.0
        assert summary["offersWithProfit"] == 1
        assert summary["affiliatesWithProfit"] == 1
        assert summary["trends"] == {"profit": 100.0, "revenue": 200.0, "conversions": 100.0, "margin": -33.33}

    def test_empty_current_period(self):
        summary = build_summary([], PREVIOUS)
        assert summary["totalConversions"] == 0
        assert summary["eCPA"] == 0.0
        assert summary["profitMargin"] == 0.0
        assert summary["trends"]["profit"] == -100.0


def _client(handler) -> UpstreamClient:
    return UpstreamClient(TEST_CREDENTIAL, transport=httpx.MockTransport(handler))


class TestDashboardSummary:
    @pytest.mark.asyncio
    async def test_live_periods(self):
        seen = []

        def handler(request):
            body = json.loads(request.content)
            seen.append((body["from"], body["to"]))
            rows = CURRENT if body["from"] == "2025-01-08" else PREVIOUS
            return httpx.Response(200, json={"conversions": rows})

        client = _client(handler)
        try:
            outcome = await dashboard_summary(client, TODAY)
        finally:
            await client.close()

        assert sorted(seen) == [("2025-01-01", "2025-01-08"), ("2025-01-08", "2025-01-15")]
        assert outcome.using_mock_data is False
        assert outcome.data["totalProfit"] == 30
        assert outcome.data["trends"]["revenue"] == 200.0
        assert outcome.data["period"]["current"] == {"from": "2025-01-08", "to": "2025-01-15"}

    @pytest.mark.asyncio
    async def test_periods_fetched_concurrently(self):
        arrived = 0
        both_in_flight = asyncio.Event()

        async def handler(request):
            nonlocal arrived
            arrived += 1
            if arrived == 2:
                both_in_flight.set()
            await asyncio.wait_for(both_in_flight.wait(), timeout=2)
            return httpx.Response(200, json={"conversions": CURRENT})

        client = _client(handler)
        try:
            outcome = await dashboard_summary(client, TODAY)
        finally:
            await client.close()

        assert arrived == 2
        assert outcome.using_mock_data is False

    @pytest.mark.asyncio
    async def test_upstream_error_falls_back(self):
        client = _client(lambda request: httpx.Response(503))
        try:
            outcome = await dashboard_summary(client, TODAY)
        finally:
            await client.close()

        assert outcome.using_mock_data is True
        assert outcome.data == mock_data.FALLBACK_DASHBOARD_SUMMARY
        assert outcome.api_error.startswith("Upstream API error: 503")

    @pytest.mark.asyncio
    async def test_missing_array_falls_back(self):
        client = _client(lambda request: httpx.Response(200, json={"data": []}))
        try:
            outcome = await dashboard_summary(client, TODAY)
        finally:
            await client.close()

        assert outcome.using_mock_data is True
        assert "conversions" in outcome.api_error

    @pytest.mark.asyncio
    async def test_no_conversions_in_either_period(self):
        client = _client(lambda request: httpx.Response(200, json={"conversions": []}))
        try:
            outcome = await dashboard_summary(client, TODAY)
        finally:
            await client.close()

        assert outcome.using_mock_data is True
        assert outcome.api_error is None
        assert outcome.data == mock_data.FALLBACK_DASHBOARD_SUMMARY

    @pytest.mark.asyncio
    async def test_no_key_never_calls_upstream(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"conversions": CURRENT})

        client = UpstreamClient(NO_KEY_CREDENTIAL, transport=httpx.MockTransport(handler))
        try:
            outcome = await dashboard_summary(client, TODAY)
        finally:
            await client.close()

        assert calls == []
        assert outcome.using_mock_data is True

"""Reporting table/summary reshaping — flat rows with two-decimal ratio strings."""
from __future__ import annotations

from typing import Any

from src.models.entities import EntityRef, ReportingMetrics, ReportingRow, ReportingSummary
from src.services.normalizer import parse_currency, to_int, to_str

_NAMED_DIMENSIONS = ("offer", "affiliate", "advertiser")


def ratio(numerator: float, denominator: float, scale: float = 1.0) -> str:
    """numerator/denominator*scale as "%.2f"; "0.00" when the denominator is zero."""
    if not denominator:
        return "0.00"
    return f"{numerator / denominator * scale:.2f}"


def _dimension(col: dict) -> EntityRef:
    return EntityRef(id=to_str(col.get("id"), "unknown"), name=to_str(col.get("label"), "Unknown"))


def transform_row(row: Any) -> ReportingRow:
    row = row if isinstance(row, dict) else {}
    reporting = row.get("reporting") if isinstance(row.get("reporting"), dict) else {}
    columns = row.get("columns") if isinstance(row.get("columns"), list) else []

    clicks = to_int(reporting.get("total_click"))
    conversions = to_int(reporting.get("cv"))
    impressions = to_int(reporting.get("imp"))
    payout = parse_currency(reporting.get("payout"))
    revenue = parse_currency(reporting.get("revenue"))

    dimensions: dict[str, EntityRef] = {}
    for col in columns:
        if isinstance(col, dict) and col.get("column_type"):
            dimensions[str(col["column_type"])] = _dimension(col)

    return ReportingRow(
        total_clicks=clicks,
        unique_clicks=to_int(reporting.get("unique_click")),
        conversions=conversions,
        payout=payout,
        revenue=revenue,
        profit=parse_currency(reporting.get("profit")),
        gross_sales=parse_currency(reporting.get("gross_sales")),
        impressions=impressions,
        media_buying_cost=parse_currency(reporting.get("media_buying_cost")),
        conversion_rate=ratio(conversions, clicks, 100),
        ctr=ratio(clicks, impressions, 100),
        epc=ratio(payout, clicks),
        rpc=ratio(revenue, clicks),
        dimensions=dimensions,
        **{name: dimensions[name] for name in _NAMED_DIMENSIONS if name in dimensions},
    )


def transform(raw_table: Any) -> list[ReportingRow]:
    """``{"table": [...]}`` → rows. Missing or malformed table → []."""
    if not isinstance(raw_table, dict) or not isinstance(raw_table.get("table"), list):
        return []
    return [transform_row(row) for row in raw_table["table"]]


def transform_summary(raw_summary: Any) -> ReportingSummary:
    data = raw_summary if isinstance(raw_summary, dict) else {}
    cvr = data.get("cvr")
    return ReportingSummary(
        metrics=ReportingMetrics(
            total_clicks=to_int(data.get("total_click")),
            unique_clicks=to_int(data.get("unique_click")),
            conversions=to_int(data.get("cv")),
            conversion_rate=f"{parse_currency(cvr):.2f}" if cvr else "0.00",
            payout=parse_currency(data.get("payout")),
            revenue=parse_currency(data.get("revenue")),
            profit=parse_currency(data.get("profit")),
            gross_sales=parse_currency(data.get("gross_sales")),
            impressions=to_int(data.get("imp")),
            media_buying_cost=parse_currency(data.get("media_buying_cost")),
        ),
        raw=data,
    )

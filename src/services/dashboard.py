"""Dashboard KPIs — last 7 days vs the 7 days before, fetched concurrently."""
from __future__ import annotations

import asyncio
from datetime import date, timedelta
from typing import Any, Optional

from src.services import mock_data
from src.services import request_builder as rb
from src.services.fallback import FallbackResolver, extract_items
from src.services.network import Outcome
from src.services.normalizer import parse_currency
from src.services.profit_aggregator import aggregate
from src.upstream.client import UpstreamClient

PERIOD_DAYS = 7


def date_ranges(today: date) -> dict[str, dict[str, str]]:
    current_start = today - timedelta(days=PERIOD_DAYS)
    previous_start = current_start - timedelta(days=PERIOD_DAYS)
    return {
        "current": {"from": current_start.isoformat(), "to": today.isoformat()},
        "previous": {"from": previous_start.isoformat(), "to": current_start.isoformat()},
    }


def trend(current: float, previous: float) -> float:
    """Percent change; a zero baseline reads as +100% if anything happened, else 0."""
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


def period_totals(conversions: list[dict]) -> dict[str, Any]:
    revenue = sum(parse_currency(c.get("revenue")) for c in conversions)
    payout = sum(parse_currency(c.get("payout")) for c in conversions)
    profit = revenue - payout
    return {
        "revenue": revenue,
        "payout": payout,
        "profit": profit,
        "conversions": len(conversions),
        "margin": profit / revenue * 100 if revenue > 0 else 0.0,
    }


def build_summary(current: list[dict], previous: list[dict], ranges: Optional[dict] = None) -> dict[str, Any]:
    now, before = period_totals(current), period_totals(previous)
    limit = max(len(current), 1)
    return {
        "totalProfit": round(now["profit"], 2),
        "totalRevenue": round(now["revenue"], 2),
        "totalPayout": round(now["payout"], 2),
        "totalConversions": now["conversions"],
        "profitMargin": round(now["margin"], 2),
        "eCPA": round(now["payout"] / now["conversions"], 2) if now["conversions"] else 0.0,
        "offersWithProfit": sum(1 for r in aggregate(current, "offer", limit) if r.profit > 0),
        "affiliatesWithProfit": sum(1 for r in aggregate(current, "affiliate", limit) if r.profit > 0),
        "trends": {
            "profit": round(trend(now["profit"], before["profit"]), 2),
            "revenue": round(trend(now["revenue"], before["revenue"]), 2),
            "conversions": round(trend(now["conversions"], before["conversions"]), 2),
            "margin": round(trend(now["margin"], before["margin"]), 2),
        },
        "period": ranges or {},
    }


async def dashboard_summary(client: UpstreamClient, today: Optional[date] = None) -> Outcome:
    ranges = date_ranges(today or date.today())

    async def fetch(period: dict[str, str]) -> list[dict]:
        req = rb.build_profit_report(period["from"], period["to"])
        payload = await client.request(req.endpoint, req.method, req.body, req.scope)
        page = extract_items(payload, "conversions")
        if page is None:
            raise ValueError("conversion report missing 'conversions' array")
        return page.items

    async def call():
        current, previous = await asyncio.gather(fetch(ranges["current"]), fetch(ranges["previous"]))
        if not current and not previous:
            return []
        return [build_summary(current, previous, ranges)]

    resolver = FallbackResolver(client.has_credentials)
    result = await resolver.resolve("dashboard_summary", call, [mock_data.FALLBACK_DASHBOARD_SUMMARY])
    return Outcome(result.data[0], result.using_mock_data, result.api_error)

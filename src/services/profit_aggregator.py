"""Profit by offer or affiliate: groups raw conversion records into ranked ProfitRecords."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable, Optional

from src.models.entities import ProfitRecord
from src.services.normalizer import deep_get, parse_currency, to_str

GROUP_KEYS = {
    "offer": ("offer", "network_offer_id", "Unknown Offer"),
    "affiliate": ("affiliate", "network_affiliate_id", "Unknown Affiliate"),
}


def _money(value: Any) -> Decimal:
    # str() of a parsed float is its shortest repr, so "0.10" sums exactly
    return Decimal(str(parse_currency(value)))


def _entity_of(conversion: dict, group_by: str) -> tuple[str, str]:
    relation, id_key, unknown_name = GROUP_KEYS[group_by]
    entity = deep_get(conversion, "relationship", relation, default={})
    return (
        to_str(deep_get(entity, id_key), "unknown"),
        to_str(deep_get(entity, "name"), unknown_name),
    )


def aggregate(conversions: Iterable[Any], group_by: str = "offer", limit: int = 10) -> list[ProfitRecord]:
    """Sum revenue/payout per entity, rank by profit (descending), keep the top ``limit``.

    Sums are kept as Decimal so equal money profits rank as ties, and ties
    keep first-seen order. The first name seen for an entity ID is kept.
    Emitted ``profit`` is exactly ``revenue - payout`` of the emitted floats.
    """
    if group_by not in GROUP_KEYS:
        raise ValueError(f"group_by must be one of {sorted(GROUP_KEYS)}, got {group_by!r}")

    totals: dict[str, dict] = {}
    for conversion in conversions or []:
        if not isinstance(conversion, dict):
            continue
        entity_id, entity_name = _entity_of(conversion, group_by)
        revenue = _money(conversion.get("revenue"))
        payout = _money(conversion.get("payout"))

        entry = totals.setdefault(entity_id, {
            "id": entity_id, "name": entity_name,
            "profit": Decimal(0), "revenue": Decimal(0), "payout": Decimal(0), "conversions": 0,
        })
        entry["conversions"] += 1
        entry["revenue"] += revenue
        entry["payout"] += payout
        entry["profit"] += revenue - payout

    ranked = sorted(totals.values(), key=lambda e: e["profit"], reverse=True)
    return [_record(entry) for entry in ranked[:max(limit, 0)]]


def _record(entry: dict) -> ProfitRecord:
    revenue, payout = float(entry["revenue"]), float(entry["payout"])
    return ProfitRecord(
        id=entry["id"], name=entry["name"],
        revenue=revenue, payout=payout, profit=revenue - payout,
        conversions=entry["conversions"],
    )


def count_entities(conversions: Iterable[Any], group_by: str = "offer") -> int:
    return len({_entity_of(c, group_by)[0] for c in conversions or [] if isinstance(c, dict)})


def summarize_profits(
    conversions: list[Any],
    group_by: str = "offer",
    limit: int = 10,
    date_range: Optional[dict] = None,
) -> dict:
    """Data block for the profits endpoint: ranked records plus totals over all entities."""
    rows = [c for c in conversions or [] if isinstance(c, dict)]
    return {
        "profits": aggregate(rows, group_by, limit),
        "groupBy": group_by,
        "dateRange": date_range or {},
        "totalEntities": count_entities(rows, group_by),
        "totalConversions": len(rows),
    }

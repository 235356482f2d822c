"""Upstream request construction — endpoints, payloads and query strings. No I/O.

Each resource has one canonical endpoint. Where the network has historically
exposed a resource under more than one name, the alternatives are listed in
order and tried by the fallback resolver's strategy chain.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterable, Optional
from urllib.parse import quote, urlencode

from config.settings import settings
from src.upstream.client import Scope

DEFAULT_PAGE_SIZE = 50


class MissingDateRangeError(ValueError):
    """A date-range resource was requested without ``from`` and/or ``to``."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Missing required date range field(s): {', '.join(missing)}")


@dataclass(frozen=True)
class UpstreamRequest:
    endpoint: str
    method: str = "GET"
    body: Optional[dict] = None
    scope: Scope = Scope.NETWORK


@dataclass(frozen=True)
class TableResource:
    name: str
    strategies: tuple[tuple[str, str], ...]  # (endpoint, method), tried in order
    array_key: str
    default_filters: dict = field(default_factory=dict)
    relationship: Optional[str] = None


TABLE_RESOURCES: dict[str, TableResource] = {
    "offers": TableResource(
        "offers", (("offerstable", "POST"),), "offers",
        {"offer_status": "active"}, "visibility,ruleset,urls",
    ),
    "affiliates": TableResource(
        "affiliates", (("affiliatestable", "POST"),), "affiliates",
        {"account_status": "active"}, "signup,users",
    ),
    "advertisers": TableResource(
        "advertisers", (("advertiserstable", "POST"), ("advertisers", "GET")), "advertisers",
    ),
    "deals": TableResource(
        "deals", (("dealstable", "POST"), ("advertiserdeals", "POST")), "deals",
    ),
    "coupon_codes": TableResource(
        "coupon_codes", (("couponcodestable", "POST"), ("couponcodes", "GET")), "coupon_codes",
    ),
}

AFFILIATE_OFFER_ENDPOINTS = {"runnable": "offersrunnable", "all": "alloffers"}

REPORTING_ENDPOINTS = {
    "table": "reporting/entity/table",
    "summary": "reporting/entity/summary",
    "export": "reporting/entity/table/export",
}

APPROVED_STATUS_FILTER = {"filter_id_value": "approved", "resource_type": "status"}


# ── Helpers ─────────────────────────────────────────────


def filters_to_map(filters: Optional[Iterable[dict[str, Any]]]) -> dict[str, Any]:
    """Reduce ``[{field, value}]`` (or single-key dicts) into a field→value map. Later wins."""
    out: dict[str, Any] = {}
    for item in filters or []:
        if not isinstance(item, dict):
            continue
        if "field" in item:
            out[str(item["field"])] = item.get("value")
        else:
            out.update(item)
    return out


def paging_query(page: int = 1, page_size: int = DEFAULT_PAGE_SIZE,
                 relationship: Optional[str] = None) -> str:
    """page only past the first page, page_size only when not the default of 50."""
    params: list[tuple[str, str]] = []
    if page and page > 1:
        params.append(("page", str(page)))
    if page_size and page_size != DEFAULT_PAGE_SIZE:
        params.append(("page_size", str(page_size)))
    if relationship:
        params.append(("relationship", relationship))
    return urlencode(params, safe=",")


def _with_query(endpoint: str, query: str) -> str:
    return f"{endpoint}?{query}" if query else endpoint


def require_date_range(from_: Optional[str], to: Optional[str]) -> tuple[str, str]:
    missing = [name for name, value in (("from", from_), ("to", to)) if not value]
    if missing:
        raise MissingDateRangeError(missing)
    return from_, to


# ── Table resources ─────────────────────────────────────


def build_table_body(
    resource: str,
    filters: Optional[Iterable[dict[str, Any]]] = None,
    search: str = "",
    extra_filters: Optional[dict[str, Any]] = None,
    extra: Optional[dict[str, Any]] = None,
) -> dict:
    """POST body for a table resource.

    Caller filters are merged over the resource default. The ``filters`` key
    is left out entirely when the merged map is empty.
    """
    table = TABLE_RESOURCES[resource]
    merged = {**table.default_filters, **filters_to_map(filters), **(extra_filters or {})}

    body: dict[str, Any] = dict(extra or {})
    if merged:
        body["filters"] = merged
    if search and search.strip():
        body["search_terms"] = [{"search_type": "name", "value": search.strip()}]
    return body


def build_table_requests(
    resource: str,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    search: str = "",
    filters: Optional[Iterable[dict[str, Any]]] = None,
    extra_filters: Optional[dict[str, Any]] = None,
    extra: Optional[dict[str, Any]] = None,
) -> list[UpstreamRequest]:
    """One request per strategy, in the order they should be tried."""
    table = TABLE_RESOURCES[resource]
    body = build_table_body(resource, filters, search, extra_filters, extra)
    query = paging_query(page, page_size, table.relationship)
    return [
        UpstreamRequest(
            endpoint=_with_query(endpoint, query),
            method=method,
            body=body if method == "POST" else None,
        )
        for endpoint, method in table.strategies
    ]


def build_advertiser_detail_request(advertiser_id: str, relationship: Optional[str] = None) -> UpstreamRequest:
    endpoint = f"advertisers/{quote(str(advertiser_id), safe='')}"
    if relationship:
        endpoint += "?" + urlencode({"relationship": relationship}, safe=",")
    return UpstreamRequest(endpoint=endpoint)


# ── Affiliate-side resources ────────────────────────────


def build_affiliate_offers_request(offer_type: str = "runnable") -> UpstreamRequest:
    if offer_type not in AFFILIATE_OFFER_ENDPOINTS:
        raise ValueError(f"Unknown affiliate offer type: {offer_type!r}")
    return UpstreamRequest(endpoint=AFFILIATE_OFFER_ENDPOINTS[offer_type], scope=Scope.AFFILIATE)


def build_traffic_requests(
    network_offer_id: Optional[int] = None,
    today: Optional[date] = None,
) -> dict[str, UpstreamRequest]:
    """Traffic controls and blocked sources, plus blocked variables for one offer (last 30 days)."""
    requests = {
        "traffic_controls": UpstreamRequest("trafficcontrols", scope=Scope.AFFILIATE),
        "blocked_sources": UpstreamRequest("trafficblocking", scope=Scope.AFFILIATE),
    }
    if network_offer_id is not None:
        today = today or date.today()
        requests["blocked_variables"] = UpstreamRequest(
            "blockedvariables",
            method="POST",
            body={
                "network_offer_id": int(network_offer_id),
                "timezone_id": settings.REPORTING_TIMEZONE_ID,
                "from": (today - timedelta(days=30)).isoformat(),
                "to": today.isoformat(),
            },
            scope=Scope.AFFILIATE,
        )
    return requests


# ── Conversion & reporting resources ────────────────────


def build_conversion_report(
    from_: Optional[str],
    to: Optional[str],
    timezone_id: Optional[int] = None,
    filters: Optional[list[dict[str, Any]]] = None,
    page: int = 1,
    page_size: int = 100,
) -> UpstreamRequest:
    from_, to = require_date_range(from_, to)
    body: dict[str, Any] = {
        "from": from_,
        "to": to,
        "timezone_id": timezone_id if timezone_id is not None else settings.CONVERSIONS_TIMEZONE_ID,
        "show_conversions": True,
        "show_events": True,
        "page": page,
        "page_size": page_size,
    }
    if filters:
        body["query"] = {"filters": list(filters)}
    return UpstreamRequest("reporting/conversions", method="POST", body=body)


def build_profit_report(from_: Optional[str], to: Optional[str],
                        timezone_id: Optional[int] = None) -> UpstreamRequest:
    """Approved conversions only, in one large page for aggregation."""
    return build_conversion_report(
        from_, to, timezone_id,
        filters=[APPROVED_STATUS_FILTER],
        page_size=settings.PROFIT_PAGE_SIZE,
    )


def build_reporting_request(
    from_: Optional[str],
    to: Optional[str],
    endpoint: str = "table",
    timezone_id: Optional[int] = None,
    currency_id: str = "USD",
    columns: Optional[list[dict[str, Any]]] = None,
    query: Optional[dict[str, Any]] = None,
    export_format: str = "json",
) -> UpstreamRequest:
    from_, to = require_date_range(from_, to)
    if endpoint not in REPORTING_ENDPOINTS:
        raise ValueError(f"Unsupported reporting endpoint: {endpoint!r}")
    body: dict[str, Any] = {
        "from": from_,
        "to": to,
        "timezone_id": timezone_id if timezone_id is not None else settings.REPORTING_TIMEZONE_ID,
        "currency_id": currency_id or "USD",
        "columns": columns if columns is not None else [{"column": "offer"}, {"column": "affiliate"}],
        "query": query if query is not None else {"filters": [], "exclusions": [], "settings": {}},
    }
    if endpoint == "export":
        body["format"] = export_format or "json"
    return UpstreamRequest(REPORTING_ENDPOINTS[endpoint], method="POST", body=body)


def build_adjustments_request(from_: Optional[str], to: Optional[str]) -> UpstreamRequest:
    from_, to = require_date_range(from_, to)
    return UpstreamRequest("reportingadjustments?" + urlencode({"from": from_, "to": to}))

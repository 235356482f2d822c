"""Per-resource orchestration: build request → call upstream → normalize → fall back.

One ``NetworkService`` is created per request around the shared client.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from functools import partial
from typing import Any, Callable, Optional

from src.models.entities import (
    AffiliateOffer,
    ReportingSummary,
    TrafficBundle,
)
from src.models.requests import (
    AdvertiserQuery,
    ConversionReportRequest,
    DealQuery,
    ProfitRequest,
    ReportingRequest,
    TableQuery,
)
from src.services import mock_data
from src.services import request_builder as rb
from src.services.fallback import FallbackResolver, FallbackResult, Page, extract_items, run_strategies
from src.services.normalizer import (
    normalize_advertiser,
    normalize_affiliate,
    normalize_affiliate_offer,
    normalize_blocked_source,
    normalize_blocked_variable,
    normalize_conversion,
    normalize_coupon_code,
    normalize_deal,
    normalize_offer,
    normalize_traffic_control,
)
from src.services.profit_aggregator import summarize_profits
from src.services.reporting import transform, transform_summary
from src.upstream.client import UpstreamClient
from src.upstream.errors import UpstreamError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome:
    """A single (non-list) result plus how it was obtained."""
    data: Any
    using_mock_data: bool = False
    api_error: Optional[str] = None


def _outcome(result: FallbackResult) -> Outcome:
    return Outcome(result.data[0] if result.data else None, result.using_mock_data, result.api_error)


def filter_affiliate_offers(
    offers: list[AffiliateOffer],
    category: Optional[str] = None,
    status: Optional[str] = None,
    visibility: Optional[str] = None,
    search: Optional[str] = None,
) -> list[AffiliateOffer]:
    """Case-insensitive post-filters; "all" or empty means no filter."""
    def wanted(value: Optional[str]) -> Optional[str]:
        return value.lower() if value and value.lower() != "all" else None

    category, status, visibility = wanted(category), wanted(status), wanted(visibility)
    needle = search.strip().lower() if search and search.strip() else None

    out = []
    for offer in offers:
        if category and offer.category.lower() != category:
            continue
        if status and offer.status.lower() != status:
            continue
        if visibility and offer.visibility.lower() != visibility:
            continue
        if needle and not any(needle in text.lower() for text in (offer.name, offer.description, offer.category)):
            continue
        out.append(offer)
    return out


class NetworkService:
    def __init__(self, client: UpstreamClient):
        self.client = client
        self.resolver = FallbackResolver(client.has_credentials)

    async def _send(self, req: rb.UpstreamRequest) -> Any:
        return await self.client.request(req.endpoint, req.method, req.body, req.scope)

    async def _attempt(self, req: rb.UpstreamRequest, key: str, normalize: Callable,
                       allow_bare_list: bool = False) -> Optional[Page]:
        page = extract_items(await self._send(req), key, allow_bare_list)
        if page is None:
            return None
        return Page([normalize(r) for r in page.items], page.paging)

    async def _table(self, resource: str, requests: list[rb.UpstreamRequest], normalize: Callable,
                     mock: list, allow_bare_list: bool = False) -> FallbackResult:
        key = rb.TABLE_RESOURCES[resource].array_key
        strategies = [partial(self._attempt, req, key, normalize, allow_bare_list) for req in requests]
        return await self.resolver.resolve(resource, partial(run_strategies, strategies), mock)

    # ── Table resources ─────────────────────────────────

    async def list_offers(self, query: TableQuery) -> FallbackResult:
        requests = rb.build_table_requests("offers", query.page, query.page_size, query.search, query.filters)
        return await self._table("offers", requests, normalize_offer, mock_data.MOCK_OFFERS)

    async def list_affiliates(self, query: TableQuery) -> FallbackResult:
        requests = rb.build_table_requests("affiliates", query.page, query.page_size, query.search, query.filters)
        return await self._table("affiliates", requests, normalize_affiliate, mock_data.MOCK_AFFILIATES)

    async def list_advertisers(self, query: AdvertiserQuery) -> FallbackResult:
        requests = rb.build_table_requests(
            "advertisers", query.page, query.page_size, query.search, query.filters,
            extra={"page": query.page, "page_size": query.page_size, "sort": query.sort},
        )
        return await self._table("advertisers", requests, normalize_advertiser,
                                 mock_data.MOCK_ADVERTISERS, allow_bare_list=True)

    async def get_advertiser(self, advertiser_id: str, relationship: Optional[str] = None) -> Outcome:
        req = rb.build_advertiser_detail_request(advertiser_id, relationship)

        async def call():
            payload = await self._send(req)
            if not isinstance(payload, dict) or "network_advertiser_id" not in payload:
                return None
            return [normalize_advertiser(payload)]

        mock = [a for a in mock_data.MOCK_ADVERTISERS if a.id == str(advertiser_id)]
        return _outcome(await self.resolver.resolve("advertiser", call, mock))

    async def list_deals(self, query: DealQuery) -> FallbackResult:
        extra_filters = {"network_offer_ids": query.network_offer_ids} if query.network_offer_ids else None
        requests = rb.build_table_requests("deals", filters=query.filters, extra_filters=extra_filters)
        return await self._table("deals", requests, normalize_deal, mock_data.MOCK_DEALS)

    async def list_coupon_codes(self) -> FallbackResult:
        requests = rb.build_table_requests("coupon_codes")
        return await self._table("coupon_codes", requests, normalize_coupon_code, mock_data.MOCK_COUPON_CODES)

    # ── Affiliate-side resources ────────────────────────

    async def list_affiliate_offers(
        self,
        offer_type: str = "runnable",
        category: Optional[str] = None,
        status: Optional[str] = None,
        visibility: Optional[str] = None,
        search: Optional[str] = None,
    ) -> FallbackResult:
        req = rb.build_affiliate_offers_request(offer_type)
        result = await self.resolver.resolve(
            "affiliate_offers",
            partial(self._attempt, req, "offers", normalize_affiliate_offer),
            mock_data.MOCK_AFFILIATE_OFFERS,
        )
        filtered = filter_affiliate_offers(result.data, category, status, visibility, search)
        return FallbackResult(filtered, result.using_mock_data, result.api_error, result.paging)

    async def get_traffic(self, network_offer_id: Optional[int] = None, today: Optional[date] = None) -> Outcome:
        requests = rb.build_traffic_requests(network_offer_id, today)

        async def blocked_variables() -> list:
            if "blocked_variables" not in requests:
                return []
            try:
                page = extract_items(await self._send(requests["blocked_variables"]), "variables")
            except UpstreamError as e:
                logger.warning("Blocked variables unavailable for offer %s: %s", network_offer_id, e)
                return []
            return [normalize_blocked_variable(r) for r in page.items] if page else []

        async def call():
            controls, sources, variables = await asyncio.gather(
                self._send(requests["traffic_controls"]),
                self._send(requests["blocked_sources"]),
                blocked_variables(),
            )
            controls_page = extract_items(controls, "traffic_controls")
            sources_page = extract_items(sources, "blocked_sources")
            bundle = TrafficBundle(
                traffic_controls=[normalize_traffic_control(r) for r in (controls_page.items if controls_page else [])],
                blocked_sources=[normalize_blocked_source(r) for r in (sources_page.items if sources_page else [])],
                blocked_variables=variables,
            )
            if not (bundle.traffic_controls or bundle.blocked_sources or bundle.blocked_variables):
                return []
            return [bundle]

        return _outcome(await self.resolver.resolve("traffic", call, [mock_data.MOCK_TRAFFIC]))

    # ── Conversions & reporting ─────────────────────────

    async def conversion_report(self, req: ConversionReportRequest) -> FallbackResult:
        upstream = rb.build_conversion_report(req.from_, req.to, req.timezone_id, req.filters,
                                              req.page, req.page_size)
        mock = [normalize_conversion(r) for r in mock_data.RAW_CONVERSIONS]
        return await self.resolver.resolve(
            "conversions", partial(self._attempt, upstream, "conversions", normalize_conversion), mock,
        )

    async def profit_report(self, req: ProfitRequest) -> Outcome:
        upstream = rb.build_profit_report(req.from_, req.to, req.timezone_id)

        async def call():
            return extract_items(await self._send(upstream), "conversions")

        result = await self.resolver.resolve("profits", call, mock_data.RAW_CONVERSIONS)
        data = summarize_profits(result.data, req.group_by, req.limit, {"from": req.from_, "to": req.to})
        return Outcome(data, result.using_mock_data, result.api_error)

    async def reporting_table(self, req: ReportingRequest) -> FallbackResult:
        upstream = self._reporting_request(req, "table")

        async def call():
            payload = await self._send(upstream)
            if not isinstance(payload, dict) or not isinstance(payload.get("table"), list):
                return None
            return transform(payload)

        return await self.resolver.resolve("reporting_table", call, transform(mock_data.RAW_REPORTING_TABLE))

    async def reporting_summary(self, req: ReportingRequest) -> Outcome:
        upstream = self._reporting_request(req, "summary")

        async def call():
            payload = await self._send(upstream)
            return [transform_summary(payload)] if isinstance(payload, dict) else None

        mock: list[ReportingSummary] = [transform_summary(mock_data.RAW_REPORTING_SUMMARY)]
        return _outcome(await self.resolver.resolve("reporting_summary", call, mock))

    async def reporting_overview(self, req: ReportingRequest) -> Outcome:
        """Table and summary for the same range, fetched concurrently."""
        table, summary = await asyncio.gather(self.reporting_table(req), self.reporting_summary(req))
        return Outcome(
            {"table": table.data, "summary": summary.data},
            table.using_mock_data or summary.using_mock_data,
            table.api_error or summary.api_error,
        )

    async def reporting_export(self, req: ReportingRequest) -> Any:
        """Raw export passthrough. Upstream errors propagate to the caller."""
        return await self._send(self._reporting_request(req, "export"))

    async def reporting_adjustments(self, from_: Optional[str], to: Optional[str]) -> FallbackResult:
        upstream = rb.build_adjustments_request(from_, to)

        async def call():
            return extract_items(await self._send(upstream), "adjustments", allow_bare_list=True)

        return await self.resolver.resolve("reporting_adjustments", call, [])

    @staticmethod
    def _reporting_request(req: ReportingRequest, endpoint: str) -> rb.UpstreamRequest:
        return rb.build_reporting_request(
            req.from_, req.to, endpoint, req.timezone_id, req.currency_id,
            req.columns, req.query, req.format,
        )

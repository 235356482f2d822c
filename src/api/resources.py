"""Network resource routes — offers, partners, deals, coupons, traffic.

Every list answers 200 with normalized entities; when the upstream API is
unreachable or empty the envelope carries mock data and ``usingMockData``.
"""
from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from src.api.deps import get_network_service, get_upstream_client
from src.auth import ANONYMOUS, require_caller
from src.models.envelope import ok
from src.models.requests import AdvertiserQuery, DealQuery, TableQuery
from src.services.fallback import FallbackResult
from src.services.network import NetworkService
from src.upstream.client import UpstreamClient

router = APIRouter(prefix="/api/v1", tags=["network"], dependencies=[Depends(require_caller)])


def _list_envelope(result: FallbackResult, params: Optional[dict] = None) -> dict:
    return ok(
        result.data,
        using_mock_data=result.using_mock_data,
        api_error=result.api_error,
        paging=result.paging,
        meta={"total": len(result.data), **({"params": params} if params else {})},
    )


# ── Status ──────────────────────────────────────────────


@router.get("/upstream/status")
async def upstream_status(
    caller: str = Depends(require_caller),
    client: UpstreamClient = Depends(get_upstream_client),
):
    """Whether an API key is configured, without revealing it."""
    cred = client.credential
    return ok({
        "hasApiKey": cred.has_api_key,
        "apiKeyPrefix": cred.key_prefix,
        "apiUrl": cred.base_url or "Not set",
        "affiliateApiUrl": cred.affiliate_base_url or "Not set",
        "caller": {"id": caller, "authenticated": caller != ANONYMOUS},
    })


# ── Offers ──────────────────────────────────────────────


@router.get("/offers")
async def list_offers(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=1000),
    search: str = Query(""),
    service: NetworkService = Depends(get_network_service),
):
    query = TableQuery(page=page, page_size=page_size, search=search)
    return _list_envelope(await service.list_offers(query), query.model_dump(exclude={"filters"}))


@router.post("/offers")
async def search_offers(body: TableQuery, service: NetworkService = Depends(get_network_service)):
    return _list_envelope(await service.list_offers(body), body.model_dump())


@router.get("/affiliate-offers")
async def list_affiliate_offers(
    type: Literal["runnable", "all"] = Query("runnable"),
    category: Optional[str] = None,
    status: Optional[str] = None,
    visibility: Optional[str] = None,
    search: Optional[str] = None,
    service: NetworkService = Depends(get_network_service),
):
    """Offers visible to the affiliate account, filtered locally after normalization."""
    result = await service.list_affiliate_offers(type, category, status, visibility, search)
    return _list_envelope(result, {
        "type": type, "category": category, "status": status, "visibility": visibility, "search": search,
    })


# ── Partners ────────────────────────────────────────────


@router.get("/affiliates")
async def list_affiliates(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=1000),
    search: str = Query(""),
    service: NetworkService = Depends(get_network_service),
):
    query = TableQuery(page=page, page_size=page_size, search=search)
    return _list_envelope(await service.list_affiliates(query), query.model_dump(exclude={"filters"}))


@router.post("/affiliates")
async def search_affiliates(body: TableQuery, service: NetworkService = Depends(get_network_service)):
    return _list_envelope(await service.list_affiliates(body), body.model_dump())


@router.get("/advertisers")
async def list_advertisers(
    page: int = Query(1, ge=1),
    page_size: int = Query(100, ge=1, le=1000),
    search: str = Query(""),
    service: NetworkService = Depends(get_network_service),
):
    query = AdvertiserQuery(page=page, page_size=page_size, search=search)
    return _list_envelope(await service.list_advertisers(query))


@router.post("/advertisers")
async def search_advertisers(body: AdvertiserQuery, service: NetworkService = Depends(get_network_service)):
    return _list_envelope(await service.list_advertisers(body), body.model_dump())


@router.get("/advertisers/{advertiser_id}")
async def get_advertiser(
    advertiser_id: str,
    relationship: Optional[str] = None,
    service: NetworkService = Depends(get_network_service),
):
    outcome = await service.get_advertiser(advertiser_id, relationship)
    if outcome.data is None:
        raise HTTPException(status_code=404, detail="Advertiser not found")
    return ok(outcome.data, using_mock_data=outcome.using_mock_data, api_error=outcome.api_error)


# ── Deals & coupons ─────────────────────────────────────


@router.get("/deals")
async def list_deals(
    network_offer_ids: Optional[str] = Query(None, description="Comma-separated offer IDs"),
    service: NetworkService = Depends(get_network_service),
):
    ids = [int(part) for part in (network_offer_ids or "").split(",") if part.strip().isdigit()]
    return _list_envelope(await service.list_deals(DealQuery(network_offer_ids=ids)))


@router.post("/deals")
async def search_deals(body: DealQuery, service: NetworkService = Depends(get_network_service)):
    return _list_envelope(await service.list_deals(body), body.model_dump())


@router.get("/coupon-codes")
async def list_coupon_codes(service: NetworkService = Depends(get_network_service)):
    return _list_envelope(await service.list_coupon_codes())


# ── Traffic ─────────────────────────────────────────────


@router.get("/traffic")
async def traffic(
    network_offer_id: Optional[int] = Query(None, ge=1),
    service: NetworkService = Depends(get_network_service),
):
    """Traffic controls and blocked sources; blocked variables when an offer is given."""
    outcome = await service.get_traffic(network_offer_id)
    return ok(outcome.data, using_mock_data=outcome.using_mock_data, api_error=outcome.api_error)

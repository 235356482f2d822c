"""Conversion, profit and reporting routes plus the dashboard summary.

Date-range endpoints reject a missing ``from``/``to`` with 400 before any
upstream call is made.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from src.api.deps import get_network_service, get_upstream_client
from src.auth import require_caller
from src.models.envelope import ok
from src.models.requests import ConversionReportRequest, ProfitRequest, ReportingRequest
from src.services.dashboard import dashboard_summary
from src.services.network import NetworkService
from src.upstream.client import UpstreamClient

router = APIRouter(prefix="/api/v1", tags=["reporting"], dependencies=[Depends(require_caller)])


@router.post("/conversions")
async def conversions(body: ConversionReportRequest, service: NetworkService = Depends(get_network_service)):
    result = await service.conversion_report(body)
    return ok(
        result.data,
        using_mock_data=result.using_mock_data,
        api_error=result.api_error,
        paging=result.paging,
        meta={"total": len(result.data), "params": body.model_dump(by_alias=True)},
    )


@router.post("/profits")
async def profits(body: ProfitRequest, service: NetworkService = Depends(get_network_service)):
    """Approved conversions grouped by offer or affiliate, ranked by profit."""
    outcome = await service.profit_report(body)
    return ok(outcome.data, using_mock_data=outcome.using_mock_data, api_error=outcome.api_error)


@router.post("/reporting")
async def reporting(body: ReportingRequest, service: NetworkService = Depends(get_network_service)):
    meta = {
        "from": body.from_,
        "to": body.to,
        "timezone_id": body.timezone_id,
        "currency_id": body.currency_id,
        "columns": body.columns,
        "endpoint": body.endpoint,
    }
    if body.endpoint == "summary":
        outcome = await service.reporting_summary(body)
        return ok(outcome.data, using_mock_data=outcome.using_mock_data, api_error=outcome.api_error, meta=meta)
    if body.endpoint == "export":
        return ok(await service.reporting_export(body), meta=meta)

    result = await service.reporting_table(body)
    return ok(result.data, using_mock_data=result.using_mock_data, api_error=result.api_error, meta=meta)


@router.post("/reporting/overview")
async def reporting_overview(body: ReportingRequest, service: NetworkService = Depends(get_network_service)):
    """Table rows and summary metrics for one range in a single round trip."""
    outcome = await service.reporting_overview(body)
    return ok(outcome.data, using_mock_data=outcome.using_mock_data, api_error=outcome.api_error)


@router.get("/reporting/adjustments")
async def reporting_adjustments(
    from_: Optional[str] = Query(None, alias="from"),
    to: Optional[str] = Query(None),
    service: NetworkService = Depends(get_network_service),
):
    result = await service.reporting_adjustments(from_, to)
    return ok(result.data, using_mock_data=result.using_mock_data, api_error=result.api_error)


@router.get("/dashboard/summary")
async def summary(client: UpstreamClient = Depends(get_upstream_client)):
    """Profit, revenue, conversions and margin for the last 7 days with trends."""
    outcome = await dashboard_summary(client)
    return ok(outcome.data, using_mock_data=outcome.using_mock_data, api_error=outcome.api_error)

"""Request bodies accepted by the dashboard API."""
from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TableQuery(_Body):
    """Paging/search/filter body for the table resources (offers, affiliates, ...).

    ``filters`` accepts ``{"field": ..., "value": ...}`` items as well as
    single-key ``{"offer_status": "paused"}`` objects.
    """
    page: int = Field(1, ge=1)
    page_size: int = Field(50, ge=1, le=1000)
    search: str = ""
    filters: list[dict[str, Any]] = []


class AdvertiserQuery(TableQuery):
    page_size: int = Field(100, ge=1, le=1000)
    sort: list[dict[str, Any]] = [{"field": "network_advertiser_id", "direction": "desc"}]


class DealQuery(_Body):
    network_offer_ids: list[int] = []
    filters: list[dict[str, Any]] = []


class DateRangeBody(_Body):
    # Missing bounds are reported as 400 by the request builder, not 422 here
    from_: Optional[str] = Field(None, alias="from")
    to: Optional[str] = None
    timezone_id: Optional[int] = None


class ConversionReportRequest(DateRangeBody):
    filters: list[dict[str, Any]] = []
    page: int = Field(1, ge=1)
    page_size: int = Field(100, ge=1, le=1000)


class ProfitRequest(DateRangeBody):
    group_by: Literal["offer", "affiliate"] = Field("offer", alias="groupBy")
    limit: int = Field(10, ge=1, le=1000)


class ReportingRequest(DateRangeBody):
    currency_id: str = "USD"
    columns: list[dict[str, Any]] = [{"column": "offer"}, {"column": "affiliate"}]
    query: dict[str, Any] = {"filters": [], "exclusions": [], "settings": {}}
    endpoint: Literal["table", "summary", "export"] = "table"
    format: str = "json"

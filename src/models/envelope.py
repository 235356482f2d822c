"""Response envelope shared by every dashboard endpoint."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def to_jsonable(value: Any) -> Any:
    """Dump models (and containers of models) using their wire aliases."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


class ResponseEnvelope(BaseModel):
    success: bool = True
    data: Any = None
    using_mock_data: Optional[bool] = None
    api_error: Optional[str] = None
    error: Optional[str] = None
    paging: Optional[dict] = None
    meta: Optional[dict] = None
    timestamp: str = ""

    def render(self) -> dict:
        """Wire form: optional keys are omitted when unset, ``data`` is dumped as-is."""
        out: dict[str, Any] = {"success": self.success}
        if self.data is not None or self.success:
            out["data"] = to_jsonable(self.data)
        if self.using_mock_data is not None:
            out["usingMockData"] = self.using_mock_data
        if self.api_error:
            out["apiError"] = self.api_error
        if self.error:
            out["error"] = self.error
        if self.paging is not None:
            out["paging"] = self.paging
        if self.meta is not None:
            out["meta"] = to_jsonable(self.meta)
        out["timestamp"] = self.timestamp or utc_timestamp()
        return out


def ok(data: Any, *, using_mock_data: bool | None = None, api_error: str | None = None,
       paging: dict | None = None, meta: dict | None = None) -> dict:
    return ResponseEnvelope(
        data=data,
        using_mock_data=using_mock_data,
        api_error=api_error,
        paging=paging,
        meta=meta,
    ).render()


def fail(error: str) -> dict:
    return ResponseEnvelope(success=False, error=error).render()

"""Mock-data fallback — every list endpoint answers 200, live or not.

The resolver substitutes deterministic mock data when:
  - no API key is configured
  - the upstream call raises
  - the expected array is missing from the response (call returns None)
  - the upstream returned zero rows

It never raises. The reason is logged and counted in /metrics.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, Sequence, TypeVar

from src.middleware.metrics import metrics
from src.upstream.errors import MissingCredentialsError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """Items extracted from one upstream response, plus its paging block if any."""
    items: list[T]
    paging: Optional[dict] = None


@dataclass(frozen=True)
class FallbackResult(Generic[T]):
    data: list[T]
    using_mock_data: bool
    api_error: Optional[str] = None
    paging: Optional[dict] = None


def extract_items(payload: Any, key: str, allow_bare_list: bool = False) -> Optional[Page[dict]]:
    """Pull ``payload[key]`` out as a Page; None when the array is absent or malformed."""
    if allow_bare_list and isinstance(payload, list):
        return Page([r for r in payload if isinstance(r, dict)])
    if not isinstance(payload, dict):
        return None
    items = payload.get(key)
    if not isinstance(items, list):
        return None
    paging = payload.get("paging")
    return Page([r for r in items if isinstance(r, dict)], paging if isinstance(paging, dict) else None)


async def run_strategies(strategies: Sequence[Callable[[], Awaitable[Optional[T]]]]) -> Optional[T]:
    """Try candidate calls in order; the first success wins.

    A strategy that raises, or returns None (shape mismatch), moves on to the
    next one. When all fail the first error is re-raised.
    """
    if not strategies:
        raise ValueError("run_strategies needs at least one strategy")
    first_error: Optional[BaseException] = None
    for index, strategy in enumerate(strategies):
        try:
            result = await strategy()
        except MissingCredentialsError:
            raise
        except Exception as e:
            logger.info("Strategy %d/%d failed: %s", index + 1, len(strategies), e)
            if first_error is None:
                first_error = e
            continue
        if result is not None:
            return result
        logger.info("Strategy %d/%d returned an unexpected shape", index + 1, len(strategies))
    if first_error is not None:
        raise first_error
    return None


class FallbackResolver:
    """Run an upstream call and fall back to mock data on any failure."""

    def __init__(self, has_credentials: bool):
        self.has_credentials = has_credentials

    async def resolve(
        self,
        resource: str,
        upstream_call: Callable[[], Awaitable[Optional[Page[T] | list[T]]]],
        mock_data: Sequence[T],
    ) -> FallbackResult[T]:
        if not self.has_credentials:
            return self._mock(resource, mock_data, "no_credentials")

        try:
            result = await upstream_call()
        except Exception as e:
            logger.warning("Upstream %s failed, serving mock data: %s", resource, e,
                           extra={"resource": resource, "reason": "error"})
            return self._mock(resource, mock_data, "error", api_error=str(e) or type(e).__name__)

        if result is None:
            logger.warning("Upstream %s response missing expected array, serving mock data", resource,
                           extra={"resource": resource, "reason": "shape"})
            return self._mock(resource, mock_data, "shape")

        page = result if isinstance(result, Page) else Page(list(result))
        if not page.items:
            return self._mock(resource, mock_data, "empty")

        return FallbackResult(data=list(page.items), using_mock_data=False, paging=page.paging)

    @staticmethod
    def _mock(resource: str, mock_data: Sequence[T], reason: str,
              api_error: Optional[str] = None) -> FallbackResult[T]:
        if reason in ("no_credentials", "empty"):
            logger.info("Serving mock %s (%s)", resource, reason, extra={"resource": resource, "reason": reason})
        metrics.record_fallback(resource, reason)
        return FallbackResult(data=list(mock_data), using_mock_data=True, api_error=api_error)

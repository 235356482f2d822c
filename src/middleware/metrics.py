"""Prometheus-compatible metrics endpoint, request tracking and upstream counters."""
from __future__ import annotations

import time
from collections import defaultdict
from threading import Lock

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

_PREFIX = "netdash"


class _Metrics:
    """Thread-safe in-memory metrics collector."""

    def __init__(self):
        self._lock = Lock()
        self.request_count: dict[tuple[str, str, int], int] = defaultdict(int)
        self.request_duration_sum: dict[tuple[str, str], float] = defaultdict(float)
        self.request_duration_count: dict[tuple[str, str], int] = defaultdict(int)
        self.upstream_calls: dict[tuple[str, str], int] = defaultdict(int)
        self.fallbacks: dict[tuple[str, str], int] = defaultdict(int)
        self.active_requests = 0
        self.startup_time = time.time()

    def record(self, method: str, path: str, status: int, duration: float):
        with self._lock:
            self.request_count[(method, path, status)] += 1
            self.request_duration_sum[(method, path)] += duration
            self.request_duration_count[(method, path)] += 1

    def record_upstream(self, endpoint: str, outcome: str):
        """Count one upstream call. outcome is "ok" or an error class name."""
        with self._lock:
            self.upstream_calls[(endpoint, outcome)] += 1

    def record_fallback(self, resource: str, reason: str):
        with self._lock:
            self.fallbacks[(resource, reason)] += 1

    def inc_active(self):
        with self._lock:
            self.active_requests += 1

    def dec_active(self):
        with self._lock:
            self.active_requests -= 1

    def reset(self):
        with self._lock:
            self.request_count.clear()
            self.request_duration_sum.clear()
            self.request_duration_count.clear()
            self.upstream_calls.clear()
            self.fallbacks.clear()
            self.active_requests = 0

    def render(self) -> str:
        p = _PREFIX
        lines: list[str] = []
        lines.append(f"# HELP {p}_http_requests_total Total HTTP requests")
        lines.append(f"# TYPE {p}_http_requests_total counter")
        with self._lock:
            for (method, path, status), count in sorted(self.request_count.items()):
                lines.append(
                    f'{p}_http_requests_total{{method="{method}",path="{path}",status="{status}"}} {count}'
                )

            lines.append("")
            lines.append(f"# HELP {p}_http_request_duration_seconds HTTP request duration")
            lines.append(f"# TYPE {p}_http_request_duration_seconds summary")
            for (method, path), total in sorted(self.request_duration_sum.items()):
                count = self.request_duration_count[(method, path)]
                lines.append(
                    f'{p}_http_request_duration_seconds_sum{{method="{method}",path="{path}"}} {total:.6f}'
                )
                lines.append(
                    f'{p}_http_request_duration_seconds_count{{method="{method}",path="{path}"}} {count}'
                )

            lines.append("")
            lines.append(f"# HELP {p}_upstream_calls_total Calls made to the affiliate network API")
            lines.append(f"# TYPE {p}_upstream_calls_total counter")
            for (endpoint, outcome), count in sorted(self.upstream_calls.items()):
                lines.append(
                    f'{p}_upstream_calls_total{{endpoint="{endpoint}",outcome="{outcome}"}} {count}'
                )

            lines.append("")
            lines.append(f"# HELP {p}_mock_fallbacks_total Responses served from mock data")
            lines.append(f"# TYPE {p}_mock_fallbacks_total counter")
            for (resource, reason), count in sorted(self.fallbacks.items()):
                lines.append(
                    f'{p}_mock_fallbacks_total{{resource="{resource}",reason="{reason}"}} {count}'
                )

            lines.append("")
            lines.append(f"# HELP {p}_active_requests Current in-flight requests")
            lines.append(f"# TYPE {p}_active_requests gauge")
            lines.append(f"{p}_active_requests {self.active_requests}")

            lines.append("")
            lines.append(f"# HELP {p}_uptime_seconds Seconds since process start")
            lines.append(f"# TYPE {p}_uptime_seconds gauge")
            lines.append(f"{p}_uptime_seconds {time.time() - self.startup_time:.1f}")

        return "\n".join(lines) + "\n"


metrics = _Metrics()


def _normalize_path(path: str) -> str:
    """Collapse IDs in paths to reduce cardinality. /advertisers/123 -> /advertisers/:id"""
    parts = path.rstrip("/").split("/")
    normalized = []
    for part in parts:
        if part.isdigit() or (len(part) > 20 and part.replace("-", "").isalnum()):
            normalized.append(":id")
        else:
            normalized.append(part)
    return "/".join(normalized) or "/"


def _endpoint_label(endpoint: str) -> str:
    """Strip the query string from an upstream endpoint: offerstable?page=2 -> offerstable"""
    return _normalize_path(endpoint.split("?", 1)[0]).lstrip("/") or "/"


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path == "/metrics":
            return PlainTextResponse(metrics.render(), media_type="text/plain; version=0.0.4")

        metrics.inc_active()
        start = time.perf_counter()
        try:
            response = await call_next(request)
            duration = time.perf_counter() - start
            metrics.record(
                request.method,
                _normalize_path(request.url.path),
                response.status_code,
                duration,
            )
            return response
        except Exception:
            duration = time.perf_counter() - start
            metrics.record(request.method, _normalize_path(request.url.path), 500, duration)
            raise
        finally:
            metrics.dec_active()

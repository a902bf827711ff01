"""
In-process request metrics with a Prometheus text export.

Tracks request counts, latency, error rates and status codes per
normalized endpoint.
"""

import time
from collections import defaultdict
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

METRIC_PREFIX = "animal_share"


def normalize_path(path: str) -> str:
    """Replace UUID path segments with ``{id}`` so per-post URLs aggregate."""
    return "/".join(
        "{id}" if len(part) == 36 and part.count("-") == 4 else part
        for part in path.split("/")
    )


class MetricsCollector:
    """
    Request metrics keyed by ``"<METHOD> <normalized path>"``.

    Not thread-safe; one collector lives per worker process.
    """

    def __init__(self) -> None:
        self._request_count: dict[str, int] = defaultdict(int)
        self._error_count: dict[str, int] = defaultdict(int)
        self._response_time_sum: dict[str, float] = defaultdict(float)
        self._status_counts: dict[int, int] = defaultdict(int)
        self._start_time: float = time.time()

    def record_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration: float,
    ) -> None:
        """Record a completed request."""
        key = f"{method} {path}"
        self._request_count[key] += 1
        self._response_time_sum[key] += duration
        self._status_counts[status_code] += 1

        if status_code >= 400:
            self._error_count[key] += 1

    def get_metrics(self) -> dict[str, Any]:
        """Get metrics as a structured dictionary."""
        total_requests = sum(self._request_count.values())
        total_errors = sum(self._error_count.values())

        return {
            "uptimeSeconds": round(time.time() - self._start_time, 2),
            "totalRequests": total_requests,
            "totalErrors": total_errors,
            "errorRate": round(total_errors / total_requests, 4) if total_requests else 0,
            "requestsByEndpoint": dict(self._request_count),
            "errorsByEndpoint": dict(self._error_count),
            "statusCodeCounts": {str(k): v for k, v in sorted(self._status_counts.items())},
            "avgResponseTimeMs": {
                key: round(self._response_time_sum[key] / count * 1000, 2)
                for key, count in self._request_count.items()
            },
        }

    def to_prometheus(self) -> str:
        """
        Export metrics in Prometheus text exposition format.
        See: https://prometheus.io/docs/instrumenting/exposition_formats/
        """
        lines: list[str] = []

        def family(name: str, kind: str, help_text: str) -> str:
            metric = f"{METRIC_PREFIX}_{name}"
            lines.append(f"# HELP {metric} {help_text}")
            lines.append(f"# TYPE {metric} {kind}")
            return metric

        metric = family("uptime_seconds", "gauge", "Time since service start in seconds")
        lines.append(f"{metric} {time.time() - self._start_time:.2f}")
        lines.append("")

        metric = family("http_requests_total", "counter", "Total HTTP requests")
        for key, count in sorted(self._request_count.items()):
            lines.append(f"{metric}{{{_endpoint_labels(key)}}} {count}")
        lines.append("")

        metric = family("http_errors_total", "counter", "Total HTTP errors (4xx/5xx)")
        for key, count in sorted(self._error_count.items()):
            lines.append(f"{metric}{{{_endpoint_labels(key)}}} {count}")
        lines.append("")

        metric = family("http_status_total", "counter", "HTTP responses by status code")
        for code, count in sorted(self._status_counts.items()):
            lines.append(f'{metric}{{code="{code}"}} {count}')
        lines.append("")

        metric = family(
            "http_response_time_seconds", "gauge", "Average response time in seconds"
        )
        for key, count in sorted(self._request_count.items()):
            avg = self._response_time_sum[key] / count
            lines.append(f"{metric}{{{_endpoint_labels(key)}}} {avg:.6f}")
        lines.append("")

        return "\n".join(lines) + "\n"


def _endpoint_labels(key: str) -> str:
    method, path = key.split(" ", 1)
    return f'method="{method}",path="{path}"'


# Global singleton
_metrics_collector: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Get or create the global metrics collector."""
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector()
    return _metrics_collector


class MetricsMiddleware(BaseHTTPMiddleware):
    """Records duration and status code of every request except metrics scrapes."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if "/metrics" in request.url.path:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start

        get_metrics_collector().record_request(
            method=request.method,
            path=normalize_path(request.url.path),
            status_code=response.status_code,
            duration=duration,
        )
        return response

import time

from fastapi import Request
from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware


class TraceIdMiddleware(BaseHTTPMiddleware):
    """Middleware to add trace id to response headers"""

    async def dispatch(self, request: Request, call_next):
        span = trace.get_current_span()
        span_context = span.get_span_context()

        trace_id = None
        if span_context.is_valid:
            trace_id = format(span_context.trace_id, "032x")

        response = await call_next(request)
        if trace_id:
            response.headers["X-Trace-Id"] = trace_id

        return response


class TimingMiddleware(BaseHTTPMiddleware):
    """Middleware to add request latency in milliseconds to response headers"""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = int((time.perf_counter() - start) * 1000)
        response.headers["X-Latency-Ms"] = str(latency_ms)
        return response

"""
Observability Middleware

Flask middleware for adding OpenTelemetry instrumentation and structured logging
to all HTTP requests.
"""

import time
import logging
from flask import Flask, request, g
from opentelemetry import trace
from opentelemetry.instrumentation.flask import FlaskInstrumentor


def add_observability_middleware(app: Flask, tracer_provider=None):
    """
    Instrument the app with OpenTelemetry and log each completed request.

    ``tracer_provider`` defaults to the globally configured provider.
    """

    FlaskInstrumentor().instrument_app(app, tracer_provider=tracer_provider)

    logger = logging.getLogger(__name__)

    @app.before_request
    def before_request():
        """Start timing and remember the trace for log correlation."""
        g.start_time = time.time()
        g.trace_id = None

        span = trace.get_current_span()
        if span.is_recording():
            g.trace_id = format(span.get_span_context().trace_id, "032x")
            span.set_attribute("http.remote_addr", request.remote_addr or "")

    @app.after_request
    def after_request(response):
        """Log request completion and add the trace id header."""
        duration_ms = round((time.time() - g.get('start_time', time.time())) * 1000, 2)

        span = trace.get_current_span()
        if span.is_recording():
            span.set_attribute("http.duration_ms", duration_ms)

        logger.info(
            "HTTP request completed",
            extra={
                "method": request.method,
                "path": request.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "remote_addr": request.remote_addr,
                "trace_id": g.get('trace_id')
            }
        )

        if g.get('trace_id'):
            response.headers['X-Trace-Id'] = g.trace_id

        return response

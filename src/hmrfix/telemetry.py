"""OpenTelemetry instrumentation for the hmrfix API.

Tracing is opt-in: nothing is imported from OpenTelemetry unless
OTEL_ENABLED=true, so the packages are only needed with the ``otel`` extra.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

OTEL_ENABLED = os.getenv("OTEL_ENABLED", "false").lower() == "true"
OTEL_SERVICE_NAME = os.getenv("OTEL_SERVICE_NAME", "hmrfix")
OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "")


def init_telemetry(app: FastAPI) -> None:
    """Export FastAPI request spans over OTLP gRPC when enabled."""
    if not OTEL_ENABLED:
        logger.debug("OpenTelemetry tracing disabled (OTEL_ENABLED=false)")
        return

    if not OTEL_EXPORTER_OTLP_ENDPOINT:
        logger.warning(
            "OTEL_ENABLED=true but OTEL_EXPORTER_OTLP_ENDPOINT not set. "
            "Skipping OpenTelemetry initialization."
        )
        return

    try:
        from opentelemetry import trace
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
            OTLPSpanExporter,
        )
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor

        resource = Resource.create(
            {
                "service.name": OTEL_SERVICE_NAME,
                "deployment.environment": os.getenv("ENVIRONMENT", "development"),
            }
        )
        provider = TracerProvider(resource=resource)
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=OTEL_EXPORTER_OTLP_ENDPOINT, insecure=True))
        )
        trace.set_tracer_provider(provider)
        FastAPIInstrumentor.instrument_app(app)
        logger.info(
            "OpenTelemetry initialized: service=%s, endpoint=%s",
            OTEL_SERVICE_NAME,
            OTEL_EXPORTER_OTLP_ENDPOINT,
        )
    except ImportError as e:
        logger.error("OpenTelemetry packages not installed: %s. Install with: pip install hmrfix[otel]", e)

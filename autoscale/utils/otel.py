"""
OpenTelemetry setup for the autoscale policy client.

- Configures OTLP exporter (gRPC) to collector.
- Instruments logging + outgoing HTTP calls made through requests.
"""

from __future__ import annotations

import logging

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.requests import RequestsInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from ..config import Settings, settings


def setup_otel(config: Settings = settings) -> TracerProvider:
    """
    Configure tracing and logging for a process embedding the client.

    Call once at start-up; library code only ever uses trace.get_tracer().
    """

    # 1) TracerProvider with resource
    resource = Resource.create(
        {
            "service.name": config.OTEL_SERVICE_NAME,
            "deployment.environment": config.ENVIRONMENT,
            "service.version": "0.1.0",
            "autoscale.component": "policy-client",
        }
    )

    provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(provider)

    # 2) OTLP gRPC exporter
    span_exporter = OTLPSpanExporter(
        endpoint=config.OTEL_ENDPOINT,
        insecure=True,
    )
    provider.add_span_processor(BatchSpanProcessor(span_exporter))

    # 3) Instrument logging and outgoing HTTP
    LoggingInstrumentor().instrument(set_logging_format=True)
    RequestsInstrumentor().instrument()

    # 4) Root logging level (INFO by default)
    logging.basicConfig(
        level=config.LOG_LEVEL.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    return provider

from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)

EXCLUDED_URLS = "healthz,readyz,metrics"


def configure_tracing(
    app: Any = None,
    service_name: str = "person-registry",
    environment: str = "dev",
    otlp_endpoint: str | None = None,
    debug: bool = False,
) -> TracerProvider:
    provider = TracerProvider(
        resource=Resource.create(
            {"service.name": service_name, "deployment.environment": environment}
        )
    )
    trace.set_tracer_provider(provider)
    if otlp_endpoint:
        exporter = OTLPSpanExporter(endpoint=otlp_endpoint)
        provider.add_span_processor(BatchSpanProcessor(exporter))
    if debug:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    if app is not None:
        FastAPIInstrumentor.instrument_app(
            app=app, tracer_provider=provider, excluded_urls=EXCLUDED_URLS
        )
    return provider

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.pymongo import PymongoInstrumentor
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from config import Settings
from logger import build_resource, logger


def setup_telemetry(settings: Settings):
    """Setup OpenTelemetry tracing and instrumentation"""
    if settings.otlp_endpoint is None:
        logger.info("OTEL_EXPORTER_OTLP_ENDPOINT not set, tracing disabled")
        return None

    tracer_provider = TracerProvider(resource=build_resource(settings.app_env))
    otlp_exporter = OTLPSpanExporter(endpoint=settings.otlp_endpoint, insecure=True)
    tracer_provider.add_span_processor(BatchSpanProcessor(otlp_exporter))
    trace.set_tracer_provider(tracer_provider)

    try:
        PymongoInstrumentor().instrument()
    except Exception as e:
        logger.warning(f"Failed to instrument pymongo: {e}")

    return tracer_provider


def instrument_fastapi(app):
    """Instrument FastAPI application with OpenTelemetry"""
    FastAPIInstrumentor.instrument_app(app)
    return app

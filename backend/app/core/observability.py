"""
OpenTelemetry Observability Module.
Provides distributed tracing for TailorReach when the SDK is installed.
"""
import logging

try:
    from opentelemetry import trace
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
    OPENTELEMETRY_AVAILABLE = True
except ImportError:
    OPENTELEMETRY_AVAILABLE = False

logger = logging.getLogger(__name__)

def setup_tracing(app=None):
    """Initializes OpenTelemetry tracing."""
    if not OPENTELEMETRY_AVAILABLE:
        logger.info("OpenTelemetry SDK not installed. Tracing is disabled.")
        return

    provider = TracerProvider()
    processor = BatchSpanProcessor(ConsoleSpanExporter())
    provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)

    if app:
        FastAPIInstrumentor.instrument_app(app, excluded_urls="health,ready")
        logger.info("OpenTelemetry FastAPI instrumentation enabled.")

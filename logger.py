import logging
import sys
from typing import Optional

from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.resources import Resource

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger("grades")

_console_installed = False


def build_resource(environment: str) -> Resource:
    return Resource.create(
        {
            "service.name": "grades-api",
            "service.version": "1.0.0",
            "deployment.environment": environment,
        }
    )


def setup_logging(
    level: str = "INFO",
    otlp_endpoint: Optional[str] = None,
    environment: str = "development",
) -> Optional[LoggerProvider]:
    """Configure the root logger.

    Records always go to stderr. When an OTLP endpoint is given they are also
    exported through OpenTelemetry, and the provider is returned so it can be
    shut down with the application.
    """
    global _console_installed
    root = logging.getLogger()
    root.setLevel(level)

    if not _console_installed:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(console)
        _console_installed = True

    # the driver and http client are noisy at debug level
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    if otlp_endpoint is None:
        return None

    logger_provider = LoggerProvider(resource=build_resource(environment))
    set_logger_provider(logger_provider)
    otlp_log_exporter = OTLPLogExporter(endpoint=otlp_endpoint, insecure=True)
    logger_provider.add_log_record_processor(
        BatchLogRecordProcessor(otlp_log_exporter)
    )
    root.addHandler(LoggingHandler(level=logging.INFO, logger_provider=logger_provider))
    return logger_provider

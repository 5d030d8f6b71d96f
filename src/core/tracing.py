"""OpenTelemetry tracing for SlideChat."""

import logging
import os

logger = logging.getLogger(__name__)
_tracing_initialized = False


def setup_tracing() -> bool:
    global _tracing_initialized
    if _tracing_initialized:
        return True

    from src.core import get_settings
    settings = get_settings()

    if not settings.tracing_enabled:
        logger.info("Tracing is disabled (set TRACING_ENABLED=true to enable)")
        return False

    if not settings.applicationinsights_connection_string:
        logger.info("No Application Insights connection string configured")
        return False

    os.environ.setdefault("OTEL_SERVICE_NAME", settings.tracing_service_name)

    from azure.monitor.opentelemetry import configure_azure_monitor
    from opentelemetry.sdk.resources import Resource

    configure_azure_monitor(
        connection_string=settings.applicationinsights_connection_string,
        resource=Resource.create({"service.name": settings.tracing_service_name}),
    )

    _tracing_initialized = True
    logger.info(f"OpenTelemetry tracing enabled for service: {settings.tracing_service_name}")
    return True


def is_tracing_enabled() -> bool:
    return _tracing_initialized

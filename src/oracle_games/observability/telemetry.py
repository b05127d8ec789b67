"""
telemetry.py

PURPOSE: OpenTelemetry initialization and tracer lookup.
DEPENDENCIES: opentelemetry-api, opentelemetry-sdk, opentelemetry-exporter-otlp (all optional)

ARCHITECTURE NOTES:
Modules grab a tracer at import time, long before the CLI has read settings.
The returned LazyTracer resolves to the real tracer only when a span starts,
and to a no-op tracer when tracing is off or the packages are missing.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from oracle_games.config import OpenTelemetrySettings

logger = logging.getLogger(__name__)

_provider: Any = None
_initialized = False


class Span(Protocol):
    """The subset of the span API this package uses."""

    def __enter__(self) -> Span: ...
    def __exit__(self, *args: object) -> None: ...
    def set_attribute(self, key: str, value: object) -> None: ...
    def record_exception(self, exception: BaseException) -> None: ...
    def add_event(self, name: str, attributes: dict[str, object] | None = None) -> None: ...


class _NullSpan:
    def __enter__(self) -> _NullSpan:
        return self

    def __exit__(self, *args: object) -> None:
        pass

    def set_attribute(self, key: str, value: object) -> None:  # noqa: ARG002
        pass

    def record_exception(self, exception: BaseException) -> None:  # noqa: ARG002
        pass

    def add_event(  # noqa: ARG002
        self, name: str, attributes: dict[str, object] | None = None
    ) -> None:
        pass


class LazyTracer:
    """A tracer that looks up the real tracer each time a span is started."""

    def __init__(self, name: str) -> None:
        self._name = name

    def start_as_current_span(self, name: str, **kwargs: Any) -> Span:
        if _provider is None:
            return _NullSpan()

        from opentelemetry import trace

        return trace.get_tracer(self._name).start_as_current_span(name, **kwargs)


def init_telemetry(settings: OpenTelemetrySettings) -> None:
    """
    Initialize OpenTelemetry tracing once per process.

    Safe to call when the otel packages are not installed.
    """
    global _initialized, _provider

    if _initialized:
        return
    _initialized = True

    if not settings.enabled:
        logger.debug("Telemetry disabled")
        return

    try:
        from opentelemetry import trace
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
    except ImportError:
        logger.warning(
            "OpenTelemetry packages not installed. "
            "Install with: pip install oracle-games[observability]"
        )
        return

    provider = TracerProvider(resource=Resource.create({"service.name": settings.service_name}))

    if settings.endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
        except ImportError:
            logger.warning("OTLP exporter not available, using console only")
            provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        else:
            provider.add_span_processor(
                BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.endpoint))
            )
            logger.info(f"OTLP exporter configured: {settings.endpoint}")
    else:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _provider = provider
    logger.info(f"Telemetry initialized: service={settings.service_name}")


def get_tracer(name: str) -> LazyTracer:
    """Get a tracer for the given module name (typically __name__)."""
    return LazyTracer(name)


def shutdown_telemetry() -> None:
    """Flush pending spans. Safe to call if telemetry never started."""
    global _initialized, _provider

    if _provider is not None:
        _provider.shutdown()
        logger.debug("Telemetry shutdown complete")

    _provider = None
    _initialized = False

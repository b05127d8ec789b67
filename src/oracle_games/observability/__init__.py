"""
observability/__init__.py

PURPOSE: Logging setup and opt-in OpenTelemetry tracing.
DEPENDENCIES: rich; opentelemetry-api, opentelemetry-sdk (optional)

ARCHITECTURE NOTES:
- Modules log through logging.getLogger(__name__); the CLI decides where it goes
- Tracing works without otel packages installed (no-op spans)
- Console span export when enabled, OTLP export when an endpoint is configured
"""

from oracle_games.observability.logs import configure_logging
from oracle_games.observability.telemetry import get_tracer, init_telemetry, shutdown_telemetry

__all__ = ["configure_logging", "get_tracer", "init_telemetry", "shutdown_telemetry"]

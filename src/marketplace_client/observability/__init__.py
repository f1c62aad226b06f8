"""OpenTelemetry instrumentation and logging setup for the marketplace client."""

from marketplace_client.observability.config import configure_logging, setup_observability
from marketplace_client.observability.decorators import traced

__all__ = ["setup_observability", "configure_logging", "traced"]

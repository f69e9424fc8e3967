"""OpenTelemetry instrumentation and logging setup for the discovery library."""

from restaurant_discovery.observability.config import configure_logging, setup_observability
from restaurant_discovery.observability.decorators import traced

__all__ = ["setup_observability", "configure_logging", "traced"]

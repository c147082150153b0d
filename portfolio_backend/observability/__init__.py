"""
Observability module.

Provides console logging and correlation ID tracking across requests.
"""

from portfolio_backend.observability.correlation import get_correlation_id, set_correlation_id
from portfolio_backend.observability.logger import configure_logging

__all__ = ["configure_logging", "get_correlation_id", "set_correlation_id"]

"""
External data feeds.

Available sources:
- OddsAPIClient: The Odds API for weekly NFL game lines
"""
from .base import (
    BaseDataSource,
    CircuitBreakerConfig,
    DataSourceError,
    DataSourceHealth,
    DataSourceStatus,
    InvalidApiKeyError,
    RateLimitError,
    RetryConfig,
)
from .odds_api import OddsAPIClient, OddsAPIClientFactory, UsageCheck

__all__ = [
    # Base classes
    "BaseDataSource",
    "CircuitBreakerConfig",
    "DataSourceError",
    "DataSourceHealth",
    "DataSourceStatus",
    "InvalidApiKeyError",
    "RateLimitError",
    "RetryConfig",
    # Clients
    "OddsAPIClient",
    "OddsAPIClientFactory",
    "UsageCheck",
]

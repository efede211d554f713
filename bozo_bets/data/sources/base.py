"""
Shared plumbing for third-party odds feeds.

Every remote call goes through ``BaseDataSource.call_with_retry``, which
retries transient failures with exponential backoff and trips a circuit
breaker once a feed keeps failing. While the circuit is open the feed is
reported unavailable and callers fall back to whatever props are stored.
"""
import asyncio
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

from loguru import logger

T = TypeVar("T")


class DataSourceStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
    DISABLED = "disabled"


@dataclass
class DataSourceHealth:
    """Snapshot of a feed's recent behaviour, served by the health routes."""

    source_name: str
    status: DataSourceStatus
    last_success: Optional[datetime] = None
    last_failure: Optional[datetime] = None
    consecutive_failures: int = 0
    error_message: Optional[str] = None
    latency_ms: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        def stamp(value: Optional[datetime]) -> Optional[str]:
            return value.isoformat() if value else None

        return {
            "source": self.source_name,
            "status": self.status.value,
            "last_success": stamp(self.last_success),
            "last_failure": stamp(self.last_failure),
            "consecutive_failures": self.consecutive_failures,
            "error": self.error_message,
        }


@dataclass
class RetryConfig:
    max_attempts: int = 3
    initial_delay_seconds: float = 1.0
    max_delay_seconds: float = 30.0
    exponential_base: float = 2.0
    jitter: bool = True

    def delay_for(self, attempt: int) -> float:
        """Backoff before retry number ``attempt`` (1-based)."""
        delay = min(
            self.initial_delay_seconds * self.exponential_base ** (attempt - 1),
            self.max_delay_seconds,
        )
        return delay * (0.5 + random.random()) if self.jitter else delay


@dataclass
class CircuitBreakerConfig:
    failure_threshold: int = 5
    recovery_timeout_seconds: int = 60


class DataSourceError(Exception):
    """A feed call failed. ``retry_allowed`` is False for permanent failures."""

    def __init__(
        self,
        message: str,
        source_name: str,
        original_error: Optional[Exception] = None,
        retry_allowed: bool = True,
    ):
        super().__init__(message)
        self.source_name = source_name
        self.original_error = original_error
        self.retry_allowed = retry_allowed


class RateLimitError(DataSourceError):
    """The provider throttled us with a 429."""

    def __init__(self, source_name: str, retry_after_seconds: Optional[int] = None):
        super().__init__(f"{source_name} is throttling requests", source_name)
        self.retry_after_seconds = retry_after_seconds


class InvalidApiKeyError(DataSourceError):
    def __init__(self, source_name: str):
        super().__init__(
            f"{source_name} rejected the configured API key", source_name, retry_allowed=False
        )


class CircuitBreaker:
    """Counts consecutive failures and stays open for the recovery timeout."""

    def __init__(self, config: CircuitBreakerConfig):
        self.config = config
        self.opened_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.opened_at is not None

    def allows_request(self) -> bool:
        if self.opened_at is None:
            return True
        waited = (datetime.now() - self.opened_at).total_seconds()
        return waited >= self.config.recovery_timeout_seconds

    def trip_if_needed(self, failures: int) -> bool:
        if failures >= self.config.failure_threshold:
            self.opened_at = datetime.now()
            return True
        return False

    def close(self) -> None:
        self.opened_at = None


class BaseDataSource(ABC):
    """
    Base for clients of third-party feeds.

    Subclasses wrap each remote call in ``call_with_retry``. A call that
    exhausts its retries counts as one failure towards the breaker.
    """

    def __init__(
        self,
        source_name: str,
        enabled: bool = True,
        retry_config: Optional[RetryConfig] = None,
        circuit_breaker_config: Optional[CircuitBreakerConfig] = None,
    ):
        self.source_name = source_name
        self.enabled = enabled
        self.retry_config = retry_config or RetryConfig()
        self.breaker = CircuitBreaker(circuit_breaker_config or CircuitBreakerConfig())
        self._health = DataSourceHealth(source_name=source_name, status=self._idle_status())

        self.logger = logger.bind(source=source_name)

    def _idle_status(self) -> DataSourceStatus:
        return DataSourceStatus.HEALTHY if self.enabled else DataSourceStatus.DISABLED

    @property
    def is_available(self) -> bool:
        return self.enabled and self.breaker.allows_request()

    @abstractmethod
    async def health_check(self) -> DataSourceHealth:
        """Cheap liveness check of the remote service."""

    async def call_with_retry(self, func: Callable[[], Awaitable[T]]) -> T:
        """
        Await ``func()`` until it succeeds or the attempts run out.

        Raises:
            DataSourceError: Feed disabled or circuit open, a permanent
                failure, or every attempt failed
        """
        if not self.is_available:
            raise DataSourceError(
                f"Data source {self.source_name} is not available",
                self.source_name,
                retry_allowed=False,
            )

        started = datetime.now()
        last_error: Optional[Exception] = None
        attempts = self.retry_config.max_attempts

        for attempt in range(1, attempts + 1):
            try:
                result = await func()
            except DataSourceError as e:
                if not e.retry_allowed:
                    self._record_failure(str(e))
                    raise
                self.logger.warning(f"{self.source_name} attempt {attempt}/{attempts}: {e}")
                last_error = e
            except Exception as e:
                self.logger.error(f"{self.source_name} attempt {attempt}/{attempts} crashed: {e}")
                last_error = e
            else:
                self._record_success((datetime.now() - started).total_seconds() * 1000)
                return result

            if attempt < attempts:
                await asyncio.sleep(self.retry_config.delay_for(attempt))

        self._record_failure(str(last_error))
        raise DataSourceError(
            f"All {attempts} attempts failed for {self.source_name}",
            self.source_name,
            original_error=last_error,
            retry_allowed=False,
        )

    def _record_success(self, latency_ms: float) -> None:
        if self.breaker.is_open:
            self.logger.info(f"{self.source_name} recovered, closing circuit")
            self.breaker.close()
        self._health = DataSourceHealth(
            source_name=self.source_name,
            status=DataSourceStatus.HEALTHY,
            last_success=datetime.now(),
            last_failure=self._health.last_failure,
            latency_ms=latency_ms,
        )

    def _record_failure(self, error_message: str) -> None:
        health = self._health
        health.last_failure = datetime.now()
        health.consecutive_failures += 1
        health.error_message = error_message

        if self.breaker.trip_if_needed(health.consecutive_failures):
            health.status = DataSourceStatus.UNHEALTHY
            self.logger.error(
                f"{self.source_name} failed {health.consecutive_failures} times, opening circuit"
            )
        elif health.consecutive_failures > 1:
            health.status = DataSourceStatus.DEGRADED

    def get_health(self) -> DataSourceHealth:
        return self._health

    def reset_circuit_breaker(self) -> None:
        self.breaker.close()
        self._health = DataSourceHealth(source_name=self.source_name, status=self._idle_status())
        self.logger.info(f"{self.source_name} circuit reset by hand")

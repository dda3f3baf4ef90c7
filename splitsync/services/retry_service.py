"""
Retry and circuit-breaker wrapper for remote calls.
"""
import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, TypeVar
from splitsync.core.config import Settings
from splitsync.core.errors import CircuitOpenError, ErrorKind, SyncError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitBreaker:
    """Opens after `threshold` consecutive exhausted calls and rejects calls until `reset_timeout` passes."""

    def __init__(self, threshold: int, reset_timeout: float, clock: Callable[[], float] = time.monotonic):
        self.threshold = threshold
        self.reset_timeout = reset_timeout
        self._clock = clock
        self.consecutive_failures = 0
        self.reset_at: Optional[float] = None

    @property
    def is_open(self) -> bool:
        return self.reset_at is not None and self._clock() < self.reset_at

    def before_call(self) -> None:
        """Raise CircuitOpenError while open; reset once the timeout has passed."""
        if self.reset_at is None:
            return
        now = self._clock()
        if now < self.reset_at:
            raise CircuitOpenError(self.reset_at - now)
        logger.info("Circuit breaker reset")
        self.consecutive_failures = 0
        self.reset_at = None

    def record_success(self) -> None:
        self.consecutive_failures = 0
        self.reset_at = None

    def record_failure(self) -> None:
        self.consecutive_failures += 1
        if self.consecutive_failures >= self.threshold:
            self.reset_at = self._clock() + self.reset_timeout
            logger.warning(
                f"Circuit breaker activated after {self.consecutive_failures} consecutive failures, "
                f"rejecting calls for {self.reset_timeout:.0f}s"
            )


class ResilientCaller:
    """
    Runs remote operations with a per-attempt timeout, bounded exponential
    backoff and a shared circuit breaker.

    Operations are passed as zero-argument callables returning a fresh
    awaitable, so every attempt re-issues the call.
    """

    def __init__(
        self,
        config: Settings,
        breaker: Optional[CircuitBreaker] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.max_attempts = config.MAX_RETRY_ATTEMPTS
        self.base_delay = config.RETRY_BASE_DELAY_SECONDS
        self.timeout = config.OPERATION_TIMEOUT_SECONDS
        self.breaker = breaker or CircuitBreaker(
            config.CIRCUIT_BREAKER_THRESHOLD, config.CIRCUIT_BREAKER_TIMEOUT_SECONDS
        )
        self._sleep = sleep

    def backoff_delay(self, attempt: int) -> float:
        """Delay after a failed attempt (1-based): base * 2^(attempt-1)."""
        return self.base_delay * (2 ** (attempt - 1))

    async def _attempt(self, operation: Callable[[], Awaitable[T]], name: str) -> T:
        try:
            return await asyncio.wait_for(operation(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise SyncError(
                ErrorKind.UNKNOWN, f"{name} timed out after {self.timeout:.0f} seconds", cause=e
            ) from e
        except SyncError:
            raise
        except Exception as e:
            raise SyncError.unknown(e) from e

    async def call(self, operation: Callable[[], Awaitable[T]], name: str = "remote call") -> T:
        self.breaker.before_call()

        last_error: Optional[SyncError] = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                result = await self._attempt(operation, name)
            except SyncError as e:
                last_error = e
                logger.warning(f"{name}: attempt {attempt} of {self.max_attempts} failed: {e.message}")
                if not e.retryable:
                    raise
                if attempt < self.max_attempts:
                    delay = self.backoff_delay(attempt)
                    logger.debug(f"{name}: waiting {delay}s before retry")
                    await self._sleep(delay)
                continue

            self.breaker.record_success()
            if attempt > 1:
                logger.info(f"{name}: succeeded on attempt {attempt}")
            return result

        logger.error(f"{name}: all {self.max_attempts} attempts exhausted")
        self.breaker.record_failure()
        raise SyncError(ErrorKind.RETRY_LIMIT_EXCEEDED, cause=last_error)

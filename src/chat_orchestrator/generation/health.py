"""
Health telemetry for the generation orchestrator.

One HealthTracker is shared by every request an orchestrator serves. Each
update is a single synchronous method call, so an update can never be split
across an await point.
"""

import logging
from collections import deque
from datetime import datetime
from typing import Callable, Deque

from chat_orchestrator.models import ErrorLogEntry, HealthStatus

logger = logging.getLogger(__name__)


class HealthTracker:
    """
    Aggregate success/failure counters with a bounded error log.

    Example:
        >>> tracker = HealthTracker()
        >>> tracker.record_success(100.0)
        >>> tracker.record_success(300.0)
        >>> tracker.record_failure("timeout")
        >>> tracker.snapshot().average_response_time
        200.0
    """

    def __init__(
        self,
        unhealthy_threshold: int = 3,
        error_log_size: int = 10,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Args:
            unhealthy_threshold: Consecutive failures at which the service is unhealthy
            error_log_size: Number of most recent failures kept in the error log
            clock: Source of timestamps (injectable for tests)
        """
        self.unhealthy_threshold = unhealthy_threshold
        self._clock = clock

        self.total_requests = 0
        self.successful_requests = 0
        self.consecutive_failures = 0
        self.average_response_time = 0.0
        self.error_log: Deque[ErrorLogEntry] = deque(maxlen=error_log_size)
        self.last_check = self._clock()

    @property
    def is_healthy(self) -> bool:
        return self.consecutive_failures < self.unhealthy_threshold

    def record_success(self, response_time: float) -> None:
        """Count a success and fold ``response_time`` (ms) into the running mean."""
        self.last_check = self._clock()
        self.total_requests += 1
        self.successful_requests += 1
        self.consecutive_failures = 0

        total_time = self.average_response_time * (self.successful_requests - 1)
        self.average_response_time = (total_time + response_time) / self.successful_requests

    def record_failure(self, error: str) -> None:
        """Count a terminal failure and append it to the error log."""
        self.last_check = self._clock()
        self.total_requests += 1
        self.consecutive_failures += 1
        self.error_log.append(
            ErrorLogEntry(
                timestamp=self.last_check,
                error=error,
                consecutive_failures=self.consecutive_failures,
            )
        )

        if not self.is_healthy:
            logger.warning(
                f"Generation service unhealthy: {self.consecutive_failures} consecutive failures"
            )

    def snapshot(self) -> HealthStatus:
        """Copy of the current state with the derived success rate."""
        success_rate = 0.0
        if self.total_requests > 0:
            success_rate = round(self.successful_requests / self.total_requests * 100, 2)

        return HealthStatus(
            total_requests=self.total_requests,
            successful_requests=self.successful_requests,
            consecutive_failures=self.consecutive_failures,
            average_response_time=self.average_response_time,
            error_log=list(self.error_log),
            is_healthy=self.is_healthy,
            last_check=self.last_check,
            success_rate=success_rate,
        )

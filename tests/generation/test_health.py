"""Unit tests for HealthTracker."""

from datetime import datetime

import pytest

from chat_orchestrator.generation import HealthTracker


@pytest.fixture
def tracker():
    return HealthTracker(unhealthy_threshold=3, error_log_size=10)


def test_initial_state(tracker):
    status = tracker.snapshot()

    assert status.total_requests == 0
    assert status.successful_requests == 0
    assert status.consecutive_failures == 0
    assert status.average_response_time == 0.0
    assert status.error_log == []
    assert status.is_healthy is True
    assert status.success_rate == 0.0


def test_running_average_and_failure_accounting(tracker):
    """Test successes of 100ms and 300ms followed by one failure."""
    tracker.record_success(100.0)
    tracker.record_success(300.0)
    tracker.record_failure("upstream timeout")

    status = tracker.snapshot()

    assert status.average_response_time == pytest.approx(200.0)
    assert status.consecutive_failures == 1
    assert status.is_healthy is True
    assert status.total_requests == 3
    assert status.successful_requests == 2
    assert status.success_rate == pytest.approx(66.67)
    assert status.error_log[0].error == "upstream timeout"
    assert status.error_log[0].consecutive_failures == 1


def test_unhealthy_after_threshold(tracker):
    tracker.record_failure("a")
    tracker.record_failure("b")
    assert tracker.is_healthy is True

    tracker.record_failure("c")
    assert tracker.is_healthy is False

    tracker.record_success(50.0)
    assert tracker.is_healthy is True
    assert tracker.consecutive_failures == 0


def test_error_log_bounded(tracker):
    """Test that only the 10 most recent errors are kept."""
    for i in range(15):
        tracker.record_failure(f"error {i}")

    status = tracker.snapshot()

    assert len(status.error_log) == 10
    assert status.error_log[0].error == "error 5"
    assert status.error_log[-1].error == "error 14"
    assert status.error_log[-1].consecutive_failures == 15
    assert status.consecutive_failures == 15


def test_snapshot_is_a_copy(tracker):
    tracker.record_failure("first")
    status = tracker.snapshot()

    tracker.record_failure("second")

    assert len(status.error_log) == 1
    assert status.consecutive_failures == 1


def test_injected_clock():
    moment = datetime(2025, 3, 1, 8, 0, 0)
    tracker = HealthTracker(clock=lambda: moment)

    tracker.record_failure("boom")

    status = tracker.snapshot()
    assert status.last_check == moment
    assert status.error_log[0].timestamp == moment

"""
Tests for the error center.
"""
from splitsync.core.errors import CircuitOpenError, ErrorKind, SyncError
from splitsync.services.alert_service import ErrorCenter


def test_one_alert_at_a_time():
    center = ErrorCenter()
    first = center.report(SyncError(ErrorKind.NETWORK_UNAVAILABLE))
    second = center.report(ValueError("bad input"))

    assert center.current is first
    assert first.title == "Network Error"
    assert center.pending_count == 1

    assert center.dismiss() is first
    assert center.current is second
    assert second.kind == ErrorKind.UNKNOWN
    assert second.message == "bad input"

    center.dismiss()
    assert center.current is None
    assert center.dismiss() is None


def test_retry_reinvokes_action():
    center = ErrorCenter()
    calls = []
    alert = center.report(SyncError(ErrorKind.QUOTA_EXCEEDED), retry=lambda: calls.append(1) or "again")
    assert alert.can_retry
    assert center.retry() == "again"
    assert calls == [1]
    assert center.current is None


def test_retry_without_action():
    center = ErrorCenter()
    center.report(SyncError(ErrorKind.NOT_FOUND), title="Missing")
    assert center.current.title == "Missing"
    assert center.retry() is None


def test_messages():
    assert SyncError(ErrorKind.PERMISSION_FAILURE).user_message == "Permission denied."
    assert SyncError.unknown(RuntimeError("disk on fire")).user_message == "disk on fire"
    assert SyncError.invalid(["a", "b"]).message == "a; b"
    assert "Circuit breaker active" in CircuitOpenError(120).user_message
    assert not SyncError(ErrorKind.INVALID_DATA).retryable
    assert SyncError(ErrorKind.UNKNOWN).retryable


def test_clear():
    center = ErrorCenter()
    center.report(SyncError(ErrorKind.UNKNOWN))
    center.report(SyncError(ErrorKind.UNKNOWN))
    center.clear()
    assert center.current is None
    assert center.pending_count == 0


def test_repeated_error_is_folded_into_existing_alert():
    center = ErrorCenter()
    shown = center.report(SyncError(ErrorKind.NETWORK_UNAVAILABLE), retry=lambda: "first")
    center.report(SyncError(ErrorKind.NOT_FOUND))
    again = center.report(SyncError(ErrorKind.NETWORK_UNAVAILABLE), retry=lambda: "second")
    center.report(SyncError(ErrorKind.NOT_FOUND))

    assert again is shown
    assert center.pending_count == 1
    assert center.retry() == "second"
    assert center.current.kind == ErrorKind.NOT_FOUND


def test_queue_discards_oldest_beyond_limit():
    center = ErrorCenter(max_queued=2)
    for n in range(5):
        center.report(ValueError(f"failure {n}"))

    assert center.current.message == "failure 0"
    assert center.pending_count == 2
    center.dismiss()
    assert center.current.message == "failure 3"

"""Unit tests for CancellationToken."""

from unittest.mock import Mock

from crpt_client.adapters.rate_limit import CancellationToken


def test_cancel_runs_callbacks_once() -> None:
    token = CancellationToken()
    callback = Mock()
    token.add_callback(callback)

    token.cancel()
    token.cancel()

    assert token.cancelled is True
    callback.assert_called_once_with()


def test_callback_added_after_cancel_runs_immediately() -> None:
    token = CancellationToken()
    token.cancel()
    callback = Mock()

    token.add_callback(callback)

    callback.assert_called_once_with()


def test_removed_callback_is_not_called() -> None:
    token = CancellationToken()
    callback = Mock()
    remove = token.add_callback(callback)

    remove()
    token.cancel()

    callback.assert_not_called()


def test_wait_reports_cancellation() -> None:
    token = CancellationToken()

    assert token.wait(timeout=0.01) is False
    token.cancel()
    assert token.wait(timeout=0.01) is True

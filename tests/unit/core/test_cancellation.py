"""Unit tests for cooperative cancellation tokens."""

from __future__ import annotations

from core.cancellation import CancellationToken, CancellationTokenSource


def test_source_cancel_flips_token_and_notifies_once() -> None:
    """Cancelling twice should notify listeners once."""
    source = CancellationTokenSource()
    calls: list[None] = []
    source.token.on_cancellation_requested(calls.append)

    source.cancel()
    source.cancel()

    assert (source.token.is_cancellation_requested, len(calls)) == (True, 1)


def test_dispose_without_cancel_keeps_token_live() -> None:
    source = CancellationTokenSource()

    source.dispose()

    assert not source.token.is_cancellation_requested


def test_dispose_with_cancel_cancels_token() -> None:
    source = CancellationTokenSource()

    source.dispose(cancel=True)

    assert source.token.is_cancellation_requested


def test_listener_added_after_cancel_fires_immediately() -> None:
    """Late listeners on a cancelled token should be called right away."""
    calls: list[None] = []

    CancellationToken.CANCELLED.on_cancellation_requested(calls.append)

    assert calls == [None]


def test_shared_tokens_are_fixed() -> None:
    """The shared none token never reports cancellation."""
    CancellationToken.NONE._cancel()

    assert (
        CancellationToken.NONE.is_cancellation_requested,
        CancellationToken.CANCELLED.is_cancellation_requested,
    ) == (False, True)

"""Cooperative cancellation tokens.

A token is a pollable flag passed through the call chain. Code checks
it at explicit checkpoints and never interrupts in-flight I/O.
"""

from __future__ import annotations

from typing import Callable, ClassVar

from core.events import Disposable, Emitter


class CancellationToken:
    """Read-only view of a cancellation signal."""

    NONE: ClassVar["CancellationToken"]
    CANCELLED: ClassVar["CancellationToken"]

    def __init__(self) -> None:
        self._cancelled = False
        self._emitter: Emitter[None] = Emitter("cancellation_requested")

    @property
    def is_cancellation_requested(self) -> bool:
        return self._cancelled

    def on_cancellation_requested(self, listener: Callable[[None], None]) -> Disposable:
        """Subscribe to the cancel transition; fires immediately if already cancelled."""
        if self._cancelled:
            listener(None)
            return Disposable(lambda: None)
        return self._emitter.subscribe(listener)

    def _cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._emitter.fire(None)
        self._emitter.dispose()


class _FixedToken(CancellationToken):
    """Shared token whose state can never change."""

    def __init__(self, cancelled: bool) -> None:
        super().__init__()
        self._cancelled = cancelled

    def _cancel(self) -> None:
        return None


CancellationToken.NONE = _FixedToken(cancelled=False)
CancellationToken.CANCELLED = _FixedToken(cancelled=True)


class CancellationTokenSource:
    """Owner side of a cancellation token."""

    def __init__(self) -> None:
        self._token = CancellationToken()

    @property
    def token(self) -> CancellationToken:
        return self._token

    def cancel(self) -> None:
        """Request cancellation; idempotent."""
        self._token._cancel()

    def dispose(self, cancel: bool = False) -> None:
        """Release the source, optionally cancelling its token first."""
        if cancel:
            self.cancel()

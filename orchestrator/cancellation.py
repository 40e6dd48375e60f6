"""Cooperative cancellation for export runs."""

from typing import Callable, Optional


class CancellationToken:
    """
    Externally settable halt flag polled by the orchestrator.

    The flag is only read at checkpoints (before each collection and before
    each document), so an in-flight fetch or finalize always completes first.
    A predicate can be supplied for hosts that already track the flag.
    """

    def __init__(self, predicate: Optional[Callable[[], bool]] = None):
        self._cancelled = False
        self._predicate = predicate

    def cancel(self) -> None:
        self._cancelled = True

    def is_cancelled(self) -> bool:
        if self._cancelled:
            return True
        if self._predicate is not None and self._predicate():
            self._cancelled = True
        return self._cancelled


class ExportHalted(Exception):
    """Raised internally when cancellation is observed mid-collection."""
    pass


__all__ = ['CancellationToken', 'ExportHalted']

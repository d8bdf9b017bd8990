"""Exceptions raised and reported by the queue core."""

from __future__ import annotations

import httpx


class QueueError(Exception):
    """Base class for failures talking to the queue server."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FetchFailed(QueueError):
    """Reading the unwatched collection failed; the snapshot was left as-is."""


class RemoteMutationFailed(QueueError):
    """A mark-watched / watch / add-channel request was not accepted."""

    def __init__(
        self,
        operation: str,
        target: str,
        *,
        status_code: int | None = None,
        reason: str = "",
    ) -> None:
        detail = f"HTTP {status_code}" if status_code is not None else (reason or "network error")
        super().__init__(f"{operation} {target!r} failed: {detail}", status_code=status_code)
        self.operation = operation  # "mark_watched" | "watch" | "add_channel"
        self.target = target
        self.reason = reason


def status_code_of(exc: BaseException) -> int | None:
    """Return the HTTP status carried by an httpx status error, if any."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    return None


__all__ = [
    "FetchFailed",
    "QueueError",
    "RemoteMutationFailed",
    "status_code_of",
]

from __future__ import annotations


class StreamError(Exception):
    """Base class for errors surfaced to callers of the transfer engine."""


class AlreadyRunning(StreamError):
    def __init__(self) -> None:
        super().__init__("Loop already running")


class AccountResolutionFailure(StreamError):
    """A wallet or token account could not be resolved while starting a stream."""

    def __init__(self, role: str, value: object, reason: str) -> None:
        self.role = role
        self.value = value
        super().__init__(f"cannot resolve {role} account {value!r}: {reason}")

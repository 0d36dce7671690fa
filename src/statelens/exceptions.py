"""
Error taxonomy for live state inspection.

Internals raise these; the public inspector surface catches them, logs,
and reports a boolean so a failed edit is never fatal to the host app.
"""


class StateLensError(Exception):
    """Base class for every error raised by statelens."""


class CellNotFoundError(StateLensError, KeyError):
    """A write targeted a name that is not in the registry."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Cell '{self.name}' is not tracked"


class CellNotWritableError(StateLensError):
    """A write targeted a derived/computed cell."""

    def __init__(self, name: str, kind: str):
        super().__init__(f"Cell '{name}' is {kind} and cannot be written")
        self.name = name
        self.kind = kind


class DecodeFailure(StateLensError, ValueError):
    """Snapshot text or raw edit input could not be decoded."""


class HostWriteError(StateLensError):
    """The host graph rejected or failed the underlying write."""

    def __init__(self, name: str, cause: BaseException):
        super().__init__(f"Host write to '{name}' failed: {cause}")
        self.name = name
        self.cause = cause

"""Failure taxonomy for stack synchronization and resolution.

Errors raised during startup (``ReadError``, ``PushError``,
``TransportError``, ``IndexLoadError``) abort the process. Errors raised
while resolving a request (``NotFoundError``, ``IntegrityError``,
``PullError``) are reported to the caller and never stop the server.
"""

from __future__ import annotations


class DevregError(Exception):
    """Base class for every error raised by devreg."""


class IndexLoadError(DevregError):
    """The index file could not be read or is malformed."""


class ReadError(DevregError):
    """A stack's devfile could not be read from disk."""

    def __init__(self, path, cause: Exception | None = None):
        self.path = path
        self.cause = cause
        super().__init__(f"failed to read {path}: {cause}")


class TransportError(DevregError):
    """The registry could not be reached at all (refused, DNS, timeout)."""


class PushError(DevregError):
    """The registry rejected a push or was unreachable during it."""

    def __init__(self, reference: str, cause: object):
        self.reference = reference
        self.cause = cause
        super().__init__(f"failed to push to {reference}: {cause}")


class NotFoundError(DevregError):
    """Nothing is stored under the requested name or reference."""


class PullError(DevregError):
    """The registry failed while serving a pull."""

    def __init__(self, reference: str, cause: object):
        self.reference = reference
        self.cause = cause
        super().__init__(f"failed to pull from {reference}: {cause}")


class IntegrityError(DevregError):
    """The registry answered, but the expected content was not in it."""


class MediaTypeError(IntegrityError):
    """An artifact was stored under a media type other than the devfile ones."""

"""
Exceptions for dxport.

All errors raised by the core derive from DxError so callers (and the CLI)
can catch a single base class. The original low-level exception, if any,
is kept on ``_original_cause`` and chained via ``raise ... from``.
"""

from __future__ import annotations


class DxError(Exception):
    """Base error for dxport."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self._original_cause = cause

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Addressing
# =============================================================================


class AddressingAmbiguousError(DxError):
    """A location could not be narrowed down to a single remote object."""

    def __init__(self, location: str, candidates: list[str] | None = None) -> None:
        self.location = location
        self.candidates = candidates or []
        if self.candidates:
            message = (
                f'"{location}" matches {len(self.candidates)} objects: '
                f"{', '.join(self.candidates)}"
            )
        else:
            message = f'Cannot find file or folder "{location}"'
        super().__init__(message)


# =============================================================================
# Transfer
# =============================================================================


class EmptySourceError(DxError):
    """Uploading a zero-length source is not allowed."""

    def __init__(self, source: str) -> None:
        self.source = source
        super().__init__(f'File "{source}" is empty')


class IncompleteSessionError(DxError):
    """An upload failed after the remote object was created but before close.

    The remote object is left in the open state; cleaning it up is the
    caller's responsibility.
    """

    def __init__(self, object_id: str, cause: BaseException | None = None) -> None:
        self.object_id = object_id
        message = f"Upload to {object_id} did not complete, object left open"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message, cause=cause)


# =============================================================================
# Platform / transport
# =============================================================================


class RemoteRejectedError(DxError):
    """The platform answered with a structured error payload."""

    def __init__(
        self,
        error_type: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        self.error_type = error_type
        self.status_code = status_code
        super().__init__(f"{error_type}: {message}")
        self.detail = message


class TransportFailureError(DxError):
    """Network or IO failure without a structured platform response."""


class NotLoggedInError(DxError):
    """No auth token or project context is configured."""

    def __init__(self, message: str = "Please login") -> None:
        super().__init__(message)


class InvalidResponseError(DxError):
    """A successful response whose body does not have the expected shape."""

    def __init__(self, route: str, reason: str, cause: BaseException | None = None) -> None:
        self.route = route
        self.reason = reason
        super().__init__(f"Unexpected response from /{route}: {reason}", cause=cause)

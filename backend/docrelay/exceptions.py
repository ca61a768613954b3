"""Errors raised while relaying a translation request.

Every error carries the HTTP status it is reported with. The message is
what the caller sees in the ``{"error": ...}`` body.
"""

from typing import Optional


class RelayError(Exception):
    """Base class for all relay errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# ============== Client input ==============


class ClientInputError(RelayError):
    """The inbound request is incomplete. Raised before any remote call."""

    status_code = 400


class MissingField(ClientInputError):
    """A required language code is absent or blank."""

    def __init__(self, message: str = "source/target required"):
        super().__init__(message)


class MissingFile(ClientInputError):
    """No file part was uploaded."""

    def __init__(self, message: str = "File required"):
        super().__init__(message)


# ============== Remote API ==============


class UpstreamProtocolError(RelayError):
    """The remote API answered, but not in a shape we can use."""


class InvalidResponse(UpstreamProtocolError):
    """A required field (request id, status) is missing or the body is not JSON."""


class UpstreamError(RelayError):
    """The remote API answered with a non-2xx status."""

    def __init__(self, operation: str, status: int, body: str = ""):
        self.operation = operation
        self.status = status
        self.body = body
        super().__init__(f"{operation} failed: HTTP {status}")


class UpstreamTimeout(RelayError):
    """A single remote call exceeded its timeout."""

    def __init__(self, operation: str, timeout: float):
        self.operation = operation
        self.timeout = timeout
        super().__init__(f"{operation} timed out after {timeout:g}s")


class NetworkError(RelayError):
    """Transport-level failure talking to the remote API."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed: {reason or 'connection error'}")


class JobFailed(RelayError):
    """The remote job reached FAILED."""

    def __init__(self, request_id: str):
        self.request_id = request_id
        super().__init__("Translation failed")


class JobTimedOut(RelayError):
    """The remote job did not finish before the deadline."""

    def __init__(self, request_id: str, deadline: float):
        self.request_id = request_id
        self.deadline = deadline
        super().__init__("Timeout")


class ClientDisconnected(RelayError):
    """The caller went away while the job was still running."""

    status_code = 499

    def __init__(self, request_id: Optional[str] = None):
        self.request_id = request_id
        super().__init__("Client disconnected")


# ============== Local ==============


class LocalIOError(RelayError):
    """Writing the uploaded file to the upload directory failed."""


class InvalidTransition(Exception):
    """A finished job was asked to change state. Indicates a bug, not bad input."""

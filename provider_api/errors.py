"""
Error taxonomy for hosting provider API clients.

Every failure surfaced by a `ProviderClient` derives from `ProviderAPIError`, so callers that
only want to know "did the provider call work" can catch a single type. The subclasses exist so
callers can tell authentication problems, explicit provider-side failures, contract violations,
and polling timeouts apart without parsing message strings. Where a response body was received,
the raw decoded body (or raw text when it was not JSON) is attached as `body` for diagnostics.

Transport failures (DNS, refused connections, socket timeouts) are not part of this taxonomy:
they propagate as the `requests` exceptions raised by the HTTP layer.
"""

from typing import Any, Optional


class ProviderAPIError(Exception):
    """
    Base exception for provider API failures.

    Args:
        message (str): Human-readable description of the failure.
        body (Any): Raw response body that triggered the failure, if any.
    """

    def __init__(self, message: str, body: Any = None) -> None:
        super().__init__(message)
        self.body = body


class AuthenticationError(ProviderAPIError):
    """Raised when the token endpoint does not return a usable access token."""


class OperationError(ProviderAPIError):
    """
    Raised when the provider explicitly reports that an action failed.

    The `message` attribute holds the provider-supplied message, or "Unknown error" when the
    provider did not send one.
    """

    def __init__(self, message: str, body: Any = None) -> None:
        super().__init__(f"Operation failed: {message}", body)
        self.message = message


class UnexpectedResponseError(ProviderAPIError):
    """Raised when a response matches none of the shapes the provider contract allows."""


class OperationTimeoutError(ProviderAPIError, TimeoutError):
    """
    Raised when polling gives up before the operation reports completion.

    Also a builtin `TimeoutError`, so generic timeout handlers catch it. Note that the caller
    cannot tell a still-running operation apart from one the provider silently dropped.
    """

    def __init__(self, operation_id: str, attempts: int, body: Optional[Any] = None) -> None:
        super().__init__(
            f"Operation timed out after {attempts} attempts (ID: {operation_id})",
            body,
        )
        self.operation_id = operation_id
        self.attempts = attempts


class InvalidRequestError(ProviderAPIError, ValueError):
    """Raised before any network call when caller input cannot form a valid request."""

"""Completion runner exceptions."""
from __future__ import annotations


class CompletionRunnerError(Exception):
    """Base exception for completion runner errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(CompletionRunnerError):
    """Credentials, endpoint or settings are missing or malformed."""


class CompletionServiceError(CompletionRunnerError):
    """The remote service rejected the request or reported a failure."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code

    def __str__(self) -> str:
        if self.code:
            return f"{self.code}: {self.message}"
        return self.message


class ServiceUnavailableError(CompletionServiceError):
    """The service could not be reached (DNS, connect, TLS, timeout)."""


class AuthenticationError(CompletionServiceError):
    """Key rejected (401/403)."""


class RateLimitError(CompletionServiceError):
    """Quota or rate limit exceeded (429)."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, code=code, status_code=429)
        self.retry_after = retry_after


class ServerError(CompletionServiceError):
    """Server error (5xx)."""

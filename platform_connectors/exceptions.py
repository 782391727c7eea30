"""
Platform Connector Exceptions.

Every connector failure is an UpstreamUnavailableError so the
aggregator can isolate it per platform and continue.
"""

from typing import Any, Optional

from core.exceptions import ErrorClassification, Severity, UpstreamUnavailableError


class ConnectorError(UpstreamUnavailableError):
    """Base exception for all connector errors."""

    def __init__(
        self,
        message: str,
        platform: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
        **kwargs,
    ) -> None:
        super().__init__(
            message,
            platform=platform,
            context=context or {},
            cause=original_error,
            **kwargs,
        )
        self.original_error = original_error


class FetchError(ConnectorError):
    """HTTP or transport failure while calling a platform API."""

    def __init__(
        self,
        message: str,
        platform: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        request_url: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        context = dict(context or {})
        if status_code is not None:
            context["status_code"] = status_code
        if request_url:
            context["request_url"] = request_url
        super().__init__(message, platform, original_error, context)
        self.status_code = status_code
        self.response_body = response_body
        self.request_url = request_url

    def is_server_error(self) -> bool:
        """Check if error is server-side."""
        return self.status_code is not None and 500 <= self.status_code < 600

    def is_not_found(self) -> bool:
        return self.status_code == 404


class RateLimitError(FetchError):
    """Platform rejected the call for rate limiting."""

    def __init__(
        self,
        message: str,
        platform: Optional[str] = None,
        retry_after_seconds: Optional[int] = None,
        status_code: Optional[int] = 429,
    ) -> None:
        super().__init__(
            message,
            platform=platform,
            status_code=status_code,
            context={"retry_after_seconds": retry_after_seconds},
        )
        self.retry_after_seconds = retry_after_seconds


class AuthenticationError(ConnectorError):
    """Missing or rejected API credentials."""

    default_severity = Severity.HIGH
    default_classification = ErrorClassification.NON_RECOVERABLE


class ProfileNotFoundError(ConnectorError):
    """The username does not exist on the platform."""

    default_classification = ErrorClassification.NON_RECOVERABLE

    def __init__(self, platform: str, username: str) -> None:
        super().__init__(
            f"{platform} user '{username}' not found",
            platform=platform,
            context={"username": username},
        )
        self.username = username


class ManualEntryMissingError(ConnectorError):
    """No manual profile data has been submitted for this username."""

    default_classification = ErrorClassification.NON_RECOVERABLE

    def __init__(self, platform: str, username: str) -> None:
        super().__init__(
            f"No manual {platform} data submitted for '{username}'",
            platform=platform,
            context={"username": username},
        )
        self.username = username

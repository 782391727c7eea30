"""
Core Module - Exceptions.

============================================================
WHICH FAILURES REACH THE CALLER
============================================================
A single platform going wrong never fails a score: its
UpstreamUnavailableError or MalformedDataError is logged,
recorded on the connection and the family is treated as
missing. CandidateNotFoundError, ConfigurationError and
PersistenceError abort the operation and propagate.

DareScoreException (base)
├── ConfigurationError
├── CandidateNotFoundError
├── UpstreamUnavailableError
│   └── (platform_connectors.exceptions.ConnectorError ...)
├── MalformedDataError
└── PersistenceError
    └── (storage.repositories.exceptions.RepositoryException ...)

============================================================
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class Severity(Enum):
    """Log level hint carried by every exception."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorClassification(Enum):
    RECOVERABLE = "recoverable"
    """The platform degrades to missing, the score still completes."""

    TRANSIENT = "transient"
    """A later refresh may succeed (outage, rate limit)."""

    NON_RECOVERABLE = "non_recoverable"
    """Surfaced to the caller."""


# ============================================================
# BASE EXCEPTION
# ============================================================

class DareScoreException(Exception):
    """
    Root of every error raised by this package.

    Subclasses pick a default severity and classification;
    ``context`` collects identifiers (candidate, platform,
    repository) for the log line.
    """

    default_severity: Severity = Severity.MEDIUM
    default_classification: ErrorClassification = ErrorClassification.RECOVERABLE

    def __init__(
        self,
        message: str,
        severity: Optional[Severity] = None,
        context: Optional[Dict[str, Any]] = None,
        classification: Optional[ErrorClassification] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.severity = severity or self.default_severity
        self.classification = classification or self.default_classification
        self.context = dict(context or {})
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)
        if cause is not None:
            self.context.setdefault("cause", f"{type(cause).__name__}: {cause}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": type(self).__name__,
            "message": self.message,
            "severity": self.severity.value,
            "classification": self.classification.value,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        if not self.context:
            return self.message
        ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} ({ctx_str})"


# ============================================================
# CONFIGURATION ERRORS
# ============================================================

class ConfigurationError(DareScoreException):
    """Invalid configuration (weights, thresholds, settings)."""

    default_severity = Severity.HIGH
    default_classification = ErrorClassification.NON_RECOVERABLE

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        actual_value: Optional[Any] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if config_key:
            context["config_key"] = config_key
        if actual_value is not None:
            context["actual_value"] = str(actual_value)[:100]

        super().__init__(message, context=context, **kwargs)


# ============================================================
# DOMAIN ERRORS
# ============================================================

class CandidateNotFoundError(DareScoreException):
    """The candidate (or its profile record) does not exist."""

    default_severity = Severity.MEDIUM
    default_classification = ErrorClassification.NON_RECOVERABLE

    def __init__(self, candidate_id: Any, **kwargs):
        context = kwargs.pop("context", {})
        context["candidate_id"] = str(candidate_id)
        super().__init__(
            f"Candidate {candidate_id} not found",
            context=context,
            **kwargs,
        )
        self.candidate_id = candidate_id


class UpstreamUnavailableError(DareScoreException):
    """
    A platform could not be read.

    Covers outages, rate limiting and authentication failures.
    Isolated per platform during aggregation.
    """

    default_severity = Severity.MEDIUM
    default_classification = ErrorClassification.TRANSIENT

    def __init__(self, message: str, platform: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        if platform:
            context["platform"] = platform
        super().__init__(message, context=context, **kwargs)
        self.platform = platform


class MalformedDataError(DareScoreException):
    """A platform payload could not be decoded into its typed variant."""

    default_severity = Severity.LOW
    default_classification = ErrorClassification.RECOVERABLE

    def __init__(
        self,
        message: str,
        platform: Optional[str] = None,
        field_name: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        if platform:
            context["platform"] = platform
        if field_name:
            context["field"] = field_name
        super().__init__(message, context=context, **kwargs)
        self.platform = platform
        self.field_name = field_name


class PersistenceError(DareScoreException):
    """Reading or writing scores failed. Fatal for the operation."""

    default_severity = Severity.HIGH
    default_classification = ErrorClassification.NON_RECOVERABLE


__all__ = [
    "Severity",
    "ErrorClassification",
    "DareScoreException",
    "ConfigurationError",
    "CandidateNotFoundError",
    "UpstreamUnavailableError",
    "MalformedDataError",
    "PersistenceError",
]

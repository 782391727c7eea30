"""
Core Module Package.

This package contains the infrastructure components that all
scoring modules depend on.

Components:
- clock: Unified time abstraction
- exceptions: Custom exception hierarchy
- settings: Environment-driven runtime settings
- logging_config: Root logger setup
"""

from .clock import ClockProtocol, SystemClock, MockClock, get_clock, set_clock, reset_clock
from .exceptions import (
    Severity,
    ErrorClassification,
    DareScoreException,
    ConfigurationError,
    CandidateNotFoundError,
    UpstreamUnavailableError,
    MalformedDataError,
    PersistenceError,
)
from .settings import Settings, get_settings
from .logging_config import setup_logging


__all__ = [
    "ClockProtocol",
    "SystemClock",
    "MockClock",
    "get_clock",
    "set_clock",
    "reset_clock",
    "Severity",
    "ErrorClassification",
    "DareScoreException",
    "ConfigurationError",
    "CandidateNotFoundError",
    "UpstreamUnavailableError",
    "MalformedDataError",
    "PersistenceError",
    "Settings",
    "get_settings",
    "setup_logging",
]

"""Exception hierarchy for EuPathDB annotation retrieval.

Errors are organised by domain and severity and carry an ``ErrorContext``
so that they can be logged as structured events.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"  # Non-critical, recoverable
    MEDIUM = "medium"  # May affect completeness of a table
    HIGH = "high"  # Aborts a single call
    CRITICAL = "critical"  # Aborts the run


class ErrorDomain(Enum):
    """Error domains for categorization."""

    CONFIG = "config"
    NETWORK = "network"
    ROUTING = "routing"
    DATA = "data"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


@dataclass
class ErrorContext:
    """Context information for errors."""

    domain: ErrorDomain
    severity: ErrorSeverity
    component: str | None = None
    operation: str | None = None
    details: dict[str, Any] | None = None
    traceback: str | None = None


class EuPathDBError(Exception):
    """Base exception for all retrieval and flattening errors."""

    def __init__(self, message: str, *, context: ErrorContext | None = None, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext(domain=ErrorDomain.UNKNOWN, severity=ErrorSeverity.MEDIUM)
        self.cause = cause

        if self.context.traceback is None and cause is not None:
            self.context.traceback = "".join(traceback.format_exception(type(cause), cause, cause.__traceback__))

    def __str__(self) -> str:
        base_msg = self.message
        if self.context.component:
            base_msg = f"[{self.context.component}] {base_msg}"
        if self.context.operation:
            base_msg = f"{base_msg} (operation: {self.context.operation})"
        return base_msg

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "message": self.message,
            "domain": self.context.domain.value,
            "severity": self.context.severity.value,
            "component": self.context.component,
            "operation": self.context.operation,
            "details": self.context.details,
            "cause": str(self.cause) if self.cause else None,
        }


# Configuration Errors
class ConfigError(EuPathDBError):
    """Raised when configuration files are missing or invalid."""

    def __init__(self, message: str, *, config_file: str | None = None, cause: Exception | None = None) -> None:
        context = ErrorContext(domain=ErrorDomain.CONFIG, severity=ErrorSeverity.HIGH, component="config", details={"config_file": config_file})
        super().__init__(message, context=context, cause=cause)


class ConfigLoadError(ConfigError):
    """Raised when configuration loading fails."""


# Network/HTTP Errors
class NetworkError(EuPathDBError):
    """Base class for network-related errors."""

    def __init__(self, message: str, *, url: str | None = None, status_code: int | None = None, component: str | None = None, cause: Exception | None = None) -> None:
        context = ErrorContext(domain=ErrorDomain.NETWORK, severity=ErrorSeverity.MEDIUM, component=component, details={"url": url, "status_code": status_code})
        super().__init__(message, context=context, cause=cause)
        self.url = url
        self.status_code = status_code


class ApiClientError(NetworkError):
    """Generic API client error (bad status, unparseable body, transport failure)."""

    def __init__(self, message: str, *, url: str | None = None, status_code: int | None = None, api_name: str | None = None, cause: Exception | None = None) -> None:
        super().__init__(message, url=url, status_code=status_code, component=api_name or "api_client", cause=cause)
        self.api_name = api_name


class TimeoutError(NetworkError):
    """Raised when a request times out or the host cannot be reached."""

    def __init__(self, message: str, *, url: str | None = None, timeout: float | None = None, cause: Exception | None = None) -> None:
        super().__init__(message, url=url, component="http", cause=cause)
        self.context.details = {"url": url, "timeout": timeout}
        self.timeout = timeout


class UnsupportedFormatError(EuPathDBError):
    """Raised when a response format other than JSON is requested."""

    def __init__(self, response_format: str) -> None:
        context = ErrorContext(
            domain=ErrorDomain.NETWORK,
            severity=ErrorSeverity.HIGH,
            component="api_client",
            operation="query",
            details={"response_format": response_format},
        )
        super().__init__(f"Invalid response type specified: {response_format!r} (only 'json' is supported)", context=context)
        self.response_format = response_format


class UnknownProviderError(EuPathDBError):
    """Raised when a data provider has no known service prefix."""

    def __init__(self, provider: str) -> None:
        context = ErrorContext(
            domain=ErrorDomain.ROUTING,
            severity=ErrorSeverity.HIGH,
            component="providers",
            operation="resolve_prefix",
            details={"provider": provider},
        )
        super().__init__(f"Unknown data provider: {provider!r}", context=context)
        self.provider = provider


# Data Processing Errors
class DataError(EuPathDBError):
    """Base class for response-processing errors."""

    def __init__(self, message: str, *, record_id: str | None = None, component: str | None = None, cause: Exception | None = None, **details: Any) -> None:
        context = ErrorContext(domain=ErrorDomain.DATA, severity=ErrorSeverity.MEDIUM, component=component, details={"record_id": record_id, **details})
        super().__init__(message, context=context, cause=cause)
        self.record_id = record_id


class MalformedIdentifierError(DataError):
    """Raised when a composite gene identifier cannot be parsed."""

    def __init__(self, message: str, *, value: Any = None, record_id: str | None = None) -> None:
        super().__init__(message, record_id=record_id, component="identifiers", value=None if value is None else str(value))
        self.value = value


class SchemaMismatchError(DataError):
    """Raised when a table row does not fit the captured column schema."""

    def __init__(self, message: str, *, table_name: str | None = None, expected: int | None = None, actual: int | None = None, record_id: str | None = None) -> None:
        super().__init__(message, record_id=record_id, component="flatten", table_name=table_name, expected=expected, actual=actual)
        self.table_name = table_name


# Validation Errors
class ValidationError(EuPathDBError):
    """Raised when a flattened table fails validation."""

    def __init__(self, message: str, *, schema_name: str | None = None, validation_errors: list[str] | None = None, cause: Exception | None = None) -> None:
        context = ErrorContext(
            domain=ErrorDomain.VALIDATION,
            severity=ErrorSeverity.HIGH,
            component="validator",
            operation="validate",
            details={"schema_name": schema_name, "validation_errors": validation_errors},
        )
        super().__init__(message, context=context, cause=cause)


__all__ = [
    "ApiClientError",
    "ConfigError",
    "ConfigLoadError",
    "DataError",
    "ErrorContext",
    "ErrorDomain",
    "ErrorSeverity",
    "EuPathDBError",
    "MalformedIdentifierError",
    "NetworkError",
    "SchemaMismatchError",
    "TimeoutError",
    "UnknownProviderError",
    "UnsupportedFormatError",
    "ValidationError",
]

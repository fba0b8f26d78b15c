"""
Enumeration types for the domain sweep system.

These enums provide type-safe constants for status codes, error codes,
and lifecycle states throughout the system.
"""

from enum import Enum


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class DomainValidationErrorCode(Enum):
    """Error codes for domain validation failures."""

    EMPTY_INPUT = "empty_input"
    FORBIDDEN_CHARS = "forbidden_chars"
    IDNA_ERROR = "idna_error"
    TOO_LONG = "too_long"
    INVALID_LABEL = "invalid_label"
    INVALID_TLD = "invalid_tld"


class WHOISErrorCode(Enum):
    """Error codes for WHOIS client operations."""

    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    PROXY_ERROR = "proxy_error"
    NO_SERVER = "no_server"


class WHOISStatus(Enum):
    """Classification of a single raw WHOIS reply."""

    REGISTERED = "registered"
    NOT_REGISTERED = "not_registered"
    RATE_LIMITED = "rate_limited"
    RATE_LIMITED_RETRY = "rate_limited_retry"


class TaskState(Enum):
    """Lifecycle of one domain inside a processor."""

    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ProcessorState(Enum):
    """Lifecycle of a processor instance."""

    OPEN = "open"
    CLOSING = "closing"
    DRAINED = "drained"
    ENDED = "ended"


class ProcessorEvent(Enum):
    """Notifications emitted by a processor."""

    ADD = "add"
    NEXT = "next"
    AVAILABLE = "available"
    TAKEN = "taken"
    FAILED = "failed"
    IDLE = "idle"
    END = "end"

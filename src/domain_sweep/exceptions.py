"""
Exception classes for the domain sweep system.

All exceptions inherit from DomainSweepError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class DomainSweepError(Exception):
    """Base exception for all domain sweep errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainSweepError):
    """Raised when domain normalization fails (IDNA encoding)."""

    pass


class NetworkError(DomainSweepError):
    """Raised when a WHOIS exchange fails at transport level (connect, timeout, proxy)."""

    pass


class RateLimitExceededError(DomainSweepError):
    """Raised when the registry keeps rate limiting after the retry budget is spent."""

    def __init__(
        self,
        message: str = "Rate limit exceeded.",
        details: Optional[dict] = None,
    ) -> None:
        super().__init__("rate_limited", message, details)


class DnsProbeError(DomainSweepError):
    """Raised when a DNS probe fails with anything other than NXDOMAIN or NoAnswer."""

    pass


class AlreadyEndedError(DomainSweepError):
    """Raised when a domain is added to a processor that has already ended."""

    def __init__(self, message: str = "The processor queue is already finished.") -> None:
        super().__init__("already_ended", message)

"""
Domain syntax validation.

Checks candidate names against the domain-name grammar (RFC 1035 / RFC 1123
labels, IDNA 2008 for international names) before any network lookup is
attempted.
"""

import re
from dataclasses import dataclass
from typing import Optional

import idna

from domain_sweep.enums import DomainValidationErrorCode
from domain_sweep.exceptions import ValidationError


# Control characters, whitespace and symbols that never appear in a host name
FORBIDDEN_CHARS_PATTERN = re.compile(
    r'[\x00-\x1f\x7f'
    r'\s'
    r'!@#$%^&*()+=\[\]{}|\\:;"\'<>,?/`~]'
)

LABEL_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")
TLD_PATTERN = re.compile(r"^(?:[a-z]{2,63}|xn--[a-z0-9-]{1,59})$")

MAX_DOMAIN_LENGTH = 253
MAX_LABEL_LENGTH = 63


@dataclass
class DomainValidationError:
    """Structured error information for domain validation failures."""

    code: DomainValidationErrorCode
    message: str
    details: dict


@dataclass
class DomainValidationResult:
    """Result of domain validation operation."""

    valid: bool
    canonical_domain: Optional[str]
    error: Optional[DomainValidationError]


def _invalid(code: DomainValidationErrorCode, message: str, **details) -> DomainValidationResult:
    return DomainValidationResult(
        valid=False,
        canonical_domain=None,
        error=DomainValidationError(code=code, message=message, details=details),
    )


class DomainValidator:
    """
    Validates domain names against the host name grammar.

    Handles:
    - Conversion to lowercase canonical form
    - IDNA encoding for international characters
    - Rejection of forbidden characters
    - Total and per-label length limits
    - Label and TLD character sets

    A trailing dot (fully qualified form) is accepted and dropped.
    """

    def validate(self, raw_domain: str) -> DomainValidationResult:
        """
        Validate and normalize a domain string.

        Args:
            raw_domain: The raw domain string to validate

        Returns:
            DomainValidationResult with validation status and canonical form or error
        """
        if not raw_domain or not raw_domain.strip():
            return _invalid(
                DomainValidationErrorCode.EMPTY_INPUT,
                "Domain input is empty",
                raw_input=raw_domain,
            )

        domain = raw_domain.strip()

        forbidden_found = FORBIDDEN_CHARS_PATTERN.findall(domain)
        if forbidden_found:
            return _invalid(
                DomainValidationErrorCode.FORBIDDEN_CHARS,
                "Domain contains forbidden characters",
                raw_input=raw_domain,
                forbidden_chars=forbidden_found,
            )

        try:
            canonical = self.normalize_to_canonical(domain)
        except ValidationError as e:
            return _invalid(DomainValidationErrorCode.IDNA_ERROR, e.message, **e.details)

        if canonical.endswith("."):
            canonical = canonical[:-1]

        if len(canonical) > MAX_DOMAIN_LENGTH:
            return _invalid(
                DomainValidationErrorCode.TOO_LONG,
                f"Domain is longer than {MAX_DOMAIN_LENGTH} characters",
                raw_input=raw_domain,
                length=len(canonical),
            )

        labels = canonical.split(".")
        if len(labels) < 2:
            return _invalid(
                DomainValidationErrorCode.INVALID_TLD,
                "Domain has no top-level domain",
                raw_input=raw_domain,
            )

        for label in labels:
            if not label or len(label) > MAX_LABEL_LENGTH or not LABEL_PATTERN.match(label):
                return _invalid(
                    DomainValidationErrorCode.INVALID_LABEL,
                    f"Invalid label: {label!r}",
                    raw_input=raw_domain,
                    label=label,
                )

        tld = labels[-1]
        if not TLD_PATTERN.match(tld):
            return _invalid(
                DomainValidationErrorCode.INVALID_TLD,
                f"Invalid top-level domain: {tld!r}",
                raw_input=raw_domain,
                tld=tld,
            )

        return DomainValidationResult(valid=True, canonical_domain=canonical, error=None)

    def normalize_to_canonical(self, domain: str) -> str:
        """
        Convert domain to canonical form (lowercase, IDNA-encoded).

        Raises:
            ValidationError: If IDNA encoding fails
        """
        domain_lower = domain.lower()

        if all(ord(c) < 128 for c in domain_lower):
            return domain_lower

        try:
            return idna.encode(domain_lower, uts46=True).decode("ascii")
        except idna.IDNAError as e:
            raise ValidationError(
                code=DomainValidationErrorCode.IDNA_ERROR.value,
                message=f"IDNA encoding failed: {e}",
                details={"domain": domain, "idna_error": str(e)},
            )


_default_validator = DomainValidator()


def is_valid_domain(name: str) -> bool:
    """Return True if name is a syntactically valid domain."""
    return _default_validator.validate(name).valid

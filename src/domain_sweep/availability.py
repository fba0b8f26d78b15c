"""
Availability oracle.

Decides whether a single domain is free to register:
1. Syntactically invalid names are never available
2. A DNS probe settles the obvious cases cheaply
3. Everything DNS cannot settle goes to WHOIS
"""

from typing import Optional

from .audit_logger import AuditLogger
from .config import CheckerConfig
from .dns_probe import DnsProbe
from .domain_validator import DomainValidator
from .enums import LogLevel
from .exceptions import DnsProbeError
from .whois_client import WHOISClient


class AvailabilityChecker:
    """
    DNS-first, WHOIS-fallback availability check.

    DNS is a heuristic: registered domains without delegation exist, so a
    missing name only counts as proof of availability when trust_dns is set.
    The checker keeps no per-domain state between calls.
    """

    def __init__(
        self,
        config: Optional[CheckerConfig] = None,
        logger: Optional[AuditLogger] = None,
        dns_probe: Optional[DnsProbe] = None,
        whois_client: Optional[WHOISClient] = None,
    ) -> None:
        """
        Initialize the availability checker.

        Args:
            config: Shared checker configuration (defaults if omitted)
            logger: Optional audit logger
            dns_probe: Optional DNS probe, built from config if omitted
            whois_client: Optional WHOIS client, built from config if omitted
        """
        self._config = config or CheckerConfig()
        self._logger = logger
        self._validator = DomainValidator()
        self._dns_probe = dns_probe or DnsProbe(
            timeout=self._config.timeout_seconds,
            simulation_mode=self._config.simulation_mode,
        )
        self._whois_client = whois_client or WHOISClient.from_config(self._config, logger)

    @property
    def config(self) -> CheckerConfig:
        return self._config

    async def is_available(self, domain: str) -> bool:
        """
        Determine whether a domain is available.

        Args:
            domain: The domain to check

        Returns:
            True if no registration was found, False otherwise

        Raises:
            RateLimitExceededError: WHOIS stayed rate limited
            NetworkError: WHOIS transport failed on every attempt
        """
        validation = self._validator.validate(domain)
        if not validation.valid:
            self._log(
                LogLevel.DEBUG,
                f"Invalid domain {domain!r}: {validation.error.message}",
                {"domain": domain, "code": validation.error.code.value},
            )
            return False

        canonical = validation.canonical_domain
        has_dns_entry = await self._probe_dns(canonical)

        if has_dns_entry is True:
            return False
        if has_dns_entry is False and self._config.trust_dns:
            return True

        has_whois_entry = await self._whois_client.has_registry_entry(canonical)
        return not has_whois_entry

    async def _probe_dns(self, domain: str) -> Optional[bool]:
        """Return the DNS verdict, or None when the probe was inconclusive."""
        try:
            result = await self._dns_probe.has_dns_entry(domain)
        except DnsProbeError as e:
            self._log(
                LogLevel.DEBUG,
                f"DNS probe inconclusive for {domain}: {e.message}",
                {"domain": domain, "code": e.code},
            )
            return None

        self._log(
            LogLevel.DEBUG,
            f"DNS probe for {domain}: {'found' if result else 'not found'}",
            {"domain": domain},
        )
        return result

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "AvailabilityChecker", message, data)


async def is_domain_available(
    domain: str,
    config: Optional[CheckerConfig] = None,
    logger: Optional[AuditLogger] = None,
) -> bool:
    """Check a single domain with a throwaway checker."""
    return await AvailabilityChecker(config, logger).is_available(domain)

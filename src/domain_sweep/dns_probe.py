"""
DNS probe used as a fast pre-filter before WHOIS.

A resolvable name is certainly registered. A missing name is only a hint,
since registered domains without delegation exist.
"""

from typing import Optional

import dns.asyncresolver
import dns.exception
import dns.resolver

from .exceptions import DnsProbeError


class DnsProbe:
    """
    Looks up A records with dnspython's asyncio resolver.

    Outcomes of has_dns_entry():
    - True: records found, or the name exists without A records (NoAnswer)
    - False: the name does not exist (NXDOMAIN)
    - DnsProbeError: anything else (timeout, SERVFAIL, no nameservers)
    """

    def __init__(
        self,
        timeout: float = 3.0,
        resolver: Optional[dns.asyncresolver.Resolver] = None,
        simulation_mode: bool = False,
    ) -> None:
        """
        Initialize the DNS probe.

        Args:
            timeout: Total lifetime of one resolution in seconds
            resolver: Optional preconfigured resolver
            simulation_mode: If True, no real network requests are made
        """
        self._timeout = timeout
        self._resolver = resolver
        self._simulation_mode = simulation_mode

    def _get_resolver(self) -> dns.asyncresolver.Resolver:
        if self._resolver is None:
            resolver = dns.asyncresolver.Resolver()
            resolver.timeout = self._timeout
            resolver.lifetime = self._timeout
            self._resolver = resolver
        return self._resolver

    async def has_dns_entry(self, domain: str) -> bool:
        """
        Check whether the domain resolves.

        Args:
            domain: Domain in canonical (lowercase, ASCII) form

        Returns:
            True if DNS knows the name, False on NXDOMAIN

        Raises:
            DnsProbeError: If the lookup was inconclusive
        """
        if self._simulation_mode:
            return self._get_simulated_result(domain)

        try:
            await self._get_resolver().resolve(domain, "A")
            return True
        except dns.resolver.NXDOMAIN:
            return False
        except dns.resolver.NoAnswer:
            return True
        except dns.exception.Timeout as e:
            raise DnsProbeError(
                code="timeout",
                message=f"DNS lookup timed out after {self._timeout}s",
                details={"domain": domain},
            ) from e
        except dns.exception.DNSException as e:
            raise DnsProbeError(
                code="dns_error",
                message=f"DNS lookup failed: {e}",
                details={"domain": domain, "error_type": type(e).__name__},
            ) from e

    def _get_simulated_result(self, domain: str) -> bool:
        """
        In simulation mode, domains whose first label starts with 'available-'
        or 'ratelimited-' do not resolve; all others do.
        """
        sld = domain.split(".")[0]
        return not sld.startswith(("available-", "ratelimited-"))

"""
WHOIS Client module for domain availability checking.

One lookup is a plain-text exchange over a single TCP connection to port 43,
optionally tunnelled through a SOCKS or HTTP proxy. Replies are classified by
case-insensitive substring markers; registries do not share a reply format,
so this stays a heuristic.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from python_socks import ProxyConnectionError, ProxyError, ProxyTimeoutError
from python_socks.async_.asyncio import Proxy

from .audit_logger import AuditLogger
from .config import CheckerConfig
from .enums import LogLevel, WHOISErrorCode, WHOISStatus
from .exceptions import NetworkError, RateLimitExceededError
from .retry_manager import RetryManager
from .tld_registry import (
    IANA_WHOIS_SERVER,
    WHOIS_PORT,
    WHOIS_SERVERS,
    get_tld,
    parse_iana_referral,
)


REGISTRATION_MARKER = "domain name:"
RATE_LIMIT_MARKER = "rate limit"
RETRY_INVITATION_MARKER = "try again"

# Replies beyond this size are truncated
MAX_RESPONSE_BYTES = 256 * 1024


@dataclass
class WHOISResponse:
    """Raw reply of one WHOIS exchange."""

    server: str
    raw_response: str
    response_time_ms: float


class WHOISClient:
    """
    WHOIS client with rate-limit-aware retries.

    has_registry_entry() resolves to:
    - True: the reply carries a registration marker ("Domain Name:")
    - False: the reply carries neither a registration nor a rate-limit marker
    and fails with RateLimitExceededError or NetworkError once the retry
    budget is spent.
    """

    def __init__(
        self,
        timeout: float = 3.0,
        proxy: Optional[str] = None,
        max_retries: int = 2,
        retry_time: float = 3.0,
        custom_servers: Optional[dict[str, str]] = None,
        simulation_mode: bool = False,
        logger: Optional[AuditLogger] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the WHOIS client.

        Args:
            timeout: Timeout of one exchange in seconds (connect + read)
            proxy: Optional proxy URL (socks4://, socks5:// or http://)
            max_retries: Retries allowed after the first attempt
            retry_time: Delay in seconds before retrying a rate-limited query
            custom_servers: Optional WHOIS servers per TLD, overriding the defaults
            simulation_mode: If True, no real network requests are made
            logger: Optional audit logger
            sleep: Delay primitive, replaceable in tests
        """
        self._timeout = timeout
        self._proxy = proxy
        self._max_retries = max_retries
        self._retry_time = retry_time
        self._simulation_mode = simulation_mode
        self._logger = logger
        self._sleep = sleep

        self._servers = dict(WHOIS_SERVERS)
        if custom_servers:
            self._servers.update({k.lower(): v for k, v in custom_servers.items()})

    @classmethod
    def from_config(
        cls,
        config: CheckerConfig,
        logger: Optional[AuditLogger] = None,
    ) -> "WHOISClient":
        """Create a client from the shared checker configuration."""
        return cls(
            timeout=config.timeout_seconds,
            proxy=config.proxy_url,
            max_retries=config.max_retries,
            retry_time=config.retry_time_seconds,
            simulation_mode=config.simulation_mode,
            logger=logger,
        )

    async def has_registry_entry(self, domain: str) -> bool:
        """
        Check whether the registry knows the domain.

        Args:
            domain: Domain in canonical form

        Returns:
            True if registered, False if not

        Raises:
            RateLimitExceededError: Still rate limited when the budget ran out,
                or the registry did not invite a retry
            NetworkError: Transport failure on the last allowed attempt
        """
        retry_manager = RetryManager(
            max_retries=self._max_retries,
            retry_delay_seconds=self._retry_time,
            sleep=self._sleep,
        )

        outcome = await retry_manager.execute_with_retry(
            lambda: self._attempt(domain),
            is_retryable=self._is_retryable,
            delay_for=self._delay_for,
        )

        if outcome.success:
            return outcome.result

        self._log(
            LogLevel.WARN,
            f"WHOIS lookup failed for {domain} after {outcome.attempts} attempt(s)",
            {"domain": domain, "attempts": outcome.attempts, "error": str(outcome.last_error)},
        )
        raise outcome.last_error

    async def _attempt(self, domain: str) -> bool:
        """Run one lookup and turn its reply into an entry flag or an error."""
        response = await self.lookup(domain)
        status = self.classify(response.raw_response)

        self._log(
            LogLevel.DEBUG,
            f"WHOIS reply for {domain}: {status.value}",
            {
                "domain": domain,
                "server": response.server,
                "response_time_ms": round(response.response_time_ms, 1),
            },
        )

        if status == WHOISStatus.REGISTERED:
            return True
        if status == WHOISStatus.NOT_REGISTERED:
            return False

        raise RateLimitExceededError(
            details={
                "domain": domain,
                "server": response.server,
                "retry_allowed": status == WHOISStatus.RATE_LIMITED_RETRY,
            },
        )

    def _is_retryable(self, error: Exception) -> bool:
        if isinstance(error, RateLimitExceededError):
            return bool(error.details.get("retry_allowed"))
        if isinstance(error, NetworkError):
            return error.code != WHOISErrorCode.NO_SERVER.value
        return False

    def _delay_for(self, error: Exception) -> float:
        if isinstance(error, RateLimitExceededError):
            self._log(
                LogLevel.INFO,
                f"Rate limited, retrying in {self._retry_time}s",
                error.details,
            )
            return self._retry_time
        self._log(LogLevel.INFO, f"Transport error, retrying: {error}", {})
        return 0.0

    @staticmethod
    def classify(raw_response: Optional[str]) -> WHOISStatus:
        """
        Classify a raw WHOIS reply.

        Empty or unrecognized replies count as NOT_REGISTERED: the absence of
        a registration marker is the deciding signal.
        """
        data = (raw_response or "").lower()

        if REGISTRATION_MARKER in data:
            return WHOISStatus.REGISTERED
        if RATE_LIMIT_MARKER in data:
            if RETRY_INVITATION_MARKER in data:
                return WHOISStatus.RATE_LIMITED_RETRY
            return WHOISStatus.RATE_LIMITED
        return WHOISStatus.NOT_REGISTERED

    async def lookup(self, domain: str) -> WHOISResponse:
        """
        Perform one WHOIS exchange for a domain.

        Raises:
            NetworkError: On connection, proxy or timeout failures
        """
        if self._simulation_mode:
            return self._get_simulated_response(domain)

        server = await self.resolve_server(get_tld(domain))

        start_time = time.perf_counter()
        raw_response = await self._query(server, domain)
        return WHOISResponse(
            server=server,
            raw_response=raw_response,
            response_time_ms=(time.perf_counter() - start_time) * 1000,
        )

    async def resolve_server(self, tld: str) -> str:
        """
        Find the WHOIS server for a TLD, asking IANA for unknown ones.

        Successful IANA referrals are cached for the lifetime of the client.
        """
        tld = tld.lower()
        server = self._servers.get(tld)
        if server:
            return server

        referral = parse_iana_referral(await self._query(IANA_WHOIS_SERVER, tld))
        if not referral:
            raise NetworkError(
                code=WHOISErrorCode.NO_SERVER.value,
                message=f"No WHOIS server known for TLD: {tld}",
                details={"tld": tld},
            )

        self._log(LogLevel.DEBUG, f"IANA referral for .{tld}: {referral}", {"tld": tld})
        self._servers[tld] = referral
        return referral

    async def _query(self, server: str, query: str) -> str:
        """Send one query to a server and translate transport failures."""
        details = {"server": server, "query": query}
        try:
            return await asyncio.wait_for(
                self._execute_whois_query(server, query),
                timeout=self._timeout,
            )
        except (ProxyError, ProxyConnectionError, ProxyTimeoutError) as e:
            raise NetworkError(
                code=WHOISErrorCode.PROXY_ERROR.value,
                message=f"Proxy error: {e}",
                details=details,
            ) from e
        except asyncio.TimeoutError as e:
            raise NetworkError(
                code=WHOISErrorCode.TIMEOUT.value,
                message=f"WHOIS query timed out after {self._timeout}s",
                details=details,
            ) from e
        except OSError as e:
            raise NetworkError(
                code=WHOISErrorCode.NETWORK_ERROR.value,
                message=f"Socket error: {e}",
                details=details,
            ) from e

    async def _execute_whois_query(self, server: str, query: str) -> str:
        """
        Execute the actual WHOIS exchange.

        Args:
            server: WHOIS server hostname
            query: Query line, sent with CRLF

        Returns:
            Raw WHOIS response as string
        """
        if self._proxy:
            proxy = Proxy.from_url(self._proxy)
            sock = await proxy.connect(dest_host=server, dest_port=WHOIS_PORT)
            reader, writer = await asyncio.open_connection(sock=sock)
        else:
            reader, writer = await asyncio.open_connection(server, WHOIS_PORT)

        try:
            writer.write(f"{query}\r\n".encode("utf-8"))
            await writer.drain()
            chunks: list[bytes] = []
            received = 0
            while received < MAX_RESPONSE_BYTES:
                chunk = await reader.read(MAX_RESPONSE_BYTES - received)
                if not chunk:
                    break
                chunks.append(chunk)
                received += len(chunk)
        finally:
            writer.close()
            await writer.wait_closed()

        return b"".join(chunks).decode("utf-8", errors="replace")

    def _get_simulated_response(self, domain: str) -> WHOISResponse:
        """
        Return a simulated response for testing.

        In simulation mode, domains starting with 'available-' have no entry,
        domains starting with 'ratelimited-' are rate limited on every
        attempt, all others are registered.
        """
        sld = domain.split(".")[0]

        if sld.startswith("available-"):
            raw = f"[SIMULATED]\nNo match for \"{domain.upper()}\".\n"
        elif sld.startswith("ratelimited-"):
            raw = "[SIMULATED]\nRate limit exceeded. Please try again later.\n"
        else:
            raw = (
                "[SIMULATED]\n"
                f"Domain Name: {domain.upper()}\n"
                "Registrar: Example Registrar\n"
                "Creation Date: 2020-01-01\n"
            )

        return WHOISResponse(server="simulation", raw_response=raw, response_time_ms=0.0)

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, "WHOISClient", message, data)

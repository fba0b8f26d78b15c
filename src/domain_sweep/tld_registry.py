"""
TLD Registry - WHOIS servers for common top-level domains.

TLDs that are not listed here are resolved through the IANA WHOIS service,
whose reply names the authoritative server in a "refer:" or "whois:" line.
"""

import re
from typing import Optional

WHOIS_PORT = 43

IANA_WHOIS_SERVER = "whois.iana.org"

REFERRAL_PATTERN = re.compile(r"^\s*(?:refer|whois):\s*(\S+)\s*$", re.IGNORECASE | re.MULTILINE)

# ============================================================================
# GENERIC TLDs (gTLDs)
# ============================================================================
GENERIC_SERVERS = {
    "com": "whois.verisign-grs.com",
    "net": "whois.verisign-grs.com",
    "org": "whois.pir.org",
    "info": "whois.afilias.net",
    "biz": "whois.nic.biz",
    "name": "whois.nic.name",
    "mobi": "whois.afilias.net",
    "pro": "whois.afilias.net",
    "edu": "whois.educause.edu",
}

# ============================================================================
# NEW gTLDs
# ============================================================================
NEW_GENERIC_SERVERS = {
    "app": "whois.nic.google",
    "dev": "whois.nic.google",
    "page": "whois.nic.google",
    "tech": "whois.centralnic.com",
    "online": "whois.centralnic.com",
    "site": "whois.centralnic.com",
    "store": "whois.centralnic.com",
    "space": "whois.centralnic.com",
    "xyz": "whois.nic.xyz",
    "shop": "whois.nic.shop",
    "club": "whois.nic.club",
    "top": "whois.nic.top",
    "blog": "whois.nic.blog",
    "cloud": "whois.nic.cloud",
    "digital": "whois.donuts.co",
    "software": "whois.donuts.co",
    "solutions": "whois.donuts.co",
    "agency": "whois.donuts.co",
    "studio": "whois.donuts.co",
    "live": "whois.donuts.co",
    "world": "whois.donuts.co",
    "email": "whois.donuts.co",
}

# ============================================================================
# COUNTRY CODE TLDs (ccTLDs)
# ============================================================================
COUNTRY_SERVERS = {
    "io": "whois.nic.io",
    "co": "whois.nic.co",
    "ai": "whois.nic.ai",
    "me": "whois.nic.me",
    "tv": "whois.nic.tv",
    "cc": "ccwhois.verisign-grs.com",
    "de": "whois.denic.de",
    "eu": "whois.eu",
    "at": "whois.nic.at",
    "ch": "whois.nic.ch",
    "nl": "whois.sidn.nl",
    "be": "whois.dns.be",
    "fr": "whois.nic.fr",
    "it": "whois.nic.it",
    "pl": "whois.dns.pl",
    "se": "whois.iis.se",
    "uk": "whois.nic.uk",
    "us": "whois.nic.us",
    "ca": "whois.cira.ca",
    "au": "whois.auda.org.au",
    "jp": "whois.jprs.jp",
    "in": "whois.registry.in",
    "ru": "whois.tcinet.ru",
}

WHOIS_SERVERS: dict[str, str] = {
    **GENERIC_SERVERS,
    **NEW_GENERIC_SERVERS,
    **COUNTRY_SERVERS,
}


def get_tld(domain: str) -> str:
    """Return the last label of a domain, lowercased."""
    return domain.rstrip(".").rsplit(".", 1)[-1].lower()


def parse_iana_referral(raw_response: str) -> Optional[str]:
    """
    Extract the authoritative WHOIS server from an IANA reply.

    Returns:
        Server hostname, or None if the reply names no server
    """
    match = REFERRAL_PATTERN.search(raw_response or "")
    if not match:
        return None
    return match.group(1).lower()

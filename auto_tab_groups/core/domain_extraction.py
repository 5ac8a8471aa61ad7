"""Domain extraction: turn a URL into a canonical grouping key."""

from __future__ import annotations

import ipaddress
import re
from urllib.parse import urlsplit

from auto_tab_groups.models.matching import ValidationResult

SYSTEM_DOMAIN = "system"
SYSTEM_DISPLAY_NAME = "System"

# Internal browser pages, extension pages and other non-web documents.
SYSTEM_SCHEMES: frozenset[str] = frozenset(
    {
        "about",
        "blob",
        "brave",
        "chrome",
        "chrome-extension",
        "chrome-search",
        "data",
        "edge",
        "file",
        "javascript",
        "moz-extension",
        "opera",
        "safari",
        "view-source",
        "vivaldi",
    }
)

# Two-label country-code suffixes treated as a single effective TLD.
MULTI_PART_SUFFIXES: frozenset[str] = frozenset(
    {
        # United Kingdom
        "co.uk", "org.uk", "ac.uk", "gov.uk", "me.uk", "net.uk", "ltd.uk",
        "plc.uk", "sch.uk", "nhs.uk", "police.uk",
        # Australia / New Zealand
        "com.au", "net.au", "org.au", "edu.au", "gov.au", "asn.au", "id.au",
        "co.nz", "net.nz", "org.nz", "govt.nz", "ac.nz",
        # Asia
        "co.jp", "ne.jp", "or.jp", "ac.jp", "go.jp",
        "co.kr", "or.kr", "ac.kr",
        "com.cn", "net.cn", "org.cn", "gov.cn", "edu.cn",
        "com.hk", "com.tw", "com.sg", "com.my", "co.th", "co.id", "com.ph",
        "com.vn", "com.pk",
        "co.in", "net.in", "org.in", "gov.in", "ac.in",
        # Middle East / Africa
        "co.il", "org.il", "ac.il", "gov.il",
        "com.sa", "com.eg", "co.za", "org.za", "com.ng", "co.ke",
        "com.tr",
        # Americas
        "com.br", "net.br", "org.br", "gov.br",
        "com.mx", "com.ar", "com.co", "com.pe",
        # Europe
        "com.ua", "co.at", "com.pl",
    }
)

NEW_TAB_URL_PREFIXES: tuple[str, ...] = (
    "chrome://newtab/",
    "chrome-extension://",
    "moz-extension://",
    "about:newtab",
    "about:home",
    "edge://newtab/",
    "about:blank",
)

EXTENSION_URL_PREFIXES: tuple[str, ...] = ("chrome-extension://", "moz-extension://")

MAX_DOMAIN_LENGTH = 253


def effective_suffix_length(labels: list[str]) -> int:
    """Number of trailing labels forming the public suffix (1, or 2 for ccSLDs)."""
    if len(labels) >= 2 and ".".join(labels[-2:]) in MULTI_PART_SUFFIXES:
        return 2
    return 1


def extract_domain(url: str | None, include_subdomain: bool = False) -> str | None:
    """Extract the grouping key for a URL.

    Returns None for empty or unparseable input, ``"system"`` for browser
    pages and hosts without a dot, the full host when ``include_subdomain``
    is set, and the registrable domain otherwise.
    """
    if not isinstance(url, str) or not url.strip():
        return None

    try:
        parts = urlsplit(url.strip())
        host = (parts.hostname or "").lower()
    except ValueError:
        return None

    if parts.scheme.lower() in SYSTEM_SCHEMES or not host or "." not in host:
        return SYSTEM_DOMAIN

    if include_subdomain or is_ip_address(host):
        return host

    labels = host.split(".")
    keep = effective_suffix_length(labels) + 1
    if len(labels) < keep:
        return host
    return ".".join(labels[-keep:])


def get_domain_display_name(domain: str | None) -> str:
    """Human-readable group title for a domain key (``bbc.co.uk`` -> ``Bbc``)."""
    if not domain:
        return ""
    if domain == SYSTEM_DOMAIN:
        return SYSTEM_DISPLAY_NAME
    if is_ip_address(domain):
        return domain

    labels = domain.split(".")
    if len(labels) == 1:
        return _capitalize(domain)

    display = labels[: -effective_suffix_length(labels)]
    if display and display[0] == "www":
        display = display[1:]

    name = ".".join(display)
    return _capitalize(name) if name else domain


def _capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]


def is_new_tab_url(url: str | None) -> bool:
    """Check if a URL is a blank/new-tab page or an extension page."""
    if not isinstance(url, str) or not url:
        return False
    return url.startswith(NEW_TAB_URL_PREFIXES)


def is_extension_url(url: str | None) -> bool:
    """Check if a URL belongs to a browser extension."""
    return isinstance(url, str) and url.startswith(EXTENSION_URL_PREFIXES)


def is_ip_address(host: str) -> bool:
    """Check if a host is a literal IPv4 or IPv6 address."""
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


def _is_octet(part: str) -> bool:
    # Rejects leading zeros: "01" is not an octet.
    return part.isdigit() and part.isascii() and 0 <= int(part) <= 255 and part == str(int(part))


def is_ipv4_address(value: str) -> bool:
    """Check for a dotted-quad IPv4 address with no leading zeros."""
    if not isinstance(value, str) or not value:
        return False
    parts = value.split(".")
    return len(parts) == 4 and all(_is_octet(part) for part in parts)


def is_ipv4_pattern(value: str) -> bool:
    """Check for an IPv4 address where any octet may be ``*``."""
    if not isinstance(value, str) or not value:
        return False
    parts = value.split(".")
    return len(parts) == 4 and all(part == "*" or _is_octet(part) for part in parts)


def match_ipv4(ip: str, pattern: str) -> bool:
    """Match an IPv4 address against an IPv4 pattern octet by octet."""
    if not is_ipv4_address(ip) or not is_ipv4_pattern(pattern):
        return False
    return all(
        expected in ("*", actual)
        for actual, expected in zip(ip.split("."), pattern.split("."), strict=True)
    )


def validate_strict_domain(domain: str | None) -> ValidationResult:
    """Validate a plain domain name (no wildcards, no paths)."""
    if not isinstance(domain, str) or not domain:
        return ValidationResult(is_valid=False, error="Domain must be a string")
    if "*" in domain:
        return ValidationResult(is_valid=False, error="Wildcards not allowed in domain format")
    if len(domain) > MAX_DOMAIN_LENGTH:
        return ValidationResult(
            is_valid=False, error=f"Domain too long (max {MAX_DOMAIN_LENGTH} characters)"
        )
    if domain.startswith(".") or domain.endswith("."):
        return ValidationResult(is_valid=False, error="Domain cannot start or end with a dot")
    if ".." in domain:
        return ValidationResult(is_valid=False, error="Domain cannot contain consecutive dots")
    if domain.startswith("-") or domain.endswith("-"):
        return ValidationResult(is_valid=False, error="Domain cannot start or end with a hyphen")
    if not re.fullmatch(r"[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}", domain):
        return ValidationResult(is_valid=False, error="Invalid domain format")
    return ValidationResult(is_valid=True)

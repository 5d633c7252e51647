"""
IP Reverser: IP Extraction and Reversal
=========================================

What:  The pure IP logic of the service: find the caller's address, reverse it,
       and optionally check it against the strict IPv4 grammar.
Who:   ReversalService (per request) and the test suite (directly).

Extraction precedence (first non-empty value wins):
    1. X-Forwarded-For   leftmost entry of the comma-separated chain
    2. X-Real-IP
    3. X-Client-IP
    4. transport remote address
    5. "127.0.0.1"
    A leading IPv4-mapped prefix ("::ffff:") is then removed.

Reversal:
    reverse_ip() only checks the *shape* a.b.c.d with 1-3 digits per
    segment. It does not bound segments to 0-255, so "999.1.1.1" reverses
    to "1.1.1.999". is_valid_ip() is the strict predicate and is never
    called by reverse_ip().
"""

import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from starlette.requests import Request

from ipreverser.exceptions import InvalidInputError

FALLBACK_IP = "127.0.0.1"
IPV4_MAPPED_PREFIX = "::ffff:"

# Header names in precedence order
FORWARDED_FOR_HEADER = "x-forwarded-for"
CLIENT_IP_HEADERS = ("x-real-ip", "x-client-ip")

_SHAPE_RE = re.compile(r"[0-9]{1,3}(?:\.[0-9]{1,3}){3}")
_OCTET = r"(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)"
_STRICT_RE = re.compile(rf"{_OCTET}(?:\.{_OCTET}){{3}}")


@dataclass(frozen=True)
class ConnectionInfo:
    """
    What the extractor needs to know about a request.

    Attributes:
        headers:         Request headers. Lookups are case-insensitive.
        remote_address:  Transport peer address, None when unknown.
    """
    headers: Mapping[str, str] = field(default_factory=dict)
    remote_address: Optional[str] = None

    @classmethod
    def from_request(cls, request: Request) -> "ConnectionInfo":
        """Adapt a Starlette/FastAPI request."""
        return cls(
            headers=request.headers,
            remote_address=request.client.host if request.client else None,
        )


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    # Starlette Headers is already case-insensitive; plain dicts are not.
    value = headers.get(name)
    if value is not None:
        return value
    for key, candidate in headers.items():
        if key.lower() == name:
            return candidate
    return None


def extract_client_ip(
    headers: Mapping[str, str],
    remote_address: Optional[str] = None,
) -> str:
    """
    Determine the client IP from proxy headers and the transport address.

    Never raises and never validates: a garbage header value is returned
    as-is and rejected later by reverse_ip().

    Example:
        >>> extract_client_ip({"X-Forwarded-For": "8.8.8.8, 192.168.1.1"})
        '8.8.8.8'
        >>> extract_client_ip({}, "::ffff:10.0.0.7")
        '10.0.0.7'
    """
    ip: Optional[str] = None

    forwarded_for = _header(headers, FORWARDED_FOR_HEADER)
    if forwarded_for:
        ip = forwarded_for.split(",")[0].strip()
    else:
        for name in CLIENT_IP_HEADERS:
            value = _header(headers, name)
            if value:
                ip = value
                break
        else:
            ip = remote_address

    if ip and IPV4_MAPPED_PREFIX in ip:
        ip = ip.replace(IPV4_MAPPED_PREFIX, "", 1)

    return ip or FALLBACK_IP


def extract_from(connection: ConnectionInfo) -> str:
    """extract_client_ip() for a ConnectionInfo."""
    return extract_client_ip(connection.headers, connection.remote_address)


def reverse_ip(ip: Any) -> str:
    """
    Reverse the octet order of a dotted-quad string.

    Args:
        ip: Address such as "192.168.1.100".

    Returns:
        The segments back-to-front, e.g. "100.1.168.192". Segment values are
        copied verbatim: no numeric parsing, no range check.

    Raises:
        InvalidInputError: ip is empty, None, not a string, or not four
            dot-separated groups of 1-3 digits.
    """
    if not ip or not isinstance(ip, str):
        raise InvalidInputError(message="IP address is required", value=ip)

    if not _SHAPE_RE.fullmatch(ip):
        raise InvalidInputError(message="Invalid IP address format", value=ip)

    return ".".join(reversed(ip.split(".")))


def is_valid_ip(ip: Any) -> bool:
    """
    Strict IPv4 check: four segments, each 0-255.

    Leading zeros are tolerated ("01.2.3.4" is valid). Anything that is not
    a string is invalid.
    """
    if not isinstance(ip, str):
        return False
    return _STRICT_RE.fullmatch(ip) is not None

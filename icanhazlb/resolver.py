"""Derive the target IPv4 address from a requested hostname.

Addresses are embedded in the hostname as a dotted quad whose octets may be
joined by ``.``, ``-`` or ``_`` in any mix, e.g. ``203-0-113-5.lb.example.com``
or ``10_0.0-1.example.com``. The leftmost such run wins. A hostname that is
itself a bare IPv4 literal matches too, since ``.`` is an allowed delimiter.
"""

import ipaddress
import re

from .errors import AddressInvalid, AddressNotFound
from .logging_config import get_logger
from .models import ResolvedTarget

logger = get_logger(__name__)

# Four 1-3 digit groups, not glued to further digits on either side.
EMBEDDED_IPV4_RE = re.compile(r"(?<!\d)\d{1,3}(?:[-_.]\d{1,3}){3}(?!\d)")

_DELIMITERS = str.maketrans("-_", "..")


def extract_hostname(host_header: str) -> str:
    """Return the host portion of a Host header, without any port."""
    return (host_header or "").split(":", 1)[0]


def parse_ip_address(hostname: str) -> str:
    """Return the canonical IPv4 address embedded in ``hostname``.

    Raises:
        AddressNotFound: no dotted-quad pattern in the hostname.
        AddressInvalid: a pattern matched but is not a valid IPv4 address
            (octet out of range, leading zeros).
    """
    match = EMBEDDED_IPV4_RE.search(hostname)
    if match is None:
        logger.warning("Failed to parse IP address from hostname", hostname=hostname)
        raise AddressNotFound(hostname)

    candidate = match.group(0).translate(_DELIMITERS)
    try:
        address = ipaddress.IPv4Address(candidate)
    except ipaddress.AddressValueError:
        logger.warning("Failed to parse IPv4 address from hostname",
                       hostname=hostname,
                       candidate=candidate)
        raise AddressInvalid(hostname, candidate) from None

    logger.debug("Parsed IP address from hostname", hostname=hostname, ip_address=str(address))
    return str(address)


def resolve_target(hostname: str) -> ResolvedTarget:
    """Resolve ``hostname`` into a :class:`ResolvedTarget`."""
    return ResolvedTarget(ip_address=parse_ip_address(hostname), hostname=hostname)

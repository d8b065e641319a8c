"""
Address range utilities for idbscan.

This module turns a range specification (a CIDR block or a single IP
address) into the ordered list of addresses that will be looked up.
"""

import ipaddress
import logging
from typing import List, Optional

from colorama import Fore, Style

logger = logging.getLogger(__name__)


class InvalidRangeError(ValueError):
    """Raised when a range specification is neither a CIDR block nor an IP."""


class RangeTooLargeError(InvalidRangeError):
    """Raised when a valid CIDR block holds more addresses than allowed."""


def is_valid_ip(ip: str) -> bool:
    """Check if string is a valid IPv4 or IPv6 address, without a zone ID."""
    if "%" in ip:
        return False
    try:
        ipaddress.ip_address(ip)
        return True
    except ValueError:
        return False


def is_valid_cidr(cidr: str) -> bool:
    """Check if string is a valid CIDR notation with a numeric prefix length."""
    if "/" not in cidr:
        return False
    address, prefix = cidr.split("/", 1)
    if not (prefix.isascii() and prefix.isdigit()) or not is_valid_ip(address):
        return False
    try:
        ipaddress.ip_network(cidr, strict=False)
        return True
    except ValueError:
        return False


def increment_ip(packed: bytearray) -> bool:
    """
    Increment a big-endian address in place.

    The last byte is incremented and any wrap to zero carries into the
    next more significant byte.

    Args:
        packed: 4 or 16 byte address

    Returns:
        bool: False if the carry ran off the most significant byte
    """
    for j in range(len(packed) - 1, -1, -1):
        packed[j] = (packed[j] + 1) & 0xFF
        if packed[j] > 0:
            return True
    return False


def expand_cidr(cidr: str, max_addresses: Optional[int] = None) -> List[str]:
    """
    Expand a CIDR notation into a list of IP addresses.

    Network and broadcast addresses are dropped only when the block holds
    more than two addresses, so /31, /32, /127 and /128 keep both ends.

    Args:
        cidr: The CIDR notation to expand
        max_addresses: Refuse blocks larger than this, None for no limit

    Returns:
        List[str]: Addresses in ascending order

    Raises:
        InvalidRangeError: If the block cannot be parsed or is too large
    """
    if not is_valid_cidr(cidr):
        raise InvalidRangeError(f"Invalid CIDR notation: {cidr}")
    network = ipaddress.ip_network(cidr, strict=False)

    if max_addresses is not None and network.num_addresses > max_addresses:
        raise RangeTooLargeError(
            f"{cidr} holds {network.num_addresses} addresses, limit is {max_addresses}"
        )

    address_class = type(network.network_address)
    packed = bytearray(network.network_address.packed)
    ips = []
    while True:
        ip = address_class(bytes(packed))
        if ip not in network:
            break
        ips.append(str(ip))
        if not increment_ip(packed):
            break

    # Exclude network and broadcast IPs
    if len(ips) > 2:
        return ips[1:-1]
    return ips


def expand_range(range_spec: str, max_addresses: Optional[int] = None) -> List[str]:
    """
    Turn a range specification into the addresses to look up.

    Args:
        range_spec: CIDR block or single IP address
        max_addresses: Refuse CIDR blocks larger than this, None for no limit

    Returns:
        List[str]: Ordered addresses, a single literal is returned as given

    Raises:
        InvalidRangeError: If the specification is neither a CIDR nor an IP
    """
    range_spec = range_spec or ""
    if is_valid_cidr(range_spec):
        return expand_cidr(range_spec, max_addresses)
    if is_valid_ip(range_spec):
        return [range_spec]
    raise InvalidRangeError(f"Not a CIDR block or IP address: {range_spec!r}")


def log_range_summary(range_spec: str, ips: List[str]) -> None:
    """Log how many addresses a range expanded to."""
    display_ips = ", ".join(ips) if len(ips) <= 5 else ", ".join(ips[:5] + ["..."])
    logger.info(
        f"{Fore.MAGENTA}{range_spec}: {Fore.CYAN}{len(ips)} address(es): {display_ips}{Style.RESET_ALL}"
    )

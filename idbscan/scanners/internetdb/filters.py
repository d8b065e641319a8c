"""
Port filtering for InternetDB results.
"""

import re
from typing import List, Optional, Sequence, Tuple

from idbscan.scanners.internetdb.client import LookupResult

_PORT_TOKEN = re.compile(r"[+-]?[0-9]+")


class InvalidPortFilterError(ValueError):
    """Raised in strict mode when a port token is not an integer."""


def parse_port_token(token: str) -> int:
    """
    Parse a trimmed port token.

    Anything that is not an optionally signed run of ASCII digits parses
    to 0, which then only matches a result that lists port 0.
    """
    if _PORT_TOKEN.fullmatch(token):
        return int(token)
    return 0


def parse_port_filter(value: Optional[str], strict: bool = False) -> Tuple[str, ...]:
    """
    Split a comma separated port filter into raw tokens.

    Tokens keep their surrounding whitespace, filter_ports trims them.

    Args:
        value: Filter string such as "80, 443", None or "" for all ports
        strict: Raise on tokens that are not integers

    Returns:
        Tuple[str, ...]: The tokens in the order given

    Raises:
        InvalidPortFilterError: In strict mode, for a non-integer token
    """
    if not value:
        return ()

    tokens = tuple(value.split(","))
    if strict:
        for token in tokens:
            if not _PORT_TOKEN.fullmatch(token.strip()):
                raise InvalidPortFilterError(f"Invalid port in filter: {token!r}")
    return tokens


def filter_ports(result: LookupResult, ports: Sequence[str]) -> List[str]:
    """
    Build the "ip:port" lines to report for a lookup result.

    Args:
        result: Decoded lookup result
        ports: Raw filter tokens, empty to report every port found

    Returns:
        List[str]: Match lines, in result order without a filter and in
        filter order otherwise
    """
    if not ports:
        return [f"{result.ip}:{port}" for port in result.ports]

    matches = []
    for token in ports:
        port = token.strip()
        if parse_port_token(port) in result.ports:
            matches.append(f"{result.ip}:{port}")
    return matches

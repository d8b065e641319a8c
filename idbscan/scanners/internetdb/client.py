"""
InternetDB lookup client.

This module queries the InternetDB service for a single address and decodes
its JSON answer into a LookupResult.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import requests

from idbscan.common.config import DEFAULT_INTERNETDB_URL

logger = logging.getLogger(__name__)


class LookupFailedError(Exception):
    """
    Raised when a lookup could not produce a LookupResult.

    Transport errors, non-success HTTP statuses and malformed bodies all end
    up here.

    Attributes:
        ip (str): The address that was looked up
        cause (Exception): The underlying error
    """

    def __init__(self, ip: str, cause: Exception):
        super().__init__(f"Lookup for {ip} failed: {cause}")
        self.ip = ip
        self.cause = cause


@dataclass(frozen=True)
class LookupResult:
    """
    Decoded InternetDB answer for one address.

    Attributes:
        ip (str): Address echoed by the service
        hostnames (Tuple[str, ...]): Known hostnames for the address
        ports (Tuple[int, ...]): Ports seen open, in service order
    """

    ip: str
    hostnames: Tuple[str, ...]
    ports: Tuple[int, ...]


def decode_response(payload) -> LookupResult:
    """
    Validate an InternetDB JSON body and build a LookupResult.

    Args:
        payload: Parsed JSON body

    Returns:
        LookupResult: The decoded result

    Raises:
        ValueError: If the body does not match the expected shape
    """
    if not isinstance(payload, dict):
        raise ValueError(f"expected a JSON object, got {type(payload).__name__}")

    for field in ("hostnames", "ip", "ports"):
        if field not in payload:
            raise ValueError(f"missing field '{field}'")

    ip = payload["ip"]
    hostnames = payload["hostnames"]
    ports = payload["ports"]

    if not isinstance(ip, str):
        raise ValueError("field 'ip' must be a string")
    if not isinstance(hostnames, list) or not all(
        isinstance(h, str) for h in hostnames
    ):
        raise ValueError("field 'hostnames' must be a list of strings")
    # bool is a subclass of int, reject it explicitly
    if not isinstance(ports, list) or not all(
        isinstance(p, int) and not isinstance(p, bool) for p in ports
    ):
        raise ValueError("field 'ports' must be a list of integers")

    return LookupResult(ip=ip, hostnames=tuple(hostnames), ports=tuple(ports))


class InternetDBClient:
    """
    Sends lookups to the InternetDB API.

    Attributes:
        base_url (str): Service root, the address is appended as the path
        timeout (float): Request timeout in seconds, None for the transport default
        session (requests.Session): Optional session to send requests with
    """

    def __init__(
        self,
        base_url: str = DEFAULT_INTERNETDB_URL,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session

    def get_internetdb_request(self, ip: str) -> requests.Response:
        """
        Send a request to the InternetDB API.

        Args:
            ip (str): Address to look up

        Returns:
            Response: HTTP response from the API
        """
        url = f"{self.base_url}/{ip}"
        get = self.session.get if self.session is not None else requests.get
        if self.timeout is not None:
            return get(url, timeout=self.timeout)
        return get(url)

    def lookup(self, ip: str) -> LookupResult:
        """
        Look up the known open ports of an address.

        Args:
            ip (str): Address to look up

        Returns:
            LookupResult: Decoded service answer

        Raises:
            LookupFailedError: On transport, HTTP status or decode failure
        """
        logger.debug(f"Querying InternetDB for {ip}")
        try:
            response = self.get_internetdb_request(ip)
            response.raise_for_status()
            result = decode_response(response.json())
        except (requests.RequestException, ValueError) as e:
            raise LookupFailedError(ip, e) from e

        logger.debug(f"InternetDB returned {len(result.ports)} port(s) for {ip}")
        return result

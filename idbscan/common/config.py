"""
Configuration settings for idbscan.

This module reads configuration values from environment variables (usually
populated from a .env file by the CLI) and provides them to the rest of the
application.

Configuration includes:
- The InternetDB endpoint to query
- The default number of concurrent lookups
- An optional HTTP timeout
- The largest address range accepted for expansion
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_INTERNETDB_URL = "https://internetdb.shodan.io"
DEFAULT_THREADS = 1
# A /8 worth of IPv4 addresses
DEFAULT_MAX_ADDRESSES = 2**24


def debug_config(key):
    """Log configuration loading status."""
    value = os.getenv(key)
    status = "OK" if value else "UNSET"
    logger.debug(f"[CONFIG] {key}: {status} ({value})")


def load_env_file(envfile: str = ".env") -> bool:
    """
    Load an env file into the process environment.

    Existing environment variables win over values from the file.

    Returns:
        bool: True if the file set at least one variable
    """
    loaded = load_dotenv(envfile)
    if loaded:
        logger.debug(f"Loaded environment from {envfile}")
    return loaded


def _int_from_env(key: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer value for {key}: {value!r}")
        return default


def _float_from_env(key: str, default: Optional[float]) -> Optional[float]:
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Ignoring non-numeric value for {key}: {value!r}")
        return default


@dataclass(frozen=True)
class Settings:
    """
    Environment driven settings.

    Attributes:
        internetdb_url (str): Base URL of the lookup service
        threads (int): Default number of concurrent lookups
        timeout (float): HTTP timeout in seconds, None for the transport default
        max_addresses (int): Largest range accepted, None for no limit
    """

    internetdb_url: str = DEFAULT_INTERNETDB_URL
    threads: int = DEFAULT_THREADS
    timeout: Optional[float] = None
    max_addresses: Optional[int] = DEFAULT_MAX_ADDRESSES


def get_settings() -> Settings:
    """Build a Settings object from the current environment."""
    for key in (
        "INTERNETDB_URL",
        "IDBSCAN_THREADS",
        "IDBSCAN_TIMEOUT",
        "IDBSCAN_MAX_ADDRESSES",
    ):
        debug_config(key)

    max_addresses = _int_from_env("IDBSCAN_MAX_ADDRESSES", DEFAULT_MAX_ADDRESSES)
    if max_addresses is not None and max_addresses <= 0:
        max_addresses = None

    return Settings(
        internetdb_url=(os.getenv("INTERNETDB_URL") or DEFAULT_INTERNETDB_URL).rstrip(
            "/"
        ),
        threads=_int_from_env("IDBSCAN_THREADS", DEFAULT_THREADS),
        timeout=_float_from_env("IDBSCAN_TIMEOUT", None),
        max_addresses=max_addresses,
    )


@dataclass(frozen=True)
class ScanConfig:
    """
    Immutable inputs of a single scan.

    Attributes:
        target_range (str): CIDR block or single IP address
        ports (Tuple[str, ...]): Raw port filter tokens, empty for all ports
        concurrency (int): Maximum number of lookups in flight
    """

    target_range: str
    ports: Tuple[str, ...] = ()
    concurrency: int = DEFAULT_THREADS

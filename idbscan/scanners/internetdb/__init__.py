"""
InternetDB lookups for idbscan.

Provides the lookup client, the port filter and the bounded concurrent
scanner that ties them together.
"""

# Re-export all the necessary components
from idbscan.scanners.internetdb.client import (
    InternetDBClient,
    LookupFailedError,
    LookupResult,
)
from idbscan.scanners.internetdb.filters import (
    InvalidPortFilterError,
    filter_ports,
    parse_port_filter,
)
from idbscan.scanners.internetdb.scanner import InternetDBScanner, run as run_scan

__all__ = [
    "InternetDBClient",
    "LookupFailedError",
    "LookupResult",
    "InvalidPortFilterError",
    "filter_ports",
    "parse_port_filter",
    "InternetDBScanner",
    "run_scan",
]

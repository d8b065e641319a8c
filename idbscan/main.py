"""
idbscan - InternetDB range scanner

This is the main entry point for idbscan. It handles command line arguments,
expands the requested address range and runs the InternetDB lookups,
printing one "ip:port" line per match.

Usage:
    idbscan -r RANGE [-p PORTS] [-t THREADS] [-env ENV_FILE]

License:
    GNU General Public License v3.0
"""

#  *
#  * This file is part of idbscan.
#  *
#  * idbscan is free software: you can redistribute it and/or modify
#  * it under the terms of the GNU General Public License as published by
#  * the Free Software Foundation, either version 3 of the License, or
#  * (at your option) any later version.
#  *
#  * idbscan is distributed in the hope that it will be useful,
#  * but WITHOUT ANY WARRANTY; without even the implied warranty of
#  * MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#  * GNU General Public License for more details.
#  *
#  * You should have received a copy of the GNU General Public License
#  * along with idbscan. If not, see <https://www.gnu.org/licenses/>.
#  *

import argparse
import logging

from colorama import Fore, Style, init

from idbscan.common.config import ScanConfig, get_settings, load_env_file
from idbscan.common.logger import setup_logger
from idbscan.core.utils import (
    InvalidRangeError,
    RangeTooLargeError,
    expand_range,
    log_range_summary,
)
from idbscan.scanners.internetdb.client import InternetDBClient
from idbscan.scanners.internetdb.filters import (
    InvalidPortFilterError,
    parse_port_filter,
)
from idbscan.scanners.internetdb.scanner import scan


setup_logger()
logger = logging.getLogger("main")

init(autoreset=True)

INVALID_INPUT = "Invalid input"


def setup_env_from_args(args=None):
    # ? First, create a minimal argument parser just to grab the --envfile parameter.
    env_parser = argparse.ArgumentParser(add_help=False)
    env_parser.add_argument(
        "-env",
        "--envfile",
        help="envfile location, default .env",
        default=".env",
        required=False,
    )
    env_parser.add_argument("-v", "--verbose", action="store_true")

    # Only parse sys.argv if args is not provided (for testing)
    if args is None:
        env_args, _ = env_parser.parse_known_args()
    else:
        env_args, _ = env_parser.parse_known_args(args)

    if env_args.verbose:
        setup_logger(logging.DEBUG)

    # ? Load the env file early so the settings below see it.
    load_env_file(env_args.envfile)

    return env_args


def build_parser(default_threads: int) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="idbscan",
        description="Look up known open ports of an address range on InternetDB",
    )
    parser.add_argument(
        "-r",
        "--range",
        default="",
        help="CIDR block or single IP address to look up",
    )
    parser.add_argument(
        "-p",
        "--ports",
        default="",
        help="Comma separated ports to search for, default: report all ports",
    )
    parser.add_argument(
        "-t",
        "--threads",
        type=int,
        default=default_threads,
        help=f"Number of concurrent lookups (default: {default_threads})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="HTTP timeout in seconds, default: no timeout",
    )
    parser.add_argument(
        "--strict-ports",
        action="store_true",
        help="Reject port filter tokens that are not integers",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar on stderr",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "-env",
        "--envfile",
        help="envfile location, default .env",
        default=".env",
        required=False,
    )
    return parser


def main(args=None):
    """
    Main function that parses arguments and runs the scan.

    Args:
        args: Command line arguments (for testing)
    """
    # Initialize environment variables
    setup_env_from_args(args)
    settings = get_settings()

    # ? Argument parser
    parser = build_parser(settings.threads)
    if args is None:
        args = parser.parse_args()
    else:
        args = parser.parse_args(args)

    # Banner
    logger.info(f"{Fore.BLUE}{'=' * 60}")
    logger.info(f"{Fore.CYAN}IDBSCAN - INTERNETDB RANGE SCANNER")
    logger.info(
        f"{Fore.CYAN}Range: {Fore.YELLOW}{args.range or '-'}{Fore.CYAN} | Ports: {Fore.YELLOW}{args.ports or 'all'}{Fore.CYAN} | Threads: {Fore.YELLOW}{args.threads}"
    )
    logger.info(f"{Fore.BLUE}{'=' * 60}{Style.RESET_ALL}")

    if not args.range:
        logger.warning(f"{Fore.YELLOW}[!] No range given, nothing to scan{Style.RESET_ALL}")
        return

    try:
        ports = parse_port_filter(args.ports, strict=args.strict_ports)
    except InvalidPortFilterError as e:
        logger.error(f"{Fore.RED}[-] {e}{Style.RESET_ALL}")
        return

    try:
        ips = expand_range(args.range, settings.max_addresses)
    except RangeTooLargeError as e:
        logger.warning(f"{Fore.YELLOW}[!] {e} (IDBSCAN_MAX_ADDRESSES){Style.RESET_ALL}")
        print(INVALID_INPUT)
        return
    except InvalidRangeError as e:
        logger.debug(str(e))
        print(INVALID_INPUT)
        return

    log_range_summary(args.range, ips)

    config = ScanConfig(
        target_range=args.range,
        ports=ports,
        concurrency=args.threads,
    )
    client = InternetDBClient(
        base_url=settings.internetdb_url,
        timeout=args.timeout if args.timeout is not None else settings.timeout,
    )

    # ? Run the scanner
    scan(config, ips, client=client, progress=args.progress)


if __name__ == "__main__":
    main()

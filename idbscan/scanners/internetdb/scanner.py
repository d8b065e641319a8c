"""
Bounded fan-out scanner over InternetDB.

Each address is looked up by its own task. An asyncio semaphore admits at
most `concurrent_limit` tasks at a time and the blocking HTTP calls run in a
thread pool of the same size.
"""

import asyncio
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence

from colorama import Fore, Style
from tqdm import tqdm

from idbscan.common.config import ScanConfig
from idbscan.scanners.internetdb.client import InternetDBClient, LookupFailedError
from idbscan.scanners.internetdb.filters import filter_ports

logger = logging.getLogger(__name__)


def print_matches(lines: List[str]) -> None:
    """Write one address' match lines to stdout in a single call."""
    print("\n".join(lines), flush=True)


class InternetDBScanner:
    """
    Looks up many addresses concurrently and reports matching ports.

    Attributes:
        client (InternetDBClient): Client used for every lookup
        concurrent_limit (int): Maximum number of lookups in flight
        sink (Callable): Receives the match lines of one address at a time
        progress (bool): Show a progress bar on stderr
    """

    def __init__(
        self,
        client: Optional[InternetDBClient] = None,
        concurrent_limit: int = 1,
        sink: Optional[Callable[[List[str]], None]] = None,
        progress: bool = False,
    ):
        if concurrent_limit < 1:
            logger.warning(
                f"{Fore.YELLOW}Concurrency {concurrent_limit} is not positive, using 1{Style.RESET_ALL}"
            )
            concurrent_limit = 1

        self.client = client if client is not None else InternetDBClient()
        self.concurrent_limit = concurrent_limit
        self.sink = sink if sink is not None else print_matches
        self.progress = progress

    async def _scan_ip(
        self,
        ip: str,
        ports: Sequence[str],
        semaphore: asyncio.Semaphore,
        executor: ThreadPoolExecutor,
    ) -> int:
        """
        Look up one address and emit its matches.

        The caller has already acquired a semaphore slot for this task; it is
        released here whatever happens.

        Returns:
            int: Number of match lines emitted
        """
        try:
            loop = asyncio.get_running_loop()
            try:
                result = await loop.run_in_executor(executor, self.client.lookup, ip)
            except LookupFailedError as e:
                logger.error(f"{Fore.RED}Error: {e}{Style.RESET_ALL}")
                return 0

            matches = filter_ports(result, ports)
            if matches:
                self.sink(matches)
            return len(matches)
        finally:
            semaphore.release()

    async def bulk_scan(self, ips: Sequence[str], ports: Sequence[str] = ()) -> int:
        """
        Look up every address and emit the matching lines.

        A slot is acquired before each task is created, so no more than
        `concurrent_limit` tasks exist at once. Returns only after every
        task has finished.

        Args:
            ips: Addresses to look up
            ports: Raw port filter tokens, empty to report every port

        Returns:
            int: Total number of match lines emitted
        """
        semaphore = asyncio.Semaphore(self.concurrent_limit)
        pending = set()
        emitted = 0

        logger.debug(
            f"Scanning {len(ips)} address(es) with {self.concurrent_limit} concurrent lookup(s)"
        )

        with ThreadPoolExecutor(max_workers=self.concurrent_limit) as executor, tqdm(
            total=len(ips),
            desc="InternetDB lookups",
            unit="ip",
            file=sys.stderr,
            disable=not self.progress,
            leave=False,
        ) as pbar:

            def on_done(task):
                nonlocal emitted
                pending.discard(task)
                pbar.update(1)
                if task.cancelled():
                    return
                error = task.exception()
                if error is not None:
                    logger.error(
                        f"{Fore.RED}Unexpected error during lookup: {error!r}{Style.RESET_ALL}"
                    )
                    return
                emitted += task.result()

            for ip in ips:
                await semaphore.acquire()
                task = asyncio.create_task(
                    self._scan_ip(ip, ports, semaphore, executor)
                )
                pending.add(task)
                task.add_done_callback(on_done)

            if pending:
                # Errors were already reported by on_done
                await asyncio.gather(*pending, return_exceptions=True)

        logger.debug(f"Finished {len(ips)} lookup(s), {emitted} match(es)")
        return emitted


async def run(scanner: InternetDBScanner, config: ScanConfig, ips: Sequence[str]) -> int:
    """
    Run a scan for an already expanded address list.

    Args:
        scanner: Scanner to use
        config: Scan inputs, only the port filter is read here
        ips: Addresses to look up

    Returns:
        int: Total number of match lines emitted
    """
    logger.info(
        f"{Fore.CYAN}Starting InternetDB lookups for {config.target_range}{Style.RESET_ALL}"
    )
    emitted = await scanner.bulk_scan(ips, config.ports)
    logger.info(f"Lookups have been completed for {config.target_range}")
    return emitted


def scan(
    config: ScanConfig,
    ips: Sequence[str],
    client: Optional[InternetDBClient] = None,
    sink: Optional[Callable[[List[str]], None]] = None,
    progress: bool = False,
) -> int:
    """
    Blocking entry point: scan `ips` with the concurrency of `config`.

    Returns:
        int: Total number of match lines emitted
    """
    scanner = InternetDBScanner(
        client=client,
        concurrent_limit=config.concurrency,
        sink=sink,
        progress=progress,
    )
    return asyncio.run(run(scanner, config, ips))

"""Periodic memory usage logging for long retrievals.

Decoding a full EC2 price list holds a large document in memory; the
monitor logs the process footprint at a fixed interval while it runs.
"""

import gc
import logging
import os
import threading
from typing import Optional

import psutil

logger = logging.getLogger("ec2_pricing.monitoring")


def log_memory_usage() -> None:
    """Log the current process memory usage at debug level."""
    memory = psutil.Process(os.getpid()).memory_info()
    logger.debug(
        f"Memory stats: rss={memory.rss / (1024 * 1024):.1f} MiB "
        f"vms={memory.vms / (1024 * 1024):.1f} MiB",
        extra={
            "pid": os.getpid(),
            "rss": memory.rss,
            "vms": memory.vms,
            "gc_collections": sum(stat["collections"] for stat in gc.get_stats()),
        },
    )


class MemoryMonitor:
    """Background thread logging memory usage every ``interval`` seconds."""

    def __init__(self, interval: float = 10.0):
        self.interval = interval
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    def start(self) -> None:
        """Start the monitor thread. Does nothing if it is already running."""
        if self._thread is not None:
            logger.warning("Memory monitor is already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="memory-monitor", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop the monitor thread and wait up to 5 seconds for it to exit."""
        if self._thread is None:
            return

        self._stop_event.set()
        self._thread.join(timeout=5)
        self._thread = None

    def _run(self) -> None:
        log_memory_usage()
        while not self._stop_event.wait(timeout=self.interval):
            log_memory_usage()

    def __enter__(self) -> "MemoryMonitor":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

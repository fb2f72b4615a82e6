"""
Module for running scan ticks on a fixed interval.
"""
import threading
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class IntervalPoller:
    """Runs a tick callback, then sleeps for a fixed interval, until stopped."""

    def __init__(self, interval: float = 1.0):
        self.interval = interval
        self.ticks = 0

    def run(self, tick: Callable[[], object],
            stop_event: Optional[threading.Event] = None,
            max_ticks: Optional[int] = None) -> None:
        """Run ticks until the stop event is set or max_ticks is reached.

        Each tick runs to completion before the interval starts. A tick that
        raises is logged and does not stop the loop.

        Args:
            tick: Callable running one full scan-and-upload pass
            stop_event: Event to signal loop termination
            max_ticks: Optional number of ticks after which to return
        """
        stop_event = stop_event or threading.Event()
        ran = 0

        while not stop_event.is_set():
            try:
                tick()
            except Exception as e:
                logger.exception(f"Error during scan tick: {e}")

            ran += 1
            self.ticks += 1
            if max_ticks is not None and ran >= max_ticks:
                break

            stop_event.wait(self.interval)

"""
Gator Feed Scheduler
====================

Runs ingestion cycles back to back on a fixed interval until stopped.

A cycle runs immediately on start and then once per interval, measured on a
monotonic clock. Cycles never overlap: a slow cycle pushes the next tick back,
and any ticks missed meanwhile collapse into a single immediate one.
"""

import signal
import threading
import time
from datetime import timedelta
from typing import Callable, Optional

from ..processing.pipeline import IngestionPipeline, CycleResult
from ..utils.logging import get_logger_for_component
from ..utils.validators import format_duration


class FeedScheduler:
    """Periodic driver for the ingestion pipeline."""

    def __init__(
        self,
        pipeline: IngestionPipeline,
        interval: timedelta,
        stop_event: Optional[threading.Event] = None,
        monotonic: Callable[[], float] = time.monotonic,
        on_cycle: Optional[Callable[[CycleResult], None]] = None,
    ):
        """Initialize scheduler.

        Args:
            pipeline: Pipeline whose cycle runs on every tick
            interval: Time between ticks, must be positive
            stop_event: Event that ends the loop when set
            monotonic: Clock used for tick scheduling
            on_cycle: Callback receiving each successful cycle result
        """
        if interval.total_seconds() <= 0:
            raise ValueError("Scheduler interval must be positive")

        self.pipeline = pipeline
        self.interval = interval
        self.stop_event = stop_event or threading.Event()
        self.monotonic = monotonic
        self.on_cycle = on_cycle
        self.cycles_run = 0
        self.logger = get_logger_for_component("scheduler")

    def run(self) -> None:
        """Run cycles until the stop event is set or a cycle fails.

        Returns normally when stopped. Any exception from a cycle stops the
        loop and is re-raised to the caller.
        """
        period = self.interval.total_seconds()
        next_tick = self.monotonic()
        self.logger.info(f"Scheduler started, interval {format_duration(self.interval)}")

        while not self.stop_event.is_set():
            self._tick()

            next_tick += period
            now = self.monotonic()
            if next_tick <= now:
                missed = int((now - next_tick) // period)
                if missed:
                    self.logger.debug(f"Cycle overran the interval, skipping {missed} tick(s)")
                next_tick += missed * period
                continue

            if self.stop_event.wait(next_tick - now):
                break

        self.logger.info(f"Scheduler stopped after {self.cycles_run} cycle(s)")

    def stop(self) -> None:
        self.stop_event.set()

    def install_signal_handlers(self) -> bool:
        """Stop the loop on SIGTERM.

        Only possible from the main thread. SIGINT is left alone so Ctrl-C
        still surfaces as KeyboardInterrupt.

        Returns:
            True if the handler was installed
        """
        if threading.current_thread() is not threading.main_thread():
            self.logger.debug("Not on the main thread, signal handlers not installed")
            return False

        def _handle_sigterm(signum, frame):
            self.logger.info("SIGTERM received, stopping scheduler")
            self.stop()

        signal.signal(signal.SIGTERM, _handle_sigterm)
        return True

    def _tick(self) -> None:
        try:
            result = self.pipeline.run_cycle()
        except Exception as e:
            self.logger.error(f"Ingestion cycle failed, stopping scheduler: {e}")
            raise

        self.cycles_run += 1
        if self.on_cycle:
            self.on_cycle(result)

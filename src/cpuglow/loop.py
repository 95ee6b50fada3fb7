"""Fixed-period sample/render loop for cpuglow."""

import logging
import threading
import time
from collections.abc import Callable

from cpuglow.errors import AccountingReadError, SampleLoopError
from cpuglow.models import CpuTimes, LoopState, TickResult
from cpuglow.renderer import render
from cpuglow.sampler import compute_utilization, read_cpu_times
from cpuglow.surface import RingSurface

logger = logging.getLogger(__name__)

DEFAULT_PERIOD = 0.2


class SampleLoop:
    """
    Sample CPU utilization on a fixed period and render it to a ring surface.

    Runs in a separate daemon thread. The previous snapshot is the only state
    carried between ticks and is replaced by the new one after every tick.
    A failed counter read, or any other error escaping a tick, stops the
    loop and is kept in `failure`.
    """

    def __init__(
        self,
        surface: RingSurface,
        brightness: float,
        period: float = DEFAULT_PERIOD,
        reader: Callable[[], CpuTimes] = read_cpu_times,
    ) -> None:
        """
        Initialize the SampleLoop.

        Args:
            surface: Where the rings are drawn.
            brightness: Fraction of maximum intensity for lit rings.
            period: Seconds between ticks. Default 0.2s.
            reader: Returns a fresh cumulative CPU times snapshot.
        """
        self._surface = surface
        self._brightness = brightness
        self._period = period
        self._reader = reader
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._state = LoopState.IDLE
        self._previous: CpuTimes | None = None
        self._last_result: TickResult | None = None
        self._ticks = 0
        self.failure: AccountingReadError | SampleLoopError | None = None

    @property
    def period(self) -> float:
        return self._period

    @property
    def state(self) -> LoopState:
        with self._lock:
            return self._state

    @property
    def is_running(self) -> bool:
        """Check if the loop thread is running."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def previous(self) -> CpuTimes | None:
        """The snapshot the next tick will be compared against."""
        return self._previous

    @property
    def last_result(self) -> TickResult | None:
        return self._last_result

    @property
    def ticks(self) -> int:
        """Number of completed ticks."""
        return self._ticks

    def _set_state(self, state: LoopState) -> None:
        with self._lock:
            self._state = state

    def start(self, initial: CpuTimes | None = None) -> None:
        """
        Start the loop thread.

        The initial snapshot is read on the calling thread, so a failing
        counter source raises AccountingReadError before any tick runs.
        """
        if self.is_running:
            return

        self._previous = initial if initial is not None else self._reader()
        self.failure = None
        self._stop_event.clear()
        self._set_state(LoopState.RUNNING)
        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name="SampleLoop",
        )
        self._thread.start()
        logger.info("Sampling every %.0fms at brightness %.2f", self._period * 1000, self._brightness)

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the loop thread.

        A tick already in progress is allowed to finish. If it has not finished
        within `timeout` the loop stays STOPPING and `is_running` stays true.

        Args:
            timeout: How long to wait for the thread to stop (seconds).
        """
        if self.state is LoopState.RUNNING:
            self._set_state(LoopState.STOPPING)
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Sample loop did not stop within %s seconds", timeout)
                return
            self._thread = None
        self._set_state(LoopState.STOPPED)

    def tick(self, previous: CpuTimes) -> CpuTimes:
        """
        Run one sample/render step against `previous`.

        Returns the fresh snapshot, which becomes the next tick's previous
        one whether or not the surface write succeeded.

        Raises:
            AccountingReadError: If the counters cannot be read.
        """
        current = self._reader()
        utilization = compute_utilization(previous, current)
        levels: tuple[int, ...] = ()
        try:
            levels = render(self._surface, utilization, self._brightness)
        except OSError as exc:
            logger.warning("Failed to update LED rings: %s", exc)
        finally:
            self._last_result = TickResult(previous, current, utilization, levels)
            self._ticks += 1
        logger.debug("Utilization %.3f -> %s", utilization, levels)
        return current

    def _run(self) -> None:
        """Main loop running in the background thread."""
        try:
            self._tick_until_stopped()
        except AccountingReadError as exc:
            self.failure = exc
            self._set_state(LoopState.STOPPED)
        except Exception as exc:
            logger.exception("Sample loop crashed")
            failure = SampleLoopError(f"Sample loop crashed: {exc!r}")
            failure.__cause__ = exc
            self.failure = failure
            self._set_state(LoopState.STOPPED)

    def _tick_until_stopped(self) -> None:
        next_fire = time.monotonic() + self._period
        while not self._stop_event.wait(timeout=max(0.0, next_fire - time.monotonic())):
            self._previous = self.tick(self._previous)

            # Drop fire times that have already passed instead of bursting
            next_fire += self._period
            now = time.monotonic()
            if next_fire < now:
                missed = int((now - next_fire) // self._period) + 1
                next_fire += missed * self._period

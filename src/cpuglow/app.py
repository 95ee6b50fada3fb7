"""cpuglow - Main daemon entry point."""

import logging
import signal
import sys
import threading
import time
from collections.abc import Callable, Sequence
from queue import Queue

from cpuglow.config import Settings, parse_args
from cpuglow.errors import (
    AccountingReadError,
    ConfigurationError,
    PeripheralAbsentError,
    SampleLoopError,
)
from cpuglow.loop import SampleLoop
from cpuglow.models import CpuTimes
from cpuglow.preview import GlowApp, QueueSurface
from cpuglow.sampler import read_cpu_times
from cpuglow.surface import PiGlow, RingSurface

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


def install_signal_handlers(cancel: threading.Event) -> None:
    """Set `cancel` on SIGINT or SIGTERM. Only possible from the main thread."""

    def _handler(signum: int, frame: object) -> None:
        cancel.set()

    if threading.current_thread() is not threading.main_thread():
        return
    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)


def check_presence(surface: RingSurface, absent_delay: float) -> None:
    """
    Make sure the LED board is reachable.

    When it is not, wait `absent_delay` seconds before giving up so that a
    process supervisor restarting us does not exhaust its restart budget.

    Raises:
        PeripheralAbsentError: If the board is not present.
    """
    if surface.is_present():
        return
    logger.error("PiGlow not found, exiting in %.0f seconds", absent_delay)
    time.sleep(absent_delay)
    raise PeripheralAbsentError("PiGlow board is not available")


def run(
    settings: Settings,
    surface: RingSurface,
    cancel: threading.Event,
    reader: Callable[[], CpuTimes] = read_cpu_times,
    poll_interval: float = 0.1,
    stop_timeout: float = 5.0,
) -> int:
    """
    Sample and render until `cancel` is set, then turn the rings off.

    Raises:
        AccountingReadError: If the counters cannot be read, at startup or on
            any tick. The rings are left as they are in that case.
        SampleLoopError: If the loop died without being cancelled, or did not
            stop within `stop_timeout`. The rings are left as they are.
    """
    loop = SampleLoop(surface, settings.brightness, period=settings.period, reader=reader)
    loop.start()

    # Wait for a shutdown request or for the loop to die on its own
    while not cancel.wait(timeout=poll_interval):
        if not loop.is_running:
            break

    if cancel.is_set():
        logger.info("Shutdown requested, stopping")

    loop.stop(timeout=stop_timeout)
    if loop.failure is not None:
        raise loop.failure
    if loop.is_running:
        raise SampleLoopError(f"Sample loop did not stop within {stop_timeout} seconds")
    if not cancel.is_set():
        raise SampleLoopError("Sample loop stopped unexpectedly")

    surface.all_off()
    logger.info("Stopped after %d ticks", loop.ticks)
    return EXIT_OK


def run_preview(settings: Settings, reader: Callable[[], CpuTimes] = read_cpu_times) -> int:
    """Run the sample loop against the terminal preview."""
    frames: Queue[tuple[int, ...]] = Queue()
    surface = QueueSurface(frames)
    loop = SampleLoop(surface, settings.brightness, period=settings.period, reader=reader)
    cancel = threading.Event()
    app = GlowApp(loop, surface, frames, initial=reader(), cancel=cancel)
    install_signal_handlers(cancel)
    app.run()
    loop.stop()
    return app.return_code or EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for cpuglow."""
    try:
        settings = parse_args(argv)
    except ConfigurationError as exc:
        setup_logging()
        logger.error("%s", exc)
        return EXIT_CONFIG

    setup_logging(settings.verbose)

    try:
        if settings.preview:
            return run_preview(settings)

        surface = PiGlow(settings.bus, settings.address)
        check_presence(surface, settings.absent_delay)

        cancel = threading.Event()
        install_signal_handlers(cancel)
        return run(settings, surface, cancel)
    except PeripheralAbsentError:
        return EXIT_FAILURE
    except (AccountingReadError, SampleLoopError) as exc:
        logger.error("%s", exc)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())

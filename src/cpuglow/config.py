"""Command-line settings for cpuglow."""

import argparse
from collections.abc import Sequence
from dataclasses import dataclass

from cpuglow import __version__
from cpuglow.errors import ConfigurationError
from cpuglow.surface import DEFAULT_ADDRESS, DEFAULT_BUS

DEFAULT_PERIOD_MS = 200
DEFAULT_BRIGHTNESS = 0.02
DEFAULT_ABSENT_DELAY = 10.0
MAX_PERIOD_MS = 24 * 60 * 60 * 1000
MAX_ABSENT_DELAY = 3600.0


@dataclass(slots=True, frozen=True)
class Settings:
    """Validated runtime settings."""

    period_ms: int = DEFAULT_PERIOD_MS
    brightness: float = DEFAULT_BRIGHTNESS
    bus: int = DEFAULT_BUS
    address: int = DEFAULT_ADDRESS
    absent_delay: float = DEFAULT_ABSENT_DELAY
    preview: bool = False
    verbose: bool = False

    @property
    def period(self) -> float:
        """Tick period in seconds."""
        return self.period_ms / 1000.0


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting on bad input."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise ConfigurationError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="cpuglow",
        description="Show CPU utilization on the PiGlow LED rings.",
    )
    parser.add_argument(
        "--period", type=int, default=DEFAULT_PERIOD_MS, help="CPU poll period (in milliseconds)"
    )
    parser.add_argument(
        "--brightness",
        type=float,
        default=DEFAULT_BRIGHTNESS,
        help="LED brightness (fraction of max brightness, 0 to 1.0)",
    )
    parser.add_argument("--bus", type=int, default=DEFAULT_BUS, help="I2C bus number")
    parser.add_argument(
        "--address",
        type=lambda value: int(value, 0),
        default=DEFAULT_ADDRESS,
        help="I2C address of the LED driver (default 0x54)",
    )
    parser.add_argument(
        "--absent-delay",
        type=float,
        default=DEFAULT_ABSENT_DELAY,
        help="Seconds to wait before exiting when the board is missing",
    )
    parser.add_argument(
        "--preview", action="store_true", help="Draw the rings in the terminal instead"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """
    Parse and validate command-line arguments.

    Raises:
        ConfigurationError: If any value is malformed or out of range.
    """
    args = build_parser().parse_args(argv)

    if not 0.0 <= args.brightness <= 1.0:
        raise ConfigurationError(
            f"Brightness must be a value between 0 and 1.0 (got {args.brightness})"
        )
    if not 0 < args.period <= MAX_PERIOD_MS:
        raise ConfigurationError(
            f"Period must be between 1 and {MAX_PERIOD_MS} milliseconds (got {args.period})"
        )
    if not 0.0 <= args.absent_delay <= MAX_ABSENT_DELAY:
        raise ConfigurationError(
            f"Absent delay must be between 0 and {MAX_ABSENT_DELAY:.0f} seconds (got {args.absent_delay})"
        )
    if not 0x03 <= args.address <= 0x77:
        raise ConfigurationError(f"I2C address out of range (got 0x{args.address:02x})")

    return Settings(
        period_ms=args.period,
        brightness=args.brightness,
        bus=args.bus,
        address=args.address,
        absent_delay=args.absent_delay,
        preview=args.preview,
        verbose=args.verbose,
    )

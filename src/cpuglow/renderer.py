"""Map a utilization ratio onto the LED rings."""

import math

from cpuglow.models import RING_COUNT
from cpuglow.surface import RingSurface

MAX_INTENSITY = 255


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def brightness_byte(brightness: float) -> int:
    """Convert a brightness fraction (0.0 - 1.0) to an 8-bit intensity."""
    return min(max(_round_half_up(brightness * MAX_INTENSITY), 0), MAX_INTENSITY)


def lit_ring_count(utilization: float) -> int:
    """Number of rings to light for a utilization ratio."""
    return min(max(_round_half_up(utilization * RING_COUNT), 0), RING_COUNT)


def ring_levels(utilization: float, brightness: float) -> tuple[int, ...]:
    """
    Compute the intensity of every ring.

    Rings fill from the highest index down. The threshold is taken against
    RING_COUNT rather than the last index so that zero utilization leaves
    every ring dark, distinct from one lit ring.
    """
    level = brightness_byte(brightness)
    threshold = RING_COUNT - lit_ring_count(utilization)
    return tuple(level if ring >= threshold else 0 for ring in range(RING_COUNT))


def render(surface: RingSurface, utilization: float, brightness: float) -> tuple[int, ...]:
    """Write the gauge for `utilization` to every ring of `surface`."""
    levels = ring_levels(utilization, brightness)
    for ring, level in enumerate(levels):
        surface.set_ring(ring, level)
    return levels

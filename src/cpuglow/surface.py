"""LED ring output surfaces.

The PiGlow board is driven by an SN3218 18-channel LED driver on the I2C
bus. Each of its six concentric rings is one LED on each of three legs.
"""

import logging
from enum import IntEnum
from typing import Protocol

from smbus2 import SMBus

from cpuglow.models import RING_COUNT

logger = logging.getLogger(__name__)

DEFAULT_BUS = 1
DEFAULT_ADDRESS = 0x54

CHANNEL_COUNT = 18

# SN3218 channels for each ring, outermost (red) to innermost (white)
RING_CHANNELS: tuple[tuple[int, int, int], ...] = (
    (6, 17, 0),  # red
    (7, 16, 1),  # orange
    (8, 15, 2),  # yellow
    (5, 13, 3),  # green
    (4, 11, 14),  # blue
    (9, 10, 12),  # white
)


class Register(IntEnum):
    """SN3218 register addresses."""

    SHUTDOWN = 0x00  # 0 = shutdown, 1 = normal operation
    PWM_BASE = 0x01  # 0x01 - 0x12, one per channel
    ENABLE_BASE = 0x13  # 0x13 - 0x15, six channels per bank
    UPDATE = 0x16  # Any write latches the PWM registers
    RESET = 0x17


class RingSurface(Protocol):
    """Anything that can show intensities on six LED rings."""

    def is_present(self) -> bool: ...

    def set_ring(self, index: int, intensity: int) -> None: ...

    def all_off(self) -> None: ...


def check_ring(index: int, intensity: int) -> None:
    if not 0 <= index < RING_COUNT:
        raise ValueError(f"Ring index must be between 0 and {RING_COUNT - 1} (got {index})")
    if not 0 <= intensity <= 0xFF:
        raise ValueError(f"Intensity must be between 0 and 255 (got {intensity})")


class PiGlow:
    """
    Driver for the PiGlow board.

    The bus is opened lazily on first use. Pass an already open `bus` to
    share one or to substitute a fake.
    """

    def __init__(
        self,
        bus_number: int = DEFAULT_BUS,
        address: int = DEFAULT_ADDRESS,
        bus: SMBus | None = None,
    ) -> None:
        self._bus_number = bus_number
        self._address = address
        self._bus = bus
        self._enabled = False

    @property
    def address(self) -> int:
        return self._address

    def _write(self, register: int, value: int) -> None:
        self._open().write_byte_data(self._address, register, value)

    def _write_block(self, register: int, values: list[int]) -> None:
        self._open().write_i2c_block_data(self._address, register, values)

    def _open(self) -> SMBus:
        if self._bus is None:
            self._bus = SMBus(self._bus_number)
        if not self._enabled:
            # Flag first so the writes below do not recurse
            self._enabled = True
            try:
                self._bus.write_byte_data(self._address, Register.SHUTDOWN, 0x01)
                self._bus.write_i2c_block_data(self._address, Register.ENABLE_BASE, [0x3F] * 3)
                self._bus.write_byte_data(self._address, Register.UPDATE, 0xFF)
            except OSError:
                self._enabled = False
                raise
        return self._bus

    def is_present(self) -> bool:
        """Check whether the SN3218 answers on the bus."""
        try:
            self._open()
        except OSError as exc:
            logger.debug("PiGlow not reachable on bus %d at 0x%02x: %s", self._bus_number, self._address, exc)
            self.close()
            return False
        return True

    def set_ring(self, index: int, intensity: int) -> None:
        """Set every LED of ring `index` to `intensity` (0-255)."""
        check_ring(index, intensity)
        for channel in RING_CHANNELS[index]:
            self._write(Register.PWM_BASE + channel, intensity)
        self._write(Register.UPDATE, 0xFF)

    def all_off(self) -> None:
        """Turn every LED off and put the chip in shutdown."""
        if self._bus is None:
            return
        try:
            self._write_block(Register.PWM_BASE, [0] * CHANNEL_COUNT)
            self._write(Register.UPDATE, 0xFF)
            self._write(Register.SHUTDOWN, 0x00)
        finally:
            self.close()

    def close(self) -> None:
        if self._bus is not None:
            self._bus.close()
            self._bus = None
        self._enabled = False

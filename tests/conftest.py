"""Shared fakes for cpuglow tests."""

import threading
import time
from collections.abc import Iterable

import pytest

from cpuglow.errors import AccountingReadError
from cpuglow.models import RING_COUNT, CpuTimes


def make_times(busy: float = 0.0, idle: float = 0.0, iowait: float = 0.0) -> CpuTimes:
    """Build a CpuTimes with all busy time on `user`."""
    return CpuTimes(
        user=busy,
        nice=0.0,
        system=0.0,
        idle=idle,
        iowait=iowait,
        irq=0.0,
        softirq=0.0,
    )


class FakeSurface:
    """Ring surface that records every write."""

    def __init__(self, present: bool = True) -> None:
        self.present = present
        self.levels = [0] * RING_COUNT
        self.writes: list[tuple[int, int]] = []
        self.off_calls = 0

    def is_present(self) -> bool:
        return self.present

    def set_ring(self, index: int, intensity: int) -> None:
        self.writes.append((index, intensity))
        self.levels[index] = intensity

    def all_off(self) -> None:
        self.off_calls += 1
        self.levels = [0] * RING_COUNT

    @property
    def lit(self) -> list[int]:
        return [ring for ring, level in enumerate(self.levels) if level > 0]


class SlowSurface(FakeSurface):
    """Ring surface whose writes block, like a stuck I2C bus."""

    def __init__(self, delay: float) -> None:
        super().__init__()
        self.delay = delay
        self.writing = threading.Event()

    def set_ring(self, index: int, intensity: int) -> None:
        self.writing.set()
        time.sleep(self.delay)
        super().set_ring(index, intensity)


class ExplodingSurface(FakeSurface):
    """Ring surface failing with an error the loop does not expect."""

    def set_ring(self, index: int, intensity: int) -> None:
        raise RuntimeError("corrupt frame")


class ScriptedReader:
    """Counter reader returning a fixed sequence of snapshots."""

    def __init__(self, snapshots: Iterable[CpuTimes], repeat_last: bool = True) -> None:
        self._snapshots = list(snapshots)
        self._repeat_last = repeat_last
        self.calls = 0

    def __call__(self) -> CpuTimes:
        index = self.calls
        self.calls += 1
        if index < len(self._snapshots):
            return self._snapshots[index]
        if self._repeat_last and self._snapshots:
            return self._snapshots[-1]
        raise AccountingReadError("Unable to read CPU times: exhausted")


class CountingReader:
    """Counter reader that advances busy and idle time steadily."""

    def __init__(self, busy_step: float = 1.0, idle_step: float = 1.0) -> None:
        self._busy_step = busy_step
        self._idle_step = idle_step
        self.calls = 0

    def __call__(self) -> CpuTimes:
        self.calls += 1
        return make_times(busy=self.calls * self._busy_step, idle=self.calls * self._idle_step)


@pytest.fixture
def surface() -> FakeSurface:
    return FakeSurface()

"""Data models for cpuglow."""

from dataclasses import dataclass
from enum import Enum

RING_COUNT = 6


@dataclass(slots=True, frozen=True)
class CpuTimes:
    """Immutable snapshot of cumulative CPU time since boot."""

    user: float
    nice: float
    system: float
    idle: float
    iowait: float
    irq: float
    softirq: float

    @property
    def busy(self) -> float:
        """Time spent doing work."""
        return self.user + self.nice + self.system + self.irq + self.softirq

    @property
    def idle_total(self) -> float:
        """Time spent idle, including waiting on I/O."""
        return self.idle + self.iowait

    @property
    def total(self) -> float:
        return self.busy + self.idle_total


class LoopState(Enum):
    """Lifecycle states of the sample loop."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


@dataclass(slots=True, frozen=True)
class TickResult:
    """Outcome of one sample/render tick."""

    previous: CpuTimes
    current: CpuTimes
    utilization: float
    levels: tuple[int, ...]  # One intensity per ring, 0-255

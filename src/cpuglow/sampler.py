"""CPU time sampling and utilization math."""

import logging
import math

import psutil

from cpuglow.errors import AccountingReadError
from cpuglow.models import CpuTimes

logger = logging.getLogger(__name__)


def read_cpu_times() -> CpuTimes:
    """
    Read the aggregate cumulative CPU times.

    Fields the platform does not report (iowait, irq and softirq outside
    Linux) read as 0.0.

    Raises:
        AccountingReadError: If the counters cannot be read.
    """
    try:
        times = psutil.cpu_times(percpu=False)
    except (OSError, psutil.Error) as exc:
        raise AccountingReadError(f"Unable to read CPU times: {exc}") from exc

    return CpuTimes(
        user=times.user,
        nice=getattr(times, "nice", 0.0),
        system=times.system,
        idle=times.idle,
        iowait=getattr(times, "iowait", 0.0),
        irq=getattr(times, "irq", 0.0),
        softirq=getattr(times, "softirq", 0.0),
    )


def compute_utilization(previous: CpuTimes, current: CpuTimes) -> float:
    """
    Compute the busy fraction of CPU time elapsed between two snapshots.

    When no time elapsed between the snapshots (or the counters went
    backwards) the interval is reported as zero utilization.
    """
    delta_idle = current.idle_total - previous.idle_total
    delta_total = current.total - previous.total

    if delta_total <= 0:
        logger.debug("No CPU time elapsed between snapshots (delta=%s)", delta_total)
        return 0.0

    ratio = 1.0 - (delta_idle / delta_total)
    if not math.isfinite(ratio):
        return 0.0
    return ratio

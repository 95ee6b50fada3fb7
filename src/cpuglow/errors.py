"""Exceptions raised by cpuglow."""


class CpuGlowError(Exception):
    """Base class for all cpuglow errors."""


class ConfigurationError(CpuGlowError):
    """Invalid command-line settings."""


class PeripheralAbsentError(CpuGlowError):
    """The LED board could not be reached."""


class AccountingReadError(CpuGlowError):
    """CPU time counters could not be read."""


class SampleLoopError(CpuGlowError):
    """The sample loop died or could not be stopped."""

"""cpuglow - CPU utilization gauge on PiGlow LED rings."""

__version__ = "0.1.0"

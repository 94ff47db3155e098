"""System Pulse: host telemetry snapshots for a monitoring dashboard."""

__version__ = "0.1.0"

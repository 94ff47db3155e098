"""HTTP service for System Pulse."""

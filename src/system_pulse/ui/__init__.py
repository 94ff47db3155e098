"""UI module for System Pulse.

The CLI can be run directly:
    python -m system_pulse.ui.cli snapshot

Note: We don't export CLI components from __init__.py to avoid
module loading issues when running as a script.
"""

__all__: list[str] = []

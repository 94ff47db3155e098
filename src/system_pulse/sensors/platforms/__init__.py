"""Raw source readers.

- `procfs`: /proc and /sys virtual files (Linux, Android)
- `commands`: external tools run with a bounded timeout
- `base`: psutil-backed readers, the cross-platform fallback
"""

from system_pulse.sensors.platforms.commands import has_command, run_command
from system_pulse.sensors.platforms.procfs import read_text

__all__ = ["has_command", "run_command", "read_text"]

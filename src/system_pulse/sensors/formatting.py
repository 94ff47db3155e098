"""Human-readable byte formatting for dashboard fields."""

_UNITS = ("B", "KB", "MB", "GB", "TB")


def _scale(num_bytes: float) -> tuple[float, str]:
    size = float(num_bytes)
    unit_index = 0
    while size >= 1024 and unit_index < len(_UNITS) - 1:
        size /= 1024
        unit_index += 1
    return size, _UNITS[unit_index]


def format_size(num_bytes: float) -> str:
    """Compact size used by the disk table, e.g. ``"12.3GB"``."""
    size, unit = _scale(num_bytes)
    return f"{size:.1f}{unit}"


def format_bytes(num_bytes: float) -> str:
    """Spaced size used by the network table, e.g. ``"12.3 GB"``; ``"0 B"`` for zero."""
    if num_bytes == 0:
        return "0 B"
    size, unit = _scale(num_bytes)
    return f"{size:.1f} {unit}"

"""Thermal zone reader (/sys/class/thermal)."""

from pathlib import Path

from system_pulse.sensors.models import ThermalInfo, ThermalZone
from system_pulse.sensors.platforms import procfs
from system_pulse.telemetry import THERMAL_ZONE_SKIPPED, get_logger

log = get_logger(__name__)


def millidegrees_to_zone(zone: str, millidegrees: int) -> ThermalZone:
    """Convert a raw ``temp`` reading into Celsius and Fahrenheit."""
    celsius = millidegrees / 1000
    return ThermalZone(
        zone=zone,
        temperature=millidegrees,
        temperature_celsius=round(celsius, 1),
        temperature_fahrenheit=round(celsius * 9 / 5 + 32, 1),
    )


def read_thermal_zones(root: Path = procfs.SYS_THERMAL) -> ThermalInfo:
    """Read every thermal zone under root.

    Zones whose ``temp`` or ``type`` file is missing, unreadable or
    non-numeric are skipped; they never fail the reading. Zones are keyed
    by their type; a repeated type gets the zone name appended.

    Args:
        root: Directory holding thermal_zone* entries.

    Returns:
        ThermalInfo with the readable zones (empty when root is absent).
    """
    zones: dict[str, ThermalZone] = {}

    for zone_dir in procfs.list_thermal_zones(root):
        try:
            raw_temp = (zone_dir / "temp").read_text(encoding="utf-8").strip()
            zone_type = (zone_dir / "type").read_text(encoding="utf-8").strip()
            millidegrees = int(raw_temp)
        except (OSError, ValueError) as e:
            log.debug(THERMAL_ZONE_SKIPPED, zone=zone_dir.name, error=str(e))
            continue

        key = zone_type or zone_dir.name
        if key in zones:
            key = f"{key}_{zone_dir.name}"
        zones[key] = millidegrees_to_zone(zone_dir.name, millidegrees)

    return ThermalInfo(zones=zones, count=len(zones))

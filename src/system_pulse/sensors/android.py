"""Android (Termux) battery, thermal and device probe.

Only Linux-family hosts can be Termux hosts; anywhere else the probe answers
``available: false`` with a reason and never touches an external tool.

On a candidate host the battery, thermal and device sub-probes run
concurrently. Each yields its own ProbeResult and a failed sub-probe only
blanks its own section: partial Android data is still a successful result.
"""

import asyncio
import json
import platform
import subprocess
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from system_pulse.sensors.models import AndroidStatus, BatteryInfo, DeviceInfo
from system_pulse.sensors.platforms import commands, procfs
from system_pulse.sensors.probe import Clock, Probe
from system_pulse.sensors.thermal import read_thermal_zones
from system_pulse.sensors.types import (
    ProbeError,
    ProbeFailure,
    ProbeResult,
    ProbeSuccess,
    SourceParseError,
    SourceUnavailableError,
    result_to_payload,
)
from system_pulse.telemetry import ANDROID_SUBPROBE_FAILED, DEVICE_PROP_FAILED, get_logger

log = get_logger(__name__)

ANDROID_HOST_SYSTEMS = ("Linux", "Android")
BATTERY_COMMAND = "termux-battery-status"
DEVICE_PROPS = {
    "android_version": "ro.build.version.release",
    "model": "ro.product.model",
    "brand": "ro.product.brand",
}


def parse_battery_status(output: str) -> BatteryInfo:
    """Parse termux-battery-status JSON.

    ``temperatureCelsius`` divides the reported temperature by 10 and
    ``voltageVolts`` divides millivolts by 1000; both are null when the
    source value is missing or zero.

    Raises:
        SourceParseError: If the output is not a JSON object.
    """
    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise SourceParseError(f"Invalid JSON from {BATTERY_COMMAND}: {e.msg}") from None
    if not isinstance(data, dict):
        raise SourceParseError(f"Expected a JSON object from {BATTERY_COMMAND}")

    temperature = data.get("temperature")
    voltage = data.get("voltage")
    return BatteryInfo(
        level=data.get("percentage"),
        status=data.get("status"),
        health=data.get("health"),
        plugged=data.get("plugged"),
        temperature=temperature,
        voltage=voltage,
        current=data.get("current") or 0,
        temperature_celsius=round(temperature / 10, 1) if temperature else None,
        voltage_volts=round(voltage / 1000, 2) if voltage else None,
    )


def read_battery_status(timeout_seconds: float) -> BatteryInfo:
    """Run termux-battery-status.

    Raises:
        SourceUnavailableError: If the Termux API tools are not installed.
    """
    if not commands.has_command(BATTERY_COMMAND):
        raise SourceUnavailableError(
            "Termux API not available (install the termux-api package and the Termux:API app)"
        )
    return parse_battery_status(commands.run_command([BATTERY_COMMAND], timeout=timeout_seconds))


def read_device_info(
    termux_api: bool,
    getprop_timeout_seconds: float,
    version_path: Path = procfs.PROC_VERSION,
) -> DeviceInfo:
    """Collect Android build properties and the kernel banner.

    Build properties are only queried when the Termux API is present. A
    property that cannot be read is logged and left out.
    """
    props: dict[str, str | None] = {}
    if termux_api:
        for field, key in DEVICE_PROPS.items():
            try:
                value = commands.run_command(["getprop", key], timeout=getprop_timeout_seconds)
            except (ProbeError, subprocess.TimeoutExpired) as e:
                log.debug(DEVICE_PROP_FAILED, prop=key, error=str(e), error_type=type(e).__name__)
                continue
            props[field] = value.strip() or None

    return DeviceInfo(**props, kernel_version=procfs.read_kernel_version(version_path))


class AndroidProbe(Probe[AndroidStatus]):
    """Battery, thermal zones and device properties on Termux hosts."""

    name = "android"

    def __init__(
        self,
        ttl_seconds: float = 5.0,
        command_timeout_seconds: float = 5.0,
        getprop_timeout_seconds: float = 2.0,
        file_read_timeout_seconds: float = 2.0,
        platform_system: str | None = None,
        thermal_root: Path = procfs.SYS_THERMAL,
        clock: Clock = time.monotonic,
    ) -> None:  # noqa: D107
        super().__init__(
            ttl_seconds=ttl_seconds, timeout_seconds=command_timeout_seconds, clock=clock
        )
        self.command_timeout_seconds = command_timeout_seconds
        self.getprop_timeout_seconds = getprop_timeout_seconds
        self.file_read_timeout_seconds = file_read_timeout_seconds
        self.thermal_root = thermal_root
        self.platform_system = platform_system or platform.system()
        self.supported = self.platform_system in ANDROID_HOST_SYSTEMS

    async def _collect(self) -> AndroidStatus:
        if not self.supported:
            return AndroidStatus(
                available=False,
                reason=f"Android features not available on {self.platform_system}",
            )

        termux_api = commands.has_command(BATTERY_COMMAND)
        # Sub-probe bounds sit just above their inner subprocess timeouts.
        device_timeout = len(DEVICE_PROPS) * self.getprop_timeout_seconds + 1

        battery, thermal, device = await asyncio.gather(
            self._subprobe(
                "battery",
                read_battery_status,
                self.command_timeout_seconds,
                timeout=self.command_timeout_seconds + 1,
            ),
            self._subprobe(
                "thermal",
                read_thermal_zones,
                self.thermal_root,
                timeout=self.file_read_timeout_seconds,
            ),
            self._subprobe(
                "device",
                read_device_info,
                termux_api,
                self.getprop_timeout_seconds,
                timeout=device_timeout,
            ),
        )

        return AndroidStatus(
            available=True,
            termux_api=termux_api,
            battery=result_to_payload(battery),
            thermal=result_to_payload(thermal),
            device=result_to_payload(device),
            timestamp=datetime.now(timezone.utc),
        )

    async def _subprobe(
        self, name: str, reader: Callable[..., Any], *args: Any, timeout: float
    ) -> ProbeResult[Any]:
        try:
            value = await asyncio.wait_for(asyncio.to_thread(reader, *args), timeout=timeout)
        except Exception as e:
            failure = ProbeFailure.from_exception(e)
            log.warning(
                ANDROID_SUBPROBE_FAILED,
                subprobe=name,
                kind=failure.kind.value,
                error=failure.message,
                error_type=type(e).__name__,
            )
            return failure
        return ProbeSuccess(value)

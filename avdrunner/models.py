"""Data models for avd-runner."""

from __future__ import annotations

import enum
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple


class BootState(enum.Enum):
    NOT_STARTED = "not_started"
    AWAITING_DEVICE = "awaiting_device"
    AWAITING_BOOT_COMPLETE = "awaiting_boot_complete"
    READY = "ready"
    TIMED_OUT = "timed_out"
    CRASHED = "crashed"

    @property
    def terminal(self) -> bool:
        return self in (BootState.READY, BootState.TIMED_OUT, BootState.CRASHED)


@dataclass
class DeviceProfile:
    name: str
    api_level: int
    target: str
    arch: str
    hardware_profile: str = ""
    cores: str = ""
    ram_size: str = ""
    heap_size: str = ""
    sdcard_path_or_size: str = ""
    disk_size: str = ""
    force_recreate: bool = True

    @property
    def abi(self) -> str:
        return f"{self.target}/{self.arch}"

    @property
    def system_image(self) -> str:
        return f"system-images;android-{self.api_level};{self.target};{self.arch}"


@dataclass(frozen=True)
class LaunchSpec:
    args: Tuple[str, ...]
    port: int
    overridden: bool = False

    @property
    def serial(self) -> str:
        return f"emulator-{self.port}"


@dataclass
class EmulatorProcess:
    """Handle on a spawned emulator; owned by the launcher until released."""

    popen: subprocess.Popen
    serial: str
    log_path: Path
    released: bool = False

    @property
    def pid(self) -> int:
        return self.popen.pid

    @property
    def returncode(self) -> Optional[int]:
        return self.popen.poll()

    def is_alive(self) -> bool:
        return self.popen.poll() is None


@dataclass
class RunnerConfig:
    api_level: int
    target: str
    arch: str
    profile: str
    cores: str
    ram_size: str
    heap_size: str
    sdcard_path_or_size: str
    disk_size: str
    avd_name: str
    force_avd_creation: bool
    emulator_options: str
    emulator_port: int
    boot_timeout: int
    disable_animations: bool
    disable_spellchecker: bool
    disable_linux_hw_accel: bool
    enable_hw_keyboard: bool
    emulator_build: Optional[str]
    working_directory: Optional[str]
    ndk_version: Optional[str]
    cmake_version: Optional[str]
    channel: str
    channel_id: int
    scripts: List[str] = field(default_factory=list)

    def device_profile(self) -> DeviceProfile:
        return DeviceProfile(
            name=self.avd_name,
            api_level=self.api_level,
            target=self.target,
            arch=self.arch,
            hardware_profile=self.profile,
            cores=self.cores,
            ram_size=self.ram_size,
            heap_size=self.heap_size,
            sdcard_path_or_size=self.sdcard_path_or_size,
            disk_size=self.disk_size,
            force_recreate=self.force_avd_creation,
        )

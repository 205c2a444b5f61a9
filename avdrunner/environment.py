"""Host environment detection for avd-runner."""

from __future__ import annotations

import enum
import sys
from dataclasses import dataclass
from typing import Optional

from avdrunner.utils import kvm_available, log


class Platform(enum.Enum):
    PREFERRED = "preferred"  # macOS, native hypervisor framework
    DEGRADED = "degraded"  # Linux, acceleration may be unavailable
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class Environment:
    platform: Platform
    kvm: bool = False

    @property
    def supported(self) -> bool:
        return self.platform is not Platform.UNSUPPORTED

    @property
    def degraded(self) -> bool:
        return self.platform is Platform.DEGRADED


def _detect_platform(sys_platform: str) -> Platform:
    if sys_platform == "darwin":
        return Platform.PREFERRED
    if sys_platform.startswith("linux"):
        return Platform.DEGRADED
    return Platform.UNSUPPORTED


def detect_environment(sys_platform: Optional[str] = None) -> Environment:
    """Describe the host this process runs on."""
    platform = _detect_platform(sys_platform if sys_platform is not None else sys.platform)
    kvm = platform is Platform.DEGRADED and kvm_available()

    if platform is Platform.DEGRADED:
        log(
            "WARN",
            "Running on a Linux host where hardware acceleration may not be available. "
            "A macOS host provides native acceleration for the emulator.",
        )
        if not kvm:
            log("DEBUG", "/dev/kvm is not usable on this host")

    return Environment(platform=platform, kvm=kvm)

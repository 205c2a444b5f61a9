"""AVD (device profile) provisioning for avd-runner."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Dict

from avdrunner.constants import ANDROID_AVD_HOME, ANDROID_SDK_ROOT
from avdrunner.exceptions import ProvisioningError
from avdrunner.models import DeviceProfile
from avdrunner.utils import log, run, update_ini


def default_avdmanager_path() -> str:
    for relative in ("cmdline-tools/latest/bin/avdmanager", "tools/bin/avdmanager"):
        candidate = ANDROID_SDK_ROOT / relative
        if candidate.exists():
            return str(candidate)
    return "avdmanager"


class AvdProvisioner:
    """Create, reuse or recreate the named AVD."""

    def __init__(self, avd_home: Path = ANDROID_AVD_HOME, avdmanager: str = "") -> None:
        self.avd_home = avd_home
        self.avdmanager = avdmanager or default_avdmanager_path()

    def avd_dir(self, profile: DeviceProfile) -> Path:
        return self.avd_home / f"{profile.name}.avd"

    def config_path(self, profile: DeviceProfile) -> Path:
        return self.avd_dir(profile) / "config.ini"

    def exists(self, profile: DeviceProfile) -> bool:
        return self.avd_dir(profile).exists()

    def provision(self, profile: DeviceProfile) -> None:
        if self.exists(profile):
            if not profile.force_recreate:
                log("INFO", f"Using cached AVD {profile.name} at {self.avd_dir(profile)}")
                return
            self.delete(profile)

        self.create(profile)
        self.apply_hardware(profile)

    def delete(self, profile: DeviceProfile) -> None:
        log("INFO", f"Deleting existing AVD {profile.name}")
        try:
            result = run([self.avdmanager, "delete", "avd", "-n", profile.name], check=False, capture_output=True)
        except OSError as exc:
            raise ProvisioningError(f"Failed to run avdmanager: {exc}") from exc
        if result.returncode != 0:
            log("WARN", f"avdmanager could not delete {profile.name}; removing files directly")
        shutil.rmtree(self.avd_dir(profile), ignore_errors=True)
        try:
            (self.avd_home / f"{profile.name}.ini").unlink(missing_ok=True)
        except OSError as exc:
            raise ProvisioningError(f"Failed to remove AVD {profile.name}: {exc}") from exc

    def create(self, profile: DeviceProfile) -> None:
        log("INFO", f"Creating AVD {profile.name} ({profile.system_image})")
        cmd = [
            self.avdmanager,
            "create",
            "avd",
            "--force",
            "-n",
            profile.name,
            "--abi",
            profile.abi,
            "--package",
            profile.system_image,
        ]
        if profile.hardware_profile:
            cmd.extend(["--device", profile.hardware_profile])
        if profile.sdcard_path_or_size:
            cmd.extend(["--sdcard", profile.sdcard_path_or_size])
        try:
            # avdmanager asks whether to create a custom hardware profile.
            result = run(cmd, check=False, input="no\n", capture_output=True)
        except OSError as exc:
            raise ProvisioningError(f"Failed to run avdmanager: {exc}") from exc
        if result.returncode != 0:
            detail = (result.stderr or result.stdout or "").strip()
            raise ProvisioningError(
                f"avdmanager create avd failed with exit code {result.returncode}" + (f": {detail}" if detail else "")
            )
        log("SUCCESS", f"AVD {profile.name} created")

    def apply_hardware(self, profile: DeviceProfile) -> None:
        updates: Dict[str, str] = {}
        if profile.cores:
            updates["hw.cpu.ncore"] = profile.cores
        if profile.ram_size:
            updates["hw.ramSize"] = profile.ram_size
        if profile.heap_size:
            updates["vm.heapSize"] = profile.heap_size
        if profile.disk_size:
            updates["disk.dataPartition.size"] = profile.disk_size
        if not updates:
            return
        try:
            update_ini(self.config_path(profile), updates)
        except OSError as exc:
            raise ProvisioningError(f"Failed to write {self.config_path(profile)}: {exc}") from exc
        log("DEBUG", f"Updated {self.config_path(profile)}: {updates}")

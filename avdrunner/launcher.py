"""Emulator process launching for avd-runner."""

from __future__ import annotations

import shlex
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from avdrunner.constants import ANDROID_SDK_ROOT, DEFAULT_EMULATOR_OPTIONS, LOG_DIR
from avdrunner.exceptions import LaunchError
from avdrunner.models import DeviceProfile, EmulatorProcess, LaunchSpec
from avdrunner.utils import ensure_directory, log


def default_emulator_path() -> str:
    candidate = ANDROID_SDK_ROOT / "emulator" / "emulator"
    return str(candidate) if candidate.exists() else "emulator"


def build_launch_spec(emulator_options: str, port: int, extra_options: Sequence[str] = ()) -> LaunchSpec:
    """Resolve emulator options.

    A non-empty ``emulator_options`` string replaces the defaults entirely;
    the two are never merged. ``extra_options`` carries host fallbacks that
    apply either way.
    """
    overridden = bool(emulator_options.strip())
    if overridden:
        try:
            options: List[str] = shlex.split(emulator_options)
        except ValueError as exc:
            raise LaunchError(f"Cannot parse emulator options '{emulator_options}': {exc}") from exc
    else:
        options = list(DEFAULT_EMULATOR_OPTIONS)
    options.extend(extra_options)
    return LaunchSpec(args=tuple(options), port=port, overridden=overridden)


class EmulatorLauncher:
    def __init__(self, emulator_path: Optional[str] = None, log_dir: Path = LOG_DIR) -> None:
        self.emulator_path = emulator_path or default_emulator_path()
        self.log_dir = log_dir

    def command(self, profile: DeviceProfile, spec: LaunchSpec) -> List[str]:
        return [self.emulator_path, "-port", str(spec.port), "-avd", profile.name, *spec.args]

    def log_path(self, spec: LaunchSpec) -> Path:
        return self.log_dir / f"{spec.serial}.log"

    def launch(self, profile: DeviceProfile, spec: LaunchSpec) -> EmulatorProcess:
        """Spawn the emulator in its own session and return without waiting for boot."""
        cmd = self.command(profile, spec)
        ensure_directory(self.log_dir)
        log_path = self.log_path(spec)
        log("INFO", f"Starting emulator: {' '.join(cmd)}")
        log("DEBUG", f"Emulator output: {log_path}")
        with open(log_path, "w") as sink:
            try:
                popen = subprocess.Popen(
                    cmd,
                    stdin=subprocess.DEVNULL,
                    stdout=sink,
                    stderr=subprocess.STDOUT,
                    start_new_session=True,
                )
            except OSError as exc:
                raise LaunchError(f"Failed to start emulator: {exc}") from exc
        log("INFO", f"Emulator spawned (PID {popen.pid}, serial {spec.serial})")
        return EmulatorProcess(popen=popen, serial=spec.serial, log_path=log_path)

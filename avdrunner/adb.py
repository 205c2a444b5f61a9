"""Control bridge to a running emulator over adb."""

from __future__ import annotations

import subprocess
from typing import Optional

from avdrunner.constants import ADB_COMMAND_TIMEOUT_SECONDS, ANDROID_SDK_ROOT
from avdrunner.utils import log, run


def default_adb_path() -> str:
    candidate = ANDROID_SDK_ROOT / "platform-tools" / "adb"
    return str(candidate) if candidate.exists() else "adb"


class AdbBridge:
    """Query and command one emulator instance, addressed by serial."""

    def __init__(self, serial: str, adb_path: Optional[str] = None,
                 timeout: float = ADB_COMMAND_TIMEOUT_SECONDS) -> None:
        self.serial = serial
        self.adb_path = adb_path or default_adb_path()
        self.timeout = timeout

    def _cmd(self, *args: str) -> list:
        return [self.adb_path, "-s", self.serial, *args]

    def wait_for_device(self, timeout: float) -> bool:
        """Block until the device registers with the adb server, or ``timeout`` elapses."""
        try:
            result = run(self._cmd("wait-for-device"), check=False, capture_output=True, timeout=timeout)
        except subprocess.TimeoutExpired:
            return False
        except OSError as exc:
            log("WARN", f"adb wait-for-device failed: {exc}")
            return False
        return result.returncode == 0

    def getprop(self, name: str) -> str:
        """Return a system property, or an empty string when it cannot be read yet."""
        try:
            result = run(
                self._cmd("shell", "getprop", name),
                check=False,
                capture_output=True,
                timeout=self.timeout,
            )
        except (subprocess.TimeoutExpired, OSError) as exc:
            log("DEBUG", f"getprop {name} failed: {exc}")
            return ""
        if result.returncode != 0:
            log("DEBUG", f"getprop {name} exited with {result.returncode}: {(result.stderr or '').strip()}")
            return ""
        return (result.stdout or "").strip()

    def shell(self, *args: str) -> subprocess.CompletedProcess:
        return run(self._cmd("shell", *args), capture_output=True, timeout=self.timeout)

    def settings_put(self, namespace: str, key: str, value: str) -> subprocess.CompletedProcess:
        return self.shell("settings", "put", namespace, key, value)

    def emu_kill(self) -> bool:
        """Ask the emulator console to shut down; True when the request was accepted."""
        try:
            result = run(self._cmd("emu", "kill"), check=False, capture_output=True, timeout=self.timeout)
        except (subprocess.TimeoutExpired, OSError) as exc:
            log("WARN", f"adb emu kill failed: {exc}")
            return False
        return result.returncode == 0

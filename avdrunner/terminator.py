"""Emulator shutdown and process ownership for avd-runner."""

from __future__ import annotations

import os
import signal
import subprocess
from typing import Callable, Optional

from avdrunner.adb import AdbBridge
from avdrunner.constants import SHUTDOWN_GRACE_SECONDS
from avdrunner.models import DeviceProfile, EmulatorProcess, LaunchSpec
from avdrunner.utils import log


class ProcessTerminator:
    """Stop an emulator: console kill first, SIGKILL to its session after a grace period."""

    def __init__(
        self,
        bridge_factory: Callable[[str], AdbBridge] = AdbBridge,
        grace_period: float = SHUTDOWN_GRACE_SECONDS,
    ) -> None:
        self.bridge_factory = bridge_factory
        self.grace_period = grace_period

    def terminate(self, process: Optional[EmulatorProcess]) -> None:
        if process is None or process.released:
            return
        try:
            if not process.is_alive():
                log("DEBUG", f"Emulator {process.serial} already exited (code {process.returncode})")
                return
            log("INFO", f"Killing emulator {process.serial}")
            if not self.bridge_factory(process.serial).emu_kill():
                log("WARN", f"Emulator {process.serial} did not accept the kill request")
            try:
                process.popen.wait(timeout=self.grace_period)
            except subprocess.TimeoutExpired:
                log("WARN", f"Emulator still running after {self.grace_period:g}s; sending SIGKILL")
                self._force_kill(process)
            else:
                log("INFO", f"Emulator {process.serial} stopped")
        finally:
            process.released = True

    def _force_kill(self, process: EmulatorProcess) -> None:
        try:
            # The launcher starts the emulator as a session leader, so its
            # qemu children share the process group id.
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
        except OSError:
            try:
                process.popen.kill()
            except OSError:
                pass
        try:
            process.popen.wait(timeout=5)
        except subprocess.TimeoutExpired:
            log("ERROR", f"Emulator PID {process.pid} survived SIGKILL")


class EmulatorSession:
    """Scoped ownership of at most one emulator process.

    The process is acquired through :meth:`launch` and released by the
    terminator exactly once when the ``with`` block exits, whatever the
    outcome inside it.
    """

    def __init__(self, launcher, terminator: ProcessTerminator) -> None:
        self.launcher = launcher
        self.terminator = terminator
        self.process: Optional[EmulatorProcess] = None
        self._closed = False

    def __enter__(self) -> "EmulatorSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    @property
    def owned_processes(self) -> int:
        if self.process is None or self.process.released:
            return 0
        return 1

    def launch(self, profile: DeviceProfile, spec: LaunchSpec) -> EmulatorProcess:
        if self._closed:
            raise RuntimeError("EmulatorSession is closed")
        if self.process is not None:
            raise RuntimeError(f"EmulatorSession already owns {self.process.serial}")
        self.process = self.launcher.launch(profile, spec)
        return self.process

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.terminator.terminate(self.process)

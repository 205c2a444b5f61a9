"""Boot monitoring for a freshly launched emulator.

The monitor walks ``NOT_STARTED -> AWAITING_DEVICE -> AWAITING_BOOT_COMPLETE
-> READY``. Either waiting state can end in ``TIMED_OUT`` when the overall
budget is spent, or in ``CRASHED`` when the emulator process exits. Process
liveness is checked before every bridge call so a dead emulator fails fast
instead of burning the remaining budget.

The monitor only queries the process; it never stops it.
"""

from __future__ import annotations

import time
from typing import Callable

from avdrunner.constants import (
    BOOT_COMPLETED_PROPERTY,
    BOOT_COMPLETED_VALUE,
    BOOT_POLL_INTERVAL_SECONDS,
    BOOT_TIMEOUT_SECONDS,
    WAIT_FOR_DEVICE_ATTEMPTS,
    WAIT_FOR_DEVICE_TIMEOUT_SECONDS,
)
from avdrunner.exceptions import BootError
from avdrunner.models import BootState, EmulatorProcess
from avdrunner.utils import log, tail_file


class BootMonitor:
    def __init__(
        self,
        bridge,
        budget: float = BOOT_TIMEOUT_SECONDS,
        interval: float = BOOT_POLL_INTERVAL_SECONDS,
        device_attempts: int = WAIT_FOR_DEVICE_ATTEMPTS,
        device_timeout: float = WAIT_FOR_DEVICE_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.bridge = bridge
        self.budget = budget
        self.interval = interval
        self.device_attempts = device_attempts
        self.device_timeout = device_timeout
        self.clock = clock
        self.sleep = sleep
        self.state = BootState.NOT_STARTED
        self.polls = 0
        self.elapsed = 0.0
        self._started_at = 0.0

    def _transition(self, state: BootState) -> None:
        log("DEBUG", f"Boot state: {self.state.name} -> {state.name}")
        self.state = state

    def _remaining(self) -> float:
        return self.budget - (self.clock() - self._started_at)

    def _check_alive(self, process: EmulatorProcess) -> None:
        if process.is_alive():
            return
        self.elapsed = self.clock() - self._started_at
        self._transition(BootState.CRASHED)
        output = tail_file(process.log_path)
        if output:
            log("ERROR", f"Last emulator output:\n{output}")
        raise BootError(
            f"Emulator process exited with code {process.returncode} before boot completed",
            BootState.CRASHED,
        )

    def _timed_out(self, detail: str) -> BootError:
        self.elapsed = self.clock() - self._started_at
        self._transition(BootState.TIMED_OUT)
        return BootError(f"Timeout waiting for emulator to boot after {self.budget:g}s: {detail}", BootState.TIMED_OUT)

    def await_ready(self, process: EmulatorProcess) -> None:
        """Block until the emulator reports boot completion; raise :class:`BootError` otherwise."""
        if self.state is not BootState.NOT_STARTED:
            raise RuntimeError(f"BootMonitor already used (state {self.state.name})")
        self._started_at = self.clock()
        log("INFO", f"Waiting for emulator {process.serial} to boot (timeout {self.budget:g}s)")

        self._transition(BootState.AWAITING_DEVICE)
        self._await_device(process)

        self._transition(BootState.AWAITING_BOOT_COMPLETE)
        self._await_boot_complete(process)

        self.elapsed = self.clock() - self._started_at
        self._transition(BootState.READY)
        log("SUCCESS", f"Emulator booted ({self.elapsed:.0f}s)")

    def _await_device(self, process: EmulatorProcess) -> None:
        for attempt in range(1, self.device_attempts + 1):
            self._check_alive(process)
            remaining = self._remaining()
            if remaining <= 0:
                raise self._timed_out("device never registered with adb")
            if self.bridge.wait_for_device(timeout=min(self.device_timeout, remaining)):
                log("INFO", f"Device {process.serial} is online")
                return
            log("WARN", f"Device {process.serial} not online yet (attempt {attempt}/{self.device_attempts})")
        self._check_alive(process)
        raise self._timed_out(f"device not online after {self.device_attempts} attempts")

    def _await_boot_complete(self, process: EmulatorProcess) -> None:
        while True:
            self._check_alive(process)
            self.polls += 1
            value = self.bridge.getprop(BOOT_COMPLETED_PROPERTY)
            if value == BOOT_COMPLETED_VALUE:
                return
            remaining = self._remaining()
            if remaining <= 0:
                raise self._timed_out(f"{BOOT_COMPLETED_PROPERTY} never became {BOOT_COMPLETED_VALUE}")
            self.sleep(min(self.interval, remaining))

"""End-to-end emulator lifecycle for avd-runner."""

from __future__ import annotations

import signal
from dataclasses import dataclass
from typing import Callable, Optional

from avdrunner.adb import AdbBridge
from avdrunner.avd import AvdProvisioner
from avdrunner.boot import BootMonitor
from avdrunner.configurator import RuntimeConfigurator, RuntimeOptions
from avdrunner.environment import Environment
from avdrunner.exceptions import ConfigError
from avdrunner.launcher import EmulatorLauncher, build_launch_spec
from avdrunner.models import BootState, RunnerConfig
from avdrunner.terminator import EmulatorSession, ProcessTerminator
from avdrunner.utils import log


def _request_shutdown(signum, frame):
    log("INFO", f"{signal.Signals(signum).name} received, shutting down emulator")
    raise SystemExit(128 + signum)


@dataclass
class LifecycleResult:
    boot_state: BootState
    owned_processes: int
    config_error: Optional[ConfigError] = None


class LifecycleManager:
    """Provision, launch, boot and configure an emulator, then always tear it down."""

    def __init__(
        self,
        cfg: RunnerConfig,
        environment: Environment,
        provisioner: Optional[AvdProvisioner] = None,
        launcher: Optional[EmulatorLauncher] = None,
        terminator: Optional[ProcessTerminator] = None,
        bridge_factory: Callable[[str], AdbBridge] = AdbBridge,
        monitor_factory: Callable[..., BootMonitor] = BootMonitor,
    ) -> None:
        self.cfg = cfg
        self.environment = environment
        self.provisioner = provisioner or AvdProvisioner()
        self.launcher = launcher or EmulatorLauncher()
        self.terminator = terminator or ProcessTerminator(bridge_factory=bridge_factory)
        self.bridge_factory = bridge_factory
        self.monitor_factory = monitor_factory
        self.configurator = RuntimeConfigurator(environment, RuntimeOptions.from_config(cfg))
        self.session: Optional[EmulatorSession] = None
        self.monitor: Optional[BootMonitor] = None

    def run(self, on_ready: Optional[Callable[[], None]] = None) -> LifecycleResult:
        """Run the lifecycle; ``on_ready`` runs once the emulator is booted and configured.

        Any exception from provisioning, launch, boot or ``on_ready``
        propagates after the emulator has been terminated. Post-boot
        configuration failures are logged and recorded on the result.
        SIGTERM is turned into ``SystemExit`` while the run is in progress so
        a cancelled job still terminates the emulator.
        """
        prev_sigterm = signal.signal(signal.SIGTERM, _request_shutdown)
        try:
            return self._run(on_ready)
        finally:
            signal.signal(signal.SIGTERM, prev_sigterm)

    def _run(self, on_ready: Optional[Callable[[], None]]) -> LifecycleResult:
        profile = self.cfg.device_profile()
        config_error: Optional[ConfigError] = None

        with EmulatorSession(self.launcher, self.terminator) as session:
            self.session = session
            self.provisioner.provision(profile)
            extra_options = self.configurator.configure_pre_boot(self.provisioner.config_path(profile))
            spec = build_launch_spec(self.cfg.emulator_options, self.cfg.emulator_port, extra_options)

            process = session.launch(profile, spec)
            bridge = self.bridge_factory(process.serial)
            self.monitor = self.monitor_factory(bridge, budget=self.cfg.boot_timeout)
            self.monitor.await_ready(process)

            try:
                self.configurator.configure_post_boot(bridge)
            except ConfigError as exc:
                log("WARN", f"{exc}; continuing")
                config_error = exc

            if on_ready is not None:
                on_ready()

        return LifecycleResult(
            boot_state=self.monitor.state,
            owned_processes=session.owned_processes,
            config_error=config_error,
        )


def run_lifecycle(
    cfg: RunnerConfig,
    environment: Environment,
    on_ready: Optional[Callable[[], None]] = None,
) -> LifecycleResult:
    return LifecycleManager(cfg, environment).run(on_ready)

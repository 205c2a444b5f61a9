"""Pre-boot and post-boot emulator configuration for avd-runner."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Tuple

from avdrunner.constants import ACCEL_OFF_OPTIONS
from avdrunner.environment import Environment
from avdrunner.exceptions import ConfigError
from avdrunner.models import RunnerConfig
from avdrunner.utils import log, update_ini


@dataclass(frozen=True)
class RuntimeOptions:
    disable_animations: bool = True
    disable_spellchecker: bool = False
    disable_linux_hw_accel: bool = True
    enable_hw_keyboard: bool = False

    @classmethod
    def from_config(cls, cfg: RunnerConfig) -> "RuntimeOptions":
        return cls(
            disable_animations=cfg.disable_animations,
            disable_spellchecker=cfg.disable_spellchecker,
            disable_linux_hw_accel=cfg.disable_linux_hw_accel,
            enable_hw_keyboard=cfg.enable_hw_keyboard,
        )


class RuntimeConfigurator:
    def __init__(self, environment: Environment, options: RuntimeOptions) -> None:
        self.environment = environment
        self.options = options

    def configure_pre_boot(self, config_path: Path) -> List[str]:
        """Edit the AVD config before launch; return extra emulator options."""
        if self.options.enable_hw_keyboard:
            update_ini(config_path, {"hw.keyboard": "yes"})
            log("INFO", "Hardware keyboard enabled")

        extra: List[str] = []
        if self.options.disable_linux_hw_accel and self.environment.degraded:
            log("INFO", "Disabling hardware acceleration on Linux host")
            extra.extend(ACCEL_OFF_OPTIONS)
        return extra

    def _post_boot_steps(self, bridge) -> List[Tuple[str, Callable[[], object]]]:
        steps: List[Tuple[str, Callable[[], object]]] = [
            ("unlock screen", lambda: bridge.shell("input", "keyevent", "82")),
        ]
        if self.options.disable_animations:
            for key in ("window_animation_scale", "transition_animation_scale", "animator_duration_scale"):
                steps.append((key, lambda key=key: bridge.settings_put("global", key, "0.0")))
        if self.options.disable_spellchecker:
            steps.append(("spell_checker_enabled", lambda: bridge.settings_put("secure", "spell_checker_enabled", "0")))
        if self.options.enable_hw_keyboard:
            steps.append(
                ("show_ime_with_hard_keyboard", lambda: bridge.settings_put("secure", "show_ime_with_hard_keyboard", "0"))
            )
        return steps

    def configure_post_boot(self, bridge) -> None:
        """Apply runtime settings; every step is attempted, failures are reported together."""
        failed: List[str] = []
        for name, step in self._post_boot_steps(bridge):
            try:
                step()
            except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as exc:
                log("WARN", f"Failed to apply {name}: {exc}")
                failed.append(name)
            else:
                log("DEBUG", f"Applied {name}")
        if failed:
            raise ConfigError(f"Failed to apply runtime settings: {', '.join(failed)}", failed)
        log("INFO", "Runtime settings applied")

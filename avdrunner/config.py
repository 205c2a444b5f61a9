"""Configuration loading and environment variable parsing for avd-runner."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import yaml  # type: ignore
except ImportError as exc:  # pragma: no cover
    raise SystemExit("PyYAML is required but not installed") from exc

from avdrunner.channels import get_channel_id
from avdrunner.constants import BOOT_TIMEOUT_SECONDS, DEFAULT_EMULATOR_PORT, TARGET_ALIASES
from avdrunner.exceptions import ValidationError
from avdrunner.models import RunnerConfig
from avdrunner.script import parse_script
from avdrunner.utils import get_env
from avdrunner.validator import (
    check_api_level,
    check_arch,
    check_boolean_input,
    check_channel,
    check_disk_size,
    check_emulator_build,
    check_port,
    check_target,
)

CONFIG_FILE_ENV = "AVD_RUNNER_CONFIG"


def load_config_file(config_path: Optional[Path] = None) -> Dict[str, str]:
    """Read input defaults from a YAML mapping keyed by dashed input names."""
    if config_path is None:
        raw_path = get_env(CONFIG_FILE_ENV)
        if not raw_path:
            return {}
        config_path = Path(raw_path)
    if not config_path.exists():
        raise ValidationError(f"Config file missing: {config_path}")
    try:
        data = yaml.safe_load(config_path.read_text())
    except yaml.YAMLError as exc:
        raise ValidationError(f"Config file {config_path} contains invalid YAML: {exc}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"Config file {config_path} must contain a mapping, got {type(data).__name__}")
    return {str(key): _stringify(value) for key, value in data.items()}


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def _env_name(input_name: str) -> str:
    return input_name.upper().replace("-", "_")


def parse_env(config_path: Optional[Path] = None) -> RunnerConfig:
    file_values = load_config_file(config_path)

    def get_input(name: str, default: str = "", required: bool = False) -> str:
        value = os.environ.get(_env_name(name))
        if value is None:
            value = file_values.get(name)
        if value is None or (required and not value.strip()):
            if required:
                raise ValidationError(f"Input required and not supplied: {name} (set {_env_name(name)})")
            value = default
        return value

    def get_bool_input(name: str, default: str) -> bool:
        raw = get_input(name, default).strip()
        check_boolean_input(name, raw)
        return raw == "true"

    api_level_raw = get_input("api-level", required=True).strip()
    check_api_level(api_level_raw)
    api_level = int(api_level_raw)

    target_raw = get_input("target", "default").strip()
    target = TARGET_ALIASES.get(target_raw, target_raw)
    check_target(target)

    arch = get_input("arch", "x86").strip()
    check_arch(arch)

    disk_size = get_input("disk-size").strip()
    check_disk_size(disk_size)

    port_raw = get_input("emulator-port", str(DEFAULT_EMULATOR_PORT)).strip()
    check_port(port_raw)

    timeout_raw = get_input("emulator-boot-timeout", str(BOOT_TIMEOUT_SECONDS)).strip()
    try:
        boot_timeout = int(timeout_raw)
    except ValueError:
        raise ValidationError(f"emulator-boot-timeout must be an integer (got '{timeout_raw}')")
    if boot_timeout < 1:
        raise ValidationError(f"emulator-boot-timeout must be >= 1 (got {boot_timeout})")

    emulator_build = get_input("emulator-build").strip() or None
    if emulator_build is not None:
        check_emulator_build(emulator_build)

    channel = get_input("channel", "stable").strip()
    check_channel(channel)

    scripts = parse_script(get_input("script", required=True))

    return RunnerConfig(
        api_level=api_level,
        target=target,
        arch=arch,
        profile=get_input("profile").strip(),
        cores=get_input("cores", "2").strip(),
        ram_size=get_input("ram-size").strip(),
        heap_size=get_input("heap-size").strip(),
        sdcard_path_or_size=get_input("sdcard-path-or-size").strip(),
        disk_size=disk_size,
        avd_name=get_input("avd-name", "test").strip() or "test",
        force_avd_creation=get_bool_input("force-avd-creation", "true"),
        emulator_options=get_input("emulator-options").strip(),
        emulator_port=int(port_raw),
        boot_timeout=boot_timeout,
        disable_animations=get_bool_input("disable-animations", "true"),
        disable_spellchecker=get_bool_input("disable-spellchecker", "false"),
        disable_linux_hw_accel=get_bool_input("disable-linux-hw-accel", "true"),
        enable_hw_keyboard=get_bool_input("enable-hw-keyboard", "false"),
        emulator_build=emulator_build,
        working_directory=get_input("working-directory").strip() or None,
        ndk_version=get_input("ndk").strip() or None,
        cmake_version=get_input("cmake").strip() or None,
        channel=channel,
        channel_id=get_channel_id(channel),
        scripts=scripts,
    )

"""CLI entry points for avd-runner."""

from __future__ import annotations

import argparse
import dataclasses
from typing import List, Optional

from avdrunner.config import parse_env
from avdrunner.constants import ANDROID_AVD_HOME, ANDROID_SDK_ROOT
from avdrunner.environment import Environment, detect_environment
from avdrunner.exceptions import RunnerError
from avdrunner.lifecycle import run_lifecycle
from avdrunner.models import RunnerConfig
from avdrunner.script import log_script, run_scripts
from avdrunner.sdk import install_android_sdk
from avdrunner.utils import log


def show_config(cfg: RunnerConfig) -> None:
    """Print the resolved configuration."""
    for field in dataclasses.fields(cfg):
        value = getattr(cfg, field.name)
        if field.name == "scripts":
            print(f"  {field.name}:")
            for command in value:
                print(f"    - {command}")
        else:
            print(f"  {field.name}: {value}")


def log_config(cfg: RunnerConfig, environment: Environment) -> None:
    log("INFO", f"Host: {environment.platform.value} | KVM: {'available' if environment.kvm else 'not available'}")
    log("INFO", f"API level: {cfg.api_level} | Target: {cfg.target} | Arch: {cfg.arch}")
    log("INFO", f"AVD: {cfg.avd_name} (force creation: {str(cfg.force_avd_creation).lower()})")
    hardware = [
        f"Profile: {cfg.profile or '<default>'}",
        f"Cores: {cfg.cores or '<default>'}",
        f"RAM: {cfg.ram_size or '<default>'}",
    ]
    if cfg.heap_size:
        hardware.append(f"Heap: {cfg.heap_size}")
    if cfg.sdcard_path_or_size:
        hardware.append(f"SD card: {cfg.sdcard_path_or_size}")
    if cfg.disk_size:
        hardware.append(f"Disk: {cfg.disk_size}")
    log("INFO", " | ".join(hardware))
    log("INFO", f"Emulator options: {cfg.emulator_options or '<default>'} | Port: {cfg.emulator_port}")
    log("INFO", f"Boot timeout: {cfg.boot_timeout}s")
    log("INFO", f"Channel: {cfg.channel_id} ({cfg.channel})")
    if cfg.emulator_build:
        log("INFO", f"Emulator build: {cfg.emulator_build}")
    if cfg.ndk_version:
        log("INFO", f"NDK: {cfg.ndk_version}")
    if cfg.cmake_version:
        log("INFO", f"CMake: {cfg.cmake_version}")
    if cfg.working_directory:
        log("INFO", f"Working directory: {cfg.working_directory}")
    log_script(cfg.scripts)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Run a script against a freshly booted Android emulator")
    parser.add_argument("--show-config", action="store_true", help="Show resolved configuration and exit")
    parser.add_argument("--dry-run", action="store_true", help="Validate config and environment, then exit")
    parser.add_argument("--skip-install", action="store_true", help="Assume SDK packages are already installed")
    args = parser.parse_args(argv)

    try:
        cfg = parse_env()
    except RunnerError as exc:
        log("ERROR", str(exc))
        return 1

    if args.show_config:
        show_config(cfg)
        return 0

    environment = detect_environment()
    if not environment.supported:
        log("ERROR", "Unsupported host: please use either a macOS or Linux host.")
        return 1

    log_config(cfg, environment)

    if args.dry_run:
        log("INFO", f"SDK root:  {ANDROID_SDK_ROOT}")
        log("INFO", f"AVD home:  {ANDROID_AVD_HOME}")
        log("INFO", "=== Dry-run complete (no emulator started) ===")
        return 0

    try:
        if not args.skip_install:
            install_android_sdk(
                cfg.api_level,
                cfg.target,
                cfg.arch,
                cfg.channel_id,
                cfg.emulator_build,
                cfg.ndk_version,
                cfg.cmake_version,
            )
        result = run_lifecycle(
            cfg,
            environment,
            on_ready=lambda: run_scripts(cfg.scripts, cfg.working_directory),
        )
        if result.config_error is not None:
            log("WARN", "Script completed, but some runtime settings were not applied")
        log("SUCCESS", "Script completed; emulator shut down")
        return 0
    except RunnerError as exc:
        log("ERROR", str(exc))
        return 1
    except Exception as exc:
        log("ERROR", f"Unexpected error: {exc}")
        import traceback

        traceback.print_exc()
        return 1

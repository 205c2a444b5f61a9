"""Global constants and path configuration for avd-runner."""

from __future__ import annotations

import os
from pathlib import Path

# ANDROID_SDK_ROOT wins over ANDROID_HOME, matching the SDK tools themselves.
ANDROID_SDK_ROOT = Path(
    os.environ.get("ANDROID_SDK_ROOT") or os.environ.get("ANDROID_HOME") or str(Path.home() / "Android" / "Sdk")
)
ANDROID_AVD_HOME = Path(os.environ.get("ANDROID_AVD_HOME") or str(Path.home() / ".android" / "avd"))

STATE_DIR = Path(os.environ.get("AVD_RUNNER_STATE_DIR") or str(Path.home() / ".avd-runner"))
LOG_DIR = Path(os.environ.get("AVD_RUNNER_LOG_DIR") or str(STATE_DIR / "logs"))

TRUTHY = {"1", "true", "yes", "on"}

MIN_API_LEVEL = 15
MAX_API_LEVEL = 35

SUPPORTED_TARGETS = (
    "default",
    "google_apis",
    "google_apis_playstore",
    "aosp_atd",
    "google_atd",
    "android-wear",
    "android-wear-cn",
    "android-tv",
    "google-tv",
)
TARGET_ALIASES = {"playstore": "google_apis_playstore"}

SUPPORTED_ARCHES = ("x86", "x86_64", "arm64-v8a")

# Ordered from most to least mature; position is the sdkmanager channel id.
CHANNELS = ("stable", "beta", "dev", "canary")

BUILD_TOOLS_VERSION = "34.0.0"
EMULATOR_BUILD_URL = "https://dl.google.com/android/repository/emulator-{os}_x64-{build}.zip"

DEFAULT_EMULATOR_PORT = 5554
MIN_EMULATOR_PORT = 5554
MAX_EMULATOR_PORT = 5584

DEFAULT_EMULATOR_OPTIONS = (
    "-no-window",
    "-gpu",
    "swiftshader_indirect",
    "-no-snapshot",
    "-noaudio",
    "-no-boot-anim",
)
ACCEL_OFF_OPTIONS = ("-accel", "off")

# Boot monitor
BOOT_TIMEOUT_SECONDS = 600
BOOT_POLL_INTERVAL_SECONDS = 2.0
WAIT_FOR_DEVICE_ATTEMPTS = 5
WAIT_FOR_DEVICE_TIMEOUT_SECONDS = 30.0
BOOT_COMPLETED_PROPERTY = "sys.boot_completed"
BOOT_COMPLETED_VALUE = "1"

# Terminator
SHUTDOWN_GRACE_SECONDS = 10.0

ADB_COMMAND_TIMEOUT_SECONDS = 30.0

_LOG_VERBOSE = os.environ.get("LOG_VERBOSE", "").lower() in TRUTHY

DISK_SIZE_SUFFIXES = ("K", "M", "G", "T")

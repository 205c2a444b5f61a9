"""Input validation for avd-runner.

Every check is a pure function that raises :class:`ValidationError` with a
message naming the offending input. Nothing here touches the host.
"""

from __future__ import annotations

import re

from avdrunner.constants import (
    CHANNELS,
    DISK_SIZE_SUFFIXES,
    MAX_API_LEVEL,
    MAX_EMULATOR_PORT,
    MIN_API_LEVEL,
    MIN_EMULATOR_PORT,
    SUPPORTED_ARCHES,
    SUPPORTED_TARGETS,
)
from avdrunner.exceptions import ValidationError

_DISK_SIZE_RE = re.compile(r"^\d+[" + "".join(DISK_SIZE_SUFFIXES) + r"]?$", re.IGNORECASE)


def check_api_level(api_level: str) -> None:
    try:
        value = int(str(api_level).strip())
    except ValueError:
        raise ValidationError(f"Unexpected API level: '{api_level}'.")
    if value < MIN_API_LEVEL:
        raise ValidationError(f"Minimum API level supported is {MIN_API_LEVEL} (got {value}).")
    if value > MAX_API_LEVEL:
        raise ValidationError(f"Maximum API level supported is {MAX_API_LEVEL} (got {value}).")


def check_target(target: str) -> None:
    if target not in SUPPORTED_TARGETS:
        raise ValidationError(
            f"Value for input.target '{target}' is unknown. Supported options: {list(SUPPORTED_TARGETS)}"
        )


def check_arch(arch: str) -> None:
    if arch not in SUPPORTED_ARCHES:
        raise ValidationError(
            f"Value for input.arch '{arch}' is unknown. Supported options: {list(SUPPORTED_ARCHES)}"
        )


def check_channel(channel: str) -> None:
    if channel not in CHANNELS:
        raise ValidationError(
            f"Value for input.channel '{channel}' is unknown. Supported options: {list(CHANNELS)}"
        )


def check_boolean_input(name: str, value: str) -> None:
    if value not in ("true", "false"):
        raise ValidationError(f"Input for input.{name} should be either 'true' or 'false' (got '{value}').")


def check_emulator_build(build: str) -> None:
    if not build.isdigit():
        raise ValidationError(f"Unexpected emulator build: '{build}'.")


def check_port(port: str) -> None:
    try:
        value = int(port)
    except ValueError:
        raise ValidationError(f"Emulator port must be an integer (got '{port}').")
    if value < MIN_EMULATOR_PORT or value > MAX_EMULATOR_PORT:
        raise ValidationError(
            f"Emulator port is outside of the supported port range [{MIN_EMULATOR_PORT}, {MAX_EMULATOR_PORT}]."
        )
    if value % 2 == 1:
        raise ValidationError("Emulator port has to be even.")


def check_disk_size(disk_size: str) -> None:
    if disk_size and not _DISK_SIZE_RE.match(disk_size):
        raise ValidationError(
            f"Unexpected disk size: '{disk_size}'. Use a number with optional suffix: K, M, G, T (e.g. '2048M')"
        )

"""Tests for avdrunner.validator."""

from __future__ import annotations

import pytest

from avdrunner.constants import MAX_API_LEVEL, MIN_API_LEVEL
from avdrunner.exceptions import ValidationError
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


class TestApiLevel:
    @pytest.mark.parametrize("level", [MIN_API_LEVEL, 21, 29, MAX_API_LEVEL])
    def test_accepts_supported_range(self, level):
        check_api_level(str(level))

    @pytest.mark.parametrize("level", [0, 14, MIN_API_LEVEL - 1])
    def test_rejects_below_minimum(self, level):
        with pytest.raises(ValidationError, match="Minimum API level"):
            check_api_level(str(level))

    @pytest.mark.parametrize("level", [MAX_API_LEVEL + 1, 99])
    def test_rejects_above_maximum(self, level):
        with pytest.raises(ValidationError, match="Maximum API level"):
            check_api_level(str(level))

    @pytest.mark.parametrize("value", ["", "twenty-nine", "29.5"])
    def test_rejects_non_numeric(self, value):
        with pytest.raises(ValidationError, match="Unexpected API level"):
            check_api_level(value)


class TestEnumerations:
    @pytest.mark.parametrize("target", ["default", "google_apis", "google_apis_playstore", "aosp_atd"])
    def test_valid_targets(self, target):
        check_target(target)

    def test_invalid_target(self):
        with pytest.raises(ValidationError, match="input.target 'some-target' is unknown"):
            check_target("some-target")

    @pytest.mark.parametrize("arch", ["x86", "x86_64", "arm64-v8a"])
    def test_valid_arches(self, arch):
        check_arch(arch)

    def test_invalid_arch(self):
        with pytest.raises(ValidationError, match="input.arch 'mips' is unknown"):
            check_arch("mips")

    @pytest.mark.parametrize("channel", ["stable", "beta", "dev", "canary"])
    def test_valid_channels(self, channel):
        check_channel(channel)

    def test_invalid_channel(self):
        with pytest.raises(ValidationError, match="input.channel 'nightly' is unknown"):
            check_channel("nightly")


class TestBooleanInput:
    @pytest.mark.parametrize("value", ["true", "false"])
    def test_valid(self, value):
        check_boolean_input("disable-animations", value)

    @pytest.mark.parametrize("value", ["yes", "1", "True", ""])
    def test_invalid(self, value):
        with pytest.raises(ValidationError, match="input.disable-animations should be either 'true' or 'false'"):
            check_boolean_input("disable-animations", value)


class TestMisc:
    def test_emulator_build(self):
        check_emulator_build("6061023")
        with pytest.raises(ValidationError, match="Unexpected emulator build"):
            check_emulator_build("abc123")

    @pytest.mark.parametrize("port", ["5554", "5556", "5584"])
    def test_valid_port(self, port):
        check_port(port)

    def test_odd_port(self):
        with pytest.raises(ValidationError, match="has to be even"):
            check_port("5555")

    @pytest.mark.parametrize("port", ["5552", "5586"])
    def test_port_out_of_range(self, port):
        with pytest.raises(ValidationError, match="outside of the supported port range"):
            check_port(port)

    @pytest.mark.parametrize("size", ["", "2048", "2048M", "8g"])
    def test_valid_disk_size(self, size):
        check_disk_size(size)

    def test_invalid_disk_size(self):
        with pytest.raises(ValidationError, match="Unexpected disk size"):
            check_disk_size("lots")

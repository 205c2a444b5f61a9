"""Shared test fixtures: configuration, environment, and fakes for the emulator toolchain."""

from __future__ import annotations

import subprocess

import pytest

from avdrunner.environment import Environment, Platform
from avdrunner.models import EmulatorProcess, RunnerConfig


class FakeClock:
    """Monotonic clock whose time only moves when ``sleep`` is called."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakePopen:
    """Stands in for subprocess.Popen; reports alive for ``exit_after`` polls."""

    def __init__(self, exit_after=None, returncode=1, exits_on_wait=True):
        self.pid = 4242
        self.exit_after = exit_after
        self.final_returncode = returncode
        self.exits_on_wait = exits_on_wait
        self.polls = 0
        self.killed = False
        self.wait_calls = []
        self._returncode = None

    def poll(self):
        if self._returncode is None and self.exit_after is not None and self.polls >= self.exit_after:
            self._returncode = self.final_returncode
        self.polls += 1
        return self._returncode

    def wait(self, timeout=None):
        self.wait_calls.append(timeout)
        if self._returncode is None:
            if not self.exits_on_wait:
                raise subprocess.TimeoutExpired("emulator", timeout)
            self._returncode = 0
        return self._returncode

    def kill(self):
        self.killed = True
        self._returncode = -9


class FakeBridge:
    """Scripted adb bridge. The last entry of each script repeats forever."""

    def __init__(self, props=("1",), device_results=(True,), failing=()):
        self.props = list(props)
        self.device_results = list(device_results)
        self.failing = set(failing)
        self.wait_calls = []
        self.getprop_calls = 0
        self.shell_calls = []
        self.settings = []
        self.kill_calls = 0

    def wait_for_device(self, timeout):
        self.wait_calls.append(timeout)
        if len(self.device_results) > 1:
            return self.device_results.pop(0)
        return self.device_results[0]

    def getprop(self, name):
        self.getprop_calls += 1
        if len(self.props) > 1:
            return self.props.pop(0)
        return self.props[0]

    def shell(self, *args):
        self.shell_calls.append(args)
        return subprocess.CompletedProcess(list(args), 0, "", "")

    def settings_put(self, namespace, key, value):
        if key in self.failing:
            raise subprocess.CalledProcessError(255, ["adb", "shell", "settings", "put", namespace, key, value])
        self.settings.append((namespace, key, value))
        return subprocess.CompletedProcess([namespace, key, value], 0, "", "")

    def emu_kill(self):
        self.kill_calls += 1
        return True


class FakeLauncher:
    def __init__(self, tmp_path, popen_factory=FakePopen):
        self.tmp_path = tmp_path
        self.popen_factory = popen_factory
        self.launches = []

    def launch(self, profile, spec):
        self.launches.append((profile, spec))
        return EmulatorProcess(popen=self.popen_factory(), serial=spec.serial, log_path=self.tmp_path / "emu.log")


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_bridge():
    return FakeBridge


@pytest.fixture
def make_popen():
    return FakePopen


@pytest.fixture
def make_process(tmp_path):
    def _make(**popen_kwargs) -> EmulatorProcess:
        return EmulatorProcess(
            popen=FakePopen(**popen_kwargs),
            serial="emulator-5554",
            log_path=tmp_path / "emulator-5554.log",
        )

    return _make


@pytest.fixture
def fake_launcher(tmp_path) -> FakeLauncher:
    return FakeLauncher(tmp_path)


@pytest.fixture
def preferred_env() -> Environment:
    return Environment(platform=Platform.PREFERRED)


@pytest.fixture
def degraded_env() -> Environment:
    return Environment(platform=Platform.DEGRADED, kvm=True)


@pytest.fixture
def default_config() -> RunnerConfig:
    """Return a RunnerConfig matching the documented defaults."""
    return RunnerConfig(
        api_level=29,
        target="default",
        arch="x86_64",
        profile="",
        cores="2",
        ram_size="",
        heap_size="",
        sdcard_path_or_size="",
        disk_size="",
        avd_name="test",
        force_avd_creation=True,
        emulator_options="",
        emulator_port=5554,
        boot_timeout=600,
        disable_animations=True,
        disable_spellchecker=True,
        disable_linux_hw_accel=True,
        enable_hw_keyboard=False,
        emulator_build=None,
        working_directory=None,
        ndk_version=None,
        cmake_version=None,
        channel="stable",
        channel_id=0,
        scripts=["./gradlew connectedCheck"],
    )


@pytest.fixture
def mock_env(monkeypatch):
    """Helper to set environment variables for tests."""

    def _set(**kwargs):
        for key, value in kwargs.items():
            if value is None:
                monkeypatch.delenv(key, raising=False)
            else:
                monkeypatch.setenv(key, str(value))

    return _set


# All environment variables that parse_env() reads, used to ensure a clean slate.
_PARSE_ENV_VARS = [
    "AVD_RUNNER_CONFIG",
    "API_LEVEL",
    "TARGET",
    "ARCH",
    "PROFILE",
    "CORES",
    "RAM_SIZE",
    "HEAP_SIZE",
    "SDCARD_PATH_OR_SIZE",
    "DISK_SIZE",
    "AVD_NAME",
    "FORCE_AVD_CREATION",
    "EMULATOR_OPTIONS",
    "EMULATOR_PORT",
    "EMULATOR_BOOT_TIMEOUT",
    "DISABLE_ANIMATIONS",
    "DISABLE_SPELLCHECKER",
    "DISABLE_LINUX_HW_ACCEL",
    "ENABLE_HW_KEYBOARD",
    "EMULATOR_BUILD",
    "WORKING_DIRECTORY",
    "NDK",
    "CMAKE",
    "CHANNEL",
    "SCRIPT",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Clear all environment variables that parse_env() reads, then set the required inputs."""
    for key in _PARSE_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("API_LEVEL", "29")
    monkeypatch.setenv("SCRIPT", "./gradlew connectedCheck")

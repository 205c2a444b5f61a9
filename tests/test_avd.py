"""Tests for avdrunner.avd."""

from __future__ import annotations

import subprocess
from unittest.mock import patch

import pytest

from avdrunner.avd import AvdProvisioner
from avdrunner.exceptions import ProvisioningError
from avdrunner.models import DeviceProfile


def _profile(**overrides):
    values = dict(name="test", api_level=29, target="default", arch="x86_64")
    values.update(overrides)
    return DeviceProfile(**values)


def _completed(cmd, returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(cmd, returncode, stdout, stderr)


@pytest.fixture
def provisioner(tmp_path):
    return AvdProvisioner(avd_home=tmp_path / "avd", avdmanager="avdmanager")


class TestProvision:
    def test_creates_new_avd(self, provisioner):
        profile = _profile(hardware_profile="pixel_5", sdcard_path_or_size="512M", cores="4", ram_size="2048M")

        def fake_run(cmd, check=True, **kwargs):
            provisioner.avd_dir(profile).mkdir(parents=True)
            return _completed(cmd)

        with patch("avdrunner.avd.run", side_effect=fake_run) as mock_run:
            provisioner.provision(profile)

        cmd = mock_run.call_args.args[0]
        assert cmd[:4] == ["avdmanager", "create", "avd", "--force"]
        assert cmd[cmd.index("-n") + 1] == "test"
        assert cmd[cmd.index("--abi") + 1] == "default/x86_64"
        assert cmd[cmd.index("--package") + 1] == "system-images;android-29;default;x86_64"
        assert cmd[cmd.index("--device") + 1] == "pixel_5"
        assert cmd[cmd.index("--sdcard") + 1] == "512M"
        assert mock_run.call_args.kwargs["input"] == "no\n"
        config = provisioner.config_path(profile).read_text()
        assert "hw.cpu.ncore=4\n" in config
        assert "hw.ramSize=2048M\n" in config

    def test_reuses_existing_avd_without_force(self, provisioner):
        profile = _profile(force_recreate=False, cores="4")
        provisioner.avd_dir(profile).mkdir(parents=True)
        provisioner.config_path(profile).write_text("hw.cpu.ncore=2\n")

        with patch("avdrunner.avd.run") as mock_run:
            provisioner.provision(profile)

        mock_run.assert_not_called()
        assert provisioner.config_path(profile).read_text() == "hw.cpu.ncore=2\n"

    def test_force_recreates_existing_avd(self, provisioner):
        profile = _profile(force_recreate=True)
        provisioner.avd_dir(profile).mkdir(parents=True)
        (provisioner.avd_dir(profile) / "userdata.img").write_text("stale")
        commands = []

        def fake_run(cmd, check=True, **kwargs):
            commands.append(cmd[1])
            if cmd[1] == "create":
                assert not (provisioner.avd_dir(profile) / "userdata.img").exists()
                provisioner.avd_dir(profile).mkdir(parents=True)
            return _completed(cmd)

        with patch("avdrunner.avd.run", side_effect=fake_run):
            provisioner.provision(profile)

        assert commands == ["delete", "create"]

    def test_create_failure_raises(self, provisioner):
        failure = _completed(["avdmanager"], returncode=1, stderr="Package path is not valid")
        with patch("avdrunner.avd.run", return_value=failure):
            with pytest.raises(ProvisioningError, match="Package path is not valid"):
                provisioner.provision(_profile())

    def test_missing_avdmanager_raises(self, provisioner):
        with patch("avdrunner.avd.run", side_effect=FileNotFoundError("avdmanager")):
            with pytest.raises(ProvisioningError, match="Failed to run avdmanager"):
                provisioner.provision(_profile())

    def test_missing_avdmanager_on_recreate_raises(self, tmp_path):
        provisioner = AvdProvisioner(avd_home=tmp_path / "avd", avdmanager=str(tmp_path / "nope" / "avdmanager"))
        profile = _profile(force_recreate=True)
        provisioner.avd_dir(profile).mkdir(parents=True)

        with pytest.raises(ProvisioningError, match="Failed to run avdmanager"):
            provisioner.provision(profile)


class TestApplyHardware:
    def test_no_values_leaves_config_untouched(self, provisioner):
        profile = _profile()
        provisioner.apply_hardware(profile)
        assert not provisioner.config_path(profile).exists()

    def test_heap_and_disk_size(self, provisioner):
        profile = _profile(heap_size="576M", disk_size="8G")
        provisioner.avd_dir(profile).mkdir(parents=True)
        provisioner.apply_hardware(profile)
        config = provisioner.config_path(profile).read_text()
        assert "vm.heapSize=576M" in config
        assert "disk.dataPartition.size=8G" in config

    def test_unwritable_config_raises(self, provisioner):
        profile = _profile(cores="4")
        # AVD directory was never created, so config.ini cannot be written.
        with pytest.raises(ProvisioningError, match="Failed to write"):
            provisioner.apply_hardware(profile)

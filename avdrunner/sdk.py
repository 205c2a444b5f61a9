"""Android SDK package installation for avd-runner."""

from __future__ import annotations

import subprocess
import sys
import zipfile
from pathlib import Path
from typing import List, Optional

from avdrunner.constants import ANDROID_SDK_ROOT, BUILD_TOOLS_VERSION, EMULATOR_BUILD_URL, STATE_DIR
from avdrunner.exceptions import InstallationError, RunnerError
from avdrunner.utils import download_file, ensure_directory, log, run


class SdkInstaller:
    """Install the packages an emulator run needs through ``sdkmanager``."""

    def __init__(self, sdk_root: Path = ANDROID_SDK_ROOT) -> None:
        self.sdk_root = sdk_root

    @property
    def sdkmanager(self) -> str:
        for relative in ("cmdline-tools/latest/bin/sdkmanager", "tools/bin/sdkmanager"):
            candidate = self.sdk_root / relative
            if candidate.exists():
                return str(candidate)
        return "sdkmanager"

    def _sdkmanager(self, args: List[str], input_text: Optional[str] = None) -> None:
        cmd = [self.sdkmanager, f"--sdk_root={self.sdk_root}", *args]
        try:
            run(cmd, input=input_text, stdout=subprocess.DEVNULL)
        except subprocess.CalledProcessError as exc:
            raise InstallationError(f"sdkmanager {' '.join(args)} failed with exit code {exc.returncode}") from exc
        except OSError as exc:
            raise InstallationError(f"Failed to run sdkmanager: {exc}") from exc

    def accept_licenses(self) -> None:
        log("INFO", "Accepting SDK licenses")
        self._sdkmanager(["--licenses"], input_text="y\n" * 32)

    def install(self, packages: List[str], channel_id: int) -> None:
        log("INFO", f"Installing {', '.join(packages)} (channel {channel_id})")
        self._sdkmanager(["--install", *packages, f"--channel={channel_id}"])

    def install_emulator_build(self, build: str) -> None:
        host = "darwin" if sys.platform == "darwin" else "linux"
        url = EMULATOR_BUILD_URL.format(os=host, build=build)
        archive = STATE_DIR / "downloads" / f"emulator-{build}.zip"
        if archive.exists() and archive.stat().st_size > 0:
            log("INFO", f"Using cached emulator build: {archive}")
        else:
            try:
                download_file(url, archive, label=f"Downloading emulator build {build}")
            except RunnerError as exc:
                raise InstallationError(str(exc)) from exc
        try:
            with zipfile.ZipFile(archive) as bundle:
                bundle.extractall(self.sdk_root)
        except zipfile.BadZipFile as exc:
            archive.unlink(missing_ok=True)
            raise InstallationError(f"Emulator build {build} archive is corrupt: {exc}") from exc
        # zipfile drops the executable bits.
        for binary in (self.sdk_root / "emulator").glob("emulator*"):
            if binary.is_file():
                binary.chmod(0o755)
        log("SUCCESS", f"Emulator build {build} installed")


def install_android_sdk(
    api_level: int,
    target: str,
    arch: str,
    channel_id: int,
    emulator_build: Optional[str] = None,
    ndk_version: Optional[str] = None,
    cmake_version: Optional[str] = None,
    installer: Optional[SdkInstaller] = None,
) -> None:
    installer = installer or SdkInstaller()
    ensure_directory(installer.sdk_root)
    log("INFO", "Installing new cmdline-tools packages")
    installer.accept_licenses()
    installer.install(
        [f"build-tools;{BUILD_TOOLS_VERSION}", "platform-tools", f"platforms;android-{api_level}"],
        channel_id,
    )

    if emulator_build:
        installer.install_emulator_build(emulator_build)
    else:
        installer.install(["emulator"], channel_id)

    installer.install([f"system-images;android-{api_level};{target};{arch}"], channel_id)

    if ndk_version:
        installer.install([f"ndk;{ndk_version}"], channel_id)
    if cmake_version:
        installer.install([f"cmake;{cmake_version}"], channel_id)
    log("SUCCESS", "Android SDK packages installed")

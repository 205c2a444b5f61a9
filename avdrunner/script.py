"""User script parsing and execution for avd-runner."""

from __future__ import annotations

import subprocess
from typing import List, Optional, Sequence

from avdrunner.exceptions import ScriptExecutionError
from avdrunner.utils import log


def parse_script(raw: str) -> List[str]:
    """Split a multi-line script into ordered commands, dropping blank lines."""
    return [line.strip() for line in raw.splitlines() if line.strip()]


def log_script(commands: Sequence[str]) -> None:
    log("INFO", "Script:")
    for command in commands:
        log("INFO", f"  {command}")


def run_scripts(commands: Sequence[str], working_directory: Optional[str] = None) -> None:
    """Run each command with ``sh -c`` in order, stopping at the first failure."""
    for command in commands:
        log("INFO", f"$ {command}")
        result = subprocess.run(["sh", "-c", command], cwd=working_directory or None)
        if result.returncode != 0:
            raise ScriptExecutionError(command, result.returncode)

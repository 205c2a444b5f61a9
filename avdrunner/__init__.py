"""avd-runner package."""

__all__ = [
    "adb",
    "avd",
    "boot",
    "channels",
    "cli",
    "config",
    "configurator",
    "constants",
    "environment",
    "exceptions",
    "launcher",
    "lifecycle",
    "models",
    "script",
    "sdk",
    "terminator",
    "utils",
    "validator",
]

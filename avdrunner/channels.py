"""Map release channel names to sdkmanager channel ids."""

from __future__ import annotations

from avdrunner.constants import CHANNELS
from avdrunner.exceptions import ValidationError


def get_channel_id(channel_name: str) -> int:
    """Return the sdkmanager ``--channel`` id; packages up to and including it are eligible."""
    try:
        return CHANNELS.index(channel_name)
    except ValueError:
        raise ValidationError(f"Unexpected channel name: '{channel_name}'.") from None

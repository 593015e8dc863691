"""Conversions between MELCloud settings values and fan entity values."""

from __future__ import annotations

from .const import PERCENTAGE_STEP
from .models import SpeedLevel, VaneMode

# Name and numeric alias for every level, lowercased
LEVEL_ALIASES: dict[str, SpeedLevel] = {}
for _level in SpeedLevel:
    LEVEL_ALIASES[_level.name.lower()] = _level
    LEVEL_ALIASES[str(int(_level))] = _level

VANE_AUTO_ALIASES = ("0", "auto")
VANE_SWING_ALIASES = ("6", "six", "7", "swing")


def percentage_to_level(percentage: float) -> SpeedLevel:
    """Quantize a percentage into a speed level.

    Buckets are upper-inclusive: 0 is Auto, (0, 20] is One, (20, 40] is Two
    and so on up to (80, 100] for Five.
    """
    if percentage <= 0:
        return SpeedLevel.AUTO
    if percentage <= 20:
        return SpeedLevel.ONE
    if percentage <= 40:
        return SpeedLevel.TWO
    if percentage <= 60:
        return SpeedLevel.THREE
    if percentage <= 80:
        return SpeedLevel.FOUR
    return SpeedLevel.FIVE


def parse_level(raw: str | None) -> SpeedLevel:
    """Parse a fan speed name or numeric alias, case-insensitively.

    Unknown values fall back to Auto.
    """
    if raw is None:
        return SpeedLevel.AUTO
    return LEVEL_ALIASES.get(str(raw).lower(), SpeedLevel.AUTO)


def level_to_percentage(raw: str | None) -> int:
    """Return the percentage for a raw fan speed value."""
    return int(parse_level(raw)) * PERCENTAGE_STEP


def normalize_vane(raw: str | None) -> str:
    """Canonicalize a vertical vane direction string."""
    normalized = (raw or "").lower()
    if normalized in VANE_AUTO_ALIASES:
        return VaneMode.AUTO.value
    if normalized in VANE_SWING_ALIASES:
        return VaneMode.SWING.value
    return normalized


def vane_mode(raw: str | None) -> VaneMode:
    """Fold a vertical vane direction into auto, swing or other."""
    normalized = normalize_vane(raw)
    if normalized == VaneMode.AUTO.value:
        return VaneMode.AUTO
    if normalized == VaneMode.SWING.value:
        return VaneMode.SWING
    return VaneMode.OTHER

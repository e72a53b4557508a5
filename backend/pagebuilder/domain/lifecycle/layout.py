from typing import Set
from pagebuilder.domain.exceptions import ValidationError

CUSTOM = "custom"
INHERITED = "inherited"

LAYOUT_MODES: Set[str] = {CUSTOM, INHERITED}


def assert_layout_mode(mode: str) -> None:
    """
    Guards layout mode switches.
    Single source of truth for accepted modes.
    """
    if mode not in LAYOUT_MODES:
        raise ValidationError(
            "INVALID_MODE",
            f"Mode must be one of: {', '.join(sorted(LAYOUT_MODES))}",
            mode=mode,
        )


def mode_of(translation) -> str:
    return CUSTOM if translation.custom else INHERITED

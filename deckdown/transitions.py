"""Slide transition vocabularies (kebab-case, as authors write them in YAML)."""
from typing import Optional

VALID_TRANSITION_STYLES = (
    "none",
    "dissolve",
    "smart-animate",
    "slide-from-left",
    "slide-from-right",
    "slide-from-top",
    "slide-from-bottom",
    "push-from-left",
    "push-from-right",
    "push-from-top",
    "push-from-bottom",
    "move-from-left",
    "move-from-right",
    "move-from-top",
    "move-from-bottom",
    "slide-out-to-left",
    "slide-out-to-right",
    "slide-out-to-top",
    "slide-out-to-bottom",
    "move-out-to-left",
    "move-out-to-right",
    "move-out-to-top",
    "move-out-to-bottom",
)

VALID_TRANSITION_CURVES = (
    "ease-in",
    "ease-out",
    "ease-in-and-out",
    "linear",
    "gentle",
    "quick",
    "bouncy",
    "slow",
)

VALID_TIMING_TYPES = ("on-click", "after-delay")


def _kebab(value: str) -> str:
    return value.strip().lower().replace("_", "-")


def normalize_transition_style(value: str) -> Optional[str]:
    """``"SLIDE_FROM_LEFT"`` -> ``"slide-from-left"``; unknown styles give None."""
    normalized = _kebab(value)
    return normalized if normalized in VALID_TRANSITION_STYLES else None


def normalize_transition_curve(value: str) -> Optional[str]:
    normalized = _kebab(value)
    return normalized if normalized in VALID_TRANSITION_CURVES else None


def normalize_timing_type(value: str) -> Optional[str]:
    normalized = _kebab(value)
    return normalized if normalized in VALID_TIMING_TYPES else None

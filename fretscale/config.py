"""Configuration for fretscale.

Startup settings for the visualizer: which tuning, root, scale and mode to
show first, how many frets to draw, how marked positions are labelled, and
where the equivalence table comes from.
"""

from dataclasses import dataclass
from typing import Optional

from fretscale import constants


@dataclass(frozen=True)
class Config:
    """Startup configuration, overridden field by field from the command line."""

    tuning: str  # Tuning key, e.g. "standard-guitar"
    root: str  # Root note in any spelling
    scale: str  # Primary scale key
    mode: Optional[str]  # Mode key, or None for the scale's default mode
    fret_count: int  # Highest fret drawn (the nut is fret 0)
    display_mode: str  # Label style for marked positions
    equivalents: Optional[str]  # Table path or URL, None for the packaged file
    load_attempts: int  # Maximum equivalence load attempts
    load_backoff: float  # Seconds before the first retry; doubles after each


def init_config(
    tuning: str = constants.DEFAULT_TUNING,
    root: str = constants.DEFAULT_ROOT,
    scale: str = constants.DEFAULT_SCALE,
    fret_count: int = constants.DEFAULT_FRET_COUNT,
) -> Config:
    """Initialize a default configuration.

    Starts on E minor over eight frets of an all-fourths guitar, labelled
    with semitone counts.

    Args:
        tuning: The tuning key.
        root: The root note.
        scale: The primary scale key.
        fret_count: The number of frets to draw.

    Returns:
        A Config instance with default settings and the specified parameters.
    """
    return Config(
        tuning=tuning,
        root=root,
        scale=scale,
        mode=None,
        fret_count=fret_count,
        display_mode=constants.DEFAULT_DISPLAY_MODE,
        equivalents=None,
        load_attempts=constants.DEFAULT_LOAD_ATTEMPTS,
        load_backoff=constants.DEFAULT_LOAD_BACKOFF,
    )

"""Constants shared across fretscale.

This module defines the note alphabet, the enharmonic spelling table and the
default values used when the visualizer starts or a tuning is selected.
"""

from typing import Dict, Tuple

MAX_NOTES = 12
"""Number of distinct pitch classes in the chromatic scale."""

NOTE_SPELLINGS: Tuple[str, ...] = (
    "C",
    "C#",
    "D",
    "D#",
    "E",
    "F",
    "F#",
    "G",
    "G#",
    "A",
    "A#",
    "B",
)
"""Canonical spelling of each pitch class, indexed by class."""

ENHARMONICS: Dict[str, str] = {
    "C#": "Db",
    "D#": "Eb",
    "F#": "Gb",
    "G#": "Ab",
    "A#": "Bb",
}
"""Sharp spelling to flat spelling for the five black keys."""

DEFAULT_OCTAVE = 4
"""Octave assumed for a spelled note that carries no octave digits."""

DEFAULT_ROOT = "E"
DEFAULT_SCALE = "minor"
DEFAULT_FRET_COUNT = 8
DEFAULT_DISPLAY_MODE = "semitones"
DEFAULT_TUNING = "all-fourths-guitar"

DEFAULT_LOAD_ATTEMPTS = 3
"""Attempts made to load the equivalence table before giving up."""
DEFAULT_LOAD_BACKOFF = 1.0
"""Seconds waited after the first failed attempt; doubles after each failure."""

EQUIVALENTS_RESOURCE = "equivalent_scales.csv"
"""Name of the packaged equivalence matrix under ``fretscale/data``."""
SCALE_ROOT_HEADER = "Scale/Root"
INTERVALS_HEADER = "Intervals"

FIFTH = 7
"""Interval of a perfect fifth in semitones."""

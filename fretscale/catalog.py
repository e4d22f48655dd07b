"""Scale and mode catalog for fretscale.

This module holds the static tables of named scales, direct mode formulas,
mode families and the popularity ranking, and derives the notes of a
(root, scale, mode) triple from them. Every formula is an ascending interval
sequence starting at 0.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from fretscale.constants import MAX_NOTES
from fretscale.pitch import class_of, name_of, parse_class


@dataclass(frozen=True)
class Scale:
    """A named scale or mode with its interval pattern.

    The intervals list always starts with 0 (the root) and contains the
    ascending semitone offsets of every scale degree.
    """

    key: str
    """Catalog key, e.g. ``"harmonic_minor"``."""
    name: str
    """Display name used in labels, e.g. ``"Harmonic Minor"``."""
    intervals: List[int]
    """Ascending semitone offsets from the root, starting at 0."""
    pattern: Optional[str] = None
    """Bass fretboard pattern notation, e.g. ``"0-2-3 / 0-2-3 / 0"``."""


SCALES: List[Scale] = [
    Scale("blues", "Blues (Minor)", [0, 3, 5, 6, 7, 10], "0-3 / 0-1-2 / 0"),
    Scale("blues_major", "Blues (Major)", [0, 2, 3, 4, 7, 9], "0-2-3-4 / 2-4 /"),
    Scale("dorian", "Dorian", [0, 2, 3, 5, 7, 9, 10], "0-2-3 / 0-2-4 / 0"),
    Scale(
        "harmonic_major", "Harmonic Major", [0, 2, 4, 5, 7, 8, 11], "0-2-4 / 0-2-3 / 1"
    ),
    Scale(
        "harmonic_minor", "Harmonic Minor", [0, 2, 3, 5, 7, 8, 11], "0-2-3 / 0-2-3 / 1"
    ),
    Scale(
        "hungarian_minor",
        "Hungarian Minor",
        [0, 2, 3, 6, 7, 8, 11],
        "0-2-3 / 1-2-3 / 1",
    ),
    Scale("in_sen", "In-sen (Japanese)", [0, 1, 5, 7, 10], "0-1 / 0-2 / 0"),
    Scale("locrian", "Locrian", [0, 1, 3, 5, 6, 8, 10], "0-1-3 / 0-1-3 / 0"),
    Scale("lydian", "Lydian", [0, 2, 4, 6, 7, 9, 11], "0-2-4 / 1-2-4 / 1"),
    Scale("major", "Major", [0, 2, 4, 5, 7, 9, 11], "0-2-4 / 0-2-4 / 1"),
    Scale("major_pentatonic", "Major Pentatonic", [0, 2, 4, 7, 9], "0-2-4 / 2-4 /"),
    Scale(
        "melodic_minor", "Melodic Minor", [0, 2, 3, 5, 7, 9, 11], "0-2-3 / 0-2-4 / 1"
    ),
    Scale("minor", "Minor", [0, 2, 3, 5, 7, 8, 10], "0-2-3 / 0-2-3 / 0"),
    Scale("minor_pentatonic", "Minor Pentatonic", [0, 3, 5, 7, 10], "0-3 / 0-2 / 0"),
    Scale("mixolydian", "Mixolydian", [0, 2, 4, 5, 7, 9, 10], "0-2-4 / 0-2-4 / 0"),
    Scale("persian", "Persian", [0, 1, 4, 5, 6, 8, 11], "0-1-4 / 0-1-3 / 1"),
    Scale("phrygian", "Phrygian", [0, 1, 3, 5, 7, 8, 10], "0-1-3 / 0-2-3 / 0"),
    Scale(
        "phrygian_dominant",
        "Phrygian Dominant (Maqam Hijaz)",
        [0, 1, 4, 5, 7, 8, 10],
        "0-1-4 / 0-2-3 / 0",
    ),
]
"""The primary scales, in alphabetical key order.

Exact detection walks this list in order, so it doubles as the tie-break
order when an interval pattern is checked against the catalog.
"""

SCALE_LOOKUP: Dict[str, Scale] = {s.key: s for s in SCALES}
"""Dictionary lookup from scale key to Scale."""

MODES: List[Scale] = [
    # Modes of the major scale
    Scale("ionian", "Ionian", [0, 2, 4, 5, 7, 9, 11]),
    Scale("dorian", "Dorian", [0, 2, 3, 5, 7, 9, 10]),
    Scale("phrygian", "Phrygian", [0, 1, 3, 5, 7, 8, 10]),
    Scale("lydian", "Lydian", [0, 2, 4, 6, 7, 9, 11]),
    Scale("mixolydian", "Mixolydian", [0, 2, 4, 5, 7, 9, 10]),
    Scale("aeolian", "Aeolian", [0, 2, 3, 5, 7, 8, 10]),
    Scale("locrian", "Locrian", [0, 1, 3, 5, 6, 8, 10]),
    # Modes of harmonic minor
    Scale("harmonic_minor", "Harmonic Minor", [0, 2, 3, 5, 7, 8, 11]),
    Scale("locrian_nat6", "Locrian ♮6", [0, 1, 3, 5, 6, 9, 10]),
    Scale("ionian_sharp5", "Ionian #5", [0, 2, 4, 5, 8, 9, 11]),
    Scale("dorian_sharp4", "Dorian #4", [0, 2, 3, 6, 7, 9, 10]),
    Scale("phrygian_dominant", "Phrygian Dominant", [0, 1, 4, 5, 7, 8, 10]),
    Scale("lydian_sharp2", "Lydian #2", [0, 3, 4, 6, 7, 9, 11]),
    Scale("super_locrian_bb7", "Super Locrian ♭♭7", [0, 1, 3, 4, 6, 8, 9]),
    # Modes of melodic minor
    Scale("melodic_minor", "Melodic Minor", [0, 2, 3, 5, 7, 9, 11]),
    Scale("dorian_b2", "Dorian ♭2", [0, 1, 3, 5, 7, 9, 10]),
    Scale("lydian_augmented", "Lydian Augmented", [0, 2, 4, 6, 8, 9, 11]),
    Scale("lydian_dominant", "Lydian Dominant", [0, 2, 4, 6, 7, 9, 10]),
    Scale("mixolydian_b6", "Mixolydian ♭6", [0, 2, 4, 5, 7, 8, 10]),
    Scale("locrian_nat2", "Locrian ♮2", [0, 2, 3, 5, 6, 8, 10]),
    Scale("altered", "Altered", [0, 1, 3, 4, 6, 8, 10]),
]
"""Direct mode formulas, grouped by parent family."""

MODE_LOOKUP: Dict[str, Scale] = {m.key: m for m in MODES}
"""Dictionary lookup from mode key to its direct formula."""


@dataclass(frozen=True)
class ModeFamily:
    """A parent scale whose modes are rotations of its interval sequence."""

    parent: str
    """Key of the parent scale in SCALE_LOOKUP."""
    offsets: Dict[str, int]
    """Mode key to rotation offset (scale degree index, 0-based)."""

    @staticmethod
    def rotate(intervals: Sequence[int], offset: int) -> List[int]:
        """Rotate an interval sequence and renormalize it to start at 0.

        Args:
            intervals: Ascending intervals of the parent scale.
            offset: Index of the degree that becomes the new root.

        Returns:
            The rotated intervals, again ascending from 0.
        """
        size = len(intervals)
        base = intervals[offset % size]
        return [
            (intervals[(i + offset) % size] - base) % MAX_NOTES for i in range(size)
        ]


MODE_FAMILIES: List[ModeFamily] = [
    ModeFamily(
        "major",
        {
            "ionian": 0,
            "dorian": 1,
            "phrygian": 2,
            "lydian": 3,
            "mixolydian": 4,
            "aeolian": 5,
            "locrian": 6,
        },
    ),
    ModeFamily(
        "harmonic_minor",
        {
            "harmonic_minor": 0,
            "locrian_nat6": 1,
            "ionian_sharp5": 2,
            "dorian_sharp4": 3,
            "phrygian_dominant": 4,
            "lydian_sharp2": 5,
            "super_locrian_bb7": 6,
        },
    ),
    ModeFamily(
        "melodic_minor",
        {
            "melodic_minor": 0,
            "dorian_b2": 1,
            "lydian_augmented": 2,
            "lydian_dominant": 3,
            "mixolydian_b6": 4,
            "locrian_nat2": 5,
            "altered": 6,
        },
    ),
]

SCALE_POPULARITY: Dict[str, int] = {
    "major": 10,
    "minor": 10,
    "ionian": 10,
    "major_pentatonic": 9,
    "minor_pentatonic": 9,
    "blues": 9,
    "harmonic_minor": 8,
    "dorian": 8,
    "mixolydian": 8,
    "melodic_minor": 7,
    "aeolian": 7,
    "phrygian": 6,
    "lydian": 6,
    "phrygian_dominant": 6,
    "bebop_dominant": 6,
    "locrian": 5,
    "bebop_major": 5,
    "bebop_minor": 5,
    "bebop_dorian": 5,
    "altered": 4,
    "lydian_dominant": 4,
    "whole_tone": 4,
    "lydian_augmented": 4,
    "mixolydian_b6": 4,
    "locrian_nat2": 4,
    "diminished_wh": 3,
    "diminished_hw": 3,
    "augmented": 3,
    "major_blues": 3,
    "dorian_b2": 3,
    "locrian_nat6": 3,
    "chromatic": 2,
    "hungarian_minor": 2,
    "hungarian_major": 2,
    "persian": 2,
    "arabian": 2,
    "byzantine": 2,
    "jewish": 2,
    "spanish_8_tone": 2,
    "neapolitan_major": 2,
    "neapolitan_minor": 2,
    "romanian": 2,
    "ionian_sharp5": 2,
    "dorian_sharp4": 2,
    "lydian_sharp2": 2,
    "super_locrian_bb7": 2,
    "double_harmonic_major": 1,
    "double_harmonic_minor": 1,
    "prometheus": 1,
    "tritone": 1,
    "egyptian": 1,
    "hirajoshi": 1,
    "iwato": 1,
    "in_sen": 1,
    "blues_9_note": 1,
    "lydian_chromatic": 1,
}
"""Ranking used to order detected matches, higher first.

Several keys name scales the catalog does not carry; they never match and
so never take part in ordering.
"""

# Display names of primary scales win over same-keyed mode names
# ("phrygian_dominant" is "Phrygian Dominant (Maqam Hijaz)" as a scale).
_DISPLAY_NAMES: Dict[str, str] = {
    **{m.key: m.name for m in MODES},
    **{s.key: s.name for s in SCALES},
}

_NON_LETTERS_RE = re.compile(r"[^a-z]")


def popularity(key: str) -> int:
    """Popularity rank of a scale or mode key, 0 if unranked."""
    return SCALE_POPULARITY.get(key, 0)


def default_mode_for(scale_key: str) -> str:
    """Mode recorded when a scale is selected: ionian for major, else itself."""
    return "ionian" if scale_key == "major" else scale_key


def scale_for(scale_key: str) -> Scale:
    """Look up a primary scale, falling back to major for unknown keys."""
    return SCALE_LOOKUP.get(scale_key, SCALE_LOOKUP["major"])


def display_name(key: str) -> str:
    """Display name of a scale key, else of a mode key, else the key itself."""
    return _DISPLAY_NAMES.get(key, key)


def mode_display_name(key: str) -> str:
    """Display name of a mode key, used for labels of mode matches."""
    mode = MODE_LOOKUP.get(key)
    return mode.name if mode is not None else key


def key_from_display_name(name: str) -> str:
    """Reverse lookup from a display name to a primary scale key.

    Tries an exact match, then a match ignoring case and non-letters, and
    finally falls back to the lowercased name with whitespace removed.
    """
    for scale in SCALES:
        if scale.name == name:
            return scale.key
    normalized = _NON_LETTERS_RE.sub("", name.lower())
    for scale in SCALES:
        if _NON_LETTERS_RE.sub("", scale.name.lower()) == normalized:
            return scale.key
    return re.sub(r"\s+", "", name.lower())


def resolve_intervals(scale_key: str, mode_key: Optional[str]) -> List[int]:
    """Find the interval sequence for a scale and mode selection.

    A direct mode formula is preferred when the mode differs from the scale,
    then a rotation of a known parent family, and finally the raw scale
    formula. A scale key that only names a mode (as adopted from a mode
    match) uses that mode formula, and an unknown key falls back to major.
    Never fails.

    Args:
        scale_key: Key of the selected primary scale.
        mode_key: Key of the selected mode, or None.

    Returns:
        An ascending interval sequence starting at 0.
    """
    if mode_key is not None and mode_key != scale_key:
        direct = MODE_LOOKUP.get(mode_key)
        if direct is not None:
            return list(direct.intervals)
        for family in MODE_FAMILIES:
            offset = family.offsets.get(mode_key)
            if offset is not None and family.parent in SCALE_LOOKUP:
                return ModeFamily.rotate(SCALE_LOOKUP[family.parent].intervals, offset)
    if scale_key not in SCALE_LOOKUP and scale_key in MODE_LOOKUP:
        return list(MODE_LOOKUP[scale_key].intervals)
    return list(scale_for(scale_key).intervals)


def scale_notes(root: str, scale_key: str, mode_key: Optional[str] = None) -> List[str]:
    """Octave-less note names of a scale and mode built on a root.

    Args:
        root: Root note in any spelling.
        scale_key: Key of the selected primary scale.
        mode_key: Key of the selected mode, or None to use the scale itself.

    Returns:
        Canonical note names in interval order.
    """
    root_class = class_of(root)
    return [
        name_of(root_class + steps) for steps in resolve_intervals(scale_key, mode_key)
    ]


def is_in_scale(note: str, notes: Sequence[str]) -> bool:
    """Check whether a note's class matches any note of a spelled scale.

    Both sides may use sharp or flat spellings, and the note may carry an
    octave. Unknown spellings are never in the scale.
    """
    pc = parse_class(note)
    if pc is None:
        return False
    return any(parse_class(member) == pc for member in notes)

"""Fretboard position model for fretscale.

This module defines the tunings the visualizer knows about, string positions
and the bounded regions they live in, and the mapping from a position to the
absolute note sounding there. None of it holds marker state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Generator, List, Optional

from fretscale.constants import DEFAULT_TUNING
from fretscale.pitch import Note


@dataclass(frozen=True)
class StringPos:
    """Represents a position on the fretboard as a string and fret combination.

    String 0 is the lowest-pitched string of the tuning and fret 0 is the
    open string.
    """

    str_index: int
    """The string number (0-based index into the tuning)."""
    fret: int
    """The fret position (semitone offset from the open string)."""

    def __str__(self) -> str:
        return f"{self.str_index}-{self.fret}"


@dataclass(frozen=True)
class StringBounds:
    """Defines a rectangular region of the fretboard.

    Both corners are inclusive, so a six-string board with eight frets spans
    ``StringPos(0, 0)`` to ``StringPos(5, 8)``.
    """

    low: StringPos
    """The minimum string position (lowest string, lowest fret)."""
    high: StringPos
    """The maximum string position (highest string, highest fret)."""

    def __iter__(self) -> Generator[StringPos, None, None]:
        """Iterate over all string positions within the bounds, string-major."""
        for str_index in range(self.low.str_index, self.high.str_index + 1):
            for fret in range(self.low.fret, self.high.fret + 1):
                yield StringPos(str_index=str_index, fret=fret)

    def __contains__(self, cand: StringPos) -> bool:
        return (
            cand.str_index >= self.low.str_index
            and cand.str_index <= self.high.str_index
            and cand.fret >= self.low.fret
            and cand.fret <= self.high.fret
        )


@dataclass(frozen=True)
class Tuning:
    """An ordered set of open-string notes, lowest string first."""

    key: str
    """Catalog key, e.g. ``"standard-guitar"``."""
    name: str
    """Human-readable name for menus."""
    strings: List[Note]
    """Open note of each string."""
    category: str
    """Menu grouping: Guitar, Bass or Other."""

    @property
    def string_count(self) -> int:
        return len(self.strings)

    def bounds(self, fret_count: int) -> StringBounds:
        """Region covering every string from the open position to fret_count."""
        return StringBounds(
            low=StringPos(0, 0),
            high=StringPos(self.string_count - 1, fret_count),
        )


def _tuning(key: str, name: str, strings: str, category: str) -> Tuning:
    return Tuning(key, name, [Note.from_str(s) for s in strings.split()], category)


TUNINGS: List[Tuning] = [
    # Guitar tunings
    _tuning("all-fourths-guitar", "All Fourths Guitar", "E2 A2 D3 G3 C4 F4", "Guitar"),
    _tuning("standard-guitar", "Standard Guitar", "E2 A2 D3 G3 B3 E4", "Guitar"),
    _tuning("drop-d-guitar", "Drop D Guitar", "D2 A2 D3 G3 B3 E4", "Guitar"),
    _tuning("open-g-guitar", "Open G Guitar", "D2 G2 D3 G3 B3 D4", "Guitar"),
    _tuning("dadgad", "DADGAD", "D2 A2 D3 G3 A3 D4", "Guitar"),
    _tuning("standard-7-string", "Standard 7-String", "B1 E2 A2 D3 G3 B3 E4", "Guitar"),
    # Bass tunings
    _tuning("standard-bass", "Standard Bass", "E1 A1 D2 G2", "Bass"),
    _tuning("5-string-bass", "5-String Bass", "B0 E1 A1 D2 G2", "Bass"),
    _tuning("6-string-bass", "6-String Bass", "B0 E1 A1 D2 G2 C3", "Bass"),
    _tuning("tenor-bass", "Tenor Bass", "C2 G2 D3 A3", "Bass"),
    _tuning("all-fourths-bass", "All Fourths Bass", "E1 A1 D2 G2 C3 F3", "Bass"),
    # Other instruments
    _tuning("standard-ukulele", "Standard Ukulele", "G4 C4 E4 A4", "Other"),
    _tuning("baritone-ukulele", "Baritone Ukulele", "D3 G3 B3 E4", "Other"),
    _tuning("5-string-banjo", "5-String Banjo", "G4 D3 G3 B3 D4", "Other"),
    _tuning("mandolin", "Mandolin", "G3 D4 A4 E5", "Other"),
]
"""Known tunings, from 4 to 7 strings."""

TUNING_LOOKUP: Dict[str, Tuning] = {t.key: t for t in TUNINGS}
"""Dictionary lookup from tuning key to Tuning."""


def tuning_for(key: str) -> Tuning:
    """Look up a tuning, falling back to the default tuning for unknown keys."""
    return TUNING_LOOKUP.get(key, TUNING_LOOKUP[DEFAULT_TUNING])


def tunings_by_category() -> Dict[str, List[Tuning]]:
    """Group the known tunings by category, preserving catalog order."""
    groups: Dict[str, List[Tuning]] = {"Guitar": [], "Bass": [], "Other": []}
    for tuning in TUNINGS:
        groups.setdefault(tuning.category, []).append(tuning)
    return groups


def note_at(tuning: Tuning, str_index: int, fret: int) -> Optional[Note]:
    """Get the absolute note at a string and fret.

    Args:
        tuning: The tuning supplying the open notes.
        str_index: The string number.
        fret: The fret number, 0 for the open string.

    Returns:
        The open note transposed up by ``fret`` semitones, or None if the
        string or fret is out of range.
    """
    if str_index < 0 or str_index >= tuning.string_count or fret < 0:
        return None
    return tuning.strings[str_index].transpose(fret)


def iter_positions(tuning: Tuning, fret_count: int) -> Generator[StringPos, None, None]:
    """Iterate over every position from the open strings to fret_count inclusive."""
    yield from tuning.bounds(fret_count)


def symmetric_interval(tuning: Tuning) -> Optional[int]:
    """Common semitone interval between adjacent strings, if there is one.

    Returns:
        The interval when every adjacent pair of strings is the same distance
        apart (e.g. 5 for all-fourths tunings), otherwise None. Tunings with
        fewer than two strings are never symmetric.
    """
    if tuning.string_count < 2:
        return None
    steps = {
        high.midi_note - low.midi_note
        for low, high in zip(tuning.strings, tuning.strings[1:])
    }
    return steps.pop() if len(steps) == 1 else None

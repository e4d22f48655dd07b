"""Pitch-class algebra for fretscale.

This module converts between spelled note names (``"C#"``, ``"Db4"``) and
pitch classes, computes intervals relative to a root and transposes notes.
All interval arithmetic is modulo 12 and normalized to ``[0, 12)``. The
canonical alphabet spells black keys with sharps; flat spellings are accepted
everywhere a note name is read.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, unique
from typing import Dict, Optional

from fretscale.base import UnknownNote
from fretscale.constants import DEFAULT_OCTAVE, ENHARMONICS, MAX_NOTES, NOTE_SPELLINGS

_OCTAVE_RE = re.compile(r"-?\d+")

_FLAT_TO_SHARP: Dict[str, str] = {flat: sharp for sharp, flat in ENHARMONICS.items()}

_CLASS_LOOKUP: Dict[str, int] = {name: pc for pc, name in enumerate(NOTE_SPELLINGS)}


@unique
class NoteName(Enum):
    """Enumeration of the twelve chromatic note names.

    Values correspond to semitone offsets from C within an octave.
    Member names use ``s`` for sharp since ``#`` is not a valid identifier;
    ``spelling`` gives the printed form.
    """

    C = 0
    Cs = 1
    D = 2
    Ds = 3
    E = 4
    F = 5
    Fs = 6
    G = 7
    Gs = 8
    A = 9
    As = 10
    B = 11

    @property
    def spelling(self) -> str:
        """The canonical sharp spelling of this note, e.g. ``"C#"``."""
        return NOTE_SPELLINGS[self.value]

    def add_steps(self, steps: int) -> NoteName:
        """Add semitone steps to this note name.

        Args:
            steps: Number of semitones to add (can be negative).

        Returns:
            The resulting note name after adding the steps.
        """
        return NOTE_LOOKUP[(self.value + steps) % MAX_NOTES]

    @staticmethod
    def parse(text: str) -> Optional[NoteName]:
        """Parse a spelled note (octave digits allowed) into a note name.

        Returns:
            The note name, or None if the spelling is unknown.
        """
        pc = parse_class(text)
        return None if pc is None else NOTE_LOOKUP[pc]


NOTE_LOOKUP: Dict[int, NoteName] = {n.value: n for n in NoteName}
"""Lookup table from pitch class (0-11) to NoteName."""


def bare_name(note: str) -> str:
    """Strip octave digits from a spelled note: ``"G#3"`` becomes ``"G#"``."""
    return _OCTAVE_RE.sub("", note).strip()


def parse_class(note: str) -> Optional[int]:
    """Look up the pitch class of a spelled note.

    Args:
        note: A note name in sharp or flat spelling, with or without octave.

    Returns:
        The pitch class in ``[0, 12)``, or None if the name is unknown.
    """
    name = bare_name(note)
    name = _FLAT_TO_SHARP.get(name, name)
    return _CLASS_LOOKUP.get(name)


def class_of(note: str) -> int:
    """Look up the pitch class of a spelled note.

    Raises:
        UnknownNote: If the name is neither in the alphabet nor the
            enharmonic map.
    """
    pc = parse_class(note)
    if pc is None:
        raise UnknownNote(note)
    return pc


def name_of(pc: int) -> str:
    """Canonical name of a pitch class; the input is reduced modulo 12 first."""
    return NOTE_SPELLINGS[pc % MAX_NOTES]


def canonical(note: str) -> str:
    """Respell a note in the canonical sharp alphabet, dropping any octave."""
    return name_of(class_of(note))


def interval(root: str, note: str) -> int:
    """Pitch-class distance from root up to note, in ``[0, 12)``."""
    return (class_of(note) - class_of(root)) % MAX_NOTES


def same_class(note_a: str, note_b: str) -> bool:
    """Check whether two spellings denote the same pitch class.

    Unknown spellings are never equal to anything.
    """
    pc_a = parse_class(note_a)
    return pc_a is not None and pc_a == parse_class(note_b)


def octave_of(note: str) -> int:
    """Octave of a spelled note, or the default octave if it has none."""
    match = _OCTAVE_RE.search(note)
    return int(match.group(0)) if match is not None else DEFAULT_OCTAVE


def transpose(note: str, semitones: int) -> str:
    """Transpose a spelled note, returning the canonical note-and-octave form."""
    return str(Note.from_str(note).transpose(semitones))


def semitones_between(note_a: str, note_b: str) -> int:
    """Signed semitone distance from note_a to note_b, octaves included."""
    return Note.from_str(note_b).midi_note - Note.from_str(note_a).midi_note


@dataclass(frozen=True)
class Note:
    """An absolute note: a pitch class name plus an octave.

    Octaves follow scientific pitch notation, so ``Note(NoteName.A, 4)`` is
    concert A at 440 Hz and MIDI note 69.
    """

    name: NoteName
    octave: int

    @staticmethod
    def parse(text: str) -> Optional[Note]:
        """Parse ``"E2"``, ``"Bb3"`` or a bare ``"F#"``; None if unknown."""
        name = NoteName.parse(text)
        if name is None:
            return None
        return Note(name, octave_of(text))

    @staticmethod
    def from_str(text: str) -> Note:
        """Parse a spelled note, raising UnknownNote if it is not recognized."""
        note = Note.parse(text)
        if note is None:
            raise UnknownNote(text)
        return note

    @property
    def pitch_class(self) -> int:
        return self.name.value

    @property
    def spelling(self) -> str:
        return self.name.spelling

    @property
    def midi_note(self) -> int:
        return (self.octave + 1) * MAX_NOTES + self.pitch_class

    @property
    def frequency(self) -> float:
        """Equal-tempered frequency in Hz with A4 = 440 Hz."""
        return 440.0 * 2.0 ** ((self.midi_note - 69) / MAX_NOTES)

    def transpose(self, semitones: int) -> Note:
        """Move this note by a number of semitones, carrying into the octave."""
        total = self.pitch_class + semitones
        return Note(NOTE_LOOKUP[total % MAX_NOTES], self.octave + total // MAX_NOTES)

    def __str__(self) -> str:
        return f"{self.spelling}{self.octave}"

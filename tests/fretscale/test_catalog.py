from typing import List, Optional

import pytest
from hypothesis import given
from hypothesis import strategies as st

from fretscale.catalog import (
    MODE_FAMILIES,
    MODE_LOOKUP,
    MODES,
    SCALE_LOOKUP,
    SCALES,
    ModeFamily,
    Scale,
    default_mode_for,
    display_name,
    is_in_scale,
    key_from_display_name,
    mode_display_name,
    popularity,
    resolve_intervals,
    scale_for,
    scale_notes,
)
from fretscale.constants import NOTE_SPELLINGS
from fretscale.detect import detect_exact
from fretscale.pitch import interval
from tests.fretscale.hypo import configure_hypo

configure_hypo()


def test_formulas_are_canonical() -> None:
    """Every formula ascends strictly from 0 within one octave."""
    for formula in SCALES + MODES:
        assert formula.intervals[0] == 0
        assert formula.intervals == sorted(set(formula.intervals))
        assert formula.intervals[-1] < 12


def test_catalog_sizes() -> None:
    assert len(SCALES) == 18
    assert len(SCALE_LOOKUP) == 18
    assert len(MODES) == 21
    assert [s.key for s in SCALES] == sorted(s.key for s in SCALES)


def test_mode_families_agree_with_direct_formulas() -> None:
    for family in MODE_FAMILIES:
        parent = SCALE_LOOKUP[family.parent]
        for mode_key, offset in family.offsets.items():
            rotated = ModeFamily.rotate(parent.intervals, offset)
            assert rotated == MODE_LOOKUP[mode_key].intervals, mode_key


def test_rotate() -> None:
    major = SCALE_LOOKUP["major"].intervals
    assert ModeFamily.rotate(major, 0) == major
    assert ModeFamily.rotate(major, 5) == [0, 2, 3, 5, 7, 8, 10]
    assert ModeFamily.rotate(major, 7) == major


@pytest.mark.parametrize(
    "root, scale, mode, expected",
    [
        ("E", "minor", None, ["E", "F#", "G", "A", "B", "C", "D"]),
        ("E", "minor", "minor", ["E", "F#", "G", "A", "B", "C", "D"]),
        ("C", "major", "ionian", ["C", "D", "E", "F", "G", "A", "B"]),
        ("D", "major", "dorian", ["D", "E", "F", "G", "A", "B", "C"]),
        ("Bb", "minor_pentatonic", None, ["A#", "C#", "D#", "F", "G#"]),
        ("A", "aeolian", "aeolian", ["A", "B", "C", "D", "E", "F", "G"]),
        ("C", "nonsense", None, ["C", "D", "E", "F", "G", "A", "B"]),
    ],
)
def test_scale_notes(
    root: str, scale: str, mode: Optional[str], expected: List[str]
) -> None:
    assert scale_notes(root, scale, mode) == expected


def test_resolve_intervals_prefers_direct_mode() -> None:
    assert resolve_intervals("major", "lydian") == [0, 2, 4, 6, 7, 9, 11]
    hijaz = resolve_intervals("harmonic_minor", "phrygian_dominant")
    assert hijaz == [0, 1, 4, 5, 7, 8, 10]
    minor = SCALE_LOOKUP["minor"].intervals
    assert resolve_intervals("minor", "unknown_mode") == minor


def test_names() -> None:
    assert display_name("phrygian_dominant") == "Phrygian Dominant (Maqam Hijaz)"
    assert mode_display_name("phrygian_dominant") == "Phrygian Dominant"
    assert display_name("aeolian") == "Aeolian"
    assert display_name("whole_tone") == "whole_tone"
    assert default_mode_for("major") == "ionian"
    assert default_mode_for("dorian") == "dorian"
    assert scale_for("missing").key == "major"


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Minor", "minor"),
        ("Blues (Minor)", "blues"),
        ("blues (major)", "blues_major"),
        ("In-sen (Japanese)", "in_sen"),
        ("Phrygian Dominant (Maqam Hijaz)", "phrygian_dominant"),
        ("Whole Tone", "wholetone"),
    ],
)
def test_key_from_display_name(name: str, expected: str) -> None:
    assert key_from_display_name(name) == expected


def test_popularity() -> None:
    assert popularity("major") == 10
    assert popularity("in_sen") == 1
    assert popularity("not_a_scale") == 0


def test_is_in_scale() -> None:
    notes = scale_notes("E", "minor")
    assert is_in_scale("F#", notes)
    assert is_in_scale("Gb3", notes)
    assert not is_in_scale("F", notes)
    assert not is_in_scale("H", notes)


@given(st.sampled_from(NOTE_SPELLINGS), st.sampled_from(SCALES))
def test_detect_round_trips_scale_notes(root: str, scale: Scale) -> None:
    """The intervals of a scale's notes detect as that scale."""
    key = scale.key
    intervals = [interval(root, note) for note in scale_notes(root, key, key)]
    assert detect_exact(intervals) == key

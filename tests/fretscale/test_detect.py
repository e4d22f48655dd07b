from typing import List, Optional

import pytest
from hypothesis import given
from hypothesis import strategies as st

from fretscale.catalog import SCALES, Scale, scale_notes
from fretscale.constants import NOTE_SPELLINGS
from fretscale.detect import (
    Match,
    detect_exact,
    equivalents_of,
    find_all_matches,
    normalize_intervals,
    scale_label,
)
from fretscale.equivalence import EquivalenceTable, build_equivalence_table
from fretscale.pitch import class_of, interval
from tests.fretscale.hypo import configure_hypo

configure_hypo()

MINOR = [0, 2, 3, 5, 7, 8, 10]


@pytest.fixture(scope="module")
def table() -> EquivalenceTable:
    return EquivalenceTable.preloaded(build_equivalence_table())


def test_normalize_intervals() -> None:
    assert normalize_intervals([10, 0, 2, 12, 14, -2]) == [0, 2, 10]


@pytest.mark.parametrize(
    "intervals, expected",
    [
        (MINOR, "minor"),
        ([10, 8, 7, 5, 3, 2, 0, 12], "minor"),
        ([0, 2, 4, 5, 7, 9, 11], "major"),
        ([0, 3, 5, 7, 10], "minor_pentatonic"),
        ([0, 3, 5, 6, 7, 10], "blues"),
        ([0, 1, 2], None),
        ([0, 2, 3, 5, 7, 8], None),
        ([], None),
    ],
)
def test_detect_exact(intervals: List[int], expected: Optional[str]) -> None:
    assert detect_exact(intervals) == expected


def test_detect_exact_is_relative_to_root() -> None:
    """A rotated major scale is not detected as major."""
    assert detect_exact([0, 1, 3, 5, 7, 8, 10]) == "phrygian"
    assert detect_exact([0, 2, 4, 6, 8, 10]) is None


def test_find_all_matches_e_minor() -> None:
    matches = find_all_matches(MINOR, "E")
    assert [m.label for m in matches] == [
        "E Minor",
        "G Ionian",
        "G Major",
        "D Mixolydian",
        "A Dorian",
        "E Aeolian",
        "C Lydian",
        "B Phrygian",
        "F# Locrian",
    ]
    assert matches[0] == Match(
        root="E", scale="minor", mode=None, label="E Minor", popularity=10
    )
    ionian = matches[1]
    assert ionian.scale is None
    assert ionian.mode == "ionian"
    assert ionian.scale_or_mode == "ionian"


def test_find_all_matches_prefers_scale_over_same_keyed_mode() -> None:
    dorian = [m for m in find_all_matches(MINOR, "E") if m.root == "A"]
    assert len(dorian) == 1
    assert dorian[0].scale == "dorian"
    assert dorian[0].mode is None


def test_find_all_matches_empty_and_unknown() -> None:
    assert find_all_matches([], "E") == []
    assert find_all_matches(MINOR, "H") == []


def test_find_all_matches_flat_reference() -> None:
    """Flat spellings of the reference root behave like their sharp twins."""
    assert find_all_matches(MINOR, "Db") == find_all_matches(MINOR, "C#")


@given(st.sampled_from(NOTE_SPELLINGS), st.sampled_from(SCALES))
def test_every_match_spells_the_same_notes(root: str, scale: Scale) -> None:
    notes = scale_notes(root, scale.key, scale.key)
    expected = {class_of(n) for n in notes}
    matches = find_all_matches([interval(root, n) for n in notes], root)
    assert any(m.root == root and m.scale == scale.key for m in matches)
    for match in matches:
        key = match.scale_or_mode
        found = {class_of(n) for n in scale_notes(match.root, key, key)}
        assert found == expected, match.label
    popularities = [m.popularity for m in matches]
    assert popularities == sorted(popularities, reverse=True)


def test_scale_label() -> None:
    assert scale_label("Db", "major") == "C# Major"
    assert scale_label("E", "blues") == "E Blues (Minor)"
    assert scale_label("E", "aeolian") == "E Aeolian"
    assert scale_label("H", "major") is None


def test_equivalents_of(table: EquivalenceTable) -> None:
    matches = equivalents_of("E", "minor", table)
    assert [m.label for m in matches] == [
        "C Lydian",
        "D Mixolydian",
        "F# Locrian",
        "G Major",
        "A Dorian",
        "B Phrygian",
    ]
    major = matches[3]
    assert major.root == "G"
    assert major.scale == "major"
    assert major.mode is None
    assert major.popularity == 10


def test_equivalents_of_enharmonic_root(table: EquivalenceTable) -> None:
    assert equivalents_of("Gb", "major", table) == equivalents_of("F#", "major", table)
    labels = [m.label for m in equivalents_of("Gb", "major", table)]
    assert "D# Minor" in labels


def test_equivalents_of_unavailable(table: EquivalenceTable) -> None:
    assert equivalents_of("E", "minor", EquivalenceTable()) == []
    assert equivalents_of("H", "minor", table) == []
    assert equivalents_of("E", "no_such_scale", table) == []

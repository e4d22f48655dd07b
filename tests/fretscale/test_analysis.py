import pytest

from fretscale.analysis import analyze, marked_classes
from fretscale.config import init_config
from fretscale.equivalence import EquivalenceTable, build_equivalence_table
from fretscale.fretboard import StringPos
from fretscale.state import (
    BoardState,
    ChangeFretCount,
    CyclePosition,
    init_state,
    reduce,
)

MINOR = [0, 2, 3, 5, 7, 8, 10]
E_MINOR_EQUIVALENTS = [
    "C Lydian",
    "D Mixolydian",
    "F# Locrian",
    "G Major",
    "A Dorian",
    "B Phrygian",
]
LOW_G = CyclePosition(7, StringPos(0, 3))


@pytest.fixture(scope="module")
def table() -> EquivalenceTable:
    return EquivalenceTable.preloaded(build_equivalence_table())


@pytest.fixture
def state() -> BoardState:
    return init_state(init_config(tuning="standard-guitar"))


def test_clean_board(state: BoardState, table: EquivalenceTable) -> None:
    analysis = analyze(state, table)
    assert analysis.marked_classes == frozenset({4, 6, 7, 9, 11, 0, 2})
    assert analysis.intervals == MINOR
    assert analysis.detected_scale is None
    assert [m.label for m in analysis.equivalents] == E_MINOR_EQUIVALENTS
    assert analysis.main_list[0].label == "E Minor"


def test_edited_board_detects(state: BoardState, table: EquivalenceTable) -> None:
    analysis = analyze(reduce(state, LOW_G), table)
    assert analysis.intervals == MINOR
    assert analysis.detected_scale == "minor"
    assert [m.label for m in analysis.equivalents] == E_MINOR_EQUIVALENTS


def test_edited_board_without_exact_match(
    state: BoardState, table: EquivalenceTable
) -> None:
    edited = reduce(reduce(state, LOW_G), LOW_G)
    analysis = analyze(edited, table)
    assert analysis.intervals == [0, 2, 5, 7, 8, 10]
    assert analysis.detected_scale is None
    assert analysis.equivalents == []


def test_unloaded_table(state: BoardState) -> None:
    analysis = analyze(state, EquivalenceTable())
    assert analysis.equivalents == []
    assert analysis.main_list


def test_hidden_markers_are_ignored(state: BoardState) -> None:
    open_strings = reduce(state, ChangeFretCount(0))
    assert marked_classes(open_strings) == frozenset({4, 9, 2, 7, 11})
    assert open_strings.marked_classes() == frozenset({9, 2, 7, 11})
    analysis = analyze(open_strings, EquivalenceTable())
    assert analysis.intervals == [0, 3, 5, 7, 10]
    assert analysis.main_list[0].label == "E Minor Pentatonic"

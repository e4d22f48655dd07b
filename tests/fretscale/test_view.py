from typing import List

import pytest

from fretscale.analysis import analyze
from fretscale.config import init_config
from fretscale.equivalence import EquivalenceTable, build_equivalence_table
from fretscale.fretboard import StringPos
from fretscale.pitch import Note
from fretscale.state import (
    BoardState,
    CyclePosition,
    DisplayMode,
    Marker,
    SetDisplayMode,
    init_state,
    reduce,
)
from fretscale.view import (
    block_offset,
    block_pattern,
    build_view,
    position_label,
    render_text,
)


def standard_state() -> BoardState:
    return init_state(init_config(tuning="standard-guitar"))


@pytest.mark.parametrize(
    "intervals, expected",
    [
        ([0, 2, 3, 5, 7, 8, 10], "0-2-3 / 0-2-3 / 0"),
        ([0, 2, 4, 5, 7, 9, 11], "0-2-4 / 0-2-4 / 1"),
        ([0, 3, 5, 7, 10], "0-3 / 0-2 / 0"),
        ([0, 2, 4, 7, 9], "0-2-4 / 2-4"),
        ([0, 5], "0 / 0"),
        ([7, 9], "2-4"),
        ([], ""),
    ],
)
def test_block_pattern(intervals: List[int], expected: str) -> None:
    assert block_pattern(intervals) == expected


def test_block_offset() -> None:
    assert [block_offset(i) for i in range(12)] == [0, 1, 2, 3, 4, 0, 1, 2, 3, 4, 0, 1]


@pytest.mark.parametrize(
    "mode, interval, is_root, expected",
    [
        (DisplayMode.Off, 3, False, ""),
        (DisplayMode.Off, 0, True, ""),
        (DisplayMode.Notes, 3, False, "G"),
        (DisplayMode.Intervals, 3, False, "m3"),
        (DisplayMode.Intervals, 7, False, "P5"),
        (DisplayMode.Semitones, 3, False, "3"),
        (DisplayMode.SemitonesString, 7, False, "2"),
        (DisplayMode.SemitonesString, 11, False, "1"),
        (DisplayMode.Semitones, 0, True, "G"),
        (DisplayMode.Intervals, 0, True, "G"),
    ],
)
def test_position_label(
    mode: DisplayMode, interval: int, is_root: bool, expected: str
) -> None:
    assert position_label(mode, Note.from_str("G2"), interval, is_root) == expected


def test_build_view() -> None:
    state = standard_state()
    view = build_view(state, analyze(state, EquivalenceTable()))
    root = view.position(StringPos(0, 0))
    assert root is not None
    assert root.is_root
    assert root.label == "E"
    assert root.marker == Marker.Absent
    g = view.position(StringPos(0, 3))
    assert g is not None
    assert g.note == Note.from_str("G2")
    assert g.interval == 3
    assert g.marker == Marker.Ringed
    assert g.label == "3"
    assert not g.is_fifth
    fifth = view.position(StringPos(0, 7))
    assert fifth is not None
    assert fifth.is_fifth
    # F is neither root nor marked
    assert view.position(StringPos(0, 1)) is None
    assert view.scale_notes == ["E", "F#", "G", "A", "B", "C", "D"]
    assert view.interval_pattern == "0-2-3 / 0-2-3 / 0"


def test_build_view_display_modes() -> None:
    state = reduce(standard_state(), SetDisplayMode(DisplayMode.Intervals))
    view = build_view(state, analyze(state, EquivalenceTable()))
    g = view.position(StringPos(0, 3))
    assert g is not None
    assert g.label == "m3"


def test_render_text() -> None:
    table = EquivalenceTable.preloaded(build_equivalence_table())
    state = reduce(standard_state(), CyclePosition(7, StringPos(0, 3)))
    text = render_text(build_view(state, analyze(state, table)))
    lines = text.splitlines()
    assert lines[1].startswith("E4")
    assert lines[6].startswith("E2")
    assert "(E)" in lines[6]
    assert "[3]" in lines[6]
    assert "Pattern: 0-2-3 / 0-2-3 / 0" in lines
    assert "Intervals: 0-2-3-5-7-8-10" in lines
    assert "Detected: Minor" in lines
    assert "G Major" in text
    assert "Tuning: Standard Guitar" in lines

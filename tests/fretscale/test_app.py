"""Tests for the host controller and the command line."""

from argparse import ArgumentTypeError
from dataclasses import replace
from pathlib import Path
from typing import List

import pytest

from fretscale.app import Visualizer
from fretscale.audio import NoteSink
from fretscale.config import init_config
from fretscale.equivalence import EquivalenceTable, build_equivalence_table
from fretscale.fretboard import StringPos
from fretscale.main import list_tunings, make_parser, parse_click, run
from fretscale.pitch import Note
from fretscale.state import Marker, MoveRoot, init_state
from fretscale.view import ViewModel


class RecordingSink(NoteSink):
    def __init__(self) -> None:
        self.played: List[Note] = []
        self.closed = False

    def play(self, note: Note) -> None:
        self.played.append(note)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def visualizer(sink: RecordingSink) -> Visualizer:
    state = init_state(init_config(tuning="standard-guitar"))
    table = EquivalenceTable.preloaded(build_equivalence_table())
    return Visualizer(state, table, sink)


def test_click_cycles_and_plays(visualizer: Visualizer, sink: RecordingSink) -> None:
    views: List[ViewModel] = []
    visualizer.add_listener(views.append)
    assert visualizer.click(0, 3)
    assert sink.played == [Note.from_str("G2")]
    assert visualizer.state.marker_at(StringPos(0, 3)) == Marker.Filled
    assert len(views) == 1
    assert views[0].analysis.detected_scale == "minor"


def test_click_on_root_only_plays(
    visualizer: Visualizer, sink: RecordingSink
) -> None:
    before = visualizer.state
    assert not visualizer.click(1, 7)
    assert sink.played == [Note.from_str("E3")]
    assert visualizer.state is before


def test_click_off_board(visualizer: Visualizer, sink: RecordingSink) -> None:
    assert not visualizer.click(0, 9)
    assert not visualizer.click(6, 0)
    assert sink.played == []


def test_select_match_and_equivalent(visualizer: Visualizer) -> None:
    main_list = visualizer.view.analysis.main_list
    major = next(m for m in main_list if m.label == "G Major")
    view = visualizer.select_match(major)
    assert (view.state.root, view.state.scale) == ("G", "major")
    equivalent = next(m for m in view.analysis.equivalents if m.label == "A Dorian")
    view = visualizer.select_equivalent(equivalent)
    assert (view.state.root, view.state.scale, view.state.mode) == (
        "A",
        "dorian",
        "dorian",
    )
    assert view.analysis.detected_scale == "dorian"


def test_dispatch_and_close(visualizer: Visualizer, sink: RecordingSink) -> None:
    view = visualizer.dispatch(MoveRoot("G"))
    assert view.state.root == "G"
    assert visualizer.view is view
    visualizer.close()
    assert sink.closed
    assert not visualizer.table.is_loaded


def test_from_config_loads_packaged_table() -> None:
    visualizer = Visualizer.from_config(init_config())
    assert visualizer.view.analysis.equivalents == []
    assert visualizer.load_equivalents()
    labels = [m.label for m in visualizer.view.analysis.equivalents]
    assert "G Major" in labels
    visualizer.close()


def test_parse_click() -> None:
    assert parse_click("0:3") == StringPos(0, 3)
    for bad in ["3", "a:b", "1:"]:
        with pytest.raises(ArgumentTypeError):
            parse_click(bad)


def test_parser() -> None:
    argv = ["--tuning", "standard-bass", "--frets", "5"]
    args = make_parser().parse_args(argv + ["--click", "0:3", "--click", "1:2"])
    assert args.tuning == "standard-bass"
    assert args.click == [StringPos(0, 3), StringPos(1, 2)]
    assert args.frets == 5
    assert args.display == "semitones"
    assert args.mode is None


def test_list_tunings() -> None:
    text = list_tunings()
    assert "Guitar:" in text
    assert "standard-bass" in text
    assert "E1 A1 D2 G2" in text


def test_run(sink: RecordingSink) -> None:
    config = init_config(tuning="standard-guitar")
    text = run(config, [StringPos(0, 3), StringPos(0, 3)], move_root="G", sink=sink)
    assert "Root: G" in text
    assert "Detected: " in text
    assert sink.played == [Note.from_str("G2"), Note.from_str("G2")]
    assert sink.closed


def test_run_without_table(tmp_path: Path) -> None:
    config = replace(
        init_config(),
        equivalents=str(tmp_path / "missing.csv"),
        load_attempts=1,
    )
    text = run(config, [])
    assert "Equivalents: \n" in text
    assert "Matches: E Minor" in text

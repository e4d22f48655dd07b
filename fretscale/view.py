"""View model and text rendering for fretscale.

The view model is what a renderer consumes: one entry per position that is
either a root or carries a marker, with its note, interval from the root,
marker kind and the label the current display mode asks for. ``render_text``
turns a view model into the plain-text fretboard printed by the CLI.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from fretscale.analysis import Analysis
from fretscale.base import MatchException
from fretscale.catalog import display_name
from fretscale.constants import FIFTH, MAX_NOTES
from fretscale.fretboard import StringPos, iter_positions, note_at
from fretscale.pitch import Note
from fretscale.state import BoardState, DisplayMode, Marker

INTERVAL_NAMES: List[str] = [
    "1",
    "m2",
    "M2",
    "m3",
    "M3",
    "P4",
    "d5",
    "P5",
    "m6",
    "M6",
    "m7",
    "M7",
]
"""Interval quality names indexed by semitones above the root."""

BLOCK_STARTS: List[int] = [0, 5, 10]
"""First interval of each block in the 5-5-2 layout of an octave."""

CELL_WIDTH = 5


@dataclass(frozen=True)
class PositionView:
    """Render flags for a single drawn position."""

    pos: StringPos
    note: Note
    interval: int  # Semitones above the root
    is_root: bool
    is_fifth: bool
    marker: Marker  # Always Absent for roots
    label: str  # Empty when nothing should be written


@dataclass(frozen=True)
class ViewModel:
    state: BoardState
    analysis: Analysis
    scale_notes: List[str]
    positions: List[PositionView]
    interval_pattern: str

    def position(self, pos: StringPos) -> Optional[PositionView]:
        for view in self.positions:
            if view.pos == pos:
                return view
        return None


def block_offset(interval: int) -> int:
    """Reduce an interval to its offset within its 5-5-2 block."""
    interval = interval % MAX_NOTES
    return interval - max(start for start in BLOCK_STARTS if start <= interval)


def block_pattern(intervals: Sequence[int]) -> str:
    """Render intervals in 5-5-2 block notation.

    Intervals 0-4, 5-9 and 10-11 fall into three blocks, each written as
    offsets from the block start joined by dashes. Empty blocks are omitted.

    Examples:
        ``[0, 2, 3, 5, 7, 8, 10]`` renders as ``"0-2-3 / 0-2-3 / 0"``.
    """
    blocks: Dict[int, List[int]] = {start: [] for start in BLOCK_STARTS}
    for interval in intervals:
        offset = block_offset(interval)
        blocks[interval % MAX_NOTES - offset].append(offset)
    return " / ".join(
        "-".join(str(offset) for offset in blocks[start])
        for start in BLOCK_STARTS
        if blocks[start]
    )


def position_label(
    display_mode: DisplayMode, note: Note, interval: int, is_root: bool
) -> str:
    """The text written on a drawn position; roots always show their name."""
    if display_mode == DisplayMode.Off:
        return ""
    elif is_root or display_mode == DisplayMode.Notes:
        return note.spelling
    elif display_mode == DisplayMode.Intervals:
        return INTERVAL_NAMES[interval % MAX_NOTES]
    elif display_mode == DisplayMode.Semitones:
        return str(interval)
    elif display_mode == DisplayMode.SemitonesString:
        return str(block_offset(interval))
    else:
        raise MatchException(display_mode)


def build_view(state: BoardState, analysis: Analysis) -> ViewModel:
    """Collect render flags for every root or marked position on the board."""
    positions: List[PositionView] = []
    root_class = state.root_class
    for pos in iter_positions(state.tuning, state.fret_count):
        note = note_at(state.tuning, pos.str_index, pos.fret)
        if note is None:
            continue
        is_root = note.pitch_class == root_class
        marker = Marker.Absent if is_root else state.marker_at(pos)
        if not is_root and not marker.marked:
            continue
        interval = (note.pitch_class - root_class) % MAX_NOTES
        positions.append(
            PositionView(
                pos=pos,
                note=note,
                interval=interval,
                is_root=is_root,
                is_fifth=interval == FIFTH,
                marker=marker,
                label=position_label(state.display_mode, note, interval, is_root),
            )
        )
    return ViewModel(
        state=state,
        analysis=analysis,
        scale_notes=state.scale_notes(),
        positions=positions,
        interval_pattern=block_pattern(analysis.intervals),
    )


def _cell(view: Optional[PositionView]) -> str:
    if view is None:
        text = "-"
    elif view.is_root:
        text = f"({view.label or 'R'})"
    elif view.marker == Marker.Filled:
        text = f"[{view.label or '#'}]"
    else:
        text = view.label or "o"
    return f"{text:^{CELL_WIDTH}}"


def render_text(view: ViewModel) -> str:
    """Render the board and its analysis as plain text.

    The highest string is printed first. Roots are wrapped in parentheses
    and filled markers in square brackets.
    """
    state = view.state
    by_pos = {p.pos: p for p in view.positions}
    frets = range(state.fret_count + 1)
    lines = [" " * 4 + "".join(f"{fret:^{CELL_WIDTH}}" for fret in frets)]
    for str_index in reversed(range(state.tuning.string_count)):
        open_note = state.tuning.strings[str_index]
        cells = "".join(_cell(by_pos.get(StringPos(str_index, fret))) for fret in frets)
        lines.append(f"{str(open_note):<4}{cells}")
    analysis = view.analysis
    lines.append("")
    lines.append(f"Tuning: {state.tuning.name}")
    lines.append(
        f"Root: {state.root}  Scale: {display_name(state.scale)}"
        f"  Mode: {display_name(state.mode)}"
    )
    lines.append(f"Notes: {' '.join(view.scale_notes)}")
    lines.append(f"Intervals: {'-'.join(str(i) for i in analysis.intervals)}")
    lines.append(f"Pattern: {view.interval_pattern}")
    if state.manually_edited:
        detected = analysis.detected_scale
        lines.append(
            f"Detected: {display_name(detected) if detected is not None else 'none'}"
        )
    lines.append("Equivalents: " + ", ".join(m.label for m in analysis.equivalents))
    lines.append("Matches: " + ", ".join(m.label for m in analysis.main_list))
    return "\n".join(lines)

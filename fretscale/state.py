"""Fretboard state machine for fretscale.

The whole visualizer state is one immutable ``BoardState`` snapshot: the
tuning, root, scale and mode selection, fret count, display mode and the
per-position marker map. Every user action is a ``BoardEvent`` and
``reduce`` maps (snapshot, event) to a new snapshot without touching the old
one. Root positions never appear in the marker map; their "on" state is
implied by the root itself.
"""

from __future__ import annotations

import logging
from abc import ABCMeta
from dataclasses import dataclass, replace
from enum import Enum, auto, unique
from typing import Dict, FrozenSet, List, Optional

from fretscale.base import MatchException
from fretscale.catalog import default_mode_for, is_in_scale, scale_notes
from fretscale.config import Config
from fretscale.constants import DEFAULT_ROOT, DEFAULT_SCALE, MAX_NOTES
from fretscale.fretboard import StringPos, Tuning, iter_positions, note_at, tuning_for
from fretscale.pitch import name_of, parse_class


@unique
class Marker(Enum):
    """Tri-state marker on a non-root fretboard position."""

    Absent = auto()  # Not marked; never stored in the marker map
    Ringed = auto()  # Marked as a member of the current note set
    Filled = auto()  # Accented on top of a ringed note class

    @property
    def marked(self) -> bool:
        return self != Marker.Absent

    def next(self) -> Marker:
        """Advance through the cycle absent, ringed, filled, absent."""
        if self == Marker.Absent:
            return Marker.Ringed
        elif self == Marker.Ringed:
            return Marker.Filled
        elif self == Marker.Filled:
            return Marker.Absent
        else:
            raise MatchException(self)


@unique
class DisplayMode(Enum):
    """What label the renderer puts on marked positions."""

    Off = "none"
    Notes = "notes"
    Intervals = "intervals"
    Semitones = "semitones"
    SemitonesString = "semitonesString"


@dataclass(frozen=True)
class BoardState:
    """A complete configuration plus marker map snapshot.

    Snapshots are replaced wholesale on every event. The marker map is never
    mutated after construction and holds no entry whose pitch class is the
    root's.
    """

    tuning: Tuning
    root: str  # Canonical sharp spelling
    scale: str
    mode: str
    fret_count: int
    display_mode: DisplayMode
    manually_edited: bool
    markers: Dict[StringPos, Marker]

    @property
    def root_class(self) -> int:
        return _root_class(self.root)

    def marker_at(self, pos: StringPos) -> Marker:
        return self.markers.get(pos, Marker.Absent)

    def class_at(self, pos: StringPos) -> Optional[int]:
        """Pitch class sounding at a position, or None if off the board."""
        note = note_at(self.tuning, pos.str_index, pos.fret)
        return None if note is None else note.pitch_class

    def scale_notes(self) -> List[str]:
        return scale_notes(self.root, self.scale, self.mode)

    def visible_markers(self) -> Dict[StringPos, Marker]:
        """Markers within the current fret count.

        Entries beyond it survive a shrink but are ignored, and growing the
        board again rewrites them.
        """
        return {
            pos: marker
            for pos, marker in self.markers.items()
            if pos.fret <= self.fret_count
        }

    def marked_classes(self) -> FrozenSet[int]:
        """Pitch classes with a visible marker; never includes the root."""
        classes = set()
        for pos, marker in self.visible_markers().items():
            pc = self.class_at(pos)
            if marker.marked and pc is not None:
                classes.add(pc)
        return frozenset(classes)


def _root_class(root: str) -> int:
    pc = parse_class(root)
    assert pc is not None, f"root {root!r} must be a known note"
    return pc


def populate_markers(
    tuning: Tuning, root: str, scale: str, mode: str, fret_count: int
) -> Dict[StringPos, Marker]:
    """Ring every in-scale, non-root position from the nut to fret_count."""
    notes = scale_notes(root, scale, mode)
    root_class = _root_class(root)
    markers: Dict[StringPos, Marker] = {}
    for pos in iter_positions(tuning, fret_count):
        note = note_at(tuning, pos.str_index, pos.fret)
        if note is None or note.pitch_class == root_class:
            continue
        if is_in_scale(note.spelling, notes):
            markers[pos] = Marker.Ringed
    return markers


def init_state(config: Config) -> BoardState:
    """Build the startup snapshot from a configuration."""
    tuning = tuning_for(config.tuning)
    root = _canonical_or(config.root, DEFAULT_ROOT)
    mode = config.mode if config.mode is not None else default_mode_for(config.scale)
    return BoardState(
        tuning=tuning,
        root=root,
        scale=config.scale,
        mode=mode,
        fret_count=max(0, config.fret_count),
        display_mode=DisplayMode(config.display_mode),
        manually_edited=False,
        markers=populate_markers(tuning, root, config.scale, mode, config.fret_count),
    )


def _canonical_or(note: str, fallback: str) -> str:
    pc = parse_class(note)
    return fallback if pc is None else name_of(pc)


def _repopulated(state: BoardState, **changes: object) -> BoardState:
    """Replace fields and regenerate markers from the resulting selection."""
    fresh = replace(state, manually_edited=False, **changes)  # type: ignore[arg-type]
    return replace(
        fresh,
        markers=populate_markers(
            fresh.tuning, fresh.root, fresh.scale, fresh.mode, fresh.fret_count
        ),
    )


def _swap_root(
    state: BoardState,
    markers: Dict[StringPos, Marker],
    new_class: int,
    notes: Optional[List[str]] = None,
) -> Dict[StringPos, Marker]:
    """Materialize the old root as ringed and strip the new root.

    Old-root positions within the fret count become ringed (only those in
    ``notes`` when given). Every entry of the new root's class is removed,
    including ones beyond the fret count.
    """
    old_class = state.root_class
    swapped = dict(markers)
    for pos in iter_positions(state.tuning, state.fret_count):
        note = note_at(state.tuning, pos.str_index, pos.fret)
        if note is None or note.pitch_class != old_class:
            continue
        if notes is None or is_in_scale(note.spelling, notes):
            swapped[pos] = Marker.Ringed
    return {
        pos: marker
        for pos, marker in swapped.items()
        if state.class_at(pos) != new_class
    }


class BoardEvent(metaclass=ABCMeta):
    """Abstract base class for user actions dispatched into the reducer."""


@dataclass(frozen=True)
class SelectTuning(BoardEvent):
    """Switch tuning and reset to the default root and scale."""

    tuning: Tuning


@dataclass(frozen=True)
class SelectScale(BoardEvent):
    """Select a primary scale at the current root."""

    scale: str


@dataclass(frozen=True)
class SelectMode(BoardEvent):
    """Select a mode of the current scale at the current root."""

    mode: str


@dataclass(frozen=True)
class TransposeRoot(BoardEvent):
    """Move the current scale shape to a new root."""

    root: str


@dataclass(frozen=True)
class MoveRoot(BoardEvent):
    """Reinterpret the marked notes around a new root."""

    root: str


@dataclass(frozen=True)
class ChangeFretCount(BoardEvent):
    fret_count: int


@dataclass(frozen=True)
class CyclePosition(BoardEvent):
    """Advance the marker at a clicked position and sync its pitch class."""

    pitch_class: int
    pos: StringPos


@dataclass(frozen=True)
class LoadFromMatch(BoardEvent):
    """Adopt a detected match, keeping only the marks that fit it."""

    root: str
    scale: Optional[str]
    mode: Optional[str] = None


@dataclass(frozen=True)
class SetFromEquivalent(BoardEvent):
    """Relabel the marked notes as an equivalent scale at another root."""

    root: str
    scale: Optional[str]
    mode: Optional[str] = None


@dataclass(frozen=True)
class SetDisplayMode(BoardEvent):
    display_mode: DisplayMode


def _select_tuning(state: BoardState, event: SelectTuning) -> BoardState:
    return _repopulated(
        state,
        tuning=event.tuning,
        root=DEFAULT_ROOT,
        scale=DEFAULT_SCALE,
        mode=default_mode_for(DEFAULT_SCALE),
    )


def _move_root(state: BoardState, event: MoveRoot) -> BoardState:
    new_class = parse_class(event.root)
    if new_class is None:
        return state
    return replace(
        state,
        root=name_of(new_class),
        markers=_swap_root(state, state.markers, new_class),
        manually_edited=True,
    )


def _change_fret_count(state: BoardState, event: ChangeFretCount) -> BoardState:
    new_count = max(0, event.fret_count)
    old_count = state.fret_count
    if new_count <= old_count:
        return replace(state, fret_count=new_count)
    if not state.manually_edited:
        return _repopulated(state, fret_count=new_count)
    # Newly exposed frets follow the visible marked classes, replacing any
    # entry left over from an earlier shrink
    classes = state.marked_classes()
    markers = dict(state.markers)
    for pos in iter_positions(state.tuning, new_count):
        if pos.fret <= old_count:
            continue
        pc = state.class_at(pos)
        if pc is not None and pc in classes and pc != state.root_class:
            markers[pos] = Marker.Ringed
        else:
            markers.pop(pos, None)
    return replace(state, fret_count=new_count, markers=markers)


def _cycle_position(state: BoardState, event: CyclePosition) -> BoardState:
    pitch_class = event.pitch_class % MAX_NOTES
    if pitch_class == state.root_class:
        return state
    next_marker = state.marker_at(event.pos).next()
    markers = dict(state.markers)
    for pos in iter_positions(state.tuning, state.fret_count):
        if state.class_at(pos) != pitch_class:
            continue
        # Filled applies to the clicked position only
        if pos == event.pos or next_marker != Marker.Filled:
            if next_marker == Marker.Absent:
                markers.pop(pos, None)
            else:
                markers[pos] = next_marker
    return replace(state, markers=markers, manually_edited=True)


def _load_from_match(state: BoardState, event: LoadFromMatch) -> BoardState:
    new_class = parse_class(event.root)
    new_scale = event.scale or event.mode or state.scale
    new_mode = event.mode or new_scale
    if new_class is None:
        return state
    new_root = name_of(new_class)
    notes = scale_notes(new_root, new_scale, new_mode)
    markers: Dict[StringPos, Marker] = {}
    for pos, marker in state.markers.items():
        note = note_at(state.tuning, pos.str_index, pos.fret)
        if note is not None and is_in_scale(note.spelling, notes):
            markers[pos] = marker
    if new_class != state.root_class:
        markers = _swap_root(state, markers, new_class, notes)
    return replace(
        state,
        root=new_root,
        scale=new_scale,
        mode=new_mode,
        markers=markers,
        manually_edited=True,
    )


def _set_from_equivalent(state: BoardState, event: SetFromEquivalent) -> BoardState:
    new_class = parse_class(event.root)
    if new_class is None:
        return state
    new_scale = event.scale or event.mode or state.scale
    new_mode = event.mode if event.mode is not None else default_mode_for(new_scale)
    return replace(
        state,
        root=name_of(new_class),
        scale=new_scale,
        mode=new_mode,
        markers=_swap_root(state, state.markers, new_class),
        manually_edited=True,
    )


def reduce(state: BoardState, event: BoardEvent) -> BoardState:
    """Compute the snapshot that follows an event.

    Total over every event type below: inputs the board cannot use (such as
    an unknown root spelling) leave the snapshot unchanged.

    Args:
        state: The current snapshot; never modified.
        event: The user action.

    Returns:
        The next snapshot.

    Raises:
        MatchException: If the event is not a known BoardEvent type.
    """
    logging.debug("reducing %s", event)
    if isinstance(event, SelectTuning):
        return _select_tuning(state, event)
    elif isinstance(event, SelectScale):
        return _repopulated(
            state, scale=event.scale, mode=default_mode_for(event.scale)
        )
    elif isinstance(event, SelectMode):
        return _repopulated(state, mode=event.mode)
    elif isinstance(event, TransposeRoot):
        pc = parse_class(event.root)
        return state if pc is None else _repopulated(state, root=name_of(pc))
    elif isinstance(event, MoveRoot):
        return _move_root(state, event)
    elif isinstance(event, ChangeFretCount):
        return _change_fret_count(state, event)
    elif isinstance(event, CyclePosition):
        return _cycle_position(state, event)
    elif isinstance(event, LoadFromMatch):
        return _load_from_match(state, event)
    elif isinstance(event, SetFromEquivalent):
        return _set_from_equivalent(state, event)
    elif isinstance(event, SetDisplayMode):
        return replace(state, display_mode=event.display_mode)
    else:
        raise MatchException(event)

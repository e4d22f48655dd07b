"""Host controller for fretscale.

This module ties the pieces together: the ``Visualizer`` owns the current
board snapshot, the equivalence table and the note sink, routes events
through the reducer and publishes a fresh view model after every change.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from fretscale.analysis import analyze
from fretscale.audio import NoteSink, NullNoteSink
from fretscale.base import Closeable
from fretscale.config import Config
from fretscale.detect import Match
from fretscale.equivalence import EquivalenceTable
from fretscale.fretboard import StringPos, note_at
from fretscale.state import (
    BoardEvent,
    BoardState,
    CyclePosition,
    LoadFromMatch,
    SetFromEquivalent,
    init_state,
    reduce,
)
from fretscale.view import ViewModel, build_view

Listener = Callable[[ViewModel], None]


class Visualizer(Closeable):
    """Single-threaded controller around the board state machine.

    Events are applied one at a time; each produces a new snapshot and a new
    view model which is handed to every registered listener.
    """

    def __init__(
        self,
        state: BoardState,
        table: EquivalenceTable,
        sink: Optional[NoteSink] = None,
    ) -> None:
        """Initialize the controller.

        Args:
            state: The starting snapshot.
            table: Equivalence lookup, loaded or not.
            sink: Where clicked notes are played; silent if omitted.
        """
        self._state = state
        self._table = table
        self._sink: NoteSink = sink if sink is not None else NullNoteSink()
        self._listeners: List[Listener] = []
        self._view = build_view(state, analyze(state, table))

    @classmethod
    def from_config(cls, config: Config, sink: Optional[NoteSink] = None) -> Visualizer:
        """Build a controller and its equivalence table from a configuration.

        The table is not loaded here; call ``start_loading`` or
        ``load_equivalents``.
        """
        table = EquivalenceTable(
            source=config.equivalents,
            attempts=config.load_attempts,
            backoff=config.load_backoff,
        )
        return cls(init_state(config), table, sink)

    @property
    def state(self) -> BoardState:
        return self._state

    @property
    def view(self) -> ViewModel:
        return self._view

    @property
    def table(self) -> EquivalenceTable:
        return self._table

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def refresh(self) -> ViewModel:
        """Recompute the view model, e.g. after the table finished loading."""
        self._view = build_view(self._state, analyze(self._state, self._table))
        for listener in self._listeners:
            listener(self._view)
        return self._view

    def dispatch(self, event: BoardEvent) -> ViewModel:
        """Apply an event and publish the resulting view model."""
        self._state = reduce(self._state, event)
        logging.debug(
            "state now %s %s/%s, %d markers",
            self._state.root,
            self._state.scale,
            self._state.mode,
            len(self._state.markers),
        )
        return self.refresh()

    def click(self, str_index: int, fret: int) -> bool:
        """Handle a pointer click on a position.

        The note at the position is played. Root positions cannot be toggled;
        any other position on the board cycles its marker.

        Returns:
            True if the click changed the board.
        """
        if fret > self._state.fret_count:
            return False
        note = note_at(self._state.tuning, str_index, fret)
        if note is None:
            return False
        self._sink.play(note)
        if note.pitch_class == self._state.root_class:
            logging.debug("ignoring click on root at %s", StringPos(str_index, fret))
            return False
        self.dispatch(CyclePosition(note.pitch_class, StringPos(str_index, fret)))
        return True

    def select_match(self, match: Match) -> ViewModel:
        """Adopt a main-list or detected match."""
        return self.dispatch(LoadFromMatch(match.root, match.scale, match.mode))

    def select_equivalent(self, match: Match) -> ViewModel:
        """Relabel the current marks as an equivalent scale."""
        return self.dispatch(SetFromEquivalent(match.root, match.scale, match.mode))

    def start_loading(self) -> None:
        """Load the equivalence table in the background."""
        self._table.start_loading()

    def load_equivalents(self) -> bool:
        """Load the equivalence table now and refresh the view.

        Returns:
            True if the table is loaded.
        """
        loaded = self._table.load_with_retry()
        self.refresh()
        return loaded

    def close(self) -> None:
        self._sink.close()
        self._table.close()

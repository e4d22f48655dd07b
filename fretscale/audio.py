"""Audio feedback boundary for fretscale.

Clicking a position plays its note. The core never synthesizes sound; it
hands the absolute note to a ``NoteSink``. ``MidiNoteSink`` forwards notes to
a MIDI output port so any synth can voice them.
"""

from __future__ import annotations

import logging
from abc import ABCMeta, abstractmethod
from typing import Optional

import mido
from mido.frozen import FrozenMessage
from mido.ports import BaseOutput

from fretscale.base import Closeable
from fretscale.pitch import Note

DEFAULT_CHANNEL = 0
DEFAULT_VELOCITY = 100
MAX_MIDI_NOTE = 127


def note_on_msg(note: Note, velocity: int, channel: int) -> Optional[FrozenMessage]:
    """Build a note-on message, or None if the note is outside the MIDI range."""
    midi_note = note.midi_note
    if midi_note < 0 or midi_note > MAX_MIDI_NOTE:
        return None
    return FrozenMessage("note_on", channel=channel, note=midi_note, velocity=velocity)


def note_off_msg(midi_note: int, channel: int) -> FrozenMessage:
    return FrozenMessage("note_off", channel=channel, note=midi_note, velocity=0)


class NoteSink(Closeable, metaclass=ABCMeta):
    """Abstract base class for anything that can sound a clicked note."""

    @abstractmethod
    def play(self, note: Note) -> None:
        """Sound a note.

        Args:
            note: The absolute note at the clicked position.
        """
        raise NotImplementedError()

    def close(self) -> None:
        pass


class NullNoteSink(NoteSink):
    """Discards every note."""

    def play(self, note: Note) -> None:
        logging.debug("muted note %s", note)


class MidiNoteSink(NoteSink):
    """Sends clicked notes to a MIDI output port.

    Only one note sounds at a time: playing a note releases the previous one,
    and closing the sink releases whatever is still sounding.
    """

    @classmethod
    def open(cls, out_port_name: str, virtual: bool = False) -> MidiNoteSink:
        """Open a MIDI output port by name.

        Args:
            out_port_name: The name of the MIDI port to open.
            virtual: Whether to create a virtual MIDI port.

        Returns:
            A new MidiNoteSink connected to the port.
        """
        out_port = mido.open_output(out_port_name, virtual=virtual)
        return cls(out_port=out_port, owns_port=True)

    def __init__(
        self,
        out_port: BaseOutput,
        channel: int = DEFAULT_CHANNEL,
        velocity: int = DEFAULT_VELOCITY,
        owns_port: bool = False,
    ) -> None:
        """Initialize the sink.

        Args:
            out_port: Anything with a mido-style ``send`` method.
            channel: MIDI channel (0-based) for every message.
            velocity: Note-on velocity.
            owns_port: Whether closing the sink also closes the port.
        """
        self._out_port = out_port
        self._channel = channel
        self._velocity = velocity
        self._owns_port = owns_port
        self._sounding: Optional[int] = None

    def _release(self) -> None:
        if self._sounding is not None:
            self._out_port.send(note_off_msg(self._sounding, self._channel))
            self._sounding = None

    def play(self, note: Note) -> None:
        msg = note_on_msg(note, self._velocity, self._channel)
        if msg is None:
            logging.warning("note %s is outside the MIDI range", note)
            return
        self._release()
        logging.debug("sending %s", msg)
        self._out_port.send(msg)
        self._sounding = msg.note

    def close(self) -> None:
        self._release()
        if self._owns_port:
            self._out_port.close()

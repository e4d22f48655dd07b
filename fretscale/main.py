"""Main entry point for the fretscale command.

This module contains the main function and command-line argument handling.
It sets up logging, builds the startup configuration, loads the equivalence
table, applies any scripted clicks and prints the resulting fretboard.
"""

import logging
from argparse import ArgumentParser, ArgumentTypeError
from dataclasses import replace
from typing import List, Optional

from fretscale import constants
from fretscale.app import Visualizer
from fretscale.audio import MidiNoteSink, NoteSink
from fretscale.catalog import MODE_LOOKUP, SCALE_LOOKUP
from fretscale.config import Config, init_config
from fretscale.equivalence import write_equivalence_csv
from fretscale.fretboard import TUNING_LOOKUP, StringPos, tunings_by_category
from fretscale.state import DisplayMode, MoveRoot
from fretscale.view import render_text


def parse_click(text: str) -> StringPos:
    """Parse a ``STRING:FRET`` click argument."""
    str_part, sep, fret_part = text.partition(":")
    try:
        if not sep:
            raise ValueError(text)
        return StringPos(str_index=int(str_part), fret=int(fret_part))
    except ValueError:
        raise ArgumentTypeError(f"expected STRING:FRET, got {text!r}")


def make_parser() -> ArgumentParser:
    """Create the command-line argument parser.

    Returns:
        An ArgumentParser configured with all the command-line options
        for the fretscale command.
    """
    parser = ArgumentParser(description="Show a scale on a fretted instrument.")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument(
        "--tuning", choices=sorted(TUNING_LOOKUP), default=constants.DEFAULT_TUNING
    )
    parser.add_argument("--root", default=constants.DEFAULT_ROOT)
    parser.add_argument(
        "--scale", choices=sorted(SCALE_LOOKUP), default=constants.DEFAULT_SCALE
    )
    parser.add_argument("--mode", choices=sorted(MODE_LOOKUP))
    parser.add_argument("--frets", type=int, default=constants.DEFAULT_FRET_COUNT)
    parser.add_argument(
        "--display",
        choices=[m.value for m in DisplayMode],
        default=constants.DEFAULT_DISPLAY_MODE,
    )
    parser.add_argument(
        "--equivalents", help="Path or URL of the equivalence table CSV"
    )
    parser.add_argument("--midi-port", help="MIDI output port for clicked notes")
    parser.add_argument(
        "--click",
        type=parse_click,
        action="append",
        default=[],
        metavar="STRING:FRET",
        help="Toggle a position; may be repeated and is applied in order",
    )
    parser.add_argument(
        "--move-root", metavar="NOTE", help="Move the root after applying clicks"
    )
    parser.add_argument("--list-tunings", action="store_true")
    parser.add_argument(
        "--write-equivalents",
        metavar="PATH",
        help="Write the equivalence table for the scale catalog and exit",
    )
    return parser


def configure_logging(log_level: str) -> None:
    """Configure the logging system with the specified log level.

    Args:
        log_level: The logging level (e.g., 'DEBUG', 'INFO', 'WARNING').
    """
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(filename)s:%(lineno)d -- %(message)s",
        level=log_level,
    )


def list_tunings() -> str:
    lines = []
    for category, tunings in tunings_by_category().items():
        lines.append(f"{category}:")
        for tuning in tunings:
            strings = " ".join(str(note) for note in tuning.strings)
            lines.append(f"  {tuning.key:<20} {tuning.name:<20} {strings}")
    return "\n".join(lines)


def run(
    config: Config,
    clicks: List[StringPos],
    move_root: Optional[str] = None,
    sink: Optional[NoteSink] = None,
) -> str:
    """Build the visualizer, apply the scripted actions and render it.

    Args:
        config: Startup configuration.
        clicks: Positions to click, in order.
        move_root: New root to move to after the clicks, if any.
        sink: Where clicked notes are played.

    Returns:
        The rendered board and analysis.
    """
    visualizer = Visualizer.from_config(config, sink)
    try:
        if not visualizer.load_equivalents():
            logging.warning("continuing without scale equivalents")
        for pos in clicks:
            if not visualizer.click(pos.str_index, pos.fret):
                logging.info("click at %s left the board unchanged", pos)
        if move_root is not None:
            visualizer.dispatch(MoveRoot(move_root))
        return render_text(visualizer.view)
    finally:
        visualizer.close()


def main() -> None:
    """Main entry point for the fretscale command.

    Parses command-line arguments, configures logging, and prints the
    requested fretboard (or the tuning list, or writes the equivalence table).
    """
    parser = make_parser()
    args = parser.parse_args()
    configure_logging(args.log_level)
    if args.list_tunings:
        print(list_tunings())
        return
    if args.write_equivalents is not None:
        count = write_equivalence_csv(args.write_equivalents)
        logging.info("wrote %d scale rows to %s", count, args.write_equivalents)
        return
    config = replace(
        init_config(
            tuning=args.tuning, root=args.root, scale=args.scale, fret_count=args.frets
        ),
        mode=args.mode,
        display_mode=args.display,
        equivalents=args.equivalents,
    )
    sink = MidiNoteSink.open(args.midi_port) if args.midi_port else None
    print(run(config, args.click, args.move_root, sink))
    logging.info("done")


if __name__ == "__main__":
    main()

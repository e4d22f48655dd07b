"""Values derived from a board snapshot.

Nothing here is stored: the marked pitch classes, their intervals from the
root, the exact scale they spell, its equivalents and the full list of
matching scales are recomputed from each snapshot.
"""

from dataclasses import dataclass
from typing import FrozenSet, List, Optional

from fretscale.constants import MAX_NOTES
from fretscale.detect import Match, detect_exact, equivalents_of, find_all_matches
from fretscale.equivalence import EquivalenceTable
from fretscale.state import BoardState


@dataclass(frozen=True)
class Analysis:
    marked_classes: FrozenSet[int]  # Always includes the root
    intervals: List[int]  # Sorted semitone distances from the root
    detected_scale: Optional[str]  # Only set when manually edited
    equivalents: List[Match]
    main_list: List[Match]


def marked_classes(state: BoardState) -> FrozenSet[int]:
    """Pitch classes marked within the fret count, plus the root."""
    return state.marked_classes() | {state.root_class}


def analyze(state: BoardState, table: EquivalenceTable) -> Analysis:
    """Derive detection and equivalence results from a snapshot.

    A clean board reports the equivalents of its selected scale. A hand-edited
    board reports the scale its marks spell exactly, if any, and that scale's
    equivalents; with no exact match it has no equivalents.

    Args:
        state: The snapshot to analyze.
        table: Equivalence lookup; may still be unloaded.

    Returns:
        The derived values.
    """
    classes = marked_classes(state)
    root_class = state.root_class
    intervals = sorted((pc - root_class) % MAX_NOTES for pc in classes)
    detected: Optional[str] = None
    if state.manually_edited:
        detected = detect_exact(intervals)
        equivalents = (
            [] if detected is None else equivalents_of(state.root, detected, table)
        )
    else:
        equivalents = equivalents_of(state.root, state.scale, table)
    return Analysis(
        marked_classes=classes,
        intervals=intervals,
        detected_scale=detected,
        equivalents=equivalents,
        main_list=find_all_matches(intervals, state.root),
    )

"""Scale detection and matching for fretscale.

Given a set of intervals measured from the selected root, this module finds
the catalog scale with exactly that shape, every (root, scale or mode) pair
whose notes are exactly the marked notes, and the precomputed equivalents of
a named scale.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Set, Tuple

from fretscale.catalog import (
    MODES,
    SCALES,
    Scale,
    display_name,
    key_from_display_name,
    mode_display_name,
    popularity,
)
from fretscale.constants import MAX_NOTES
from fretscale.equivalence import EquivalenceTable
from fretscale.pitch import class_of, name_of, parse_class


@dataclass(frozen=True)
class Match:
    """A named scale or mode at a specific root.

    Exactly one of ``scale`` and ``mode`` is set: primary catalog scales
    populate ``scale``, direct mode formulas populate ``mode``.
    """

    root: str
    """Canonical root name, e.g. ``"G"``."""
    scale: Optional[str]
    """Primary scale key, or None for a mode match."""
    mode: Optional[str]
    """Mode key, or None for a scale match."""
    label: str
    """Display label, ``"<Root> <DisplayName>"``."""
    popularity: int = 0

    @property
    def scale_or_mode(self) -> str:
        if self.scale is not None:
            return self.scale
        assert self.mode is not None
        return self.mode


def normalize_intervals(intervals: Iterable[int]) -> List[int]:
    """Reduce intervals modulo 12, deduplicate and sort ascending."""
    return sorted({i % MAX_NOTES for i in intervals})


def scale_label(root: str, key: str) -> Optional[str]:
    """Canonical ``"<Root> <DisplayName>"`` label used by the equivalence table.

    The root is respelled in the canonical sharp alphabet so that ``Db`` and
    ``C#`` produce the same key. Returns None for an unknown root.
    """
    pc = parse_class(root)
    if pc is None:
        return None
    return f"{name_of(pc)} {display_name(key)}"


def detect_exact(intervals: Iterable[int]) -> Optional[str]:
    """Find the primary scale whose formula is exactly this interval pattern.

    The comparison is relative to the current root: no rotation is tried.

    Args:
        intervals: Intervals from the selected root, in any order, possibly
            with duplicates.

    Returns:
        The first catalog scale key with the same cardinality and the same
        elements, or None. An empty pattern never matches.
    """
    pattern = normalize_intervals(intervals)
    if not pattern:
        return None
    for scale in SCALES:
        if len(scale.intervals) != len(pattern):
            continue
        if scale.intervals == pattern:
            return scale.key
    return None


def _candidates() -> List[Tuple[Scale, bool]]:
    return [(s, False) for s in SCALES] + [(m, True) for m in MODES]


def find_all_matches(intervals: Iterable[int], reference_root: str) -> List[Match]:
    """Find every (root, scale or mode) whose notes are exactly the pattern.

    For each of the twelve candidate roots, each catalog formula of the same
    cardinality is re-expressed relative to the reference root and compared
    with the pattern as a set. Matches are deduplicated on (root, key) and
    ordered by popularity (highest first), then root index, then label.

    Args:
        intervals: Intervals from the reference root.
        reference_root: The root the intervals are measured from, in any
            spelling.

    Returns:
        The ordered matches; empty for an empty pattern or an unknown root.
    """
    pattern: FrozenSet[int] = frozenset(normalize_intervals(intervals))
    ref_class = parse_class(reference_root)
    if not pattern or ref_class is None:
        return []
    matches: List[Match] = []
    seen: Set[Tuple[str, str]] = set()
    for cand_class in range(MAX_NOTES):
        cand_root = name_of(cand_class)
        # Semitones from the candidate root up to the reference root (G to E is 9)
        offset = (ref_class - cand_class) % MAX_NOTES
        for formula, is_mode in _candidates():
            if len(formula.intervals) != len(pattern):
                continue
            rotated = {(i - offset) % MAX_NOTES for i in formula.intervals}
            if rotated != pattern or (cand_root, formula.key) in seen:
                continue
            seen.add((cand_root, formula.key))
            if is_mode:
                name = mode_display_name(formula.key)
            else:
                name = display_name(formula.key)
            matches.append(
                Match(
                    root=cand_root,
                    scale=None if is_mode else formula.key,
                    mode=formula.key if is_mode else None,
                    label=f"{cand_root} {name}",
                    popularity=popularity(formula.key),
                )
            )
    matches.sort(key=lambda m: (-m.popularity, class_of(m.root), m.label))
    return matches


def _parse_label(label: str) -> Match:
    eq_root, _, eq_name = label.strip().partition(" ")
    key = key_from_display_name(eq_name)
    return Match(
        root=eq_root,
        scale=key,
        mode=None,
        label=label,
        popularity=popularity(key),
    )


def _root_order(match: Match) -> Tuple[int, str]:
    pc = parse_class(match.root)
    return (MAX_NOTES if pc is None else pc, match.label)


def equivalents_of(root: str, key: str, table: EquivalenceTable) -> List[Match]:
    """Scales with identical note content under a different label.

    Delegates to the equivalence table. Never blocks and never raises: an
    unloaded table, an unknown root or a label missing from the table all
    give an empty list.

    Args:
        root: Root note in any spelling.
        key: Scale (or mode) key whose display name forms the label.
        table: The equivalence lookup collaborator.

    Returns:
        Equivalent matches ordered by root index, then label.
    """
    label = scale_label(root, key)
    if label is None:
        return []
    return sorted((_parse_label(eq) for eq in table.lookup(label)), key=_root_order)

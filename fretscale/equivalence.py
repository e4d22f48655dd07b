"""Equivalence table loading and lookup for fretscale.

The equivalence table maps a ``"<Root> <Scale Name>"`` label to every other
label with identical note content (``"E Minor"`` to ``"G Major"`` and so on).
It is precomputed and shipped as a CSV matrix. This module owns the cache
for that table: a one-shot load with bounded retry and exponential backoff,
optionally run on a background thread, after which the cache is read-only.
Until a load succeeds every lookup returns an empty list.
"""

from __future__ import annotations

import csv
import io
import logging
import time
import urllib.error
import urllib.request
from enum import Enum, auto, unique
from importlib import resources
from pathlib import Path
from threading import Lock, Thread
from typing import Callable, Dict, FrozenSet, List, Mapping, Optional, Sequence, Union

from fretscale.base import Closeable, FretscaleError, TableFormatError, TableLoadError
from fretscale.catalog import SCALES
from fretscale.constants import (
    DEFAULT_LOAD_ATTEMPTS,
    DEFAULT_LOAD_BACKOFF,
    EQUIVALENTS_RESOURCE,
    INTERVALS_HEADER,
    MAX_NOTES,
    NOTE_SPELLINGS,
    SCALE_ROOT_HEADER,
)

Source = Union[str, Path, None]
"""A path, an http(s) URL, or None for the packaged data file."""

URL_TIMEOUT = 10.0
"""Seconds to wait on a remote table before the attempt counts as failed."""


@unique
class LoadState(Enum):
    """Lifecycle of the equivalence cache."""

    Unloaded = auto()  # Nothing attempted yet, or closed
    Loading = auto()  # An attempt is in flight
    Loaded = auto()  # Cache populated; immutable from here on
    Failed = auto()  # Retries exhausted; stays empty for the process


def read_source(source: Source) -> str:
    """Read the raw table text from a path, URL or the packaged data file.

    Raises:
        TableLoadError: If the text cannot be read.
    """
    try:
        if source is None:
            data = resources.files("fretscale").joinpath("data", EQUIVALENTS_RESOURCE)
            return data.read_text(encoding="utf-8")
        text_source = str(source)
        if text_source.startswith(("http://", "https://")):
            with urllib.request.urlopen(text_source, timeout=URL_TIMEOUT) as response:
                return response.read().decode("utf-8")
        return Path(text_source).read_text(encoding="utf-8")
    except (OSError, urllib.error.URLError) as e:
        raise TableLoadError(f"Cannot read equivalence table from {source}: {e}") from e


def parse_table(text: str) -> Dict[str, List[str]]:
    """Parse the CSV equivalence matrix.

    The first column holds the row label, the second the interval formula,
    and every further column is headed by a label. A cell reading ``yes``
    marks that column's label as equivalent to the row's label.

    Raises:
        TableFormatError: If there is no header or a row has the wrong width.
    """
    rows = [
        row
        for row in csv.reader(io.StringIO(text.strip()))
        if any(cell.strip() for cell in row)
    ]
    if not rows:
        raise TableFormatError("No headers found")
    headers = [h.strip() for h in rows[0]]
    if len(headers) < 2:
        raise TableFormatError(
            f"Expected {SCALE_ROOT_HEADER!r} and {INTERVALS_HEADER!r} columns"
        )
    errors = [
        f"Row {index + 2}: Expected {len(headers)} columns, got {len(row)}"
        for index, row in enumerate(rows[1:])
        if len(row) != len(headers)
    ]
    if errors:
        raise TableFormatError("; ".join(errors))
    label_headers = headers[2:]
    table: Dict[str, List[str]] = {}
    for row in rows[1:]:
        label = row[0].strip()
        if not label:
            continue
        table[label] = [
            header
            for header, cell in zip(label_headers, row[2:])
            if cell.strip().lower() == "yes"
        ]
    return table


def _label_pitch_classes() -> Dict[str, FrozenSet[int]]:
    notes: Dict[str, FrozenSet[int]] = {}
    for scale in SCALES:
        for root_class, root in enumerate(NOTE_SPELLINGS):
            notes[f"{root} {scale.name}"] = frozenset(
                (root_class + i) % MAX_NOTES for i in scale.intervals
            )
    return notes


def build_equivalence_table() -> Dict[str, List[str]]:
    """Compute the equivalence mapping directly from the scale catalog.

    Two labels are equivalent when they spell the same set of pitch classes
    and are not the same label.
    """
    notes = _label_pitch_classes()
    table: Dict[str, List[str]] = {}
    for label, own in notes.items():
        table[label] = [
            other
            for other, members in notes.items()
            if members == own and other != label
        ]
    return table


def build_equivalence_rows() -> List[List[str]]:
    """Build the CSV matrix (header row first) for the whole scale catalog.

    Rows and columns are ordered by scale, then by root.
    """
    notes = _label_pitch_classes()
    labels = list(notes)
    formulas = {
        f"{root} {scale.name}": ",".join(str(i) for i in scale.intervals)
        for scale in SCALES
        for root in NOTE_SPELLINGS
    }
    rows = [[SCALE_ROOT_HEADER, INTERVALS_HEADER, *labels]]
    for label in labels:
        cells = []
        for other in labels:
            if other == label:
                cells.append("-")
            elif notes[other] == notes[label]:
                cells.append("yes")
            else:
                cells.append("")
        rows.append([label, formulas[label], *cells])
    return rows


def write_equivalence_csv(path: Union[str, Path]) -> int:
    """Write the catalog's equivalence matrix to a CSV file.

    Returns:
        The number of labelled rows written.
    """
    rows = build_equivalence_rows()
    with open(path, "w", newline="", encoding="utf-8") as handle:
        csv.writer(handle, lineterminator="\n").writerows(rows)
    return len(rows) - 1


class EquivalenceTable(Closeable):
    """Owned, injectable cache for the equivalence table.

    The table starts unloaded. ``load_with_retry`` (or ``start_loading`` to
    run it on a daemon thread) makes a bounded number of attempts with
    exponential backoff between them. Once loaded the mapping never changes;
    once retries are exhausted the table stays failed and every lookup
    returns an empty list. ``close`` drops the cache.
    """

    @classmethod
    def preloaded(cls, mapping: Mapping[str, Sequence[str]]) -> EquivalenceTable:
        """Create a table that is already loaded with the given mapping."""
        table = cls()
        table._state = LoadState.Loading
        table._publish({label: list(eqs) for label, eqs in mapping.items()})
        return table

    def __init__(
        self,
        source: Source = None,
        attempts: int = DEFAULT_LOAD_ATTEMPTS,
        backoff: float = DEFAULT_LOAD_BACKOFF,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize an unloaded table.

        Args:
            source: Path, URL, or None for the packaged data file.
            attempts: Maximum number of load attempts.
            backoff: Seconds to wait after the first failure; doubles each time.
            sleep: Function used to wait between attempts.
        """
        self._source = source
        self._attempts = max(1, attempts)
        self._backoff = backoff
        self._sleep = sleep
        self._lock = Lock()
        self._load_lock = Lock()  # Held across read, parse and publish
        self._state = LoadState.Unloaded
        self._cache: Optional[Dict[str, List[str]]] = None
        self._error: Optional[FretscaleError] = None
        self._thread: Optional[Thread] = None

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def is_loaded(self) -> bool:
        return self._state == LoadState.Loaded

    @property
    def error(self) -> Optional[FretscaleError]:
        """The last load error, kept for surfacing to the user."""
        return self._error

    def _publish(self, cache: Dict[str, List[str]]) -> bool:
        with self._lock:
            # A close() during the load leaves the state Unloaded
            if self._state != LoadState.Loading:
                return False
            self._cache = cache
            self._error = None
            self._state = LoadState.Loaded
            return True

    def load(self) -> None:
        """Make a single load attempt; a no-op once loaded.

        Concurrent calls are serialized, so the cache is published at most
        once. A result that arrives after ``close`` is discarded.

        Raises:
            TableLoadError: If the source cannot be read.
            TableFormatError: If the text is not a valid matrix.
        """
        with self._load_lock:
            if self.is_loaded:
                return
            with self._lock:
                self._state = LoadState.Loading
            try:
                cache = parse_table(read_source(self._source))
            except FretscaleError:
                with self._lock:
                    if self._state == LoadState.Loading:
                        self._state = LoadState.Unloaded
                raise
            if self._publish(cache):
                logging.info("loaded %d scale combinations", len(cache))
            else:
                logging.info("table closed during load, discarding result")

    def load_with_retry(self) -> bool:
        """Load the table, retrying with exponential backoff.

        Returns:
            True if the table is loaded, False if every attempt failed.
        """
        for attempt in range(1, self._attempts + 1):
            if self.is_loaded:
                return True
            try:
                self.load()
                return self.is_loaded
            except FretscaleError as e:
                self._error = e
                logging.warning(
                    "equivalence load attempt %d/%d failed: %s",
                    attempt,
                    self._attempts,
                    e,
                )
                if attempt < self._attempts:
                    self._sleep(self._backoff * 2 ** (attempt - 1))
        with self._lock:
            self._state = LoadState.Failed
        logging.error("failed to load scale data: %s", self._error)
        return False

    def start_loading(self) -> Thread:
        """Run ``load_with_retry`` on a daemon thread, at most once.

        Returns:
            The loader thread (the same one on repeated calls).
        """
        with self._lock:
            if self._thread is None:
                self._thread = Thread(
                    name="equivalence-loader", target=self.load_with_retry, daemon=True
                )
                self._thread.start()
            return self._thread

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait for a background load to finish.

        Returns:
            True if the table ended up loaded.
        """
        thread = self._thread
        if thread is not None:
            thread.join(timeout=timeout)
        return self.is_loaded

    def lookup(self, label: str) -> List[str]:
        """Labels equivalent to the given one; empty while not loaded."""
        cache = self._cache
        if cache is None:
            return []
        return list(cache.get(label, []))

    def close(self) -> None:
        """Drop the cache and return to the unloaded state.

        A load still in flight finishes without publishing its result.
        """
        with self._lock:
            self._cache = None
            self._state = LoadState.Unloaded

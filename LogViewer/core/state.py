"""Filter state and the reconciler that keeps it coherent across refreshes.

This module provides:
    - FilterState: the selections, the known subsystem and category universes, and the current batch
    - FilterStateReconciler: ingests batches from a log source, recomputes the universes,
      re-sanitizes selections and applies the user's filter actions

All state mutations happen on the thread the reconciler lives on. Only the fetch itself runs on a
worker thread; its result is delivered back through queued signals.
"""
import collections
import dataclasses
import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional

from PySide6 import QtCore

from .entry import LogEntry
from .filters import filter_entries, normalize_categories, sanitize_category_selections, sorted_labels
from .source import AsyncWorker, LogSource, fetch_batch
from ..settings import lib
from ..status import status


@dataclasses.dataclass
class FilterState:
    """
    The mutable filter state of one viewer.

    Attributes:
        default_subsystems (frozenset[str]): Subsystems configured at startup. Always listed as available.
        selected_subsystems (set[str]): Explicitly selected subsystems. Empty means all subsystems.
        selected_categories (dict[str, set[str]]): Selected categories per subsystem. A missing key
            means all categories of that subsystem. Never holds an empty set.
        available_subsystems (list[str]): The subsystem universe, sorted case-insensitively.
        available_categories (dict[str, list[str]]): The normalized category universe per subsystem.
        entries (list[LogEntry]): The most recent batch.
        finished_collecting (bool): False while a refresh is running.
        category_implies_subsystem (bool): When True a category selection always adds its subsystem to the
            effective subsystem filter. When False it only does so while no subsystem is explicitly selected.
    """
    default_subsystems: frozenset[str] = frozenset()
    selected_subsystems: set[str] = dataclasses.field(default_factory=set)
    selected_categories: dict[str, set[str]] = dataclasses.field(default_factory=dict)
    available_subsystems: list[str] = dataclasses.field(default_factory=list)
    available_categories: dict[str, list[str]] = dataclasses.field(default_factory=dict)
    entries: list[LogEntry] = dataclasses.field(default_factory=list)
    finished_collecting: bool = False
    category_implies_subsystem: bool = True

    @classmethod
    def create(cls, default_subsystems: Iterable[str] = (), category_implies_subsystem: bool = True) -> 'FilterState':
        """Returns a state with the default subsystems selected."""
        defaults = frozenset(s for s in default_subsystems if s)
        return cls(
            default_subsystems=defaults,
            selected_subsystems=set(defaults),
            category_implies_subsystem=category_implies_subsystem,
        )

    def category_subsystems(self) -> set[str]:
        """Returns the subsystems that have a category selection."""
        return {subsystem for subsystem, categories in self.selected_categories.items() if categories}

    def effective_subsystem_filter(self) -> set[str]:
        """
        Returns the subsystem filter actually applied.

        A category selection scopes the filter to its subsystem. With
        ``category_implies_subsystem`` disabled this only happens while no subsystem is
        explicitly selected.

        Returns:
            set[str]: The subsystems to keep. Empty means all subsystems.
        """
        if not self.category_implies_subsystem and self.selected_subsystems:
            return set(self.selected_subsystems)
        return set(self.selected_subsystems) | self.category_subsystems()

    def active_category_filters(self) -> list[tuple[str, set[str]]]:
        """Returns the non-empty category selections ordered by subsystem name."""
        return [
            (subsystem, set(self.selected_categories[subsystem]))
            for subsystem in sorted_labels(self.category_subsystems())
        ]


class FilterStateReconciler(QtCore.QObject):
    """
    Owns a :class:`FilterState` and keeps it coherent.

    Signals:
        refreshStarted (): A refresh began; the state is collecting.
        refreshFinished (): A refresh completed, successfully or not.
        entriesChanged (): A new batch was stored.
        selectionChanged (): The selections changed; the displayed entries must be recomputed.

    Args:
        source (LogSource): Where batches are fetched from.
        default_subsystems: Subsystems listed and selected from the start.
        since (datetime, optional): The start of the time window. Defaults to now minus the
            configured ``since_seconds``.
        settings (lib.Settings, optional): The viewer settings.
        parent (QtCore.QObject, optional): Parent QObject.
    """
    refreshStarted = QtCore.Signal()
    refreshFinished = QtCore.Signal()
    entriesChanged = QtCore.Signal()
    selectionChanged = QtCore.Signal()

    def __init__(self, source: LogSource, default_subsystems: Iterable[str] = (),
                 since: Optional[datetime] = None, settings: Optional[lib.Settings] = None,
                 parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self.source = source
        self.settings = settings or lib.Settings()

        defaults = set(default_subsystems) | set(self.settings.default_subsystems)
        self.state = FilterState.create(defaults, self.settings.category_implies_subsystem)

        if since is None:
            since = datetime.now() - timedelta(seconds=self.settings.since_seconds)
        self.since: datetime = since

        self._sequence = 0
        self._applied_sequence = 0
        self._worker: Optional[AsyncWorker] = None
        self._in_flight = False
        self._displayed: Optional[list[LogEntry]] = None

    # Refresh

    def is_refreshing(self) -> bool:
        """Returns True from the start of an asynchronous refresh until its result was applied."""
        return self._in_flight

    def refresh(self) -> bool:
        """
        Fetches a new batch on a worker thread.

        The result is applied on this object's thread once the worker finishes. A request made while
        another refresh is in flight is ignored.

        Returns:
            bool: True if a refresh was started.
        """
        if self._worker is not None:
            logging.debug('A log refresh is already in progress, ignoring request')
            return False

        self._in_flight = True
        sequence = self._begin_refresh()

        worker = AsyncWorker(fetch_batch, self.source, self.since, sequence=sequence)
        worker.resultReady.connect(self._on_result_ready)
        worker.errorOccurred.connect(self._on_error_occurred)
        worker.finished.connect(self._on_worker_finished)
        self._worker = worker
        worker.start()
        return True

    def refresh_now(self) -> bool:
        """
        Fetches a new batch on the calling thread.

        Returns:
            bool: True if the source returned a batch, False if it failed.
        """
        sequence = self._begin_refresh()
        try:
            batch = fetch_batch(self.source, self.since)
        except status.SourceError as ex:
            self._apply_failure(sequence, ex)
            return False
        self._apply_batch(sequence, batch)
        return True

    def _begin_refresh(self) -> int:
        self._sequence += 1
        self.state.finished_collecting = False
        self.refreshStarted.emit()
        return self._sequence

    def _accepts(self, sequence: int) -> bool:
        if sequence < self._applied_sequence:
            logging.debug(f'Discarding out-of-order log batch #{sequence}, #{self._applied_sequence} already applied')
            return False
        self._applied_sequence = sequence
        return True

    def _apply_batch(self, sequence: int, batch: list[LogEntry]) -> None:
        if self._accepts(sequence):
            self.reconcile(batch)

    def _apply_failure(self, sequence: int, error: Exception) -> None:
        if self._accepts(sequence):
            self.fail(error)

    @QtCore.Slot(object)
    def _on_result_ready(self, payload: tuple[int, list[LogEntry]]) -> None:
        sequence, batch = payload
        self._in_flight = False
        self._apply_batch(sequence, batch)

    @QtCore.Slot(object)
    def _on_error_occurred(self, payload: tuple[int, Exception]) -> None:
        sequence, error = payload
        self._in_flight = False
        self._apply_failure(sequence, error)

    @QtCore.Slot()
    def _on_worker_finished(self) -> None:
        worker, self._worker = self._worker, None
        if worker is not None:
            worker.deleteLater()

    def wait(self, msecs: int = -1) -> bool:
        """Blocks until the in-flight worker finished running. Results are still delivered through the event loop."""
        if self._worker is None:
            return True
        if msecs < 0:
            return self._worker.wait()
        return self._worker.wait(msecs)

    # Reconciliation

    def reconcile(self, batch: Iterable[LogEntry]) -> None:
        """
        Stores a new batch and recomputes the subsystem and category universes.

        Selections are kept: selected subsystems and categories stay listed even when the batch does
        not contain them, and category selections are re-sanitized against the new universe.

        Args:
            batch: The freshly fetched entries.
        """
        state = self.state
        state.entries = list(batch)

        detected = {entry.subsystem for entry in state.entries if entry.subsystem}
        universe = (
            detected
            | state.default_subsystems
            | state.selected_subsystems
            | set(state.selected_categories)
        )
        universe.discard('')

        grouped: dict[str, list[str]] = collections.defaultdict(list)
        for entry in state.entries:
            if entry.subsystem:
                grouped[entry.subsystem].append(entry.category)

        categories: dict[str, list[str]] = {
            subsystem: normalize_categories(labels) for subsystem, labels in grouped.items()
        }

        # Subsystems without entries still get a (possibly empty) category list
        for subsystem in universe:
            categories.setdefault(subsystem, [])

        for subsystem, selected in state.selected_categories.items():
            merged = set(categories.get(subsystem, ())) | selected
            categories[subsystem] = normalize_categories(merged)

        state.available_categories = categories
        state.available_subsystems = sorted_labels(universe)

        sanitized = sanitize_category_selections(state.selected_categories, categories)
        state.selected_categories.clear()
        state.selected_categories.update(sanitized)

        state.finished_collecting = True
        self._invalidate()

        logging.debug(
            f'Reconciled {len(state.entries)} log entries: '
            f'{len(state.available_subsystems)} subsystems, '
            f'{sum(len(v) for v in categories.values())} categories'
        )

        self.entriesChanged.emit()
        self.selectionChanged.emit()
        self.refreshFinished.emit()

    def fail(self, error: Exception) -> None:
        """
        Records a failed refresh. The previous batch and universes are kept.

        Args:
            error (Exception): The failure reported by the source.
        """
        # Status exceptions log themselves when raised
        if not isinstance(error, status.BaseStatusException):
            logging.warning(f'Log refresh failed: {error}')
        logging.debug(f'Keeping the previous {len(self.state.entries)} log entries')
        self.state.finished_collecting = True
        self.refreshFinished.emit()

    # User actions

    def toggle_subsystem(self, subsystem: str) -> None:
        """Selects or deselects a subsystem. Deselecting also drops its category selection."""
        if not subsystem:
            return

        state = self.state
        if subsystem in state.selected_subsystems:
            state.selected_subsystems.discard(subsystem)
            state.selected_categories.pop(subsystem, None)
        else:
            state.selected_subsystems.add(subsystem)
        self._selection_changed()

    def toggle_category(self, category: str, subsystem: str) -> None:
        """Selects or deselects a category of a subsystem."""
        if not subsystem:
            return

        categories = set(self.state.selected_categories.get(subsystem, ()))
        if category in categories:
            categories.discard(category)
        else:
            categories.add(category)

        if categories:
            self.state.selected_categories[subsystem] = categories
        else:
            self.state.selected_categories.pop(subsystem, None)
        self._selection_changed()

    def clear_categories(self, subsystem: str) -> None:
        """Shows all categories of a subsystem again."""
        if self.state.selected_categories.pop(subsystem, None) is not None:
            self._selection_changed()

    def reset_categories(self) -> None:
        """Clears every category selection."""
        self.state.selected_categories.clear()
        self._selection_changed()

    def reset(self) -> None:
        """Clears every subsystem and category selection."""
        self.state.selected_subsystems.clear()
        self.state.selected_categories.clear()
        self._selection_changed()

    def _selection_changed(self) -> None:
        self._invalidate()
        self.selectionChanged.emit()

    def _invalidate(self) -> None:
        self._displayed = None

    # Queries

    def displayed_entries(self) -> list[LogEntry]:
        """Returns the entries passing the current filters, in batch order."""
        if self._displayed is None:
            self._displayed = filter_entries(
                self.state.entries,
                self.state.effective_subsystem_filter(),
                self.state.selected_categories,
            )
        return list(self._displayed)

    def can_export(self) -> bool:
        """Returns True once loading finished and at least one entry is displayed."""
        return self.state.finished_collecting and bool(self.displayed_entries())

    def is_subsystem_active(self, subsystem: str) -> bool:
        return (
            subsystem in self.state.selected_subsystems
            or bool(self.state.selected_categories.get(subsystem))
        )

    def is_category_selected(self, category: str, subsystem: str) -> bool:
        return category in self.state.selected_categories.get(subsystem, ())

    def has_selection(self) -> bool:
        return bool(self.state.selected_subsystems or self.state.selected_categories)

    def category_menu_subsystems(self) -> list[str]:
        """Returns the subsystems with known or selected categories, sorted case-insensitively."""
        state = self.state
        candidates = (
            set(state.available_subsystems)
            | set(state.available_categories)
            | set(state.selected_categories)
        )
        candidates.discard('')
        return [
            subsystem for subsystem in sorted_labels(candidates)
            if state.available_categories.get(subsystem) or state.selected_categories.get(subsystem)
        ]

    def category_menu_items(self, subsystem: str) -> list[str]:
        """Returns the categories listed for a subsystem: the available ones plus any selected ones."""
        available = self.state.available_categories.get(subsystem, [])
        selected = self.state.selected_categories.get(subsystem, set())
        return normalize_categories([*available, *selected])

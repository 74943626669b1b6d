"""Pure filtering helpers for subsystem and category selections.

This module provides:
    - normalize_categories: deduplicate and order category labels for display
    - sanitize_category_selections: reconcile selections with the categories that exist
    - filter_entries: apply subsystem and category filters to a batch of entries
    - category_display_name: the display label of a category

None of these functions touch the filter state; :mod:`LogViewer.core.state` builds on them.
"""
from typing import Iterable, Mapping, Protocol, Sequence, TypeVar

UNCATEGORIZED_LABEL: str = 'Uncategorized'


class Filterable(Protocol):
    """Anything carrying a subsystem and a category."""
    subsystem: str
    category: str


EntryT = TypeVar('EntryT', bound=Filterable)


def sort_key(label: str) -> tuple[str, str]:
    """Case-insensitive ordering; case variants of the same label keep a fixed order."""
    return label.casefold(), label


def sorted_labels(labels: Iterable[str]) -> list[str]:
    """Returns the labels ordered case-insensitively."""
    return sorted(labels, key=sort_key)


def normalize_categories(categories: Iterable[str]) -> list[str]:
    """
    Deduplicates and orders category labels.

    Labels are sorted case-insensitively. The uncategorized label (the empty string) always
    comes first when present.

    Args:
        categories: The labels to normalize, in any order and with duplicates.

    Returns:
        list[str]: The distinct labels in display order.
    """
    unique = set()
    includes_empty = False

    for category in categories:
        if not category:
            includes_empty = True
        else:
            unique.add(category)

    result = sorted_labels(unique)
    if includes_empty:
        result.insert(0, '')
    return result


def sanitize_category_selections(
        selections: Mapping[str, Iterable[str]],
        available: Mapping[str, Sequence[str]],
) -> dict[str, set[str]]:
    """
    Reconciles category selections with the categories known to exist.

    A subsystem without known categories keeps its selection as is: availability has not been
    established yet, so there is nothing to check against. Otherwise the selection is narrowed to
    the categories that exist, and dropped when none of them do.

    Args:
        selections: The selected categories per subsystem.
        available: The available categories per subsystem.

    Returns:
        dict[str, set[str]]: The sanitized selections. Never contains an empty set.
    """
    result: dict[str, set[str]] = {}

    for subsystem, categories in selections.items():
        categories = set(categories)
        if not categories:
            continue

        known = set(available.get(subsystem) or ())
        if not known:
            result[subsystem] = categories
            continue

        intersection = categories & known
        if intersection:
            result[subsystem] = intersection

    return result


def filter_entries(
        entries: Iterable[EntryT],
        subsystem_filters: Iterable[str],
        category_filters: Mapping[str, Iterable[str]],
) -> list[EntryT]:
    """
    Returns the entries that pass the subsystem and category filters, in their original order.

    An empty subsystem filter matches every subsystem. A subsystem without a category selection
    matches every category. Categories match exactly; the empty string matches uncategorized
    entries.

    Args:
        entries: The entries to filter.
        subsystem_filters: The subsystems to keep.
        category_filters: The categories to keep, per subsystem.

    Returns:
        list: The matching entries.
    """
    subsystem_filters = frozenset(subsystem_filters)
    category_filters = {k: frozenset(v) for k, v in category_filters.items()}

    def accepts(entry: Filterable) -> bool:
        if subsystem_filters and entry.subsystem not in subsystem_filters:
            return False
        categories = category_filters.get(entry.subsystem)
        if not categories:
            return True
        return entry.category in categories

    return [entry for entry in entries if accepts(entry)]


def category_display_name(category: str) -> str:
    """Returns the label shown for a category."""
    return category if category else UNCATEGORIZED_LABEL

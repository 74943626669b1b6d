"""Human-readable summaries of the filter state.

This module renders the current :class:`~LogViewer.core.state.FilterState` for the viewer's menus
and empty-state message, and renders the exported archive (header and body). Lists are joined
with a :class:`~LogViewer.settings.locale.ListFormatter`; archive lines end in CRLF.
"""
import re
from datetime import datetime
from typing import Iterable, Optional

from .entry import LogEntry, level_glyph
from .filters import category_display_name, normalize_categories
from .state import FilterState
from ..settings import locale as locale_lib

CRLF = '\r\n'

re_line_ending = re.compile(r'\r\n|\r|\n')

ADJUST_HINT = 'Adjust your filters or refresh.'


def _formatter(formatter: Optional[locale_lib.ListFormatter]) -> locale_lib.ListFormatter:
    return formatter or locale_lib.ListFormatter()


def _category_names(categories: Iterable[str]) -> list[str]:
    return [category_display_name(c) for c in normalize_categories(categories)]


def subsystem_menu_label(state: FilterState, formatter: Optional[locale_lib.ListFormatter] = None) -> str:
    """Returns the label of the subsystem menu, e.g. ``All subsystems`` or ``app and net``."""
    filters = state.effective_subsystem_filter()
    if not filters:
        return 'All subsystems'
    return _formatter(formatter).format(sorted(filters))


def category_menu_label(state: FilterState, formatter: Optional[locale_lib.ListFormatter] = None) -> str:
    """
    Returns the label of the category menu.

    Shows ``All categories`` when nothing is selected, the selected categories when a single
    subsystem has at most two of them, and a count otherwise.
    """
    entries = state.active_category_filters()
    if not entries:
        return 'All categories'

    if len(entries) == 1:
        _, categories = entries[0]
        names = _category_names(categories)
        if not names:
            return 'All categories'
        if len(names) <= 2:
            return _formatter(formatter).format(names)
        return f'Categories ({len(names)})'

    total = sum(len(categories) for _, categories in entries)
    return f'Categories ({total})'


def subsystem_summary(filters: set[str], formatter: Optional[locale_lib.ListFormatter] = None) -> str:
    """Returns ``any subsystem``, ``subsystem x`` or ``subsystems x and y``."""
    if not filters:
        return 'any subsystem'

    names = _formatter(formatter).format(sorted(filters))
    if len(filters) == 1:
        return f'subsystem {names}'
    return f'subsystems {names}'


def category_summary_parts(state: FilterState, formatter: Optional[locale_lib.ListFormatter] = None) -> list[str]:
    """Returns one description per active category selection, naming the subsystem when ambiguous."""
    entries = state.active_category_filters()
    if not entries:
        return []

    formatter = _formatter(formatter)
    qualify = len(entries) > 1 or len(state.effective_subsystem_filter()) > 1

    parts = []
    for subsystem, categories in entries:
        names = _category_names(categories)
        if not names:
            continue
        text = formatter.format(names)
        parts.append(f'{text} ({subsystem})' if qualify else text)
    return parts


def filter_explanation(state: FilterState, formatter: Optional[locale_lib.ListFormatter] = None) -> str:
    """Explains which filters hide all entries."""
    filters = state.effective_subsystem_filter()
    subsystems = subsystem_summary(filters, formatter)
    parts = category_summary_parts(state, formatter)

    if not parts:
        if not filters:
            return f'No log entries match the current filters. {ADJUST_HINT}'
        return f'No log entries match {subsystems}. {ADJUST_HINT}'

    if len(parts) == 1:
        return f'No log entries match {subsystems} with categories {parts[0]}. {ADJUST_HINT}'

    return (
        f'No log entries match {subsystems} with the selected categories '
        f'({"; ".join(parts)}). {ADJUST_HINT}'
    )


def empty_state_message(state: FilterState, displayed: list[LogEntry], since: datetime,
                        formatter: Optional[locale_lib.ListFormatter] = None,
                        locale: str = locale_lib.DEFAULT_LOCALE) -> Optional[str]:
    """
    Returns the message shown in place of an empty entry list.

    Args:
        state (FilterState): The filter state.
        displayed (list[LogEntry]): The entries passing the filters.
        since (datetime): The start of the time window.
        formatter (ListFormatter, optional): Joins lists of names.
        locale (str): Locale used to format ``since``.

    Returns:
        str | None: ``None`` when there are entries to show.
    """
    if displayed:
        return None
    if not state.finished_collecting:
        return 'Collecting logs...'
    if not state.entries:
        return f'No log entries captured since {locale_lib.format_since(since, locale)}.'
    return filter_explanation(state, formatter)


def filter_summary(state: FilterState, formatter: Optional[locale_lib.ListFormatter] = None) -> str:
    """Returns the filter line of an exported archive, e.g. ``Filters: app; Categories: net``."""
    formatter = _formatter(formatter)
    filters = state.effective_subsystem_filter()
    subsystems = formatter.format(sorted(filters)) if filters else 'All subsystems'

    entries = state.active_category_filters()
    descriptions = []
    for subsystem, categories in entries:
        names = _category_names(categories)
        if not names:
            continue
        text = formatter.format(names)
        if len(entries) == 1 and len(filters) <= 1:
            descriptions.append(text)
        else:
            descriptions.append(f'{text} in {subsystem}')

    if not descriptions:
        return f'Filters: {subsystems}'
    return f'Filters: {subsystems}; Categories: {"; ".join(descriptions)}'


def export_header(app_name: str, state: FilterState, since: datetime, generated: datetime,
                  formatter: Optional[locale_lib.ListFormatter] = None,
                  locale: str = locale_lib.DEFAULT_LOCALE) -> str:
    """Returns the header of an exported archive, each line terminated by CRLF."""
    lines = [
        f'Log archive for {app_name}',
        f'Generated on {locale_lib.format_generated(generated, locale)}',
        filter_summary(state, formatter),
        f'Logs captured since {locale_lib.format_since(since, locale)}',
    ]
    return CRLF.join(lines) + CRLF


def format_entry(entry: LogEntry, locale: str = locale_lib.DEFAULT_LOCALE) -> str:
    """Returns the two-line archive block of one entry."""
    timestamp = locale_lib.format_timestamp(entry.timestamp, locale)
    message = re_line_ending.sub(CRLF, entry.message)
    headline = f'[{timestamp}] {level_glyph(entry.level)} {message}'
    metadata = f'sender: {entry.sender} | subsystem: {entry.subsystem} | category: {entry.category}'
    return headline + CRLF + metadata


def export_body(entries: Iterable[LogEntry], locale: str = locale_lib.DEFAULT_LOCALE) -> str:
    """Returns the archive blocks of ``entries`` separated by blank lines."""
    return (CRLF + CRLF).join(format_entry(entry, locale) for entry in entries)


def export_contents(app_name: str, state: FilterState, entries: list[LogEntry], since: datetime,
                    generated: datetime, formatter: Optional[locale_lib.ListFormatter] = None,
                    locale: str = locale_lib.DEFAULT_LOCALE) -> str:
    """Returns the full archive text: header, body and a final CRLF."""
    return (
        export_header(app_name, state, since, generated, formatter, locale)
        + export_body(entries, locale)
        + CRLF
    )

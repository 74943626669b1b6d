"""
Module for formatting lists and dates using Babel.

The summary and export strings of the viewer go through these helpers so that the formatting
follows the configured locale. Every helper degrades to a fixed, locale-independent rendering
when Babel cannot handle the locale.
"""
import logging
from datetime import datetime
from typing import Iterable, Optional

from babel import Locale
from babel.dates import format_date, format_datetime, format_time, get_datetime_format
from babel.lists import format_list

DEFAULT_LOCALE: str = 'en_US'


def is_valid_locale(locale: str) -> bool:
    """
    Check whether Babel knows the given locale identifier.

    Args:
        locale (str): Locale string, e.g. 'fr_FR'.

    Returns:
        bool: True if the locale can be parsed.
    """
    try:
        Locale.parse(locale)
        return True
    except Exception:
        return False


class ListFormatter:
    """
    Joins display items into a locale-aware list, e.g. ``a, b, and c``.

    Falls back to a plain comma-joined list when no locale is set or Babel fails.

    Attributes:
        locale (str | None): Locale string, e.g. 'en_US'.
    """

    def __init__(self, locale: Optional[str] = DEFAULT_LOCALE):
        self.locale = locale

    def format(self, items: Iterable[str]) -> str:
        """
        Format items as a list.

        Args:
            items: The strings to join, in display order.

        Returns:
            str: The joined list or an empty string when there are no items.
        """
        items = list(items)
        if not items:
            return ''
        if not self.locale:
            return ', '.join(items)

        try:
            return format_list(items, locale=Locale.parse(self.locale))
        except Exception as ex:
            logging.debug(f'Error formatting list for locale "{self.locale}": {ex}')
            return ', '.join(items)


def _combine(date_width: str, time_width: str, value: datetime, locale: str) -> str:
    locale_obj = Locale.parse(locale)
    pattern = get_datetime_format(date_width, locale=locale_obj)
    return pattern.replace("'", '').format(
        format_time(value, time_width, locale=locale_obj),
        format_date(value, date_width, locale=locale_obj),
    )


def format_timestamp(value: datetime, locale: str = DEFAULT_LOCALE) -> str:
    """
    Format the timestamp of a log entry: abbreviated date with seconds.

    Args:
        value (datetime): The timestamp.
        locale (str): Locale string, e.g. 'en_US'.

    Returns:
        str: The formatted timestamp, e.g. 'Oct 16, 2026, 9:41:07 AM'.
    """
    try:
        return format_datetime(value, 'medium', locale=Locale.parse(locale))
    except Exception as ex:
        logging.debug(f'Error formatting timestamp: {ex}')
        return value.strftime('%Y-%m-%d %H:%M:%S')


def format_since(value: datetime, locale: str = DEFAULT_LOCALE) -> str:
    """
    Format a cutoff time: abbreviated date without seconds.

    Args:
        value (datetime): The cutoff.
        locale (str): Locale string, e.g. 'en_US'.

    Returns:
        str: The formatted cutoff, e.g. 'Oct 16, 2026, 9:41 AM'.
    """
    try:
        return _combine('medium', 'short', value, locale)
    except Exception as ex:
        logging.debug(f'Error formatting date: {ex}')
        return value.strftime('%Y-%m-%d %H:%M')


def format_generated(value: datetime, locale: str = DEFAULT_LOCALE) -> str:
    """
    Format a generation time: long date with seconds.

    Args:
        value (datetime): The generation time.
        locale (str): Locale string, e.g. 'en_US'.

    Returns:
        str: The formatted time, e.g. 'October 16, 2026 at 9:41:07 AM'.
    """
    try:
        return _combine('long', 'medium', value, locale)
    except Exception as ex:
        logging.debug(f'Error formatting date: {ex}')
        return value.strftime('%Y-%m-%d %H:%M:%S')

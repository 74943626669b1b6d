"""Log entries as seen by the filter engine.

A :class:`LogEntry` is the immutable view of one captured log record. Only ``subsystem`` and
``category`` take part in filtering; the remaining fields are used for rendering and export.
"""
import dataclasses
import enum
import logging
from datetime import datetime


class Level(enum.IntEnum):
    """Maps standard log level names to their numeric values."""
    NOTSET = logging.NOTSET  # 0
    DEBUG = logging.DEBUG  # 10
    INFO = logging.INFO  # 20
    WARNING = logging.WARNING  # 30
    ERROR = logging.ERROR  # 40
    CRITICAL = logging.CRITICAL  # 50

    @classmethod
    def from_levelno(cls, levelno: int) -> 'Level':
        """Returns the closest standard level at or below ``levelno``."""
        try:
            return cls(levelno)
        except ValueError:
            pass
        candidates = [lvl for lvl in cls if lvl <= levelno]
        return max(candidates) if candidates else cls.NOTSET


LEVEL_GLYPHS: dict[Level, str] = {
    Level.NOTSET: '🔔',
    Level.DEBUG: '🩺',
    Level.INFO: 'ℹ️',
    Level.WARNING: '🔔',
    Level.ERROR: '❗',
    Level.CRITICAL: '‼️',
}


def level_glyph(level: int) -> str:
    """Returns the glyph used for ``level`` in exported archives."""
    return LEVEL_GLYPHS.get(Level.from_levelno(level), '🔔')


@dataclasses.dataclass(frozen=True)
class LogEntry:
    """
    One captured log message.

    Attributes:
        subsystem (str): Top-level namespace the entry belongs to, e.g. ``myapp``.
        category (str): Finer-grained label within the subsystem. Empty means uncategorized.
        timestamp (datetime): When the message was logged.
        level (Level): The severity of the message.
        message (str): The rendered message body.
        sender (str): The module that emitted the message.
    """
    subsystem: str
    category: str = ''
    timestamp: datetime = dataclasses.field(default_factory=datetime.now)
    level: Level = Level.NOTSET
    message: str = ''
    sender: str = ''

    @classmethod
    def from_record(cls, record: logging.LogRecord) -> 'LogEntry':
        """
        Builds an entry from a logging record.

        The subsystem and category can be given explicitly through ``extra``, e.g.
        ``logging.getLogger('x').info('msg', extra={'subsystem': 'myapp', 'category': 'net'})``.
        Otherwise they are derived from the logger name: ``myapp.net.http`` yields the subsystem
        ``myapp`` and the category ``net.http``. The root logger has neither.

        Args:
            record (logging.LogRecord): The record to convert.

        Returns:
            LogEntry: The converted entry.
        """
        name = record.name if record.name != 'root' else ''
        head, _, tail = name.partition('.')

        subsystem = getattr(record, 'subsystem', None)
        if not isinstance(subsystem, str):
            subsystem = head

        category = getattr(record, 'category', None)
        if not isinstance(category, str):
            category = tail

        message = record.getMessage()
        if record.exc_info and not record.exc_text:
            record.exc_text = logging.Formatter().formatException(record.exc_info)
        if record.exc_text:
            message = f'{message}\n{record.exc_text}'

        return cls(
            subsystem=subsystem,
            category=category,
            timestamp=datetime.fromtimestamp(record.created),
            level=Level.from_levelno(record.levelno),
            message=message,
            sender=record.module,
        )

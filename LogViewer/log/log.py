import collections
import logging
import sys
from datetime import datetime
from typing import Optional

from PySide6.QtCore import QtMsgType, qInstallMessageHandler

from ..core.entry import LogEntry
from ..ui.actions import signals

LOG_LEVEL = logging.DEBUG
LOG_FORMAT = '[%(asctime)s] <%(module)s> %(levelname)s:  %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'

TANK_CAPACITY = 10000


def set_logging_level(level):
    """
    Sets the logging level for the root logger and its handlers.

    Args:
        level (int): The logging level to set. Should be one of the standard logging levels.
    """
    if not isinstance(level, int) or isinstance(level, bool):
        raise ValueError("Logging level must be an integer.")
    if level not in (
            logging.DEBUG,
            logging.INFO,
            logging.WARNING,
            logging.ERROR,
            logging.CRITICAL,
    ):
        raise ValueError('Invalid logging level. Use one of the standard logging levels, e.g., logging.DEBUG.')

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)


def qt_message_handler(mode, context, message):
    """
    Converts Qt messages to standard Python logging.
    """
    logger = logging.getLogger('Qt')

    # Qt message may have newline/stripped formatting
    message = message.strip()

    if mode == QtMsgType.QtDebugMsg:
        logger.debug(message)
    elif mode == QtMsgType.QtInfoMsg:
        logger.info(message)
    elif mode == QtMsgType.QtWarningMsg:
        logger.warning(message)
    elif mode == QtMsgType.QtCriticalMsg:
        logger.error(message)
    elif mode == QtMsgType.QtFatalMsg:
        logger.critical(message)
        sys.exit(1)


def setup_logging(enable_stream_handler=True, enable_qt_handler=True, log_level=LOG_LEVEL,
                  capacity=TANK_CAPACITY):
    """
    Configures the root logger with a TankHandler and, optionally, a stdout stream handler.

    Args:
        enable_stream_handler (bool): Also print log messages to stdout.
        enable_qt_handler (bool): Route Qt's own messages through Python logging.
        log_level (int): The root logging level.
        capacity (int): The number of entries the tank keeps before dropping the oldest.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear all handlers to avoid formatting conflicts
    root_logger.handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    if enable_stream_handler:
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setFormatter(formatter)
        stream_handler.setLevel(log_level)
        root_logger.addHandler(stream_handler)

    tank_handler = TankHandler(capacity=capacity)
    tank_handler.setFormatter(formatter)
    tank_handler.setLevel(log_level)
    root_logger.addHandler(tank_handler)

    if enable_qt_handler:
        # Qt messages will now also be routed through this formatter
        qInstallMessageHandler(qt_message_handler)


def get_handler():
    """Returns the TankHandler from the root logger or raises RuntimeError."""
    root_logger = logging.getLogger()
    handler = [h for h in root_logger.handlers if isinstance(h, TankHandler)]
    if not handler:
        raise RuntimeError('TankHandler not found in root logger')
    if len(handler) > 1:
        raise RuntimeError('Multiple TankHandlers found in root logger')
    return handler[0]


class TankHandler(logging.Handler):
    """
    Custom logging handler that stores log records as entries in an in-memory tank.

    The tank is the runtime log history the viewer browses. When it is full the oldest
    entries are dropped.

    Attributes:
        tank (collections.deque[LogEntry]): The stored entries, oldest first.
    """

    def __init__(self, capacity=TANK_CAPACITY):
        """
        Initializes the TankHandler with an empty tank.

        Args:
            capacity (int): Maximum number of entries kept.
        """
        super().__init__()
        self.tank = collections.deque(maxlen=capacity)

    def emit(self, record):
        """
        Converts a log record to a :class:`LogEntry` and stores it in the tank.

        Args:
            record (logging.LogRecord): The log record to be processed.
        """
        try:
            entry = LogEntry.from_record(record)
            self.tank.append(entry)
            # Auto-show log viewer on errors and criticals
            if record.levelno >= logging.ERROR:
                signals.showLogs.emit()
        except (Exception, KeyboardInterrupt):
            self.handleError(record)

    def get_entries(self, since: Optional[datetime] = None, level=logging.NOTSET):
        """
        Returns the stored entries, optionally limited by time and minimum level.

        Safe to call from a worker thread.

        Args:
            since (datetime, optional): Only return entries logged at or after this time.
            level (int, optional): The minimum logging level. Defaults to logging.NOTSET.

        Returns:
            list[LogEntry]: The matching entries, oldest first.
        """
        self.acquire()
        try:
            snapshot = list(self.tank)
        finally:
            self.release()

        return [
            entry for entry in snapshot
            if entry.level >= level and (since is None or entry.timestamp >= since)
        ]

    def clear_logs(self):
        """
        Clears all the stored entries from the tank.
        """
        self.acquire()
        try:
            self.tank.clear()
        finally:
            self.release()

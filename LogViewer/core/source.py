"""Log sources and the worker thread used to read them.

A log source yields one batch of :class:`~LogViewer.core.entry.LogEntry` objects for a time
window. Reading may block, so the reconciler runs it on an :class:`AsyncWorker`.
"""
import logging
import threading
from datetime import datetime
from typing import Any, Callable, Iterable, Optional

from PySide6 import QtCore

from .entry import LogEntry
from ..status import status


class LogSource:
    """Base class for log sources.

    Subclasses implement :meth:`fetch`. Failures are reported by raising
    :class:`~LogViewer.status.status.SourceError`.
    """

    def fetch(self, since: datetime) -> list[LogEntry]:
        """
        Returns the entries logged at or after ``since``.

        Args:
            since (datetime): The start of the time window.

        Returns:
            list[LogEntry]: The batch, in any order.

        Raises:
            status.SourceError: If the log history could not be read.
        """
        raise NotImplementedError


class TankLogSource(LogSource):
    """Reads the runtime log history captured by the :class:`~LogViewer.log.log.TankHandler`.

    Args:
        handler: The tank to read. Looked up on the root logger at fetch time when omitted.
    """

    def __init__(self, handler: Any = None) -> None:
        self._handler = handler

    def fetch(self, since: datetime) -> list[LogEntry]:
        from ..log import log

        try:
            handler = self._handler or log.get_handler()
        except RuntimeError as ex:
            raise status.SourceError(str(ex)) from ex
        return handler.get_entries(since=since)


class StaticLogSource(LogSource):
    """A source serving a fixed list of entries.

    Args:
        entries: The entries to serve.
    """

    def __init__(self, entries: Iterable[LogEntry] = ()) -> None:
        self.entries: list[LogEntry] = list(entries)

    def fetch(self, since: datetime) -> list[LogEntry]:
        return [entry for entry in self.entries if entry.timestamp >= since]


def fetch_batch(source: LogSource, since: datetime) -> list[LogEntry]:
    """
    Fetches one batch from ``source``, wrapping unexpected failures in a SourceError.

    Args:
        source (LogSource): The source to read.
        since (datetime): The start of the time window.

    Returns:
        list[LogEntry]: The batch.

    Raises:
        status.SourceError: If the source failed for any reason.
    """
    logging.debug(f'[Thread-{threading.get_ident()}] Fetching log entries since {since.isoformat()}')
    try:
        batch = list(source.fetch(since))
    except status.SourceError:
        raise
    except Exception as ex:
        raise status.SourceError(f'{type(ex).__name__}: {ex}') from ex
    logging.debug(f'[Thread-{threading.get_ident()}] Fetched {len(batch)} log entries')
    return batch


class AsyncWorker(QtCore.QThread):
    """
    Worker thread running a single blocking call.

    There are no retries: the call is attempted once and either its result or its error is
    emitted, tagged with the worker's sequence number.

    Signals:
        resultReady (object): Emitted with ``(sequence, result)`` on success.
        errorOccurred (object): Emitted with ``(sequence, exception)`` on failure.
    """
    resultReady = QtCore.Signal(object)
    errorOccurred = QtCore.Signal(object)

    def __init__(self, func: Callable[..., Any], *args: Any, sequence: int = 0,
                 parent: Optional[QtCore.QObject] = None, **kwargs: Any) -> None:
        super().__init__(parent)
        self.func = func
        self.args = args
        self.kwargs = kwargs
        self.sequence = sequence

    def run(self) -> None:
        try:
            result = self.func(*self.args, **self.kwargs)
        except Exception as ex:
            self.errorOccurred.emit((self.sequence, ex))
            return
        self.resultReady.emit((self.sequence, result))

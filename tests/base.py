"""Unittest base class for creating a clean test environment."""
import logging
import os
import shutil
import tempfile
import unittest
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from PySide6 import QtCore, QtWidgets

from LogViewer.core.entry import Level, LogEntry
from LogViewer.core.source import LogSource, StaticLogSource
from LogViewer.core.state import FilterStateReconciler
from LogViewer.settings import lib

EPOCH = datetime(2026, 10, 16, 9, 30, 0)
SINCE = EPOCH - timedelta(hours=1)


def make_entry(subsystem: str, category: str = '', message: str = '', offset: int = 0,
               level: Level = Level.INFO, sender: str = 'module') -> LogEntry:
    """Returns an entry logged ``offset`` seconds after :data:`EPOCH`."""
    return LogEntry(
        subsystem=subsystem,
        category=category,
        timestamp=EPOCH + timedelta(seconds=offset),
        level=level,
        message=message or f'{subsystem}/{category}',
        sender=sender,
    )


def wait_for(signal: QtCore.SignalInstance, timeout_ms: int = 5000) -> None:
    """Runs an event loop until ``signal`` fires or the timeout passes."""
    loop = QtCore.QEventLoop()
    signal.connect(loop.quit)
    QtCore.QTimer.singleShot(timeout_ms, loop.quit)
    loop.exec()
    signal.disconnect(loop.quit)


class BaseTestCase(unittest.TestCase):
    """Base test case providing a headless QApplication and a temporary directory."""

    tmp_dir: Optional[Path]

    def setUp(self) -> None:
        # Ensure headless Qt
        if 'QT_QPA_PLATFORM' not in os.environ:
            os.environ['QT_QPA_PLATFORM'] = 'offscreen'
            logging.debug('QT_QPA_PLATFORM set to offscreen for headless testing.')

        # Ensure a QApplication is available
        if not QtWidgets.QApplication.instance():
            QtWidgets.QApplication([])  # type: ignore
            logging.debug('QtWidgets.QApplication initialized for tests.')

        self.tmp_dir = Path(tempfile.mkdtemp(prefix='logviewer_test_'))

    def tearDown(self) -> None:
        if self.tmp_dir and self.tmp_dir.is_dir():
            shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def make_reconciler(self, entries=(), default_subsystems=(), source: Optional[LogSource] = None,
                        **settings) -> FilterStateReconciler:
        """Returns a reconciler over a static source, with the test temp dir as export directory."""
        settings.setdefault('export_dir', str(self.tmp_dir))
        return FilterStateReconciler(
            source or StaticLogSource(entries),
            default_subsystems=default_subsystems,
            since=SINCE,
            settings=lib.Settings(settings),
        )

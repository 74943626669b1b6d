"""Application-wide Qt signals for LogViewer.

This module provides:
    - Signals: custom Qt signals for refresh requests, exports, errors and showing the viewer.
    - signals: the shared :class:`Signals` instance.
"""
import logging

from PySide6 import QtCore


class Signals(QtCore.QObject):
    """Centralized Qt signals for log refresh, export and error events."""
    refreshRequested = QtCore.Signal()
    exportRequested = QtCore.Signal()
    exportFinished = QtCore.Signal(list)

    showLogs = QtCore.Signal()

    error = QtCore.Signal(str)

    def __init__(self):
        super().__init__()
        self._connect_signals()

    def _connect_signals(self):
        @QtCore.Slot(list)
        def export_finished(paths: list) -> None:
            if not paths:
                logging.debug('Export finished without producing a file')
                return
            logging.info(f'Log archive written to {paths[0]}')

        self.exportFinished.connect(export_finished)


signals = Signals()

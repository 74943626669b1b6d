# tests/test_status.py
"""
Tests for LogViewer.status.status (status messages and the non-fatal exceptions).

Run:
    python -m unittest tests.test_status
"""
from LogViewer.status import status
from LogViewer.ui.actions import signals
from tests.base import BaseTestCase


class StatusTests(BaseTestCase):

    def test_every_status_has_a_message(self):
        self.assertEqual(set(status.STATUS_MESSAGE), set(status.Status))
        for value in status.Status:
            self.assertEqual(status.get_message(value), status.STATUS_MESSAGE[value])

    def test_exceptions_carry_their_status(self):
        self.assertEqual(status.BaseStatusException.status, status.Status.UnknownStatus)
        self.assertEqual(status.SourceError.status, status.Status.SourceUnavailable)
        self.assertEqual(status.ExportError.status, status.Status.ExportFailed)
        self.assertEqual(status.ConfigInvalidException.status, status.Status.ConfigInvalid)

    def test_exception_message_and_error_signal(self):
        received: list[str] = []

        def _slot(message: str) -> None:
            received.append(message)

        signals.error.connect(_slot)
        try:
            ex = status.ExportError('disk full')
        finally:
            signals.error.disconnect(_slot)

        self.assertEqual(ex.message, 'disk full')
        self.assertEqual(str(ex), 'Could not write the log archive. disk full')
        self.assertEqual(received, ['disk full'])

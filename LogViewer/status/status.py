"""Status definitions and exceptions for LogViewer.

This module provides:
    - Status: enumeration of possible viewer states
    - STATUS_MESSAGE: user-facing messages for each status
    - get_message: retrieve the message for a status
    - BaseStatusException: base exception carrying a Status
    - SourceError, ExportError and ConfigInvalidException for the non-fatal failures of the viewer
"""
import enum
import logging
from typing import Dict


class Status(enum.StrEnum):
    """Enumeration of viewer status codes."""
    UnknownStatus = enum.auto()

    # Log source status
    SourceUnavailable = enum.auto()

    # Export status
    ExportFailed = enum.auto()

    # Configuration status
    ConfigInvalid = enum.auto()


STATUS_MESSAGE: Dict[Status, str] = {
    Status.UnknownStatus: 'Unknown status.',

    Status.SourceUnavailable: 'Could not read the log history.',
    Status.ExportFailed: 'Could not write the log archive.',
    Status.ConfigInvalid: 'The viewer settings seem to be incomplete, or contain invalid values.',
}


def get_message(status: Status) -> str:
    """
    Get the message for a given status.

    Args:
        status (Status): The status enum.

    Returns:
        str: The message associated with the status.
    """
    return STATUS_MESSAGE.get(status, 'Unknown status')


class BaseStatusException(Exception):
    """Base exception for status-based errors in LogViewer.

    None of these errors are fatal: callers log them and carry on with the data they already have.

    Attributes:
        status (Status): Status code associated with this error.
        status_message (str): User-facing message for the status.
        message (str): The diagnostic message given when the error was raised.

    Args:
        message (str): Optional additional context for the error.
    """
    status = Status.UnknownStatus

    def __init__(self, message: str = None):
        self.status_message = get_message(self.status)
        self.message = message or ''
        exception_message = f'{self.status_message} {message}' if message else self.status_message
        super().__init__(exception_message)

        logging.error(exception_message)

        from ..ui.actions import signals
        signals.error.emit(message or self.status_message)


class SourceError(BaseStatusException):
    """Exception raised when the log source is unreachable or the query failed."""
    status = Status.SourceUnavailable


class ExportError(BaseStatusException):
    """Exception raised when the log archive could not be written."""
    status = Status.ExportFailed


class ConfigInvalidException(BaseStatusException):
    """Exception raised when the settings file is missing values or is malformed."""
    status = Status.ConfigInvalid

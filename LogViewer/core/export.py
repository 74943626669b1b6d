"""Writing the filtered log view to a shareable archive.

This module provides:
    - AppIdentityProvider: resolves the application name used in the archive
    - sanitized_file_component / export_file_name: archive file naming
    - write_archive: atomic UTF-8 write raising ExportError
    - export_archive: renders and writes the archive of a reconciler's current view
"""
import logging
import os
import pathlib
import re
import tempfile
from datetime import datetime
from typing import Optional

from PySide6 import QtCore

from . import summary
from .state import FilterStateReconciler
from ..settings import lib
from ..settings import locale as locale_lib
from ..status import status

FALLBACK_APP_NAME: str = lib.app_name

re_disallowed = re.compile(r'[^\w-]+')


class AppIdentityProvider:
    """
    Supplies the application name used for archive file names and headers.

    Args:
        display_name (str): The user-facing name of the application.
        short_name (str): The short or bundle name of the application.
    """

    def __init__(self, display_name: str = '', short_name: str = '') -> None:
        self.display_name = display_name
        self.short_name = short_name

    @classmethod
    def from_application(cls, app_name: str = '') -> 'AppIdentityProvider':
        """Reads the names of the running Qt application. ``app_name`` takes precedence when given."""
        display_name = app_name
        short_name = ''

        app = QtCore.QCoreApplication.instance()
        if app is not None:
            short_name = app.applicationName()
            if not display_name and hasattr(app, 'applicationDisplayName'):
                display_name = app.applicationDisplayName()
        return cls(display_name=display_name, short_name=short_name)

    def resolved_name(self) -> str:
        """Returns the display name, else the short name, else a fixed fallback."""
        for name in (self.display_name, self.short_name):
            if name and name.strip():
                return name
        return FALLBACK_APP_NAME


def sanitized_file_component(name: str) -> str:
    """
    Makes a string safe to use in a file name.

    Keeps letters, digits, ``-`` and ``_``; any run of other characters becomes a single ``-``.

    Args:
        name (str): The string to sanitize.

    Returns:
        str: The sanitized string, or the fallback application name if nothing is left.
    """
    components = [c for c in re_disallowed.split(name.strip()) if c]
    return '-'.join(components) or FALLBACK_APP_NAME


def export_file_name(app_name: str, now: Optional[datetime] = None) -> str:
    """Returns ``<app>-logs-<yyyyMMdd-HHmmss>.log``."""
    now = now or datetime.now()
    return f'{sanitized_file_component(app_name)}-logs-{now.strftime("%Y%m%d-%H%M%S")}.log'


def write_archive(path: pathlib.Path, contents: str) -> pathlib.Path:
    """
    Writes ``contents`` to ``path`` as UTF-8, replacing any existing file.

    The text is written to a temporary file next to ``path`` first, so a failed write never
    leaves a partial archive behind.

    Args:
        path (pathlib.Path): The destination.
        contents (str): The archive text. Line endings are written as given.

    Returns:
        pathlib.Path: The written path.

    Raises:
        status.ExportError: If the archive could not be written.
    """
    path = pathlib.Path(path)
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f'.{path.name}.', dir=path.parent)
        with os.fdopen(fd, 'w', encoding='utf-8', newline='') as f:
            f.write(contents)
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as ex:
        raise status.ExportError(f'{path}: {ex}') from ex
    finally:
        if tmp_name and os.path.exists(tmp_name):
            os.remove(tmp_name)

    logging.debug(f'Wrote log archive "{path}" ({len(contents)} characters)')
    return path


def export_archive(reconciler: FilterStateReconciler, identity: Optional[AppIdentityProvider] = None,
                   directory: Optional[pathlib.Path] = None,
                   now: Optional[datetime] = None) -> list[pathlib.Path]:
    """
    Writes the reconciler's displayed entries to an archive.

    The filter state is only read.

    Args:
        reconciler (FilterStateReconciler): Supplies the state and the displayed entries.
        identity (AppIdentityProvider, optional): Names the application. Defaults to the running Qt application.
        directory (pathlib.Path, optional): Where to write. Defaults to the configured export directory.
        now (datetime, optional): The generation time. Defaults to now.

    Returns:
        list[pathlib.Path]: The written archive, or an empty list if there was nothing to export or the
        write failed.
    """
    settings = reconciler.settings
    if not reconciler.can_export():
        logging.debug('Nothing to export')
        return []

    entries = reconciler.displayed_entries()
    identity = identity or AppIdentityProvider.from_application(settings.app_name)
    app_name = identity.resolved_name()
    now = now or datetime.now()
    directory = pathlib.Path(directory) if directory else settings.export_dir

    contents = summary.export_contents(
        app_name,
        reconciler.state,
        entries,
        reconciler.since,
        now,
        formatter=locale_lib.ListFormatter(settings.locale),
        locale=settings.locale,
    )

    try:
        path = write_archive(directory / export_file_name(app_name, now), contents)
    except status.ExportError:
        return []
    return [path]

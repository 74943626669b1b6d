"""
LogViewer: browse, filter and export an application's own runtime log history.

This package provides:

- :mod:`LogViewer.core` – The filter engine: entries, category normalization, selection sanitizing,
  entry matching, the filter state reconciler, summaries and archive export.
- :mod:`LogViewer.log` – The in-memory log tank fed by Python logging.
- :mod:`LogViewer.settings` – Settings loading and Babel based locale formatting.
- :mod:`LogViewer.status` – Status codes and the non-fatal error taxonomy.
- :mod:`LogViewer.ui` – A PySide6 viewer with subsystem and category menus.

Use :func:`LogViewer.exec_` to launch the viewer.
"""

import sys

# Fail on Python < 3.11
if not (sys.version_info.major == 3 and sys.version_info.minor >= 11):
    raise RuntimeError('LogViewer requires Python 3.11 or higher.')

__version__ = '0.1.0'
__description__ = 'LogViewer: browse, filter and export the runtime log history of an application.'

from .log import log

log.setup_logging()


def exec_(settings_path=None) -> None:
    """Launch the viewer on a QApplication and enter its event loop.

    Args:
        settings_path (str, optional): A JSON settings file. Defaults to ``$LOGVIEWER_CONFIG``.
    """
    from PySide6 import QtCore, QtWidgets

    from .core.source import TankLogSource
    from .core.state import FilterStateReconciler
    from .settings import lib
    from .ui.view import LogViewerWidget

    settings = lib.Settings.load(settings_path)
    log.setup_logging(log_level=log.LOG_LEVEL, capacity=settings.tank_capacity)

    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication(sys.argv)
    app.setApplicationName(settings.app_name or lib.app_name)
    app.setApplicationVersion(__version__)

    defaults = [] if settings.default_subsystems or not settings.app_name else [settings.app_name]
    reconciler = FilterStateReconciler(TankLogSource(), default_subsystems=defaults, settings=settings)

    widget = LogViewerWidget(reconciler)
    widget.show()

    # Load the history once the event loop runs
    QtCore.QTimer.singleShot(0, reconciler.refresh)

    sys.exit(app.exec())


if __name__ == '__main__':
    exec_()

"""
Qt user interface of the log viewer.

Modules:

- :mod:`LogViewer.ui.actions` – Application-wide signals.
- :mod:`LogViewer.ui.view` – Table model, views and the viewer widget.
"""

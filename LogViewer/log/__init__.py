"""
Logging subsystem: the in-memory log tank the viewer reads its history from.

Modules:

- :mod:`LogViewer.log.log` – Log handler integrating with Python logging.
"""

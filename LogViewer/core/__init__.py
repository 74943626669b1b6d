"""
Core of the log viewer: entries, filtering, filter state reconciliation, summaries and export.

Modules:

- :mod:`LogViewer.core.entry` – The LogEntry value type and log levels.
- :mod:`LogViewer.core.filters` – Pure category normalization, selection sanitizing and entry matching.
- :mod:`LogViewer.core.state` – FilterState and the FilterStateReconciler.
- :mod:`LogViewer.core.source` – Log sources and the refresh worker thread.
- :mod:`LogViewer.core.summary` – Menu labels, empty-state messages and archive rendering.
- :mod:`LogViewer.core.export` – Archive naming and writing.
"""

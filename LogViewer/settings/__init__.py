"""
Settings and locale helpers.

Modules:

- :mod:`LogViewer.settings.lib` – Settings schema, validation and loading.
- :mod:`LogViewer.settings.locale` – Babel based list and date formatting.
"""

"""Log views for browsing and exporting the filtered log history.

This module provides:
    - LogEntryModel: table model over the reconciler's displayed entries
    - LogTableView: table view for the entries
    - LogViewerWidget: the viewer with subsystem and category menus, refresh and export actions

The widgets hold no filter logic of their own; every decision goes through
:class:`~LogViewer.core.state.FilterStateReconciler` and :mod:`LogViewer.core.summary`.
"""
import enum
import logging
from typing import Any, Optional

from PySide6 import QtCore, QtGui, QtWidgets

from .actions import signals
from ..core import export, summary
from ..core.entry import Level
from ..core.filters import category_display_name
from ..core.state import FilterStateReconciler
from ..settings import locale as locale_lib


class Columns(enum.IntEnum):
    """Defines the column indexes for log table data."""
    Date = 0
    Level = 1
    Sender = 2
    Subsystem = 3
    Category = 4
    Message = 5


class LogEntryModel(QtCore.QAbstractTableModel):
    """
    A model for displaying the entries that pass the reconciler's filters.

    The model resets whenever the batch or the selections change.
    """

    def __init__(self, reconciler: FilterStateReconciler, parent: Any = None):
        super().__init__(parent=parent)
        self._reconciler = reconciler
        self._entries = reconciler.displayed_entries()

        reconciler.entriesChanged.connect(self.reload)
        reconciler.selectionChanged.connect(self.reload)

    @QtCore.Slot()
    def reload(self) -> None:
        """Re-reads the displayed entries from the reconciler."""
        self.beginResetModel()
        self._entries = self._reconciler.displayed_entries()
        self.endResetModel()

    def rowCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self._entries)

    def columnCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(Columns)

    def data(self, index: QtCore.QModelIndex, role: int = QtCore.Qt.DisplayRole) -> Any:
        if not index.isValid() or index.row() >= len(self._entries):
            return None

        entry = self._entries[index.row()]

        if role == QtCore.Qt.DisplayRole:
            column = index.column()
            if column == Columns.Date:
                return entry.timestamp.strftime('%Y-%m-%d %H:%M:%S')
            elif column == Columns.Level:
                return entry.level.name
            elif column == Columns.Sender:
                return entry.sender
            elif column == Columns.Subsystem:
                return entry.subsystem
            elif column == Columns.Category:
                return category_display_name(entry.category)
            elif column == Columns.Message:
                return entry.message

        if role == QtCore.Qt.FontRole and entry.level >= Level.ERROR:
            font = QtGui.QFont()
            font.setBold(True)
            return font

        if role == QtCore.Qt.ForegroundRole:
            if entry.level == Level.DEBUG:
                return QtGui.QColor(QtCore.Qt.darkCyan)
            elif entry.level >= Level.ERROR:
                return QtGui.QColor(QtCore.Qt.red)

        return None

    def headerData(self, section: int, orientation, role: int = QtCore.Qt.DisplayRole) -> Any:
        if orientation == QtCore.Qt.Horizontal and role == QtCore.Qt.DisplayRole:
            return Columns(section).name
        return super().headerData(section, orientation, role)


class LogTableView(QtWidgets.QTableView):
    """A QTableView displaying log entries from LogEntryModel."""

    def __init__(self, reconciler: FilterStateReconciler, parent=None):
        super().__init__(parent=parent)
        self.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        self.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.setWordWrap(True)

        self.setModel(LogEntryModel(reconciler, parent=self))

        header = self.horizontalHeader()
        header.setDefaultAlignment(QtCore.Qt.AlignLeft | QtCore.Qt.AlignVCenter)
        for column in Columns:
            header.setSectionResizeMode(column.value, QtWidgets.QHeaderView.ResizeToContents)
        header.setSectionResizeMode(Columns.Message.value, QtWidgets.QHeaderView.Stretch)
        self.verticalHeader().setHidden(True)


class LogViewerWidget(QtWidgets.QWidget):
    """
    Browses the runtime log history with subsystem and category filters.

    Args:
        reconciler (FilterStateReconciler): The filter engine to drive.
        parent (QtWidgets.QWidget, optional): Parent widget.
    """

    def __init__(self, reconciler: FilterStateReconciler, parent=None) -> None:
        super().__init__(parent=parent)
        self.setWindowTitle('Log viewer')
        self.reconciler = reconciler
        self.formatter = locale_lib.ListFormatter(reconciler.settings.locale)

        self.toolbar: Optional[QtWidgets.QToolBar] = None
        self.subsystem_button: Optional[QtWidgets.QToolButton] = None
        self.category_button: Optional[QtWidgets.QToolButton] = None
        self.export_action: Optional[QtGui.QAction] = None
        self.refresh_action: Optional[QtGui.QAction] = None
        self.overlay_label: Optional[QtWidgets.QLabel] = None
        self.status_label: Optional[QtWidgets.QLabel] = None
        self.view: Optional[LogTableView] = None

        self._create_ui()
        self._connect_signals()
        self.update_state()

    def _create_ui(self) -> None:
        QtWidgets.QVBoxLayout(self)
        self.layout().setContentsMargins(0, 0, 0, 0)
        self.layout().setSpacing(0)

        self.toolbar = QtWidgets.QToolBar(self)

        self.subsystem_button = QtWidgets.QToolButton(self.toolbar)
        self.subsystem_button.setPopupMode(QtWidgets.QToolButton.InstantPopup)
        self.subsystem_button.setMenu(QtWidgets.QMenu(self.subsystem_button))
        self.toolbar.addWidget(self.subsystem_button)

        self.category_button = QtWidgets.QToolButton(self.toolbar)
        self.category_button.setPopupMode(QtWidgets.QToolButton.InstantPopup)
        self.category_button.setMenu(QtWidgets.QMenu(self.category_button))
        self.toolbar.addWidget(self.category_button)

        self.toolbar.addSeparator()

        self.refresh_action = self.toolbar.addAction('Refresh')
        self.refresh_action.setShortcut(QtGui.QKeySequence.Refresh)
        self.refresh_action.setToolTip('Reload the log history')

        self.export_action = self.toolbar.addAction('Share')
        self.export_action.setToolTip('Export the displayed entries to a log archive')

        self.layout().addWidget(self.toolbar)

        self.view = LogTableView(self.reconciler, parent=self)
        self.layout().addWidget(self.view, 1)

        self.overlay_label = QtWidgets.QLabel(self)
        self.overlay_label.setAlignment(QtCore.Qt.AlignCenter)
        self.overlay_label.setWordWrap(True)
        self.layout().addWidget(self.overlay_label, 1)

        self.status_label = QtWidgets.QLabel(self)
        self.status_label.setWordWrap(True)
        self.layout().addWidget(self.status_label)

    def _connect_signals(self) -> None:
        self.subsystem_button.menu().aboutToShow.connect(self.populate_subsystem_menu)
        self.category_button.menu().aboutToShow.connect(self.populate_category_menu)

        self.refresh_action.triggered.connect(lambda: self.reconciler.refresh())
        self.export_action.triggered.connect(lambda: self.export())

        self.reconciler.refreshStarted.connect(self.update_state)
        self.reconciler.refreshFinished.connect(self.update_state)
        self.reconciler.selectionChanged.connect(self.update_state)

        signals.refreshRequested.connect(self.reconciler.refresh)
        signals.exportRequested.connect(self.export)
        signals.error.connect(self.status_label.setText)

    @QtCore.Slot()
    def update_state(self) -> None:
        """Updates the menu labels, the empty-state message and the enabled actions."""
        state = self.reconciler.state
        displayed = self.reconciler.displayed_entries()

        self.subsystem_button.setText(summary.subsystem_menu_label(state, self.formatter))
        self.subsystem_button.setEnabled(bool(state.available_subsystems))

        self.category_button.setText(summary.category_menu_label(state, self.formatter))
        self.category_button.setEnabled(bool(state.available_categories or state.selected_categories))

        self.refresh_action.setEnabled(not self.reconciler.is_refreshing())
        self.export_action.setEnabled(self.reconciler.can_export())

        message = summary.empty_state_message(
            state, displayed, self.reconciler.since, self.formatter, self.reconciler.settings.locale
        )
        self.overlay_label.setText(message or '')
        self.overlay_label.setVisible(message is not None)
        self.view.setVisible(message is None)

    @QtCore.Slot()
    def populate_subsystem_menu(self) -> None:
        menu = self.subsystem_button.menu()
        menu.clear()

        subsystems = self.reconciler.state.available_subsystems
        if not subsystems:
            menu.addAction('No subsystems detected yet').setEnabled(False)
            return

        for subsystem in subsystems:
            action = menu.addAction(subsystem)
            action.setCheckable(True)
            action.setChecked(self.reconciler.is_subsystem_active(subsystem))
            action.triggered.connect(
                lambda checked=False, s=subsystem: self.reconciler.toggle_subsystem(s)
            )

        if self.reconciler.has_selection():
            menu.addSeparator()
            menu.addAction('Show all subsystems').triggered.connect(lambda: self.reconciler.reset())

    @QtCore.Slot()
    def populate_category_menu(self) -> None:
        menu = self.category_button.menu()
        menu.clear()

        subsystems = self.reconciler.category_menu_subsystems()
        if not subsystems:
            menu.addAction('No categories detected yet').setEnabled(False)
            return

        for subsystem in subsystems:
            if len(subsystems) > 1:
                menu.addSection(subsystem)
            self._add_category_items(menu, subsystem)

        if self.reconciler.state.selected_categories:
            menu.addSeparator()
            menu.addAction('Reset category filters').triggered.connect(lambda: self.reconciler.reset_categories())

    def _add_category_items(self, menu: QtWidgets.QMenu, subsystem: str) -> None:
        categories = self.reconciler.category_menu_items(subsystem)
        if not categories:
            menu.addAction('No categories detected yet').setEnabled(False)

        for category in categories:
            action = menu.addAction(category_display_name(category))
            action.setCheckable(True)
            action.setChecked(self.reconciler.is_category_selected(category, subsystem))
            action.triggered.connect(
                lambda checked=False, c=category, s=subsystem: self.reconciler.toggle_category(c, s)
            )

        if self.reconciler.state.selected_categories.get(subsystem):
            menu.addAction('Show all categories').triggered.connect(
                lambda checked=False, s=subsystem: self.reconciler.clear_categories(s)
            )

    @QtCore.Slot()
    def export(self) -> list:
        """Exports the displayed entries and reports the written archive."""
        paths = export.export_archive(self.reconciler)
        if paths:
            self.status_label.setText(f'Saved {paths[0]}')
        else:
            logging.warning('No log archive was produced')
        signals.exportFinished.emit([str(p) for p in paths])
        return paths

    def sizeHint(self):
        return QtCore.QSize(960, 540)

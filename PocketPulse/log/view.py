"""Log view and dock widget.

This module provides:
    - LogTableView: table view of the in-memory log records
    - LogDockWidget: dockable container with level and clear actions
"""
import logging

from PySide6 import QtCore, QtWidgets, QtGui

from . import log
from .model import Columns, LogFilterProxyModel, LogTableModel, get_handler
from ..ui import ui
from ..ui.dockable_widget import DockableWidget

LEVELS = (
    ('Debug', logging.DEBUG),
    ('Info', logging.INFO),
    ('Warning', logging.WARNING),
    ('Error', logging.ERROR),
    ('Critical', logging.CRITICAL),
)


class LogTableView(QtWidgets.QTableView):
    """A QTableView displaying log messages from LogTableModel, newest last."""

    def __init__(self, parent=None):
        super().__init__(parent=parent)
        self.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        self.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.setWordWrap(False)
        self.setShowGrid(False)

        self.setItemDelegate(ui.RoundedRowDelegate(parent=self))

        proxy = LogFilterProxyModel(self)
        proxy.setSourceModel(LogTableModel(parent=self))
        self.setModel(proxy)

        header = self.horizontalHeader()
        header.setDefaultAlignment(QtCore.Qt.AlignLeft | QtCore.Qt.AlignVCenter)
        for column in (Columns.Date, Columns.Module, Columns.Level):
            header.setSectionResizeMode(column.value, QtWidgets.QHeaderView.ResizeToContents)
        header.setSectionResizeMode(Columns.Message.value, QtWidgets.QHeaderView.Stretch)

        header = self.verticalHeader()
        header.setDefaultSectionSize(ui.Size.RowHeight(0.8))
        header.setHidden(True)

        self.model().rowsInserted.connect(self.scrollToBottom)

    def sizeHint(self):
        return QtCore.QSize(
            ui.Size.DefaultWidth(1.0),
            ui.Size.DefaultHeight(0.4)
        )


class LogDockWidget(DockableWidget):
    """Dockable widget for viewing app logs."""

    def __init__(self, parent=None) -> None:
        super().__init__('Logs', parent)
        self.setObjectName('PocketPulseLogDockWidget')

        self.view = LogTableView(self)
        self.view.setContextMenuPolicy(QtCore.Qt.ActionsContextMenu)
        self.setWidget(self.view)

        self._init_actions()
        self.visibilityChanged.connect(self.on_visibility_changed)

    def _add_level_menu(self, label, current, callback) -> None:
        action = QtGui.QAction(label, self)
        menu = QtWidgets.QMenu(self)
        group = QtGui.QActionGroup(self)
        group.setExclusive(True)

        for name, lvl in LEVELS:
            act = menu.addAction(name)
            act.setData(lvl)
            act.setCheckable(True)
            act.setChecked(current == lvl)
            group.addAction(act)
        group.triggered.connect(lambda a: callback(a.data()))

        action.setMenu(menu)
        self.view.addAction(action)

    def _init_actions(self) -> None:
        proxy = self.view.model()

        self._add_level_menu('App Level', logging.getLogger().level, log.set_logging_level)
        self._add_level_menu('View Filter', proxy.filter_level(), proxy.set_filter_level)

        action = QtGui.QAction('Clear Logs', self)
        action.triggered.connect(self.clear_logs)
        self.view.addAction(action)

    @QtCore.Slot()
    def clear_logs(self) -> None:
        try:
            get_handler().clear_logs()
        except RuntimeError:
            logging.warning('TankHandler not found; cannot clear underlying logs.')
        self.view.model().sourceModel().clear_logs()

    @QtCore.Slot(bool)
    def on_visibility_changed(self, visible: bool) -> None:
        model = self.view.model().sourceModel()
        if visible:
            model.resume()
        else:
            model.pause()

"""
Toolbar Module.

The view toolbar holds the controls that change what is shown:

    View date | Type filter | Search | Reload, Seed Demo Data

Every control reports through the application signals and ends in a single refresh.
"""
import logging

from PySide6 import QtCore, QtGui, QtWidgets

from . import ui
from .actions import signals
from ..data.data import TypeFilter


class ViewToolBar(QtWidgets.QToolBar):
    """Toolbar with the view date, type filter and search controls."""

    def __init__(self, parent=None):
        super().__init__('View', parent=parent)
        self.setMovable(False)
        self.setFloatable(False)
        self.setObjectName('PocketPulseViewToolBar')

        self.date_editor: QtWidgets.QDateEdit
        self.type_filter_editor: QtWidgets.QComboBox
        self.search_editor: QtWidgets.QLineEdit
        self.reload_action: QtGui.QAction
        self.seed_action: QtGui.QAction

        self._create_ui()
        self._connect_signals()

    def _create_ui(self):
        self.addWidget(QtWidgets.QLabel('View date', self))

        self.date_editor = QtWidgets.QDateEdit(QtCore.QDate.currentDate(), self)
        self.date_editor.setCalendarPopup(True)
        self.date_editor.setDisplayFormat('yyyy-MM-dd')
        self.addWidget(self.date_editor)

        self.type_filter_editor = QtWidgets.QComboBox(self)
        for f in TypeFilter:
            self.type_filter_editor.addItem(f.value.capitalize(), userData=f.value)
        self.addWidget(self.type_filter_editor)

        self.search_editor = QtWidgets.QLineEdit(self)
        self.search_editor.setPlaceholderText('Search description or category')
        self.search_editor.setClearButtonEnabled(True)
        self.search_editor.setMinimumWidth(ui.Size.DefaultWidth(0.35))
        self.addWidget(self.search_editor)

        spacer = QtWidgets.QWidget(self)
        spacer.setAttribute(QtCore.Qt.WA_TransparentForMouseEvents)
        spacer.setSizePolicy(QtWidgets.QSizePolicy.Expanding, QtWidgets.QSizePolicy.Preferred)
        self.addWidget(spacer)

        self.reload_action = QtGui.QAction('Reload', self)
        self.reload_action.setToolTip('Fetch the latest data from the server')
        self.reload_action.setShortcut('Ctrl+R')
        self.reload_action.setShortcutContext(QtCore.Qt.ApplicationShortcut)
        self.addAction(self.reload_action)

        self.seed_action = QtGui.QAction('Seed Demo Data', self)
        self.seed_action.setToolTip('Add a few sample transactions around today')
        self.addAction(self.seed_action)

    def _connect_signals(self):
        self.date_editor.dateChanged.connect(self.emit_view_date)
        self.type_filter_editor.currentIndexChanged.connect(
            lambda: signals.typeFilterChanged.emit(self.type_filter_editor.currentData())
        )
        self.search_editor.textChanged.connect(signals.searchTextChanged)

        self.reload_action.triggered.connect(signals.refreshRequested)
        self.seed_action.triggered.connect(self.seed_demo_data)

    @QtCore.Slot(QtCore.QDate)
    def emit_view_date(self, date: QtCore.QDate) -> None:
        signals.viewDateChanged.emit(date.toString(QtCore.Qt.ISODate))

    @QtCore.Slot()
    def seed_demo_data(self) -> None:
        res = QtWidgets.QMessageBox.question(
            self,
            'Seed Demo Data',
            'Add sample transactions for today and the two previous days?',
            QtWidgets.QMessageBox.Yes | QtWidgets.QMessageBox.No,
            QtWidgets.QMessageBox.Yes
        )
        if res != QtWidgets.QMessageBox.Yes:
            return
        logging.debug('Seeding demo data.')
        signals.seedDemoRequested.emit()

    def view_date(self) -> str:
        return self.date_editor.date().toString(QtCore.Qt.ISODate)

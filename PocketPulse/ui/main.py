"""Main window composition and UI entry points for PocketPulse.

This module defines:
    - show(): initialize and display the main window
    - MainWindow: the view toolbar, summary and history chart, and the form,
      transactions and log docks
"""
import functools
import logging

from PySide6 import QtWidgets, QtCore, QtGui

from . import ui
from .actions import signals
from .toolbar import ViewToolBar
from ..core import refresh
from ..data.data import Transaction
from ..data.view.form import TransactionFormDockWidget
from ..data.view.history import HistoryChartView
from ..data.view.summary import SummaryWidget
from ..data.view.transaction import TransactionsDockWidget
from ..log.view import LogDockWidget
from ..settings import lib
from ..settings import locale

STATUS_TIMEOUT_MS = 8000
REFRESHING_MESSAGE = 'Refreshing...'

widget = None


def show():
    global widget

    if widget is None:
        widget = MainWindow()

    widget.show()


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, parent=None):
        super().__init__(parent=parent)
        self.setWindowTitle(lib.settings['name'] or lib.app_name)
        self.setObjectName('PocketPulseMainWindow')

        self.manager = refresh.get_manager()

        self.toolbar: ViewToolBar
        self.summary_view: SummaryWidget
        self.history_view: HistoryChartView

        self.form_view: TransactionFormDockWidget
        self.transactions_view: TransactionsDockWidget
        self.log_view: LogDockWidget

        self._configure_dock_behavior()
        self._create_ui()
        self._init_actions()
        self._connect_signals()
        self.load_window_settings()

    def _configure_dock_behavior(self) -> None:
        opts = self.dockOptions()
        opts |= QtWidgets.QMainWindow.AllowNestedDocks | QtWidgets.QMainWindow.AnimatedDocks
        self.setDockOptions(opts)

    def _create_ui(self) -> None:
        self.toolbar = ViewToolBar(self)
        self.addToolBar(QtCore.Qt.TopToolBarArea, self.toolbar)

        central = QtWidgets.QWidget(self)
        layout = QtWidgets.QVBoxLayout(central)
        o = ui.Size.Margin(0.5)
        layout.setContentsMargins(o, o, o, o)
        layout.setSpacing(o)

        self.summary_view = SummaryWidget(central)
        layout.addWidget(self.summary_view, 0)

        self.history_view = HistoryChartView(central)
        layout.addWidget(self.history_view, 1)

        self.setCentralWidget(central)

        dock_configs = [
            {
                'attr': 'form_view',
                'class': TransactionFormDockWidget,
                'area': QtCore.Qt.LeftDockWidgetArea,
                'visible': True,
            },
            {
                'attr': 'transactions_view',
                'class': TransactionsDockWidget,
                'area': QtCore.Qt.BottomDockWidgetArea,
                'visible': True,
            },
            {
                'attr': 'log_view',
                'class': LogDockWidget,
                'area': QtCore.Qt.BottomDockWidgetArea,
                'visible': False,
            },
        ]
        for cfg in dock_configs:
            dock = cfg['class'](parent=self)
            setattr(self, cfg['attr'], dock)
            self.addDockWidget(cfg['area'], dock)
            dock.setVisible(cfg['visible'])
            logging.debug(f'Added dock {dock.objectName()} in area {cfg["area"]}')

        self.tabifyDockWidget(self.transactions_view, self.log_view)
        self.transactions_view.raise_()

        self.setStatusBar(QtWidgets.QStatusBar(self))

    def _init_actions(self) -> None:
        action = self.log_view.toggleViewAction()
        action.setText('Logs')
        action.setShortcut('Ctrl+L')
        action.setShortcutContext(QtCore.Qt.ApplicationShortcut)
        self.toolbar.addAction(action)
        self.addAction(action)

        action = QtGui.QAction('Focus Search', self)
        action.setShortcut('Ctrl+F')
        action.setShortcutContext(QtCore.Qt.ApplicationShortcut)
        action.triggered.connect(functools.partial(self.toolbar.search_editor.setFocus, QtCore.Qt.ShortcutFocusReason))
        self.addAction(action)

    def _connect_signals(self) -> None:
        signals.showLogs.connect(self.show_logs)
        signals.error.connect(self.show_error)

        self.manager.refreshStarted.connect(lambda _: self.statusBar().showMessage(REFRESHING_MESSAGE))
        self.manager.refreshFinished.connect(self.clear_refresh_message)
        self.manager.refreshFailed.connect(self.clear_refresh_message)

        signals.transactionCreated.connect(self.show_transaction_created)

        @QtCore.Slot(str, object)
        def metadata_changed(key: str, value: object) -> None:
            if key == 'name':
                self.setWindowTitle(value or lib.app_name)

        signals.metadataChanged.connect(metadata_changed)

    @QtCore.Slot()
    def show_logs(self) -> None:
        self.log_view.show()
        self.log_view.raise_()

    @QtCore.Slot(str)
    def show_error(self, message: str) -> None:
        self.statusBar().showMessage(message, STATUS_TIMEOUT_MS)

    def clear_refresh_message(self, *args) -> None:
        """Clear the status bar unless it shows something other than the refresh notice."""
        if self.statusBar().currentMessage() == REFRESHING_MESSAGE:
            self.statusBar().clearMessage()

    @QtCore.Slot(object)
    def show_transaction_created(self, transaction: Transaction) -> None:
        amount = locale.format_amount(transaction.amount)
        self.statusBar().showMessage(
            f'Added {transaction.type} of {amount} ({transaction.category}).', STATUS_TIMEOUT_MS
        )

    def sizeHint(self):
        return QtCore.QSize(
            ui.Size.DefaultWidth(1.8),
            ui.Size.DefaultHeight(1.6)
        )

    def closeEvent(self, event) -> None:
        """Persist window geometry and state on close."""
        settings = QtCore.QSettings(lib.app_name, lib.app_name)
        settings.setValue('MainWindow/geometry', self.saveGeometry())
        settings.setValue('MainWindow/windowState', self.saveState())
        super().closeEvent(event)

    def load_window_settings(self) -> None:
        settings = QtCore.QSettings(lib.app_name, lib.app_name)

        geometry = settings.value('MainWindow/geometry')
        if isinstance(geometry, QtCore.QByteArray):
            self.restoreGeometry(geometry)
        else:
            self.resize(self.sizeHint())

        state = settings.value('MainWindow/windowState')
        if isinstance(state, QtCore.QByteArray):
            self.restoreState(state)

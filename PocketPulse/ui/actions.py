"""Application-wide Qt signals for PocketPulse.

This module provides:
    - Signals: custom Qt signals for configuration changes, view state changes
      (date, type filter, search), refresh results, transaction actions and UI
      actions (showLogs).
"""
import logging

from PySide6 import QtCore


class Signals(QtCore.QObject):
    """Centralized Qt signals for application config, data, and UI events."""
    initializationRequested = QtCore.Signal()

    configSectionChanged = QtCore.Signal(str)  # Section
    metadataChanged = QtCore.Signal(str, object)

    # View state. Every change ends in a single refresh.
    viewDateChanged = QtCore.Signal(str)
    typeFilterChanged = QtCore.Signal(str)
    searchTextChanged = QtCore.Signal(str)
    refreshRequested = QtCore.Signal()

    # Refresh results
    transactionsChanged = QtCore.Signal(list)
    summaryChanged = QtCore.Signal(object)
    seriesChanged = QtCore.Signal(object)

    # Transaction actions
    transactionCreated = QtCore.Signal(object)
    seedDemoRequested = QtCore.Signal()

    showLogs = QtCore.Signal()

    error = QtCore.Signal(str)

    def __init__(self):
        super().__init__()
        self._connect_signals()

    def _connect_signals(self):
        @QtCore.Slot(str, object)
        def metadata_changed(key: str, value: object) -> None:
            if key != 'theme':
                return

            from PySide6 import QtWidgets
            if not QtWidgets.QApplication.instance():
                return
            try:
                from . import ui
                ui.apply_theme()
            except (RuntimeError, FileNotFoundError, KeyError, AttributeError) as ex:
                logging.debug(f'Error applying theme: {ex}')

        self.metadataChanged.connect(metadata_changed)


signals = Signals()

"""Transaction table view and dock.

This module provides:
    - DeleteButtonDelegate: paints the per-row delete control
    - TransactionsView: table of the filtered transactions, newest first, with a
      confirmed delete action and an empty-list placeholder
    - TransactionsDockWidget: dockable container for the view
"""
import logging
from typing import Optional

from PySide6 import QtWidgets, QtCore, QtGui

from ..model.transaction import TransactionsModel, Columns, IdRole
from ...ui import ui
from ...ui.dockable_widget import DockableWidget

PLACEHOLDER_TEXT = 'No transactions yet.'
DELETE_PROMPT = 'Delete this transaction?'
DELETE_FAILED = 'Failed to delete transaction.'


class DeleteButtonDelegate(ui.RoundedRowDelegate):
    """Paints a rounded delete pill in the delete column."""

    def paint(self, painter: QtGui.QPainter, option: QtWidgets.QStyleOptionViewItem,
              index: QtCore.QModelIndex) -> None:
        super().paint(painter, option, index)

        hover = option.state & QtWidgets.QStyle.State_MouseOver

        painter.save()
        painter.setRenderHint(QtGui.QPainter.Antialiasing)

        o = ui.Size.Indicator(1.0)
        rect = QtCore.QRect(option.rect).adjusted(o, o, -o, -o)

        color = ui.Color.Red()
        if not hover:
            color.setAlpha(160)

        painter.setPen(QtCore.Qt.NoPen)
        painter.setBrush(color)
        painter.drawRoundedRect(rect, rect.height() / 2.0, rect.height() / 2.0)

        painter.setPen(ui.Color.SelectedText())
        painter.setFont(ui.get_font(ui.Size.SmallText(1.0), bold=True))
        painter.drawText(rect, QtCore.Qt.AlignCenter, 'Delete')

        painter.restore()

    def initStyleOption(self, option: QtWidgets.QStyleOptionViewItem, index: QtCore.QModelIndex) -> None:
        super().initStyleOption(option, index)
        option.text = ''


class TransactionsView(QtWidgets.QTableView):
    """Table view for the transaction list of the latest refresh.

    Rows keep the order they were delivered in: the list is already filtered
    and ordered newest first.
    """

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)

        self.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        self.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.setContextMenuPolicy(QtCore.Qt.ActionsContextMenu)
        self.setMouseTracking(True)

        self.setShowGrid(False)
        self.setAlternatingRowColors(False)
        self.setWordWrap(False)

        self.setItemDelegate(ui.RoundedRowDelegate(first_column=0, last_column=-2, parent=self))
        self.setItemDelegateForColumn(Columns.Delete.value, DeleteButtonDelegate(parent=self))

        self.setSizePolicy(
            QtWidgets.QSizePolicy.Preferred,
            QtWidgets.QSizePolicy.MinimumExpanding
        )

        self.setModel(TransactionsModel(parent=self))

        self._init_section_sizing()
        self._init_actions()
        self._connect_signals()

    def _init_section_sizing(self) -> None:
        header = self.horizontalHeader()
        header.setDefaultAlignment(QtCore.Qt.AlignLeft | QtCore.Qt.AlignVCenter)
        header.setStretchLastSection(False)
        header.setSectionsClickable(False)
        header.setSectionsMovable(False)

        for column in Columns:
            header.setSectionResizeMode(column.value, QtWidgets.QHeaderView.ResizeToContents)
        header.setSectionResizeMode(Columns.Description.value, QtWidgets.QHeaderView.Stretch)
        header.setSectionResizeMode(Columns.Delete.value, QtWidgets.QHeaderView.Fixed)
        header.resizeSection(Columns.Delete.value, ui.Size.Section(0.8))

        header = self.verticalHeader()
        header.setDefaultSectionSize(ui.Size.RowHeight(1.0))
        header.setHidden(True)

    def _init_actions(self) -> None:
        action = QtGui.QAction('Delete Transaction', self)
        action.setShortcut(QtGui.QKeySequence.Delete)
        action.setShortcutContext(QtCore.Qt.WidgetWithChildrenShortcut)
        action.triggered.connect(lambda: self.delete_transaction(self.currentIndex()))
        self.addAction(action)

        action = QtGui.QAction('Reload', self)
        action.setShortcut('F5')
        action.setShortcutContext(QtCore.Qt.WidgetWithChildrenShortcut)

        from ...ui.actions import signals
        action.triggered.connect(signals.refreshRequested)
        self.addAction(action)

    def _connect_signals(self) -> None:
        self.clicked.connect(self.on_clicked)

    @QtCore.Slot(QtCore.QModelIndex)
    def on_clicked(self, index: QtCore.QModelIndex) -> None:
        if index.isValid() and index.column() == Columns.Delete.value:
            self.delete_transaction(index)

    @QtCore.Slot(QtCore.QModelIndex)
    def delete_transaction(self, index: QtCore.QModelIndex) -> bool:
        """Ask for confirmation, then delete the transaction at `index`.

        Returns:
            bool: True if the transaction was deleted.
        """
        if not index.isValid():
            return False

        transaction_id = index.siblingAtColumn(Columns.Date.value).data(IdRole)
        if transaction_id is None:
            return False

        res = QtWidgets.QMessageBox.question(
            self,
            'Delete Transaction',
            DELETE_PROMPT,
            QtWidgets.QMessageBox.Yes | QtWidgets.QMessageBox.No,
            QtWidgets.QMessageBox.No
        )
        if res != QtWidgets.QMessageBox.Yes:
            logging.debug(f'Delete of transaction {transaction_id} cancelled.')
            return False

        from ...core import refresh
        if refresh.get_manager().delete_transaction(transaction_id):
            return True

        QtWidgets.QMessageBox.warning(
            self,
            'Delete Transaction',
            DELETE_FAILED,
            QtWidgets.QMessageBox.Ok
        )
        return False

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:
        """Draw the table, or a placeholder message when there are no rows."""
        super().paintEvent(event)

        if self.model() is None or self.model().rowCount() != 0:
            return

        painter = QtGui.QPainter(self.viewport())
        painter.setFont(ui.get_font(ui.Size.MediumText(1.0)))
        painter.setPen(ui.Color.DisabledText())
        painter.drawText(self.viewport().rect(), QtCore.Qt.AlignCenter, PLACEHOLDER_TEXT)
        painter.end()

    def sizeHint(self) -> QtCore.QSize:
        return QtCore.QSize(
            ui.Size.DefaultWidth(1.0),
            ui.Size.DefaultHeight(0.6)
        )


class TransactionsDockWidget(DockableWidget):
    """Dock widget holding the transaction table."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(
            'Transactions',
            parent=parent,
            closable=False,
            min_width=ui.Size.DefaultWidth(0.5),
        )
        self.setObjectName('PocketPulseTransactionsDockWidget')

        content = QtWidgets.QWidget(self)
        QtWidgets.QVBoxLayout(content)
        o = ui.Size.Margin(0.5)
        content.layout().setContentsMargins(o, o, o, o)

        self.view = TransactionsView(content)
        content.layout().addWidget(self.view, 1)

        self.setWidget(content)

import enum
import logging
from typing import Any, List, Optional

from PySide6 import QtCore

from ..data import Transaction
from ...settings import locale
from ...ui import ui
from ...ui.actions import signals

TransactionRole = QtCore.Qt.UserRole + 1
IdRole = QtCore.Qt.UserRole + 2


class Columns(enum.IntEnum):
    Date = 0
    Type = 1
    Category = 2
    Description = 3
    Amount = 4
    Delete = 5


HEADERS = {
    Columns.Date: 'Date',
    Columns.Type: 'Type',
    Columns.Category: 'Category',
    Columns.Description: 'Description',
    Columns.Amount: 'Amount',
    Columns.Delete: '',
}


class TransactionsModel(QtCore.QAbstractTableModel):
    """
    Table model over the filtered, ordered transaction list of the last refresh.

    The rows are replaced wholesale on every refresh.
    """

    def __init__(self, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent=parent)
        self._data: List[Transaction] = []
        self._connect_signals()

    def _connect_signals(self) -> None:
        signals.transactionsChanged.connect(self.init_data)
        signals.metadataChanged.connect(self.on_metadata_changed)

    @QtCore.Slot(list)
    def init_data(self, data: List[Transaction]) -> None:
        self.beginResetModel()
        self._data = list(data or [])
        self.endResetModel()
        logging.debug(f'Transactions model reset with {len(self._data)} rows.')

    @QtCore.Slot()
    def clear_data(self) -> None:
        self.beginResetModel()
        self._data = []
        self.endResetModel()

    @QtCore.Slot(str, object)
    def on_metadata_changed(self, key: str, value: Any) -> None:
        if key not in ('locale', 'currency', 'fallback_symbol', 'theme'):
            return
        if not self._data:
            return
        self.dataChanged.emit(
            self.index(0, 0),
            self.index(self.rowCount() - 1, self.columnCount() - 1)
        )

    def transaction(self, row: int) -> Optional[Transaction]:
        if row < 0 or row >= len(self._data):
            return None
        return self._data[row]

    def rowCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self._data)

    def columnCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(Columns)

    def data(self, index: QtCore.QModelIndex, role: int = QtCore.Qt.DisplayRole) -> Any:
        """Returns data for the specified index and role."""
        if not index.isValid():
            return None

        t = self.transaction(index.row())
        if t is None:
            return None

        column = index.column()

        if role == TransactionRole:
            return t
        if role == IdRole:
            return t.id

        if role == QtCore.Qt.DisplayRole:
            if column == Columns.Date:
                return t.date
            if column == Columns.Type:
                return t.type.capitalize()
            if column == Columns.Category:
                return t.category
            if column == Columns.Description:
                return t.description
            if column == Columns.Amount:
                return locale.format_signed_amount(t.amount, t.type)
            return None

        if role in (QtCore.Qt.ToolTipRole, QtCore.Qt.StatusTipRole):
            if column == Columns.Delete:
                return 'Delete this transaction'
            if column == Columns.Description:
                return t.description or None
            return None

        if role == QtCore.Qt.ForegroundRole:
            if column in (Columns.Type, Columns.Amount):
                return ui.amount_color(t.type)
            if column == Columns.Date:
                return ui.Color.SecondaryText()
            return None

        if role == QtCore.Qt.FontRole and column == Columns.Amount:
            return ui.get_font(ui.Size.MediumText(1.0), bold=True)

        if role == QtCore.Qt.TextAlignmentRole:
            if column == Columns.Amount:
                return QtCore.Qt.AlignRight | QtCore.Qt.AlignVCenter
            if column == Columns.Delete:
                return QtCore.Qt.AlignCenter
            return QtCore.Qt.AlignLeft | QtCore.Qt.AlignVCenter

        return None

    def headerData(self, section: int, orientation: QtCore.Qt.Orientation,
                   role: int = QtCore.Qt.DisplayRole) -> Any:
        if orientation == QtCore.Qt.Horizontal and role == QtCore.Qt.DisplayRole:
            return HEADERS.get(Columns(section), '') if section < len(Columns) else None
        return None

    def flags(self, index: QtCore.QModelIndex) -> QtCore.Qt.ItemFlags:
        if not index.isValid():
            return QtCore.Qt.NoItemFlags
        return QtCore.Qt.ItemIsEnabled | QtCore.Qt.ItemIsSelectable

"""Transaction entry form.

This module provides:
    - TransactionForm: type, amount, category, date and description inputs with an add button
    - TransactionFormDockWidget: dockable container for the form
"""
import logging
from typing import Optional

from PySide6 import QtCore, QtWidgets

from ..data import Transaction, TransactionType
from ...status import status
from ...ui import ui
from ...ui.dockable_widget import DockableWidget

CREATE_FAILED = 'Failed to add transaction'


class TransactionForm(QtWidgets.QWidget):
    """Form creating a new transaction.

    On success the form resets to its defaults. On failure the entered values
    are kept and an alert is shown.
    """
    submitted = QtCore.Signal(object)

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)

        self.type_editor: QtWidgets.QComboBox
        self.amount_editor: QtWidgets.QLineEdit
        self.category_editor: QtWidgets.QLineEdit
        self.date_editor: QtWidgets.QDateEdit
        self.description_editor: QtWidgets.QLineEdit
        self.add_button: QtWidgets.QPushButton

        self._create_ui()
        self._connect_signals()
        self.reset()

    def _create_ui(self) -> None:
        layout = QtWidgets.QFormLayout(self)
        o = ui.Size.Margin(1.0)
        layout.setContentsMargins(o, o, o, o)
        layout.setSpacing(ui.Size.Indicator(2.0))
        layout.setFieldGrowthPolicy(QtWidgets.QFormLayout.AllNonFixedFieldsGrow)

        self.type_editor = QtWidgets.QComboBox(self)
        for kind in TransactionType:
            self.type_editor.addItem(kind.value.capitalize(), userData=kind.value)
        layout.addRow('Type', self.type_editor)

        self.amount_editor = QtWidgets.QLineEdit(self)
        self.amount_editor.setPlaceholderText('0.00')
        layout.addRow('Amount', self.amount_editor)

        self.category_editor = QtWidgets.QLineEdit(self)
        layout.addRow('Category', self.category_editor)

        self.date_editor = QtWidgets.QDateEdit(self)
        self.date_editor.setCalendarPopup(True)
        self.date_editor.setDisplayFormat('yyyy-MM-dd')
        layout.addRow('Date', self.date_editor)

        self.description_editor = QtWidgets.QLineEdit(self)
        self.description_editor.setPlaceholderText('Optional')
        layout.addRow('Description', self.description_editor)

        self.add_button = QtWidgets.QPushButton('Add Transaction', self)
        self.add_button.setProperty('primary', True)
        self.add_button.setDefault(True)
        layout.addRow(self.add_button)

    def _connect_signals(self) -> None:
        self.add_button.clicked.connect(self.submit)
        self.amount_editor.returnPressed.connect(self.submit)
        self.description_editor.returnPressed.connect(self.submit)
        self.type_editor.currentIndexChanged.connect(self.update_category_placeholder)

    @QtCore.Slot()
    def update_category_placeholder(self) -> None:
        from ..data import default_category
        self.category_editor.setPlaceholderText(default_category(self.type_editor.currentData()))

    @QtCore.Slot()
    def reset(self) -> None:
        """Restore every field to its default: income, empty inputs, today's date."""
        self.type_editor.setCurrentIndex(0)
        self.amount_editor.clear()
        self.category_editor.clear()
        self.description_editor.clear()
        self.date_editor.setDate(QtCore.QDate.currentDate())
        self.update_category_placeholder()

    def values(self) -> dict:
        return {
            'kind': self.type_editor.currentData(),
            'amount': self.amount_editor.text(),
            'category': self.category_editor.text(),
            'date': self.date_editor.date().toString(QtCore.Qt.ISODate),
            'description': self.description_editor.text(),
        }

    @QtCore.Slot()
    def submit(self) -> Optional[Transaction]:
        """Validate and create the transaction.

        Returns:
            The created transaction, or None if validation or the create failed.
        """
        from ...core import refresh

        try:
            transaction = refresh.get_manager().submit_transaction(**self.values())
        except status.AmountInvalidException:
            QtWidgets.QMessageBox.warning(
                self,
                'Add Transaction',
                status.get_message(status.Status.AmountInvalid),
                QtWidgets.QMessageBox.Ok
            )
            self.amount_editor.setFocus()
            return None

        if transaction is None:
            QtWidgets.QMessageBox.warning(
                self,
                'Add Transaction',
                CREATE_FAILED,
                QtWidgets.QMessageBox.Ok
            )
            return None

        logging.info(f'Added {transaction.type} of {transaction.amount} on {transaction.date}.')
        self.reset()
        self.submitted.emit(transaction)
        return transaction


class TransactionFormDockWidget(DockableWidget):
    """Dock widget holding the transaction form."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(
            'Add Transaction',
            parent=parent,
            closable=False,
            min_width=ui.Size.DefaultWidth(0.4),
        )
        self.setObjectName('PocketPulseTransactionFormDockWidget')

        self.form = TransactionForm(self)
        self.setWidget(self.form)

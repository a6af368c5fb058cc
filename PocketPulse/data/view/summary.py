"""Summary figures for the viewed date.

This module provides:
    - SummaryWidget: the day's income, expense and balance plus the month and lifetime balances
"""
from typing import Dict, Optional

from PySide6 import QtCore, QtWidgets

from ..data import Summary
from ...settings import locale
from ...ui import ui
from ...ui.actions import signals

FIELDS = (
    ('daily_income', 'Income today'),
    ('daily_expense', 'Expense today'),
    ('daily_balance', 'Balance today'),
    ('month_balance', 'Month balance'),
    ('lifetime_balance', 'Lifetime balance'),
)


class SummaryWidget(QtWidgets.QWidget):
    """Displays the server-computed summary for the viewed date."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)

        self._summary: Summary = Summary.zero()
        self.labels: Dict[str, QtWidgets.QLabel] = {}

        self._create_ui()
        self._connect_signals()
        self.set_summary(self._summary)

    def _create_ui(self) -> None:
        layout = QtWidgets.QGridLayout(self)
        o = ui.Size.Margin(1.0)
        layout.setContentsMargins(o, o, o, o)
        layout.setHorizontalSpacing(o)
        layout.setVerticalSpacing(ui.Size.Indicator(1.0))

        for column, (key, caption) in enumerate(FIELDS):
            caption_label = QtWidgets.QLabel(caption, self)
            caption_label.setProperty('caption', True)
            layout.addWidget(caption_label, 0, column)

            value_label = QtWidgets.QLabel(self)
            value_label.setProperty('figure', True)
            value_label.setTextInteractionFlags(QtCore.Qt.TextSelectableByMouse)
            layout.addWidget(value_label, 1, column)

            self.labels[key] = value_label

    def _connect_signals(self) -> None:
        signals.summaryChanged.connect(self.set_summary)

        @QtCore.Slot(str, object)
        def metadata_changed(key: str, value: object) -> None:
            if key in ('locale', 'currency', 'fallback_symbol'):
                self.set_summary(self._summary)

        signals.metadataChanged.connect(metadata_changed)

    @property
    def summary(self) -> Summary:
        return self._summary

    @QtCore.Slot(object)
    def set_summary(self, summary: Summary) -> None:
        self._summary = summary or Summary.zero()

        values = {
            'daily_income': self._summary.daily.income,
            'daily_expense': self._summary.daily.expense,
            'daily_balance': self._summary.daily.balance,
            'month_balance': self._summary.month_balance,
            'lifetime_balance': self._summary.lifetime_balance,
        }
        for key, value in values.items():
            label = self.labels[key]
            label.setText(locale.format_amount(value))

            if key == 'daily_income':
                color = ui.Color.Green(qss=True)
            elif key == 'daily_expense' or value < 0:
                color = ui.Color.Red(qss=True)
            else:
                color = ui.Color.Text(qss=True)
            label.setStyleSheet(f'color: {color};')

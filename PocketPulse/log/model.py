import enum
import logging
import re
from typing import Any

from PySide6 import QtCore

from .log import TankHandler
from ..ui import ui


class Columns(enum.IntEnum):
    """Column indexes of the log table."""
    Date = 0
    Module = 1
    Level = 2
    Message = 3


class Level(enum.IntEnum):
    """Standard log level names and their numeric values."""
    NOTSET = logging.NOTSET
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class Roles:
    LOG_LEVEL = QtCore.Qt.UserRole + 1


def get_handler():
    """Returns the TankHandler from the root logger or raises RuntimeError."""
    handlers = [h for h in logging.getLogger().handlers if isinstance(h, TankHandler)]
    if not handlers:
        raise RuntimeError('TankHandler not found in root logger')
    if len(handlers) > 1:
        raise RuntimeError('Multiple TankHandlers found in root logger')
    return handlers[0]


class LogTableModel(QtCore.QAbstractTableModel):
    """
    Polls the TankHandler and exposes its messages as date, module, level and message columns.
    """

    re_log_pattern = re.compile(
        r'^\[(?P<date>[^\]]+)\]\s+<(?P<module>[^>]+)>\s+(?P<level>[^:]+):\s+(?P<message>.*)$',
        flags=re.DOTALL
    )

    def __init__(self, parent: Any = None, fetch_interval_ms: int = 1000):
        super().__init__(parent=parent)
        self._logs: list[dict[str, Any]] = []
        self._is_paused = False

        self._timer = QtCore.QTimer(self)
        self._timer.timeout.connect(self.fetch_new_logs)
        self._timer.start(fetch_interval_ms)

    @QtCore.Slot()
    def pause(self) -> None:
        self._is_paused = True

    @QtCore.Slot()
    def resume(self) -> None:
        self._is_paused = False
        self.fetch_new_logs()

    def rowCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self._logs)

    def columnCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(Columns)

    def data(self, index: QtCore.QModelIndex, role: int = QtCore.Qt.DisplayRole) -> Any:
        if not index.isValid() or index.row() >= len(self._logs):
            return None

        entry = self._logs[index.row()]

        if role == QtCore.Qt.DisplayRole:
            if index.column() == Columns.Date:
                return entry['date']
            if index.column() == Columns.Module:
                return entry['module']
            if index.column() == Columns.Level:
                return entry['level'].name
            if index.column() == Columns.Message:
                return entry['message']

        if role == QtCore.Qt.ToolTipRole and index.column() == Columns.Message:
            return entry['message']

        if role == QtCore.Qt.ForegroundRole:
            if entry['level'] == Level.DEBUG:
                return ui.Color.Blue()
            if entry['level'] >= Level.ERROR:
                return ui.Color.Red()

        if role == Roles.LOG_LEVEL:
            return entry['level'].value

        return None

    def headerData(self, section: int, orientation, role: int = QtCore.Qt.DisplayRole) -> Any:
        if orientation == QtCore.Qt.Horizontal and role == QtCore.Qt.DisplayRole:
            return Columns(section).name if section < len(Columns) else None
        return super().headerData(section, orientation, role)

    @QtCore.Slot()
    def fetch_new_logs(self) -> None:
        """Appends messages logged since the last fetch."""
        if self._is_paused:
            return

        try:
            handler = get_handler()
        except RuntimeError:
            return

        all_logs = handler.get_logs(logging.NOTSET)
        # The tank was cleared elsewhere
        if len(all_logs) < len(self._logs):
            self.clear_logs()

        existing = len(self._logs)
        incoming = all_logs[existing:]
        if not incoming:
            return

        self.beginInsertRows(QtCore.QModelIndex(), existing, existing + len(incoming) - 1)
        self._logs.extend(self.parse_log_message(msg) for msg in incoming)
        self.endInsertRows()

    @QtCore.Slot()
    def clear_logs(self) -> None:
        self.beginResetModel()
        self._logs = []
        self.endResetModel()

    def parse_log_message(self, raw_message: str) -> dict[str, Any]:
        """
        Splits a formatted record into its fields. Unparsed lines are kept whole as the message.
        """
        result: dict[str, Any] = {
            'date': '',
            'module': '',
            'level': Level.NOTSET,
            'message': raw_message
        }

        match = self.re_log_pattern.match(raw_message)
        if not match:
            return result

        try:
            level = Level[match.group('level').strip().upper()]
        except KeyError:
            level = Level.NOTSET

        result.update({
            'date': match.group('date'),
            'module': match.group('module'),
            'level': level,
            'message': match.group('message').strip(),
        })
        return result


class LogFilterProxyModel(QtCore.QSortFilterProxyModel):
    """Hides rows below a minimum logging level."""

    def __init__(self, parent: Any = None):
        super().__init__(parent)
        self._filter_level = logging.NOTSET

    def filter_level(self) -> int:
        return self._filter_level

    def set_filter_level(self, level: int) -> None:
        self._filter_level = level
        self.invalidateFilter()

    def filterAcceptsRow(self, source_row: int, source_parent: QtCore.QModelIndex) -> bool:
        index = self.sourceModel().index(source_row, Columns.Date, source_parent)
        level = self.sourceModel().data(index, Roles.LOG_LEVEL)
        if level is None:
            return True
        return level >= self._filter_level

"""
Dockable widget base class for unified behavior and sizing.

This module defines:
    - DockableWidget: QDockWidget with unified features, size constraints,
      and a toggled signal for visibility changes.
"""
from typing import Optional

from PySide6 import QtWidgets, QtCore


class DockableWidget(QtWidgets.QDockWidget):
    """Base class for the main window's docks."""
    toggled = QtCore.Signal(bool)

    def __init__(
            self,
            title: str,
            parent: Optional[QtWidgets.QWidget] = None,
            movable: bool = True,
            floatable: bool = True,
            closable: bool = True,
            min_width: Optional[int] = None,
            min_height: Optional[int] = None,
            size_hint: Optional[QtCore.QSize] = None,
    ) -> None:
        super().__init__(title, parent=parent)

        features = QtWidgets.QDockWidget.NoDockWidgetFeatures

        if movable:
            features |= QtWidgets.QDockWidget.DockWidgetMovable
        if floatable:
            features |= QtWidgets.QDockWidget.DockWidgetFloatable
        if closable:
            features |= QtWidgets.QDockWidget.DockWidgetClosable

        self.setFeatures(features)
        self.setAllowedAreas(QtCore.Qt.AllDockWidgetAreas)

        self._size_hint = size_hint

        if min_width is not None:
            self.setMinimumWidth(min_width)

        if min_height is not None:
            self.setMinimumHeight(min_height)

        self.visibilityChanged.connect(self.toggled.emit)

    def sizeHint(self) -> QtCore.QSize:
        if self._size_hint:
            return self._size_hint
        return super().sizeHint()

"""Application setup utilities and custom QApplication for PocketPulse.

This module provides:
    - set_application_properties: high-DPI rounding policy
    - Application: QApplication subclass configuring application metadata and theme
"""
import sys
from typing import Optional, Sequence

from PySide6 import QtCore, QtGui, QtWidgets


def set_application_properties() -> None:
    """Use unrounded high-dpi scale factors."""
    QtGui.QGuiApplication.setHighDpiScaleFactorRoundingPolicy(
        QtCore.Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )


class Application(QtWidgets.QApplication):
    """QApplication carrying the PocketPulse name, version and style sheet."""

    def __init__(self, argv: Optional[Sequence[str]] = None) -> None:
        set_application_properties()
        if argv is None:
            argv = sys.argv

        super().__init__(list(argv))

        from .. import __version__
        from ..settings import lib
        self.setApplicationName(lib.app_name)
        self.setOrganizationName('')
        self.setApplicationVersion(__version__)
        self.setQuitOnLastWindowClosed(True)

        from . import ui
        ui.apply_theme()

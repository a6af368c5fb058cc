"""
UI package: application signals, main application setup, theming, and widgets.

This package provides:

- :mod:`PocketPulse.ui.actions` – Application-wide Qt signals.
- :mod:`PocketPulse.ui.app` – QApplication subclass.
- :mod:`PocketPulse.ui.main` – Main window composition.
- :mod:`PocketPulse.ui.toolbar` – View date, type filter and search controls.
- :mod:`PocketPulse.ui.ui` – Styling constants for sizes and colors, and the style sheet.
- :mod:`PocketPulse.ui.dockable_widget` – Base class for dockable widgets.
"""

"""
PocketPulse: desktop front end for a personal income and expense tracker served over a REST API.

This package provides:

- :mod:`PocketPulse.core` – The server gateway (:mod:`PocketPulse.core.service`) and the refresh manager driving every view (:mod:`PocketPulse.core.refresh`).
- :mod:`PocketPulse.data` – Transaction types and the two transforms run on each refresh (:func:`PocketPulse.data.data.filter_transactions`, :func:`PocketPulse.data.data.get_series`), plus the Qt model and views.
- :mod:`PocketPulse.ui` – A PySide6-based UI: main window, toolbar, theming and application signals.
- :mod:`PocketPulse.settings` – Settings management with schema validation, and locale-aware currency formatting.
- :mod:`PocketPulse.log` – In-app logging with a log viewer.

Use :func:`PocketPulse.exec_` to launch the application.
"""

import sys

from PySide6 import QtCore

# Fail on Python < 3.11
if not (sys.version_info.major == 3 and sys.version_info.minor >= 11):
    raise RuntimeError('PocketPulse requires Python 3.11 or higher.')

__version__ = '0.1.0'
__description__ = 'PocketPulse: desktop front end for tracking daily income and expenses.'

from .log import log

log.setup_logging()


def exec_() -> None:
    """Launch the PocketPulse GUI application and enter its event loop.

    Initializes the QApplication, shows the main window, and requests the first refresh.
    """
    from .ui import app
    from .ui import main
    from .ui.actions import signals

    application = app.Application(sys.argv)
    main.show()

    # Ask components to load their data
    QtCore.QTimer.singleShot(100, signals.initializationRequested)

    sys.exit(application.exec())


if __name__ == '__main__':
    exec_()

"""
BudgetBar: desktop client for the household budget service.

This package provides:

- :mod:`BudgetBar.core` – REST client, the per-entry paginated transaction cache and the accordion controller.
- :mod:`BudgetBar.data` – Qt models and views for the budget bars of a month and their transactions.
- :mod:`BudgetBar.ui` – Application setup, main window and month navigation.
- :mod:`BudgetBar.settings` – Client configuration and locale formatting.
- :mod:`BudgetBar.log` – Logging setup.

Use :func:`BudgetBar.exec_` to launch the application.
"""

import sys

from PySide6 import QtCore

# Fail on Python < 3.11
if not (sys.version_info.major == 3 and sys.version_info.minor >= 11):
    raise RuntimeError('BudgetBar requires Python 3.11 or higher.')

__version__ = '0.1.0'
__license__ = 'GPL-3.0'
__description__ = 'BudgetBar: desktop client for a household budget service.'

from .log import log

log.setup_logging()


def exec_() -> None:
    """Launch the BudgetBar GUI application and enter its event loop.

    Initializes the QApplication, shows the main window, and starts the Qt event loop.
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

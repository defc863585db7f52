"""Custom QApplication for BudgetBar.

This module provides:
    - set_application_properties: enable high-DPI support
    - Application: subclass of QApplication configuring application metadata
"""
import sys
from typing import Optional, Sequence

from PySide6 import QtCore, QtGui, QtWidgets


def set_application_properties() -> None:
    """Round fractional scale factors instead of snapping to integers."""
    QtGui.QGuiApplication.setHighDpiScaleFactorRoundingPolicy(
        QtCore.Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )


class Application(QtWidgets.QApplication):
    """QApplication configured with the application name and version."""

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

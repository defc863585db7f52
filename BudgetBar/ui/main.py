"""Main window of BudgetBar.

This module defines:
    - show(): initialize and display the main window
    - MainWindow: month navigator above the budget bars of the browsed month,
      with the latest error shown in the status bar
"""
import logging

from PySide6 import QtCore, QtGui, QtWidgets

from . import ui
from .actions import signals
from .yearmonth import MonthNavigator
from ..core.fetch import ThreadDispatcher
from ..data.view.budgetbar import BudgetBarsView
from ..settings import lib

widget = None


def show():
    global widget

    if widget is None:
        widget = MainWindow()

    widget.show()


class MainWindow(QtWidgets.QMainWindow):
    """Top-level window. The budget bars follow the month navigator."""

    def __init__(self, parent=None):
        super().__init__(parent=parent)
        self.setObjectName('BudgetBarMainWindow')

        self.navigator = None
        self.budget_bars = None
        self.title_label = None

        self._create_ui()
        self._connect_signals()

        self.load_window_settings()

    def _create_ui(self) -> None:
        central = QtWidgets.QWidget(self)
        QtWidgets.QVBoxLayout(central)
        o = ui.Size.Margin(0.5)
        central.layout().setContentsMargins(o, o, o, o)

        self.title_label = QtWidgets.QLabel(central)
        font = QtGui.QFont(self.title_label.font())
        font.setPixelSize(ui.Size.LargeText())
        self.title_label.setFont(font)
        central.layout().addWidget(self.title_label)

        self.navigator = MonthNavigator(parent=central)
        central.layout().addWidget(self.navigator)

        self.budget_bars = BudgetBarsView(parent=central)
        central.layout().addWidget(self.budget_bars, 1)

        self.setCentralWidget(central)
        self.setStatusBar(QtWidgets.QStatusBar(self))

        self.update_title()

    def _connect_signals(self) -> None:
        self.navigator.monthChanged.connect(self.budget_bars.set_month)
        self.navigator.monthChanged.connect(signals.monthChanged)

        signals.initializationRequested.connect(self.init_data)
        signals.error.connect(self.show_error)
        signals.metadataChanged.connect(self.on_metadata_changed)

    @QtCore.Slot(str, object)
    def on_metadata_changed(self, key: str, value: object) -> None:
        if key == 'name':
            self.update_title()

    @QtCore.Slot()
    def init_data(self) -> None:
        """Show the month the navigator starts on."""
        self.budget_bars.set_month(self.navigator.get_value())

    @QtCore.Slot(str)
    def show_error(self, message: str) -> None:
        self.statusBar().showMessage(message, 10000)

    def update_title(self) -> None:
        try:
            name = lib.get_settings()['name'] or lib.app_name
        except Exception as ex:
            logging.debug(f'Could not read the budget name: {ex}')
            name = lib.app_name
        self.title_label.setText(name)
        self.setWindowTitle(name)

    def sizeHint(self):
        return QtCore.QSize(
            ui.Size.DefaultWidth(1.0),
            ui.Size.DefaultHeight(1.0)
        )

    def closeEvent(self, event) -> None:
        """Persist window geometry, wait for pending fetches and close service connections."""
        settings = QtCore.QSettings(lib.app_name, lib.app_name)
        settings.setValue('MainWindow/geometry', self.saveGeometry())

        dispatcher = self.budget_bars.cache.dispatcher
        if isinstance(dispatcher, ThreadDispatcher):
            dispatcher.wait()
        self.budget_bars.close_connections()

        super().closeEvent(event)

    def load_window_settings(self) -> None:
        settings = QtCore.QSettings(lib.app_name, lib.app_name)
        geom_data = settings.value('MainWindow/geometry')
        if isinstance(geom_data, QtCore.QByteArray):
            self.restoreGeometry(geom_data)
            self.clamp_window_to_screens()
            return

        self.resize(self.sizeHint())
        primary = QtGui.QGuiApplication.primaryScreen()
        if primary is None:
            return
        avail = primary.availableGeometry()
        self.move(
            avail.x() + (avail.width() - self.width()) // 2,
            avail.y() + (avail.height() - self.height()) // 2,
        )

    def clamp_window_to_screens(self) -> None:
        frame = self.frameGeometry()
        screen = QtGui.QGuiApplication.screenAt(frame.center()) or QtGui.QGuiApplication.primaryScreen()
        if screen is None:
            return
        avail = screen.availableGeometry()

        width = min(frame.width(), avail.width())
        height = min(frame.height(), avail.height())

        x = max(avail.left(), min(frame.x(), avail.right() - width))
        y = max(avail.top(), min(frame.y(), avail.bottom() - height))

        self.setGeometry(x, y, width, height)

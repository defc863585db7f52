"""
Month navigation widgets.

The browsed month is managed as a "YYYY-MM" string.

Classes:
    YearMonthPopup: Popup widget for choosing a year and month.
    MonthNavigator: Previous/next buttons around a button opening the popup.

"""
import logging
from datetime import datetime

from PySide6 import QtCore, QtWidgets
from dateutil.relativedelta import relativedelta

from . import ui
from ..settings import lib

MONTH_NAMES = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
               'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']


def current_month():
    return datetime.now().strftime('%Y-%m')


def shift_month(value, months):
    """
    Move a "YYYY-MM" string by a number of months.

    Args:
        value (str): The month to shift.
        months (int): Months to add, negative to go back.

    Returns:
        str: The shifted "YYYY-MM" string.
    """
    dt = datetime.strptime(value, '%Y-%m') + relativedelta(months=months)
    return dt.strftime('%Y-%m')


class YearMonthPopup(QtWidgets.QFrame):
    """
    Popup widget for selecting a year-month combination.

    Displays navigation for the year and a grid of month buttons.

    Signals:
        yearMonthSelected(str): Emitted when a month is selected in "YYYY-MM" format.
    """
    yearMonthSelected = QtCore.Signal(str)

    def __init__(self, parent=None, initial_year=None):
        super().__init__(parent=parent)

        self.setWindowFlags(QtCore.Qt.Popup)
        self.setAttribute(QtCore.Qt.WA_DeleteOnClose, True)

        self.prev_button = None
        self.next_button = None
        self.year_label = None
        self.month_buttons = []

        self.current_year = initial_year if initial_year is not None else datetime.now().year

        self._create_ui()

    def _create_ui(self):
        QtWidgets.QVBoxLayout(self)
        o = ui.Size.Margin(0.5)
        self.layout().setContentsMargins(o, o, o, o)

        header_layout = QtWidgets.QHBoxLayout()

        self.prev_button = QtWidgets.QToolButton(self)
        self.prev_button.setText('<')
        self.prev_button.clicked.connect(self.decrement_year)
        header_layout.addWidget(self.prev_button)

        self.year_label = QtWidgets.QLabel(str(self.current_year), self)
        self.year_label.setAlignment(QtCore.Qt.AlignCenter)
        header_layout.addWidget(self.year_label, 1)

        self.next_button = QtWidgets.QToolButton(self)
        self.next_button.setText('>')
        self.next_button.clicked.connect(self.increment_year)
        header_layout.addWidget(self.next_button)

        self.layout().addLayout(header_layout)

        grid_layout = QtWidgets.QGridLayout()
        for i, name in enumerate(MONTH_NAMES):
            btn = QtWidgets.QPushButton(name, self)
            btn.clicked.connect(lambda checked=False, m=i + 1: self.month_clicked(m))
            self.month_buttons.append(btn)
            grid_layout.addWidget(btn, i // 4, i % 4)
        self.layout().addLayout(grid_layout)

    @QtCore.Slot()
    def decrement_year(self):
        self.current_year -= 1
        self.year_label.setText(str(self.current_year))

    @QtCore.Slot()
    def increment_year(self):
        self.current_year += 1
        self.year_label.setText(str(self.current_year))

    @QtCore.Slot(int)
    def month_clicked(self, month):
        """
        Handle month button click.

        Args:
            month (int): The selected month (1-12).
        """
        self.yearMonthSelected.emit(f'{self.current_year:04d}-{month:02d}')
        self.close()


class MonthNavigator(QtWidgets.QWidget):
    """
    Widget for browsing months one at a time.

    The last browsed month is saved in the client metadata and restored on start.

    Signals:
        monthChanged(str): Emitted with the new "YYYY-MM" month.
    """
    monthChanged = QtCore.Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent=parent)

        self._popup = None
        self._value = ''

        self.prev_button = None
        self.month_button = None
        self.next_button = None

        self._create_ui()
        self._init_data()
        self._connect_signals()

    def _create_ui(self):
        QtWidgets.QHBoxLayout(self)
        self.layout().setContentsMargins(0, 0, 0, 0)

        self.prev_button = QtWidgets.QToolButton(self)
        self.prev_button.setText('<')
        self.prev_button.setToolTip('Previous month')
        self.layout().addWidget(self.prev_button)

        self.month_button = QtWidgets.QToolButton(self)
        self.month_button.setToolButtonStyle(QtCore.Qt.ToolButtonTextOnly)
        self.layout().addWidget(self.month_button, 1)

        self.next_button = QtWidgets.QToolButton(self)
        self.next_button.setText('>')
        self.next_button.setToolTip('Next month')
        self.layout().addWidget(self.next_button)

    def _init_data(self):
        saved = ''
        try:
            saved = lib.get_settings()['yearmonth'] or ''
        except Exception as ex:
            logging.debug(f'Could not read the saved month: {ex}')

        self._value = saved if saved and lib.is_valid_yearmonth(saved) else current_month()
        self.month_button.setText(self._value)

    def _connect_signals(self):
        self.prev_button.clicked.connect(self.previous_month)
        self.next_button.clicked.connect(self.next_month)
        self.month_button.clicked.connect(self.show_popup)

    def get_value(self):
        """Return the current 'YYYY-MM' string."""
        return self._value

    @QtCore.Slot(str)
    def set_value(self, value):
        """Browse to a month, save it and emit monthChanged if it differs."""
        if not lib.is_valid_yearmonth(value) or not value:
            raise ValueError(f'Invalid month "{value}", expected "YYYY-MM".')
        if value == self._value:
            return

        self._value = value
        self.month_button.setText(value)

        try:
            lib.get_settings()['yearmonth'] = value
        except Exception as ex:
            logging.error(f'Could not save the browsed month: {ex}')

        self.monthChanged.emit(value)

    @QtCore.Slot()
    def previous_month(self):
        self.set_value(shift_month(self._value, -1))

    @QtCore.Slot()
    def next_month(self):
        self.set_value(shift_month(self._value, 1))

    @QtCore.Slot()
    def show_popup(self):
        self._popup = YearMonthPopup(self, initial_year=int(self._value[:4]))
        self._popup.yearMonthSelected.connect(self.set_value)
        pos = self.month_button.mapToGlobal(QtCore.QPoint(0, self.month_button.height()))
        self._popup.move(pos)
        self._popup.show()
        self._popup.raise_()
        self._popup.setFocus(QtCore.Qt.PopupFocusReason)

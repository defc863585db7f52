from typing import Any, List, Optional

from PySide6 import QtCore

from ...core.models import CategoryBudgetSummary, MonthSummary
from ...settings import locale
from ...ui import ui
from ...ui.actions import signals

EntryIdRole = QtCore.Qt.UserRole + 1
StatusRole = QtCore.Qt.UserRole + 2
BudgetedRole = QtCore.Qt.UserRole + 3
PaidRole = QtCore.Qt.UserRole + 4
RemainingRole = QtCore.Qt.UserRole + 5
RatioRole = QtCore.Qt.UserRole + 6
SummaryRole = QtCore.Qt.UserRole + 7


class SummaryModel(QtCore.QAbstractListModel):
    """List model with one row per category budget of the browsed month."""

    def __init__(self, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent=parent)
        self.setObjectName('BudgetBarSummaryModel')

        self._summary: Optional[MonthSummary] = None
        self._data: List[CategoryBudgetSummary] = []

        self._connect_signals()

    def _connect_signals(self) -> None:
        signals.summaryFetched.connect(self.init_data)
        signals.monthChanged.connect(self.clear_data)

    @property
    def summary(self) -> Optional[MonthSummary]:
        return self._summary

    def entry_ids(self) -> List[str]:
        return [row.entry_id for row in self._data]

    def row_of(self, entry_id: str) -> int:
        return next((i for i, row in enumerate(self._data) if row.entry_id == entry_id), -1)

    def rowCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self._data)

    def data(self, index: QtCore.QModelIndex, role: int = QtCore.Qt.DisplayRole) -> Any:
        if not index.isValid() or not 0 <= index.row() < len(self._data):
            return None

        row = self._data[index.row()]

        if role == QtCore.Qt.DisplayRole:
            return row.category.display_name
        if role in (QtCore.Qt.ToolTipRole, QtCore.Qt.StatusTipRole):
            return (
                f'{row.category.display_name}: {locale.format_currency(row.paid)} / '
                f'{locale.format_currency(row.budgeted)}'
            )
        if role == QtCore.Qt.ForegroundRole:
            return ui.status_color(row.status)
        if role == EntryIdRole:
            return row.entry_id
        if role == StatusRole:
            return row.status
        if role == BudgetedRole:
            return row.budgeted
        if role == PaidRole:
            return row.paid
        if role == RemainingRole:
            return row.remaining
        if role == RatioRole:
            return row.ratio
        if role == SummaryRole:
            return row
        return None

    @QtCore.Slot(object)
    def init_data(self, summary: MonthSummary) -> None:
        self.beginResetModel()
        self._summary = summary
        self._data = list(summary.categories) if summary else []
        self.endResetModel()

    @QtCore.Slot()
    def clear_data(self) -> None:
        self.beginResetModel()
        self._summary = None
        self._data = []
        self.endResetModel()

import enum
from typing import Any, List, Optional

from PySide6 import QtCore, QtGui

from ...core.models import Transaction
from ...settings import locale
from ...ui import ui


class TransactionRole(enum.IntEnum):
    Transaction = QtCore.Qt.UserRole + 1
    TransactionId = QtCore.Qt.UserRole + 2
    Amount = QtCore.Qt.UserRole + 3
    AmountText = QtCore.Qt.UserRole + 4
    DateText = QtCore.Qt.UserRole + 5


class TransactionsModel(QtCore.QAbstractListModel):
    """
    List model over the cached transactions of a single budget entry.

    :meth:`set_items` appends rows when the new list extends the current one, so
    a view keeps its scroll position while further pages arrive. Any other
    change resets the model.
    """

    def __init__(self, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent=parent)
        self._data: List[Transaction] = []

    def items(self) -> List[Transaction]:
        return list(self._data)

    @QtCore.Slot(list)
    def set_items(self, items: List[Transaction]) -> None:
        """Update the rows from the cache, appending where possible.

        Args:
            items (list[Transaction]): The entry's cached transactions, newest first.
        """
        items = list(items)
        if len(items) >= len(self._data) and items[:len(self._data)] == self._data:
            if len(items) == len(self._data):
                return
            first = len(self._data)
            self.beginInsertRows(QtCore.QModelIndex(), first, len(items) - 1)
            self._data = items
            self.endInsertRows()
            return

        self.beginResetModel()
        self._data = items
        self.endResetModel()

    @QtCore.Slot()
    def clear_data(self) -> None:
        self.beginResetModel()
        self._data = []
        self.endResetModel()

    def rowCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self._data)

    def data(self, index: QtCore.QModelIndex, role: int = QtCore.Qt.DisplayRole) -> Any:
        """Returns data for the specified index and role.

        Args:
            index (QtCore.QModelIndex): The model index.
            role (int): The data role.

        Returns:
            Any: Data appropriate for the role, or None.
        """
        if not index.isValid() or not 0 <= index.row() < len(self._data):
            return None

        transaction = self._data[index.row()]

        if role == QtCore.Qt.DisplayRole:
            return transaction.title or locale.format_transaction_date(transaction.date)
        elif role in (QtCore.Qt.ToolTipRole, QtCore.Qt.StatusTipRole):
            title = transaction.title or ''
            return f'{locale.format_transaction_date(transaction.date)}  {title}'.strip()
        elif role == QtCore.Qt.ForegroundRole:
            return ui.Color.Text()
        elif role == QtCore.Qt.FontRole:
            font = QtGui.QFont()
            font.setPixelSize(ui.Size.SmallText())
            return font
        elif role == TransactionRole.Transaction:
            return transaction
        elif role == TransactionRole.TransactionId:
            return transaction.id
        elif role == TransactionRole.Amount:
            return transaction.amount
        elif role == TransactionRole.AmountText:
            return locale.format_currency(transaction.amount)
        elif role == TransactionRole.DateText:
            return locale.format_transaction_date(transaction.date)
        return None

    def flags(self, index: QtCore.QModelIndex) -> QtCore.Qt.ItemFlags:
        if not index.isValid():
            return QtCore.Qt.NoItemFlags
        return QtCore.Qt.ItemIsEnabled | QtCore.Qt.ItemIsSelectable

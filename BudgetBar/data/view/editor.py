"""Dialog for adding, editing and deleting a transaction.

A successful change is announced with ``signals.transactionMutated`` for the
owning entry. Moving a transaction to another entry announces both entries.
"""
import datetime
import logging
from typing import List, Optional

from PySide6 import QtCore, QtWidgets

from ...core import service
from ...core.api import TransactionsAPI
from ...core.models import CategoryBudgetSummary, Transaction
from ...settings import locale
from ...status import status
from ...ui import ui
from ...ui.actions import signals


class TransactionEditorDialog(QtWidgets.QDialog):
    """Edits one transaction, or creates one when no transaction is given.

    Args:
        entries (list[CategoryBudgetSummary]): Entries the transaction can belong to.
        transaction (Transaction, optional): The transaction to edit.
        entry_id (str, optional): Preselected entry of a new transaction.
        api (TransactionsAPI, optional): The transaction endpoints.
    """

    def __init__(self, entries: List[CategoryBudgetSummary], transaction: Optional[Transaction] = None,
                 entry_id: Optional[str] = None, api: Optional[TransactionsAPI] = None,
                 parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)

        self.entries = list(entries)
        self.transaction = transaction
        self.api = api

        self.entry_editor = None
        self.amount_editor = None
        self.date_editor = None
        self.title_editor = None
        self.error_label = None
        self.save_button = None
        self.delete_button = None
        self.cancel_button = None

        self.setWindowTitle('Edit Transaction' if transaction else 'Add Transaction')

        self._create_ui()
        self._init_data(entry_id)
        self._connect_signals()

    def _create_ui(self) -> None:
        QtWidgets.QVBoxLayout(self)
        o = ui.Size.Margin(1.0)
        self.layout().setContentsMargins(o, o, o, o)

        form = QtWidgets.QFormLayout()

        self.entry_editor = QtWidgets.QComboBox(self)
        form.addRow('Category', self.entry_editor)

        self.amount_editor = QtWidgets.QLineEdit(self)
        self.amount_editor.setPlaceholderText('0.00')
        form.addRow('Amount', self.amount_editor)

        self.date_editor = QtWidgets.QDateEdit(self)
        self.date_editor.setCalendarPopup(True)
        self.date_editor.setDisplayFormat('yyyy-MM-dd')
        form.addRow('Date', self.date_editor)

        self.title_editor = QtWidgets.QLineEdit(self)
        self.title_editor.setPlaceholderText('Optional')
        form.addRow('Title', self.title_editor)

        self.layout().addLayout(form)

        self.error_label = QtWidgets.QLabel(self)
        self.error_label.setWordWrap(True)
        self.error_label.setStyleSheet(f'color: {ui.Color.Red(qss=True)};')
        self.error_label.setHidden(True)
        self.layout().addWidget(self.error_label)

        buttons = QtWidgets.QHBoxLayout()
        self.delete_button = QtWidgets.QPushButton('Delete', self)
        self.delete_button.setHidden(self.transaction is None)
        buttons.addWidget(self.delete_button)
        buttons.addStretch(1)

        self.cancel_button = QtWidgets.QPushButton('Cancel', self)
        buttons.addWidget(self.cancel_button)

        self.save_button = QtWidgets.QPushButton('Save', self)
        self.save_button.setDefault(True)
        buttons.addWidget(self.save_button)

        self.layout().addLayout(buttons)

    def _init_data(self, entry_id: Optional[str]) -> None:
        for entry in self.entries:
            self.entry_editor.addItem(entry.category.display_name, userData=entry.entry_id)

        if self.transaction is not None:
            entry_id = self.transaction.entry_id
            amount = locale.minor_to_major(self.transaction.amount)
            self.amount_editor.setText(f'{amount:.{locale.DECIMAL_PLACES}f}')
            self.date_editor.setDate(QtCore.QDate(self.transaction.date))
            self.title_editor.setText(self.transaction.title or '')
        else:
            self.date_editor.setDate(QtCore.QDate.currentDate())

        idx = self.entry_editor.findData(entry_id)
        self.entry_editor.setCurrentIndex(max(idx, 0))

    def _connect_signals(self) -> None:
        self.save_button.clicked.connect(self.save)
        self.delete_button.clicked.connect(lambda: self.delete_transaction(confirm=True))
        self.cancel_button.clicked.connect(self.reject)

    def sizeHint(self) -> QtCore.QSize:
        return QtCore.QSize(ui.Size.DefaultWidth(0.8), ui.Size.RowHeight(8.0))

    def _get_api(self) -> TransactionsAPI:
        if self.api is None:
            self.api = TransactionsAPI()
        return self.api

    def show_error(self, message: str) -> None:
        self.error_label.setText(message)
        self.error_label.setHidden(False)

    def values(self) -> dict:
        """Return the edited fields as ``entry_id``, ``amount``, ``date`` and ``title``."""
        return {
            'entry_id': self.entry_editor.currentData(),
            'amount': locale.parse_currency_to_minor(self.amount_editor.text()),
            'date': self.date_editor.date().toPython(),
            'title': self.title_editor.text().strip() or None,
        }

    def validate(self) -> Optional[str]:
        """Return an error message for invalid input, or None."""
        v = self.values()
        if not v['entry_id']:
            return 'Choose a category.'
        if not self.amount_editor.text().strip():
            return 'Enter an amount.'
        if v['amount'] < 0:
            return 'The amount cannot be negative.'
        if not isinstance(v['date'], datetime.date):
            return 'Enter a valid date.'
        return None

    @QtCore.Slot()
    def save(self) -> bool:
        """Create or update the transaction.

        Returns:
            bool: True if the service accepted the change.
        """
        error = self.validate()
        if error:
            self.show_error(error)
            return False

        v = self.values()
        api = self._get_api()
        date = v['date'].isoformat()

        try:
            if self.transaction is None:
                service.start_asynchronous(api.create, v['entry_id'], v['amount'], date, title=v['title'])
                mutated = [v['entry_id']]
            else:
                service.start_asynchronous(
                    api.update,
                    self.transaction.id,
                    entry_id=v['entry_id'],
                    amount=v['amount'],
                    date=date,
                    title=v['title'],
                )
                mutated = [v['entry_id']]
                if self.transaction.entry_id != v['entry_id']:
                    mutated.append(self.transaction.entry_id)
        except status.BaseStatusException as ex:
            self.show_error(str(ex))
            return False

        for entry_id in mutated:
            signals.transactionMutated.emit(entry_id)
        self.accept()
        return True

    def delete_transaction(self, confirm: bool = True) -> bool:
        """Delete the edited transaction.

        Args:
            confirm (bool): Ask the user before deleting.

        Returns:
            bool: True if the transaction was deleted.
        """
        if self.transaction is None:
            return False

        if confirm:
            res = QtWidgets.QMessageBox.question(
                self,
                'Delete Transaction',
                'Delete this transaction?',
                QtWidgets.QMessageBox.Yes | QtWidgets.QMessageBox.No,
            )
            if res != QtWidgets.QMessageBox.Yes:
                return False

        try:
            service.start_asynchronous(self._get_api().delete, self.transaction.id)
        except status.BaseStatusException as ex:
            self.show_error(str(ex))
            return False

        logging.debug(f'Deleted transaction "{self.transaction.id}"')
        signals.transactionMutated.emit(self.transaction.entry_id)
        self.accept()
        return True

"""Application-wide Qt signals for BudgetBar.

This module provides:
    - Signals: custom Qt signals for configuration changes, month navigation,
      transaction mutations, summary fetches and error reporting.
    - signals: the shared :class:`Signals` instance.
"""
import logging

from PySide6 import QtCore


class Signals(QtCore.QObject):
    """Centralized Qt signals for application config, data, and UI events."""
    initializationRequested = QtCore.Signal()

    configSectionChanged = QtCore.Signal(str)  # Section
    metadataChanged = QtCore.Signal(str, object)

    monthChanged = QtCore.Signal(str)  # "YYYY-MM"
    summaryFetched = QtCore.Signal(object)  # MonthSummary

    transactionMutated = QtCore.Signal(str)  # Owning entry id

    error = QtCore.Signal(str)

    def __init__(self):
        super().__init__()
        self._connect_signals()

    def _connect_signals(self):
        @QtCore.Slot(str)
        def transaction_mutated(entry_id: str) -> None:
            logging.debug(f'Transaction mutated for entry "{entry_id}"')

        self.transactionMutated.connect(transaction_mutated)

        @QtCore.Slot(str)
        def month_changed(value: str) -> None:
            logging.debug(f'Month changed: {value}')

        self.monthChanged.connect(month_changed)


signals = Signals()

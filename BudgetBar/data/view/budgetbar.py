"""Budget bars of the browsed month.

This module provides:
    - BudgetBarHeader: painted row showing a category's paid share of its budget
    - BudgetBarRow: a header plus the transaction panel shown when expanded
    - BudgetBarsView: the scrollable list of rows. It owns the transaction cache
      and the accordion controller of the month it shows.
"""
import logging
from typing import Dict, List, Optional

from PySide6 import QtCore, QtGui, QtWidgets

from .panel import TransactionPanel
from ..model.summary import SummaryModel, SummaryRole
from ...core import service
from ...core.accordion import AccordionController
from ...core.cache import TransactionCache
from ...core.models import CategoryBudgetSummary, Transaction
from ...settings import locale
from ...status import status
from ...ui import ui
from ...ui.actions import signals


class BudgetBarHeader(QtWidgets.QWidget):
    """
    Clickable row painting the category name, the amounts and a progress bar.

    Signals:
        clicked (): Emitted when the row is clicked.
    """
    clicked = QtCore.Signal()

    def __init__(self, summary: CategoryBudgetSummary, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.summary = summary
        self.expanded = False

        self.setMouseTracking(True)
        self.setCursor(QtCore.Qt.PointingHandCursor)
        self.setSizePolicy(QtWidgets.QSizePolicy.Expanding, QtWidgets.QSizePolicy.Fixed)
        self.setFixedHeight(ui.Size.RowHeight(1.5))
        self.setToolTip(
            f'{summary.category.display_name}: {locale.format_currency(summary.remaining)} remaining'
        )

    def set_summary(self, summary: CategoryBudgetSummary) -> None:
        self.summary = summary
        self.update()

    def mouseReleaseEvent(self, event: QtGui.QMouseEvent) -> None:
        if event.button() == QtCore.Qt.LeftButton and self.rect().contains(event.position().toPoint()):
            self.clicked.emit()
            return
        super().mouseReleaseEvent(event)

    def enterEvent(self, event: QtCore.QEvent) -> None:
        self.update()
        super().enterEvent(event)

    def leaveEvent(self, event: QtCore.QEvent) -> None:
        self.update()
        super().leaveEvent(event)

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:
        painter = QtGui.QPainter(self)
        painter.setRenderHint(QtGui.QPainter.Antialiasing)

        o = ui.Size.Indicator(1.5)
        if self.underMouse() or self.expanded:
            painter.setPen(QtCore.Qt.NoPen)
            painter.setBrush(ui.Color.Background())
            painter.drawRoundedRect(self.rect(), o, o)

        m = ui.Size.Margin(0.5)
        rect = self.rect().adjusted(m, m * 0.5, -m, -m * 0.5)
        bar_height = ui.Size.BarHeight()
        text_rect = rect.adjusted(0, 0, 0, -bar_height - m * 0.5)

        font = QtGui.QFont(self.font())
        font.setPixelSize(ui.Size.MediumText())
        painter.setFont(font)

        painter.setPen(ui.Color.Text())
        painter.drawText(text_rect, QtCore.Qt.AlignLeft | QtCore.Qt.AlignVCenter,
                         self.summary.category.display_name)

        amounts = (
            f'{locale.format_currency(self.summary.paid)} / '
            f'{locale.format_currency(self.summary.budgeted)}'
        )
        painter.setPen(ui.Color.SecondaryText())
        painter.drawText(text_rect, QtCore.Qt.AlignRight | QtCore.Qt.AlignVCenter, amounts)

        bar_rect = QtCore.QRectF(rect.left(), rect.bottom() - bar_height, rect.width(), bar_height)
        r = bar_height / 2.0
        painter.setPen(QtCore.Qt.NoPen)
        painter.setBrush(ui.Color.LightBackground())
        painter.drawRoundedRect(bar_rect, r, r)

        ratio = min(max(self.summary.ratio, 0.0), 1.0)
        if ratio > 0.0:
            fill = QtCore.QRectF(bar_rect)
            fill.setWidth(max(bar_rect.width() * ratio, bar_height))
            painter.setBrush(ui.status_color(self.summary.status))
            painter.drawRoundedRect(fill, r, r)

        painter.end()


class BudgetBarRow(QtWidgets.QWidget):
    """
    A budget bar and, while expanded, the transaction panel of its entry.

    Signals:
        toggled (str): Emitted with the entry id when the header is clicked.
        addRequested (str): Forwarded from the panel.
        editRequested (object): Forwarded from the panel.
    """
    toggled = QtCore.Signal(str)
    addRequested = QtCore.Signal(str)
    editRequested = QtCore.Signal(object)

    def __init__(self, summary: CategoryBudgetSummary, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.summary = summary
        self.header = None
        self.panel: Optional[TransactionPanel] = None

        self._create_ui()
        self._connect_signals()

    @property
    def entry_id(self) -> str:
        return self.summary.entry_id

    def _create_ui(self) -> None:
        QtWidgets.QVBoxLayout(self)
        self.layout().setContentsMargins(0, 0, 0, 0)
        self.layout().setSpacing(0)

        self.header = BudgetBarHeader(self.summary, parent=self)
        self.layout().addWidget(self.header)

    def _connect_signals(self) -> None:
        self.header.clicked.connect(lambda: self.toggled.emit(self.entry_id))

    def set_summary(self, summary: CategoryBudgetSummary) -> None:
        self.summary = summary
        self.header.set_summary(summary)

    def is_expanded(self) -> bool:
        return self.panel is not None

    def set_expanded(self, expanded: bool, cache: TransactionCache) -> None:
        """Show or remove the transaction panel of this row's entry."""
        self.header.expanded = expanded
        self.header.update()

        if expanded and self.panel is None:
            self.panel = TransactionPanel(cache, key=self.entry_id, parent=self)
            self.panel.addRequested.connect(self.addRequested)
            self.panel.editRequested.connect(self.editRequested)
            self.layout().addWidget(self.panel)
        elif not expanded and self.panel is not None:
            panel = self.panel
            self.panel = None
            panel.set_key(None)
            self.layout().removeWidget(panel)
            panel.hide()
            panel.deleteLater()


class BudgetBarsView(QtWidgets.QScrollArea):
    """
    Scrollable list of the budget bars of one month.

    Expanding a bar shows its transactions. At most one bar is expanded, and
    changing the month collapses it and drops every cached transaction list.
    """

    def __init__(self, api=None, dispatcher=None, directory=None, summary_api=None,
                 parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.setObjectName('BudgetBarsView')

        self.cache = TransactionCache(api=api, dispatcher=dispatcher, parent=self)
        self.accordion = AccordionController(parent=self)
        self.model = SummaryModel(parent=self)

        self.directory = directory
        self.summary_api = summary_api

        self._rows: Dict[str, BudgetBarRow] = {}
        self._month: str = ''

        self.container = None
        self.totals_label = None
        self.empty_label = None

        self._create_ui()
        self._connect_signals()

    def _create_ui(self) -> None:
        self.setWidgetResizable(True)
        self.setHorizontalScrollBarPolicy(QtCore.Qt.ScrollBarAlwaysOff)
        self.setFrameShape(QtWidgets.QFrame.NoFrame)

        self.container = QtWidgets.QWidget(self)
        QtWidgets.QVBoxLayout(self.container)
        o = ui.Size.Margin(1.0)
        self.container.layout().setContentsMargins(o, o, o, o)
        self.container.layout().setSpacing(ui.Size.Indicator(1.0))

        self.totals_label = QtWidgets.QLabel(parent=self.container)
        self.totals_label.setStyleSheet(f'color: {ui.Color.SecondaryText(qss=True)};')
        self.container.layout().addWidget(self.totals_label)

        self.empty_label = QtWidgets.QLabel('No budget for this month.', parent=self.container)
        self.empty_label.setStyleSheet(f'color: {ui.Color.SecondaryText(qss=True)};')
        self.container.layout().addWidget(self.empty_label)

        self.container.layout().addStretch(1)
        self.setWidget(self.container)

    def _connect_signals(self) -> None:
        self.accordion.contextChanged.connect(self.cache.invalidate_all)
        self.accordion.expandedChanged.connect(self.on_expanded_changed)

        self.model.modelReset.connect(self.init_rows)

        signals.transactionMutated.connect(self.on_transaction_mutated)

    @property
    def month(self) -> str:
        return self._month

    def rows(self) -> List[BudgetBarRow]:
        return list(self._rows.values())

    def row(self, entry_id: str) -> Optional[BudgetBarRow]:
        return self._rows.get(entry_id)

    @QtCore.Slot(str)
    def set_month(self, month: str) -> None:
        """Show another month: collapse, drop cached transactions, fetch its summary."""
        logging.debug(f'Budget bars month: {self._month} -> {month}')
        self._month = month
        self.accordion.change_context(month)
        self.model.clear_data()
        self.refresh_summary()

    @QtCore.Slot()
    def refresh_summary(self) -> None:
        if not self._month:
            return

        from ...core import api
        if self.directory is None:
            self.directory = api.MonthDirectory()
        if self.summary_api is None:
            self.summary_api = api.SummaryAPI()

        try:
            service.fetch_summary(self._month, directory=self.directory, summary_api=self.summary_api)
        except status.BaseStatusException as ex:
            # Already reported through signals.error
            logging.debug(f'Summary of {self._month} unavailable: {ex}')
            self.model.clear_data()

    @QtCore.Slot()
    def init_rows(self) -> None:
        """Sync the rows with the summary model, keeping rows whose entry survives."""
        layout = self.container.layout()
        summaries = [
            self.model.index(i, 0).data(SummaryRole)
            for i in range(self.model.rowCount())
        ]
        entry_ids = [s.entry_id for s in summaries]

        if entry_ids == list(self._rows.keys()):
            for summary in summaries:
                self._rows[summary.entry_id].set_summary(summary)
        else:
            for row in self._rows.values():
                row.set_expanded(False, self.cache)
                layout.removeWidget(row)
                row.deleteLater()
            self._rows = {}

            # Rows go between the totals/empty labels and the trailing stretch
            insert_at = layout.count() - 1
            for summary in summaries:
                row = BudgetBarRow(summary, parent=self.container)
                row.toggled.connect(self.accordion.toggle)
                row.addRequested.connect(self.add_transaction)
                row.editRequested.connect(self.edit_transaction)
                layout.insertWidget(insert_at, row)
                insert_at += 1
                self._rows[summary.entry_id] = row

            expanded = self.accordion.expanded_key
            if expanded is not None and expanded not in self._rows:
                self.accordion.collapse()
            elif expanded is not None:
                self._rows[expanded].set_expanded(True, self.cache)

        self.empty_label.setHidden(bool(summaries) or self.model.summary is None)
        summary = self.model.summary
        if summary is None:
            self.totals_label.setText('')
        else:
            self.totals_label.setText(
                f'{locale.format_currency(summary.total_paid)} of '
                f'{locale.format_currency(summary.total_budgeted)} paid, '
                f'{locale.format_currency(summary.remaining)} remaining'
            )

    @QtCore.Slot(object)
    def on_expanded_changed(self, key: Optional[str]) -> None:
        for entry_id, row in self._rows.items():
            row.set_expanded(entry_id == key, self.cache)

    @QtCore.Slot(str)
    def on_transaction_mutated(self, entry_id: str) -> None:
        """Refetch a mutated entry's transactions and the month summary."""
        if self.cache.has_entry(entry_id):
            self.cache.invalidate(entry_id)
        self.refresh_summary()

    def _entry_choices(self) -> List[CategoryBudgetSummary]:
        return [row.summary for row in self._rows.values()]

    @QtCore.Slot(str)
    def add_transaction(self, entry_id: str) -> None:
        from .editor import TransactionEditorDialog
        dialog = TransactionEditorDialog(
            self._entry_choices(), entry_id=entry_id, api=self._editor_api(), parent=self
        )
        dialog.open()

    @QtCore.Slot(object)
    def edit_transaction(self, transaction: Transaction) -> None:
        from .editor import TransactionEditorDialog
        dialog = TransactionEditorDialog(
            self._entry_choices(), transaction=transaction, api=self._editor_api(), parent=self
        )
        dialog.open()

    def _editor_api(self):
        from ...core import api
        if isinstance(self.cache.api, api.TransactionsAPI):
            return self.cache.api
        return None

    def close_connections(self) -> None:
        """Close the pooled connections of the service endpoints used by this view."""
        from ...core import api
        endpoints = (self.cache.api, self.summary_api, getattr(self.directory, 'months_api', None))
        for endpoint in endpoints:
            client = getattr(endpoint, 'client', None)
            if isinstance(client, api.ApiClient):
                client.close()

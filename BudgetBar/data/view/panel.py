"""Transaction panel shown under an expanded budget bar.

The panel renders one entry of a :class:`BudgetBar.core.cache.TransactionCache`:

    - a loading line until the first page arrives
    - an empty-state line when the entry has no transactions
    - a short preview list with a "Show more" button while the entry is not revealed
    - once revealed, a height-bounded list that fetches the next page when
      scrolled near its bottom
    - an inline error line with a "Retry" button when a fetch failed

"""
import logging
from typing import Optional, Tuple

from PySide6 import QtCore, QtGui, QtWidgets

from ..model.transaction import TransactionRole, TransactionsModel
from ...core.cache import TransactionCache
from ...settings import lib
from ...ui import ui


class TransactionDelegate(QtWidgets.QStyledItemDelegate):
    """Paints a transaction row: date, optional title and the amount on the right."""

    def paint(self, painter: QtGui.QPainter, option: QtWidgets.QStyleOptionViewItem,
              index: QtCore.QModelIndex) -> None:
        painter.save()
        painter.setRenderHint(QtGui.QPainter.Antialiasing)

        if option.state & QtWidgets.QStyle.State_MouseOver:
            painter.setPen(QtCore.Qt.NoPen)
            painter.setBrush(ui.Color.LightBackground())
            o = ui.Size.Indicator(1.0)
            painter.drawRoundedRect(option.rect, o, o)

        rect = option.rect.adjusted(ui.Size.Margin(0.5), 0, -ui.Size.Margin(0.5), 0)

        font = QtGui.QFont(option.font)
        font.setPixelSize(ui.Size.SmallText())
        painter.setFont(font)
        metrics = QtGui.QFontMetrics(font)

        amount_text = index.data(TransactionRole.AmountText) or ''
        amount_width = metrics.horizontalAdvance(amount_text)
        amount_rect = QtCore.QRect(rect.right() - amount_width, rect.top(), amount_width, rect.height())

        date_text = index.data(TransactionRole.DateText) or ''
        date_width = metrics.horizontalAdvance(date_text)
        date_rect = QtCore.QRect(rect.left(), rect.top(), date_width, rect.height())

        painter.setPen(ui.Color.SecondaryText())
        painter.drawText(date_rect, QtCore.Qt.AlignVCenter | QtCore.Qt.AlignLeft, date_text)

        transaction = index.data(TransactionRole.Transaction)
        if transaction is not None and transaction.title:
            spacing = ui.Size.Margin(0.5)
            title_rect = QtCore.QRect(
                date_rect.right() + spacing, rect.top(),
                amount_rect.left() - date_rect.right() - spacing * 2, rect.height()
            )
            title = metrics.elidedText(transaction.title, QtCore.Qt.ElideRight, title_rect.width())
            painter.setPen(ui.Color.Text())
            painter.drawText(title_rect, QtCore.Qt.AlignVCenter | QtCore.Qt.AlignLeft, title)

        painter.setPen(ui.Color.Text())
        painter.drawText(amount_rect, QtCore.Qt.AlignVCenter | QtCore.Qt.AlignRight, amount_text)

        painter.restore()

    def sizeHint(self, option: QtWidgets.QStyleOptionViewItem, index: QtCore.QModelIndex) -> QtCore.QSize:
        return QtCore.QSize(option.rect.width(), ui.Size.RowHeight(0.8))


class TransactionsView(QtWidgets.QListView):
    """List view of a single entry's transactions."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)

        self.setItemDelegate(TransactionDelegate(self))
        self.setMouseTracking(True)
        self.setUniformItemSizes(True)
        self.setSelectionMode(QtWidgets.QAbstractItemView.NoSelection)
        self.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.setVerticalScrollMode(QtWidgets.QAbstractItemView.ScrollPerPixel)
        self.setHorizontalScrollBarPolicy(QtCore.Qt.ScrollBarAlwaysOff)
        self.setFrameShape(QtWidgets.QFrame.NoFrame)
        self.setSizePolicy(QtWidgets.QSizePolicy.Expanding, QtWidgets.QSizePolicy.Fixed)

    def content_height(self) -> int:
        """Height needed to show every row without scrolling."""
        model = self.model()
        if model is None or not model.rowCount():
            return 0
        return ui.Size.RowHeight(0.8) * model.rowCount() + self.frameWidth() * 2


class TransactionPanel(QtWidgets.QWidget):
    """
    Shows the cached transactions of one budget entry and drives its paging.

    Signals:
        addRequested (str): Emitted with the entry id when the user wants to add a transaction.
        editRequested (object): Emitted with the Transaction the user activated.
    """
    addRequested = QtCore.Signal(str)
    editRequested = QtCore.Signal(object)

    def __init__(self, cache: TransactionCache, key: Optional[str] = None,
                 parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.setObjectName('BudgetBarTransactionPanel')

        self.cache = cache
        self._key: Optional[str] = None
        self._error: Optional[Exception] = None
        self._progress: Optional[Tuple[bool, int]] = None

        self.model = TransactionsModel(parent=self)

        self.loading_label = None
        self.empty_label = None
        self.view = None
        self.more_button = None
        self.more_label = None
        self.error_widget = None
        self.error_label = None
        self.retry_button = None
        self.add_button = None

        self._create_ui()
        self._connect_signals()

        if key is not None:
            self.set_key(key)

    def _create_ui(self) -> None:
        QtWidgets.QVBoxLayout(self)
        o = ui.Size.Margin(0.5)
        self.layout().setContentsMargins(o, 0, o, o)
        self.layout().setSpacing(ui.Size.Indicator(1.0))

        self.loading_label = QtWidgets.QLabel('Loading transactions...', parent=self)
        self.loading_label.setStyleSheet(f'color: {ui.Color.SecondaryText(qss=True)};')
        self.layout().addWidget(self.loading_label)

        self.empty_label = QtWidgets.QLabel('No transactions yet.', parent=self)
        self.empty_label.setStyleSheet(f'color: {ui.Color.SecondaryText(qss=True)};')
        self.layout().addWidget(self.empty_label)

        self.view = TransactionsView(parent=self)
        self.view.setModel(self.model)
        self.layout().addWidget(self.view)

        row = QtWidgets.QHBoxLayout()
        row.setContentsMargins(0, 0, 0, 0)

        self.more_button = QtWidgets.QPushButton('Show more', parent=self)
        row.addWidget(self.more_button)

        self.more_label = QtWidgets.QLabel('Loading more...', parent=self)
        self.more_label.setStyleSheet(f'color: {ui.Color.SecondaryText(qss=True)};')
        row.addWidget(self.more_label)

        row.addStretch(1)

        self.add_button = QtWidgets.QToolButton(parent=self)
        self.add_button.setText('+')
        self.add_button.setToolTip('Add transaction')
        row.addWidget(self.add_button)

        self.layout().addLayout(row)

        self.error_widget = QtWidgets.QWidget(parent=self)
        QtWidgets.QHBoxLayout(self.error_widget)
        self.error_widget.layout().setContentsMargins(0, 0, 0, 0)

        self.error_label = QtWidgets.QLabel(parent=self.error_widget)
        self.error_label.setWordWrap(True)
        self.error_label.setStyleSheet(f'color: {ui.Color.Red(qss=True)};')
        self.error_widget.layout().addWidget(self.error_label, 1)

        self.retry_button = QtWidgets.QPushButton('Retry', parent=self.error_widget)
        self.error_widget.layout().addWidget(self.retry_button)

        self.layout().addWidget(self.error_widget)

        self._update_state()

    def _connect_signals(self) -> None:
        self.cache.entryChanged.connect(self.on_entry_changed)
        self.cache.entryFailed.connect(self.on_entry_failed)
        self.cache.cleared.connect(self.on_cleared)

        self.more_button.clicked.connect(self.show_more)
        self.retry_button.clicked.connect(self.retry)
        self.add_button.clicked.connect(self.request_add)

        self.view.verticalScrollBar().valueChanged.connect(self.on_scrolled)
        self.view.activated.connect(self.on_activated)

    @property
    def key(self) -> Optional[str]:
        return self._key

    def set_key(self, key: Optional[str]) -> None:
        """Show the transactions of an entry and start its first fetch if needed.

        Args:
            key (str): The budget entry id, or None to show nothing.
        """
        self._key = key
        self._error = None
        self._progress = None
        self.model.clear_data()
        if key is not None:
            self.cache.load(key)
        self._update_state()

    def _update_state(self) -> None:
        key = self._key
        if key is None:
            for widget in (self.loading_label, self.empty_label, self.view, self.more_button,
                           self.more_label, self.error_widget, self.add_button):
                widget.setHidden(True)
            return

        initial_loaded = self.cache.get_initial_loaded(key)
        loading = self.cache.get_is_loading(key)
        revealed = self.cache.get_revealed(key)
        has_more = self.cache.get_has_more(key)
        items = self.cache.get_items(key)

        self.model.set_items(items)

        self.loading_label.setHidden(initial_loaded or self._error is not None)
        self.empty_label.setHidden(not initial_loaded or bool(items))
        self.view.setHidden(not initial_loaded or not items)
        self.more_button.setHidden(not initial_loaded or revealed or not has_more)
        self.more_button.setEnabled(not loading)
        self.more_label.setHidden(not (initial_loaded and revealed and loading))
        self.add_button.setHidden(False)

        self.error_widget.setHidden(self._error is None)
        if self._error is not None:
            self.error_label.setText(f'Could not load transactions: {self._error}')

        self._update_view_height(revealed)

        # A failed fetch leaves the rows unchanged and must not refetch
        progress = (initial_loaded, len(items))
        if progress != self._progress:
            self._progress = progress
            self.fill_view()

    def _update_view_height(self, revealed: bool) -> None:
        height = self.view.content_height()
        if revealed:
            self.view.setVerticalScrollBarPolicy(QtCore.Qt.ScrollBarAsNeeded)
            self.view.setFixedHeight(min(height, lib.SCROLL_CONTAINER_MAX_HEIGHT))
        else:
            self.view.setVerticalScrollBarPolicy(QtCore.Qt.ScrollBarAlwaysOff)
            self.view.setFixedHeight(height)

    @QtCore.Slot(str)
    def on_entry_changed(self, key: str) -> None:
        if key != self._key:
            return
        if self.cache.get_is_loading(key):
            self._error = None
        self._update_state()

    @QtCore.Slot(str, object)
    def on_entry_failed(self, key: str, ex: object) -> None:
        if key != self._key:
            return
        self._error = ex
        self._update_state()

    @QtCore.Slot()
    def on_cleared(self) -> None:
        if self._key is None:
            return
        self.set_key(self._key)

    @QtCore.Slot()
    def show_more(self) -> None:
        if self._key is None:
            return
        self.cache.load_more(self._key)

    @QtCore.Slot()
    def retry(self) -> None:
        """Repeat the fetch that failed."""
        if self._key is None:
            return
        logging.debug(f'Retrying transactions of "{self._key}"')
        if self.cache.get_initial_loaded(self._key):
            self.cache.load_more(self._key)
        else:
            self.cache.invalidate(self._key)

    @QtCore.Slot()
    def request_add(self) -> None:
        if self._key is not None:
            self.addRequested.emit(self._key)

    @QtCore.Slot(QtCore.QModelIndex)
    def on_activated(self, index: QtCore.QModelIndex) -> None:
        transaction = index.data(TransactionRole.Transaction)
        if transaction is not None:
            self.editRequested.emit(transaction)

    @QtCore.Slot(int)
    def on_scrolled(self, value: int) -> None:
        bar = self.view.verticalScrollBar()
        self.maybe_load_more(bar.maximum() - value)

    def maybe_load_more(self, distance_to_bottom: int) -> bool:
        """Fetch the next page when a revealed list is scrolled near its bottom.

        Args:
            distance_to_bottom (int): Pixels left to scroll.

        Returns:
            bool: True if a fetch was started.
        """
        key = self._key
        if key is None or not self.cache.get_revealed(key):
            return False
        if distance_to_bottom >= lib.SCROLL_LOAD_THRESHOLD:
            return False
        if not self.cache.get_has_more(key) or self.cache.get_is_loading(key):
            return False
        self.cache.load_more(key)
        return True

    def fill_view(self) -> bool:
        """Fetch the next page while a revealed list is too short to scroll.

        Returns:
            bool: True if a fetch was started.
        """
        if self._key is None or self._error is not None:
            return False
        if self.view.content_height() > lib.SCROLL_CONTAINER_MAX_HEIGHT:
            return False
        return self.maybe_load_more(0)

"""Per-entry paginated transaction cache.

:class:`TransactionCache` keeps, for every budget entry id it has seen, the
transactions fetched so far and the paging state needed to fetch the next page.
It is the only writer of its :class:`CacheEntry` records and the only caller of
the pagination transport.

Operations:
    - load: fetch the first ``INITIAL_COUNT`` transactions once per entry
    - load_more: append the next ``BATCH_SIZE`` transactions and mark the entry revealed
    - invalidate: refetch an entry to the depth the user had already revealed
    - invalidate_all: drop every entry, e.g. when the browsed month changes

At most one fetch per entry is in flight. Every fetch carries the generation of
the entry it was started for; entries get a new generation whenever they are
recreated, and a result for an older generation is dropped.

Example:

    .. code-block:: python

        cache = TransactionCache(TransactionsAPI())
        cache.entryChanged.connect(on_entry_changed)
        cache.load(entry_id)
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from PySide6 import QtCore

from .fetch import FetchMode, PageRequest, ThreadDispatcher
from .models import Page, Transaction
from ..settings import lib


@dataclass
class CacheEntry:
    """Paging state of a single entry. A missing entry reads as a fresh one."""
    items: List[Transaction] = field(default_factory=list)
    offset: int = 0
    has_more: bool = False
    loading: bool = False
    initial_loaded: bool = False
    revealed: bool = False
    generation: int = 0
    depth: int = 0  # number of items the pending first fetch is meant to restore


class TransactionCache(QtCore.QObject):
    """
    Lazily paginated transaction lists keyed by budget entry id.

    Construct one cache per enclosing view and pass it to the widgets that read it.

    Signals:
        entryChanged (str): Emitted with the entry id whenever its state changes.
        entryFailed (str, object): Emitted with the entry id and the transport exception.
        cleared (): Emitted after every entry was dropped.
    """
    entryChanged = QtCore.Signal(str)
    entryFailed = QtCore.Signal(str, object)
    cleared = QtCore.Signal()

    def __init__(self, api=None, dispatcher=None, parent: Optional[QtCore.QObject] = None) -> None:
        """
        Args:
            api: Object providing ``list_by_entry(entry_id, limit, offset) -> Page``.
                Defaults to a :class:`BudgetBar.core.api.TransactionsAPI` built from settings.
            dispatcher: Runs fetches, defaults to a :class:`ThreadDispatcher`.
            parent: Optional Qt parent.
        """
        super().__init__(parent)

        if api is None:
            from .api import TransactionsAPI
            api = TransactionsAPI()

        self.api = api
        self.dispatcher = dispatcher if dispatcher is not None else ThreadDispatcher(parent=self)

        self._entries: Dict[str, CacheEntry] = {}
        self._generation: int = 0

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _get_or_create(self, key: str) -> CacheEntry:
        entry = self._entries.get(key)
        if entry is None:
            entry = CacheEntry(generation=self._next_generation())
            self._entries[key] = entry
        return entry

    def _dispatch(self, key: str, entry: CacheEntry, limit: int, offset: int, mode: FetchMode) -> None:
        request = PageRequest(key, limit, offset, entry.generation, mode)
        logging.debug(
            f'Fetching transactions for "{key}": mode={mode}, limit={limit}, '
            f'offset={offset}, generation={entry.generation}'
        )
        self.dispatcher.dispatch(self.api.list_by_entry, request, self._on_page_ready, self._on_page_failed)

    def _current(self, request: PageRequest) -> Optional[CacheEntry]:
        entry = self._entries.get(request.key)
        if entry is None or entry.generation != request.generation:
            logging.debug(
                f'Dropping stale {request.mode} page for "{request.key}" '
                f'(generation {request.generation})'
            )
            return None
        return entry

    def load(self, key: str) -> None:
        """Fetch the first page of an entry unless it was already fetched or is loading.

        Args:
            key (str): The budget entry id.
        """
        entry = self._get_or_create(key)
        if entry.initial_loaded or entry.loading:
            return

        entry.loading = True
        entry.depth = lib.INITIAL_COUNT
        self.entryChanged.emit(key)
        self._dispatch(key, entry, lib.INITIAL_COUNT, 0, FetchMode.Initial)

    def load_more(self, key: str) -> None:
        """Append the next page of an entry and mark the entry as revealed.

        A no-op while a fetch for the entry is in flight or when the service
        reported no further transactions.

        Args:
            key (str): The budget entry id.
        """
        entry = self._entries.get(key)
        if entry is None or entry.loading or not entry.has_more:
            return

        entry.loading = True
        entry.revealed = True
        self.entryChanged.emit(key)
        self._dispatch(key, entry, lib.BATCH_SIZE, entry.offset, FetchMode.More)

    def invalidate(self, key: str) -> None:
        """Discard an entry and refetch it in one request to its previous depth.

        Call after a transaction of the entry was created, edited or deleted. The
        revealed flag survives so an expanded list does not collapse back to its
        preview.

        Args:
            key (str): The budget entry id.
        """
        previous = self._entries.get(key)
        if previous is None:
            depth = lib.INITIAL_COUNT
            revealed = False
        elif previous.initial_loaded:
            depth = max(previous.offset, lib.INITIAL_COUNT)
            revealed = previous.revealed
        else:
            depth = max(previous.depth, lib.INITIAL_COUNT)
            revealed = previous.revealed

        entry = CacheEntry(
            loading=True,
            revealed=revealed,
            generation=self._next_generation(),
            depth=depth,
        )
        self._entries[key] = entry
        logging.debug(f'Invalidated "{key}", refetching {depth} transactions')

        self.entryChanged.emit(key)
        self._dispatch(key, entry, depth, 0, FetchMode.Refresh)

    @QtCore.Slot()
    def invalidate_all(self) -> None:
        """Drop every entry. In-flight results for dropped entries are discarded."""
        logging.debug(f'Dropping {len(self._entries)} cached transaction lists')
        self._entries.clear()
        self.cleared.emit()

    @QtCore.Slot(object, object)
    def _on_page_ready(self, request: PageRequest, page: Page) -> None:
        entry = self._current(request)
        if entry is None:
            return

        if request.mode == FetchMode.More:
            entry.items = entry.items + list(page.items)
            entry.offset += len(page.items)
        else:
            entry.items = list(page.items)
            entry.offset = len(page.items)
            entry.initial_loaded = True
        entry.has_more = page.has_more
        entry.loading = False

        self.entryChanged.emit(request.key)

    @QtCore.Slot(object, object)
    def _on_page_failed(self, request: PageRequest, ex: Exception) -> None:
        entry = self._current(request)
        if entry is None:
            return

        logging.error(f'Failed to fetch transactions for "{request.key}": {ex}')
        entry.loading = False

        self.entryChanged.emit(request.key)
        self.entryFailed.emit(request.key, ex)

    def has_entry(self, key: str) -> bool:
        return key in self._entries

    def get_items(self, key: str) -> List[Transaction]:
        entry = self._entries.get(key)
        return list(entry.items) if entry else []

    def get_has_more(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry.has_more if entry else False

    def get_is_loading(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry.loading if entry else False

    def get_revealed(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry.revealed if entry else False

    def get_initial_loaded(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry.initial_loaded if entry else False

"""Page fetch requests and the dispatchers that run them.

A :class:`PageRequest` describes one call into the pagination transport. A
dispatcher runs the call and reports the outcome to two callbacks:

    - :class:`ThreadDispatcher` runs each request on a :class:`PageWorker` thread.
      Outcomes are delivered through queued signals, so the callbacks execute on
      the thread that owns the receiving object (the GUI thread).
    - :class:`ImmediateDispatcher` runs the request inline and re-raises failures
      after reporting them.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from PySide6 import QtCore

from .models import Page

#: fetch(key, limit, offset) -> Page
FetchFunc = Callable[[str, int, int], Page]
ReadyCallback = Callable[['PageRequest', Page], None]
FailedCallback = Callable[['PageRequest', Exception], None]


class FetchMode(enum.StrEnum):
    """Why a page is fetched, which decides how its result is committed."""
    Initial = enum.auto()
    More = enum.auto()
    Refresh = enum.auto()


@dataclass(frozen=True)
class PageRequest:
    key: str
    limit: int
    offset: int
    generation: int
    mode: FetchMode


class PageWorker(QtCore.QThread):
    """
    Worker thread running a single page fetch.

    Failures are not retried.

    Signals:
        pageReady (object, object): Emitted with the request and the fetched Page.
        pageFailed (object, object): Emitted with the request and the raised exception.
    """
    pageReady = QtCore.Signal(object, object)
    pageFailed = QtCore.Signal(object, object)

    def __init__(self, fetch: FetchFunc, request: PageRequest, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self.fetch = fetch
        self.request = request

    def run(self) -> None:
        try:
            page = self.fetch(self.request.key, self.request.limit, self.request.offset)
        except Exception as ex:
            self.pageFailed.emit(self.request, ex)
            return
        self.pageReady.emit(self.request, page)


class ThreadDispatcher(QtCore.QObject):
    """Runs page requests on worker threads and keeps the workers alive until they finish."""

    def __init__(self, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._workers: List[PageWorker] = []

    def dispatch(self, fetch: FetchFunc, request: PageRequest,
                 on_ready: ReadyCallback, on_failed: FailedCallback) -> None:
        """Start a worker for the request.

        ``on_ready`` and ``on_failed`` should be slots of a QObject living in the
        GUI thread so the queued connection delivers them there.
        """
        self._workers = [w for w in self._workers if not w.isFinished()]

        worker = PageWorker(fetch, request)
        worker.pageReady.connect(on_ready, QtCore.Qt.QueuedConnection)
        worker.pageFailed.connect(on_failed, QtCore.Qt.QueuedConnection)
        self._workers.append(worker)
        worker.start()

    def pending(self) -> int:
        """Number of workers still running."""
        return sum(1 for w in self._workers if not w.isFinished())

    def wait(self, msecs: int = 5000) -> bool:
        """Block until every running worker has finished.

        Returns:
            bool: False if a worker did not finish in time.
        """
        done = True
        for worker in self._workers:
            if not worker.wait(msecs):
                logging.error(f'Fetch worker for "{worker.request.key}" did not finish in time')
                done = False
        return done


class ImmediateDispatcher:
    """Runs page requests synchronously on the calling thread."""

    def dispatch(self, fetch: FetchFunc, request: PageRequest,
                 on_ready: ReadyCallback, on_failed: FailedCallback) -> Any:
        try:
            page = fetch(request.key, request.limit, request.offset)
        except Exception as ex:
            on_failed(request, ex)
            raise
        on_ready(request, page)

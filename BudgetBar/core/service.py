"""Blocking service calls run off the GUI thread.

:func:`start_asynchronous` runs a blocking function on an :class:`AsyncWorker`
thread while a local event loop keeps the interface responsive, then returns
the result or raises the error on the calling thread.

The month summary and transaction mutations go through here. Transaction
pages do not: :mod:`BudgetBar.core.fetch` dispatches them without blocking.
"""
import logging
from typing import Any, Callable, Dict

from PySide6 import QtCore

from ..status import status

TOTAL_TIMEOUT: int = 30


class AsyncWorker(QtCore.QThread):
    """
    Worker thread running a single blocking function.

    Signals:
        resultReady (object): Emitted with the function's result on success.
        errorOccurred (object): Emitted with the raised exception on failure.
    """
    resultReady = QtCore.Signal(object)
    errorOccurred = QtCore.Signal(object)

    def __init__(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        super().__init__()
        self.func = func
        self.args = args
        self.kwargs = kwargs

    def run(self) -> None:
        try:
            result = self.func(*self.args, **self.kwargs)
        except Exception as ex:
            self.errorOccurred.emit(ex)
            return
        self.resultReady.emit(result)


def start_asynchronous(func: Callable[..., Any], *args: Any, total_timeout: int = TOTAL_TIMEOUT,
                       **kwargs: Any) -> Any:
    """
    Run a blocking function on a worker thread and wait for it in a local event loop.

    Args:
        func: The blocking function to run.
        *args, **kwargs: Arguments passed to func.
        total_timeout (int): Seconds to wait before giving up.

    Returns:
        The result of the function on success.

    Raises:
        status.BaseStatusException: Raised by the function, or an UnknownException
            wrapping any other error or a timeout.
    """
    worker: AsyncWorker = AsyncWorker(func, *args, **kwargs)

    result: Dict[str, Any] = {'data': None, 'error': None, 'done': False}
    loop: QtCore.QEventLoop = QtCore.QEventLoop()

    worker.resultReady.connect(lambda d: (result.update({'data': d, 'done': True}), loop.quit()))
    worker.errorOccurred.connect(lambda err: (result.update({'error': err, 'done': True}), loop.quit()))

    timer: QtCore.QTimer = QtCore.QTimer()
    timer.setSingleShot(True)
    timer.setInterval(total_timeout * 1000)
    timer.timeout.connect(loop.quit)

    worker.start()
    timer.start()
    if not result['done']:
        loop.exec()
    timer.stop()

    if not result['done']:
        if worker.isRunning():
            worker.terminate()
        worker.wait()
        raise status.UnknownException(f'{getattr(func, "__name__", func)} timed out after {total_timeout}s.')

    worker.wait()
    if result['error']:
        err = result['error']
        if isinstance(err, status.BaseStatusException):
            raise err
        logging.debug(f'Unexpected error in {getattr(func, "__name__", func)}: {err!r}')
        raise status.UnknownException(str(err)) from err
    return result['data']


def fetch_summary(month: str, directory=None, summary_api=None, total_timeout: int = TOTAL_TIMEOUT):
    """
    Fetch the budget summary of a "YYYY-MM" month and broadcast it.

    Args:
        month (str): The month to summarize.
        directory (api.MonthDirectory, optional): Resolves the month to its id.
        summary_api (api.SummaryAPI, optional): The summary endpoint.
        total_timeout (int): Seconds to wait before giving up.

    Returns:
        MonthSummary: The fetched summary, also emitted on ``signals.summaryFetched``.
    """
    from . import api
    from ..ui.actions import signals

    directory = directory or api.MonthDirectory()
    summary_api = summary_api or api.SummaryAPI()

    def _fetch():
        return summary_api.get(directory.resolve_month_id(month))

    summary = start_asynchronous(_fetch, total_timeout=total_timeout)
    logging.debug(f'Fetched summary of {month}: {len(summary.categories)} categories')
    signals.summaryFetched.emit(summary)
    return summary

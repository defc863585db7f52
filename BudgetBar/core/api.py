"""REST client for the household budget service.

Provides a thin :class:`ApiClient` over :mod:`requests` and typed endpoint
wrappers:

    - TransactionsAPI: paginated per-entry listing plus create/update/delete
    - MonthsAPI and MonthDirectory: month listing and "YYYY-MM" to id resolution
    - SummaryAPI: the per-category budget summary of a month

Non-2xx answers raise :class:`status.ApiException` built from the service's
``{"error": {"code": ..., "details": ...}}`` envelope. Connection failures
raise :class:`status.ServiceUnavailableException`.
"""
import logging
import threading
from typing import Any, Dict, List, Optional

import requests

from .models import Month, MonthSummary, Page, Transaction
from ..settings import lib
from ..status import status

DEFAULT_TIMEOUT: float = 10.0

#: Sentinel for optional update fields that must be left untouched.
UNSET = object()


class ApiClient:
    """Minimal JSON client bound to a base url.

    Args:
        base_url (str): Root of the versioned API, e.g. ``http://localhost:3000/api/v1``.
        timeout (float): Per-request timeout in seconds.
        session (requests.Session, optional): Session to reuse.
    """

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._session = session
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls) -> 'ApiClient':
        """Build a client from the "api" section of the client configuration."""
        config = lib.get_settings().get_section('api')
        return cls(config['base_url'], timeout=config.get('timeout', DEFAULT_TIMEOUT))

    @property
    def session(self) -> requests.Session:
        """The session shared by every fetch worker.

        Created on first use. Its connection pool is reused across threads.
        """
        with self._lock:
            if self._session is None:
                self._session = requests.Session()
                self._session.headers.update({'Accept': 'application/json'})
            return self._session

    def close(self) -> None:
        """Close the pooled connections. A later request opens a new session."""
        with self._lock:
            if self._session is not None:
                self._session.close()
                self._session = None

    def _url(self, path: str) -> str:
        return f'{self.base_url}/{path.lstrip("/")}'

    def request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None,
                body: Any = None) -> Any:
        """Send a request and decode the JSON answer.

        Args:
            method (str): HTTP method.
            path (str): Path relative to the base url.
            params (dict, optional): Query string parameters.
            body (Any, optional): JSON-serializable request body.

        Returns:
            The decoded JSON body, or None for ``204 No Content``.

        Raises:
            status.ServiceUnavailableException: If the service cannot be reached.
            status.ApiException: If the service answers with an error.
        """
        url = self._url(path)
        logging.debug(f'{method} {url} params={params}')
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=body,
                timeout=self.timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as ex:
            raise status.ServiceUnavailableException(f'{method} {url}: {ex}') from ex

        return self._handle_response(response)

    @staticmethod
    def _handle_response(response: requests.Response) -> Any:
        if not response.ok:
            try:
                payload = response.json()
                error = payload['error']
            except (ValueError, KeyError, TypeError):
                raise status.ApiException('NETWORK_ERROR', http_status=response.status_code)
            raise status.ApiException(
                error.get('code', 'UNKNOWN_ERROR'),
                details=error.get('details'),
                http_status=response.status_code,
            )

        if response.status_code == 204:
            return None

        try:
            return response.json()
        except ValueError as ex:
            raise status.ApiException('NETWORK_ERROR', http_status=response.status_code) from ex

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request('GET', path, params=params)

    def post(self, path: str, body: Any = None) -> Any:
        return self.request('POST', path, body=body)

    def patch(self, path: str, body: Any) -> Any:
        return self.request('PATCH', path, body=body)

    def delete(self, path: str) -> None:
        self.request('DELETE', path)


class TransactionsAPI:
    """Transaction endpoints, including the per-entry pagination transport."""

    def __init__(self, client: Optional[ApiClient] = None) -> None:
        self.client = client or ApiClient.from_settings()

    def list_by_entry(self, entry_id: str, limit: int, offset: int) -> Page:
        """Fetch one page of an entry's transactions.

        The service orders by date then creation time, newest first, and reports
        ``has_more`` itself. The flag is returned as received.

        Args:
            entry_id (str): The budget entry id.
            limit (int): Maximum number of transactions to return.
            offset (int): Number of transactions to skip.

        Returns:
            Page: The transactions and the has-more flag.
        """
        data = self.client.get('/transactions', params={
            'entry_id': entry_id,
            'limit': limit,
            'offset': offset,
        })
        page = Page.from_dict(data)
        logging.debug(
            f'Fetched {len(page.items)} transactions for entry "{entry_id}" '
            f'(limit={limit}, offset={offset}, has_more={page.has_more})'
        )
        return page

    def list(self, month_id: str) -> List[Transaction]:
        data = self.client.get('/transactions', params={'month': month_id})
        return [Transaction.from_dict(d) for d in data]

    def create(self, entry_id: str, amount: int, date: str, title: Optional[str] = None) -> Transaction:
        body: Dict[str, Any] = {'entry_id': entry_id, 'amount': amount, 'date': date}
        if title:
            body['title'] = title
        return Transaction.from_dict(self.client.post('/transactions', body))

    def update(self, transaction_id: str, entry_id: Optional[str] = None, amount: Optional[int] = None,
               date: Optional[str] = None, title: Any = UNSET) -> Transaction:
        """Patch a transaction. Fields left as None are unchanged.

        ``title`` distinguishes three states: omitted leaves it, None clears it,
        a string sets it.
        """
        body: Dict[str, Any] = {}
        if entry_id is not None:
            body['entry_id'] = entry_id
        if amount is not None:
            body['amount'] = amount
        if date is not None:
            body['date'] = date
        if title is not UNSET:
            body['title'] = title or None
        return Transaction.from_dict(self.client.patch(f'/transactions/{transaction_id}', body))

    def delete(self, transaction_id: str) -> None:
        self.client.delete(f'/transactions/{transaction_id}')


class MonthsAPI:
    def __init__(self, client: Optional[ApiClient] = None) -> None:
        self.client = client or ApiClient.from_settings()

    def list(self) -> List[Month]:
        return [Month.from_dict(d) for d in self.client.get('/months')]

    def get(self, month_id: str) -> Month:
        return Month.from_dict(self.client.get(f'/months/{month_id}'))

    def create(self, month: str) -> Month:
        return Month.from_dict(self.client.post('/months', {'month': month}))


class MonthDirectory:
    """Resolves "YYYY-MM" strings to month ids using a lazily fetched month list."""

    def __init__(self, months_api: Optional[MonthsAPI] = None) -> None:
        self.months_api = months_api or MonthsAPI()
        self._months: List[Month] = []
        self._loaded = False

    def get_months(self) -> List[Month]:
        if self._loaded:
            return self._months
        return self.refresh()

    def refresh(self) -> List[Month]:
        self._months = self.months_api.list()
        self._loaded = True
        return self._months

    def resolve_month_id(self, month: str) -> str:
        """Return the id of a "YYYY-MM" month, refreshing the list once on a miss.

        Raises:
            status.MonthNotFoundException: If the month does not exist on the service.
        """
        found = next((m for m in self.get_months() if m.month == month), None)
        if found:
            return found.id

        found = next((m for m in self.refresh() if m.month == month), None)
        if found:
            return found.id

        raise status.MonthNotFoundException(month)


class SummaryAPI:
    def __init__(self, client: Optional[ApiClient] = None) -> None:
        self.client = client or ApiClient.from_settings()

    def get(self, month_id: str) -> MonthSummary:
        return MonthSummary.from_dict(self.client.get(f'/months/{month_id}/summary'))

"""PocketPulse server API integration.

Wraps the four remote operations (list, create, delete, summary). The private
``_`` functions raise status exceptions on transport, HTTP and response shape
failures. The public functions never raise: they log the failure and return a
safe default (an empty list, a zeroed summary) or ``None`` as the failure
sentinel for create and delete.

Also provides :class:`AsyncWorker` to run blocking calls off the UI thread.
"""

import logging
import os
from typing import Any, Callable, Dict, List, Optional

import requests
from PySide6 import QtCore

from ..data.data import Summary, Transaction
from ..status import status

# Cached HTTP session reused across calls
_cached_session: Optional[requests.Session] = None

BASE_URL_ENV_KEY: str = 'POCKETPULSE_BASE_URL'


class AsyncWorker(QtCore.QThread):
    """
    Generic worker thread for blocking functions.

    Signals:
        resultReady (object): Emitted with the function's result on success.
        errorOccurred (object): Emitted with the exception on failure.
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
            logging.error(f'Worker failed running {getattr(self.func, "__name__", self.func)}', exc_info=ex)
            self.errorOccurred.emit(ex)
            return
        self.resultReady.emit(result)


def start_asynchronous(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """
    Runs a blocking function on an AsyncWorker and waits for it in a local event loop.

    The calling thread keeps processing events while the worker runs, so the
    window stays responsive during a slow request.

    Args:
        func: The blocking function to run.
        *args, **kwargs: Arguments passed to func.

    Returns:
        The result of the function.

    Raises:
        status.BaseStatusException: Re-raised as is if the function raised one.
        status.UnknownException: If the function raised any other exception.
    """
    worker: AsyncWorker = AsyncWorker(func, *args, **kwargs)

    result: Dict[str, Any] = {'data': None, 'error': None}
    loop: QtCore.QEventLoop = QtCore.QEventLoop()

    worker.resultReady.connect(lambda d: (result.update({'data': d}), loop.quit()))
    worker.errorOccurred.connect(lambda err: (result.update({'error': err}), loop.quit()))

    worker.start()
    loop.exec()
    worker.wait()
    worker.deleteLater()

    if result['error'] is not None:
        err = result['error']
        if isinstance(err, status.BaseStatusException):
            raise err
        raise status.UnknownException(str(err))
    return result['data']


def clear_session() -> None:
    """
    Closes and clears the cached HTTP session.
    """
    global _cached_session

    if _cached_session is not None:
        _cached_session.close()

    _cached_session = None


def get_session() -> requests.Session:
    """
    Builds (or returns cached) HTTP session.

    Returns:
        A requests Session sending and accepting JSON, reused for the app run.
    """
    global _cached_session
    if _cached_session is not None:
        return _cached_session

    session = requests.Session()
    session.headers.update({'Accept': 'application/json'})
    logging.debug('HTTP session created.')
    _cached_session = session
    return session


def get_base_url() -> str:
    """Returns the server root, preferring the environment override over the config."""
    from ..settings import lib

    url = os.environ.get(BASE_URL_ENV_KEY, '') or lib.settings.get_section('api').get('base_url', '')
    return (url or lib.DEFAULT_BASE_URL).rstrip('/')


def get_timeout() -> float:
    from ..settings import lib

    return float(lib.settings.get_section('api').get('timeout', lib.DEFAULT_TIMEOUT))


def _request(method: str, path: str, **kwargs: Any) -> Any:
    """
    Sends a request to the server and decodes the JSON body.

    Args:
        method: HTTP method.
        path: Path relative to the server root, e.g. '/transactions'.
        **kwargs: Passed to :meth:`requests.Session.request`.

    Returns:
        The decoded JSON body.

    Raises:
        ServiceUnavailableException: If the server can't be reached or times out.
        HttpStatusException: If the server answers with a non-success status.
        ResponseInvalidException: If the body is not JSON.
    """
    url = f'{get_base_url()}{path}'
    logging.debug(f'{method} {url} {kwargs.get("params") or ""}'.rstrip())

    try:
        response = get_session().request(method, url, timeout=get_timeout(), **kwargs)
    except requests.exceptions.Timeout as ex:
        raise status.ServiceUnavailableException(f'Timeout calling {method} {url}: {ex}') from ex
    except requests.exceptions.RequestException as ex:
        raise status.ServiceUnavailableException(f'Error calling {method} {url}: {ex}') from ex

    if not response.ok:
        raise status.HttpStatusException(f'HTTP error {response.status_code} calling {method} {url}.')

    try:
        return response.json()
    except ValueError as ex:
        raise status.ResponseInvalidException(f'{method} {url} did not return JSON.') from ex


def _list_transactions(date: Optional[str] = None) -> List[Transaction]:
    """
    Fetches transactions, all of them or only those attributed to `date`.

    Records that can't be parsed are skipped.

    Raises:
        ServiceUnavailableException, HttpStatusException, ResponseInvalidException.
    """
    params = {'date': date} if date else None
    data = _request('GET', '/transactions', params=params)

    if not isinstance(data, list):
        raise status.ResponseInvalidException(f'Expected a list of transactions, got {type(data).__name__}.')

    transactions: List[Transaction] = []
    for item in data:
        try:
            transactions.append(Transaction.from_dict(item))
        except status.ResponseInvalidException:
            logging.warning(f'Skipping malformed transaction record: {item!r}')

    logging.debug(f'Fetched {len(transactions)} transactions.')
    return transactions


def list_transactions(date: Optional[str] = None) -> List[Transaction]:
    """
    Fetches transactions. Returns an empty list on any failure.
    """
    try:
        return _list_transactions(date)
    except status.BaseStatusException as ex:
        logging.error(f'Error fetching transactions: {ex}')
        return []


def _create_transaction(draft: Dict[str, Any]) -> Transaction:
    """
    Posts a draft and returns the stored transaction.

    Only the draft columns are sent: ids are assigned by the server.

    Raises:
        ServiceUnavailableException, HttpStatusException,
        ResponseInvalidException: If the response doesn't carry an id.
    """
    from ..settings import lib

    draft = {k: draft.get(k) for k in lib.DRAFT_DATA_COLUMNS}
    data = _request('POST', '/transactions', json=draft)
    if not isinstance(data, dict) or data.get('id') in (None, ''):
        raise status.ResponseInvalidException('Create response is missing the transaction id.')

    transaction = Transaction.from_dict({**draft, **data})
    logging.debug(f'Created transaction {transaction.id}.')
    return transaction


def create_transaction(draft: Dict[str, Any]) -> Optional[Transaction]:
    """
    Posts a draft. Returns the stored transaction, or None if the create failed.
    """
    try:
        return _create_transaction(draft)
    except status.BaseStatusException as ex:
        logging.error(f'Error adding transaction: {ex}')
        return None


def _delete_transaction(transaction_id: Any) -> Dict[str, Any]:
    """
    Deletes a transaction and returns the server acknowledgment.

    Raises:
        ServiceUnavailableException, HttpStatusException,
        ResponseInvalidException: If the response doesn't acknowledge the delete.
    """
    data = _request('DELETE', f'/transactions/{transaction_id}')
    if not isinstance(data, dict) or not data.get('ok'):
        raise status.ResponseInvalidException(f'Delete of transaction {transaction_id} was not acknowledged.')

    logging.debug(f'Deleted transaction {transaction_id}.')
    return data


def delete_transaction(transaction_id: Any) -> Optional[Dict[str, Any]]:
    """
    Deletes a transaction. Returns the acknowledgment, or None if the delete failed.
    """
    try:
        return _delete_transaction(transaction_id)
    except status.BaseStatusException as ex:
        logging.error(f'Error deleting transaction: {ex}')
        return None


def _fetch_summary(date: str) -> Summary:
    """
    Fetches the daily, monthly and lifetime figures for `date`.

    Raises:
        ServiceUnavailableException, HttpStatusException, ResponseInvalidException.
    """
    data = _request('GET', '/summary', params={'date': date})
    if not isinstance(data, dict):
        raise status.ResponseInvalidException(f'Expected a summary object, got {type(data).__name__}.')
    return Summary.from_dict(data)


def fetch_summary(date: str) -> Summary:
    """
    Fetches the summary for `date`. Returns an all-zero summary on any failure.
    """
    try:
        return _fetch_summary(date)
    except status.BaseStatusException as ex:
        logging.error(f'Error fetching summary: {ex}')
        return Summary.zero()


# Reset cached session when the api config changes
from ..ui.actions import signals


@QtCore.Slot(str)
def _reset_cached_session(section: str) -> None:
    """Clear the cached session when the server settings change."""
    if section == 'api':
        logging.debug('Clearing cached HTTP session due to api config change')
        clear_session()


signals.configSectionChanged.connect(_reset_cached_session)

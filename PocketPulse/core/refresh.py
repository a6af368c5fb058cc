"""Refresh manager: the single entry point that re-syncs every view with the server.

Any change to the viewed date, the type filter or the search text, and every
successful create or delete, ends in :meth:`RefreshManager.refresh`. A refresh
cycle fetches the full transaction list and the summary for the viewed date,
runs :func:`~PocketPulse.data.data.filter_transactions` for the table and
:func:`~PocketPulse.data.data.get_series` for the chart, and publishes the
results through the application signals.

Each refresh is stamped with a monotonically increasing token. Cycles are not
cancelled, but a result whose token is older than the latest issued one is
dropped, so overlapping refreshes can't overwrite newer data.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, List, Optional, Set, Tuple

from PySide6 import QtCore, QtWidgets

from . import service
from ..data.data import (
    Series,
    Summary,
    Transaction,
    TypeFilter,
    add_days,
    build_draft,
    filter_transactions,
    get_series,
    today_iso,
)

DEMO_DATA: List[dict] = [
    {'type': 'income', 'amount': 5000, 'category': 'Salary', 'days': 0, 'description': 'Monthly salary'},
    {'type': 'expense', 'amount': 120, 'category': 'Food', 'days': 0, 'description': 'Lunch'},
    {'type': 'expense', 'amount': 350, 'category': 'Groceries', 'days': 0, 'description': 'Vegetables'},
    {'type': 'expense', 'amount': 200, 'category': 'Transport', 'days': -1, 'description': 'Taxi'},
    {'type': 'income', 'amount': 1500, 'category': 'Freelance', 'days': -2, 'description': 'Project part'},
]


@dataclass(frozen=True)
class ViewState:
    """What the user is currently looking at."""
    view_date: str = field(default_factory=today_iso)
    type_filter: str = TypeFilter.All.value
    query: str = ''


@dataclass
class RefreshResult:
    """Everything one refresh cycle produces."""
    token: int
    state: ViewState
    transactions: List[Transaction] = field(default_factory=list)
    rows: List[Transaction] = field(default_factory=list)
    summary: Summary = field(default_factory=Summary.zero)
    series: Series = field(default_factory=Series)


def create_drafts(drafts: List[dict]) -> int:
    """Send each draft to the server. Blocking.

    Returns:
        int: The number of drafts the server accepted.
    """
    return sum(1 for draft in drafts if service.create_transaction(draft) is not None)


def run_cycle(token: int, state: ViewState) -> RefreshResult:
    """Fetch and transform the data for one refresh. Blocking.

    Args:
        token: The refresh token the result will carry.
        state: The view state to refresh for.

    Returns:
        RefreshResult: The table rows, summary and chart series.
    """
    transactions = service.list_transactions()
    rows = filter_transactions(transactions, state.type_filter, state.query)
    summary = service.fetch_summary(state.view_date)
    series = get_series(transactions, state.view_date)
    return RefreshResult(
        token=token,
        state=state,
        transactions=transactions,
        rows=rows,
        summary=summary,
        series=series,
    )


class RefreshManager(QtCore.QObject):
    """Owns the view state and runs refresh cycles.

    Signals:
        refreshStarted (int): Emitted with the token of a newly issued refresh.
        refreshFinished (object): Emitted with the applied RefreshResult.
        refreshDiscarded (int): Emitted with the token of a stale result that was dropped.
        refreshFailed (str): Emitted with the error message of a cycle that raised.
    """
    refreshStarted = QtCore.Signal(int)
    refreshFinished = QtCore.Signal(object)
    refreshDiscarded = QtCore.Signal(int)
    refreshFailed = QtCore.Signal(str)

    def __init__(self, parent: Optional[QtCore.QObject] = None, asynchronous: bool = True) -> None:
        super().__init__(parent)

        self.asynchronous = asynchronous

        self._state = ViewState()
        self._token = 0
        self._workers: Set[service.AsyncWorker] = set()
        self._connections: List[Tuple[QtCore.SignalInstance, Callable[..., Any]]] = []

        self._refresh_timer = QtCore.QTimer(self)
        self._refresh_timer.setSingleShot(True)
        self._refresh_timer.setInterval(QtWidgets.QApplication.keyboardInputInterval())

        self._connect_signals()

    def _connect_signals(self) -> None:
        from ..ui.actions import signals

        self._refresh_timer.timeout.connect(self.refresh)

        self._connections = [
            (signals.initializationRequested, self.refresh),
            (signals.refreshRequested, self.refresh),
            (signals.viewDateChanged, self.set_view_date),
            (signals.typeFilterChanged, self.set_type_filter),
            (signals.searchTextChanged, self.set_query),
            (signals.seedDemoRequested, self.seed_demo_data),
        ]
        for signal, slot in self._connections:
            signal.connect(slot)

    def close(self) -> None:
        """Detach the manager from the application signals.

        Pending debounced refreshes are cancelled and running cycles are waited
        for. A closed manager no longer reacts to the signal bus, though its
        methods can still be called directly.
        """
        self._refresh_timer.stop()

        for signal, slot in self._connections:
            signal.disconnect(slot)
        self._connections = []

        for worker in list(self._workers):
            worker.wait()
        logging.debug('Refresh manager closed.')

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def token(self) -> int:
        """The token of the most recently issued refresh."""
        return self._token

    @QtCore.Slot(str)
    def set_view_date(self, date: str) -> None:
        if date == self._state.view_date:
            return
        self._state = replace(self._state, view_date=date)
        self.request_refresh()

    @QtCore.Slot(str)
    def set_type_filter(self, type_filter: str) -> None:
        if type_filter not in [f.value for f in TypeFilter]:
            raise ValueError(f'Invalid type filter: {type_filter}')
        if type_filter == self._state.type_filter:
            return
        self._state = replace(self._state, type_filter=type_filter)
        self.request_refresh()

    @QtCore.Slot(str)
    def set_query(self, query: str) -> None:
        if query == self._state.query:
            return
        self._state = replace(self._state, query=query)
        self.request_refresh()

    @QtCore.Slot()
    def request_refresh(self) -> None:
        """Schedule a refresh, coalescing rapid changes such as typing."""
        self._refresh_timer.start(self._refresh_timer.interval())

    @QtCore.Slot()
    def refresh(self) -> int:
        """Start a refresh cycle for the current view state.

        Returns:
            int: The token issued for this refresh.
        """
        self._refresh_timer.stop()

        self._token += 1
        token = self._token
        state = self._state
        logging.debug(f'Refresh {token} requested for {state}.')
        self.refreshStarted.emit(token)

        if not self.asynchronous:
            self.deliver(run_cycle(token, state))
            return token

        worker = service.AsyncWorker(run_cycle, token, state)
        worker.resultReady.connect(self.deliver)
        worker.errorOccurred.connect(lambda error: self.fail(token, error))
        worker.finished.connect(lambda: self._workers.discard(worker))
        worker.finished.connect(worker.deleteLater)
        self._workers.add(worker)
        worker.start()
        return token

    @QtCore.Slot(object)
    def deliver(self, result: RefreshResult) -> bool:
        """Publish a refresh result unless a newer refresh has been issued since.

        Returns:
            bool: True if the result was applied, False if it was stale.
        """
        if result.token != self._token:
            logging.debug(f'Discarding stale refresh {result.token}, latest is {self._token}.')
            self.refreshDiscarded.emit(result.token)
            return False

        from ..ui.actions import signals

        signals.transactionsChanged.emit(result.rows)
        signals.summaryChanged.emit(result.summary)
        signals.seriesChanged.emit(result.series)

        self.refreshFinished.emit(result)
        return True

    def fail(self, token: int, error: Exception) -> bool:
        """Report a refresh cycle that raised instead of producing a result.

        Failures of stale cycles are only logged.

        Returns:
            bool: True if the failure was reported, False if the cycle was stale.
        """
        if token != self._token:
            logging.debug(f'Ignoring failure of stale refresh {token}: {error}')
            return False

        from ..ui.actions import signals

        message = f'Refresh failed: {error}'
        logging.error(message)
        self.refreshFailed.emit(message)
        signals.error.emit(message)
        return True

    def _call(self, func: Callable[..., Any], *args: Any) -> Any:
        if not self.asynchronous:
            return func(*args)
        return service.start_asynchronous(func, *args)

    def submit_transaction(
            self,
            kind: str,
            amount: Any,
            category: str = '',
            date: Optional[str] = None,
            description: str = '',
    ) -> Optional[Transaction]:
        """Validate and create a transaction, then refresh.

        The amount is validated before anything is sent.

        Returns:
            The created transaction, or None if the server rejected or never received it.

        Raises:
            status.AmountInvalidException: If the amount is not a number greater than zero.
        """
        draft = build_draft(kind, amount, category, date, description)

        transaction = self._call(service.create_transaction, draft)
        if transaction is None:
            return None

        self.refresh()

        from ..ui.actions import signals
        signals.transactionCreated.emit(transaction)
        return transaction

    @QtCore.Slot(object)
    def delete_transaction(self, transaction_id: Any) -> bool:
        """Delete a transaction and refresh on success.

        Returns:
            bool: True if the server acknowledged the delete.
        """
        if self._call(service.delete_transaction, transaction_id) is None:
            return False
        self.refresh()
        return True

    @QtCore.Slot()
    def seed_demo_data(self) -> int:
        """Create a handful of sample transactions around today, then refresh.

        Returns:
            int: The number of sample transactions the server accepted.
        """
        today = today_iso()
        drafts = [
            build_draft(
                item['type'],
                item['amount'],
                item['category'],
                add_days(today, item['days']),
                item['description'],
            )
            for item in DEMO_DATA
        ]
        created = self._call(create_drafts, drafts)

        logging.info(f'Seeded {created} of {len(DEMO_DATA)} demo transactions.')
        self.refresh()
        return created


refresh_manager: Optional[RefreshManager] = None


def get_manager() -> RefreshManager:
    """Return the application refresh manager, creating it on first use."""
    global refresh_manager
    if refresh_manager is None:
        refresh_manager = RefreshManager()
    return refresh_manager

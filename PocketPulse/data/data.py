"""Transaction data types and analytics API.

This module provides the data model shared by the gateway and the views, and the
two transforms run on every refresh:

- :func:`filter_transactions` – type/text filtering and newest-first ordering for the table.
- :func:`get_series` – the 7-day income/expense series for the history chart.

It also validates user input into a draft ready to be sent with
:func:`build_draft`.
"""
import datetime
import enum
import logging
import math
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from ..settings import lib
from ..status import status


class TransactionType(enum.StrEnum):
    Income = 'income'
    Expense = 'expense'


class TypeFilter(enum.StrEnum):
    All = 'all'
    Income = 'income'
    Expense = 'expense'


@dataclass
class Transaction:
    """A single dated income or expense record, as stored by the server."""
    id: Any
    type: str
    amount: float
    category: str
    date: str
    description: str = ''

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        """Build a transaction from a JSON record.

        Raises:
            status.ResponseInvalidException: If the record is missing a required field
                or carries values of the wrong type.
        """
        if not isinstance(data, dict):
            raise status.ResponseInvalidException(f'Expected a transaction object, got {type(data).__name__}.')

        missing = [k for k in ('id', 'type', 'amount', 'date') if data.get(k) in (None, '')]
        if missing:
            raise status.ResponseInvalidException(f'Transaction is missing {", ".join(missing)}.')

        if data['type'] not in [f.value for f in TransactionType]:
            raise status.ResponseInvalidException(f'Unknown transaction type "{data["type"]}".')

        try:
            amount = float(data['amount'])
            date = datetime.date.fromisoformat(str(data['date'])[:10]).isoformat()
        except (TypeError, ValueError) as ex:
            raise status.ResponseInvalidException(f'Invalid transaction {data.get("id")}: {ex}') from ex

        return cls(
            id=data['id'],
            type=data['type'],
            amount=amount,
            category=str(data.get('category') or default_category(data['type'])),
            date=date,
            description=str(data.get('description') or ''),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DailySummary:
    income: float = 0.0
    expense: float = 0.0
    balance: float = 0.0


@dataclass
class Summary:
    """Server-computed aggregate figures for a date, its month, and the lifetime of the ledger."""
    daily: DailySummary = field(default_factory=DailySummary)
    month_balance: float = 0.0
    lifetime_balance: float = 0.0

    @classmethod
    def zero(cls) -> 'Summary':
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Summary':
        """Build a summary from the `/summary` response body.

        Raises:
            status.ResponseInvalidException: If a section or figure is missing or not numeric.
        """
        try:
            daily = data['daily']
            return cls(
                daily=DailySummary(
                    income=float(daily['income']),
                    expense=float(daily['expense']),
                    balance=float(daily['balance']),
                ),
                month_balance=float(data['month']['balance']),
                lifetime_balance=float(data['lifetime']['balance']),
            )
        except (KeyError, TypeError, ValueError) as ex:
            raise status.ResponseInvalidException(f'Malformed summary: {ex!r}') from ex

    def to_dict(self) -> Dict[str, Any]:
        return {
            'daily': asdict(self.daily),
            'month': {'balance': self.month_balance},
            'lifetime': {'balance': self.lifetime_balance},
        }


@dataclass
class Series:
    """Aligned daily income and expense figures for the history chart."""
    labels: List[str] = field(default_factory=list)
    income: List[float] = field(default_factory=list)
    expense: List[float] = field(default_factory=list)


def today_iso() -> str:
    return datetime.date.today().isoformat()


def add_days(iso: str, days: int) -> str:
    """Shift an ISO date by a number of days."""
    return (datetime.date.fromisoformat(iso) + datetime.timedelta(days=days)).isoformat()


def default_category(kind: str) -> str:
    return 'Income' if kind == TransactionType.Income.value else 'Expense'


def parse_amount(value: Any) -> float:
    """Parse a user-entered amount.

    Raises:
        status.AmountInvalidException: If the value is not a finite number greater than zero.
    """
    try:
        amount = float(str(value).strip())
    except (TypeError, ValueError):
        raise status.AmountInvalidException(f'Got "{value}".')

    if not math.isfinite(amount) or amount <= 0:
        raise status.AmountInvalidException(f'Got "{value}".')
    return amount


def build_draft(
        kind: str,
        amount: Any,
        category: str = '',
        date: Optional[str] = None,
        description: str = '',
) -> Dict[str, Any]:
    """Validate form input and build the body of a create request.

    The draft never carries an id. An empty category falls back to "Income" or
    "Expense" by type and the date defaults to today.

    Raises:
        status.AmountInvalidException: If the amount is not a number greater than zero.
        ValueError: If the type is not income or expense.
    """
    if kind not in [f.value for f in TransactionType]:
        raise ValueError(f'Invalid transaction type: {kind}')

    draft = {
        'type': kind,
        'amount': parse_amount(amount),
        'category': (category or '').strip() or default_category(kind),
        'date': date or today_iso(),
        'description': (description or '').strip(),
    }
    return {k: draft[k] for k in lib.DRAFT_DATA_COLUMNS}


def _sortable_id(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return float('-inf')


def filter_transactions(
        transactions: Iterable[Transaction],
        type_filter: str = TypeFilter.All.value,
        query: str = '',
) -> List[Transaction]:
    """Filter and order transactions for the table.

    Keeps transactions matching the type filter (unless 'all') and containing the
    case-insensitive query in "description category". Orders by date descending,
    then id descending compared numerically.

    Args:
        transactions: The full transaction list.
        type_filter: One of 'all', 'income', 'expense'.
        query: Free text. Empty matches everything.

    Returns:
        list[Transaction]: The matching transactions, newest first.
    """
    transactions = list(transactions)
    if not transactions:
        return []

    df = pd.DataFrame({
        'type': [t.type for t in transactions],
        'date': [t.date for t in transactions],
        'id': [_sortable_id(t.id) for t in transactions],
        'text': [f'{t.description} {t.category}'.lower() for t in transactions],
    })

    if type_filter and type_filter != TypeFilter.All.value:
        df = df[df['type'] == type_filter]

    q = (query or '').strip().lower()
    if q:
        df = df[df['text'].str.contains(q, regex=False)]

    df = df.sort_values(by=['date', 'id'], ascending=False, kind='mergesort')
    return [transactions[i] for i in df.index]


def get_series(
        transactions: Iterable[Transaction],
        anchor: str,
        days: int = lib.SERIES_DAYS,
) -> Series:
    """Sum income and expense per day over the window ending at the anchor date.

    Transactions are bucketed by date in a single pass. Sums are rounded to two
    decimals once, after summing.

    Args:
        transactions: The full transaction list.
        anchor: The viewed ISO date, last day of the window.
        days: Window length.

    Returns:
        Series: `days` ascending dates with the matching income and expense figures.
    """
    end = pd.Timestamp(anchor).normalize()
    window = pd.date_range(end=end, periods=days, freq='D')
    labels = [d.strftime('%Y-%m-%d') for d in window]

    records = [(t.date, t.type, t.amount) for t in transactions]
    df = pd.DataFrame(records, columns=['date', 'type', 'amount'])
    df = df[df['date'].isin(labels)]
    if df.empty:
        return Series(labels=labels, income=[0.0] * days, expense=[0.0] * days)

    totals = (
        df.groupby(['date', 'type'])['amount']
        .sum()
        .unstack('type')
        .reindex(index=labels, columns=[f.value for f in TransactionType])
        .fillna(0.0)
        .round(2)
    )

    logging.debug(f'Built {days}-day series ending {labels[-1]} from {len(df)} transactions.')
    return Series(
        labels=labels,
        income=[float(v) for v in totals[TransactionType.Income.value]],
        expense=[float(v) for v in totals[TransactionType.Expense.value]],
    )

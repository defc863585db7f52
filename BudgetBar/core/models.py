"""Typed records returned by the budget service.

All amounts are integers in minor currency units. Records are immutable: the
client never edits a record in place, it asks the service and re-reads.
"""
import datetime
import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class BudgetStatus(enum.StrEnum):
    """Spending status of a category for a month."""
    Unpaid = 'unpaid'
    Underspent = 'underspent'
    OnBudget = 'on_budget'
    Overspent = 'overspent'


def _parse_timestamp(value: Optional[str]) -> Optional[datetime.datetime]:
    if not value:
        return None
    return datetime.datetime.fromisoformat(value)


@dataclass(frozen=True)
class Transaction:
    """A single payment booked against a budget entry."""
    id: str
    entry_id: str
    amount: int
    date: datetime.date
    title: Optional[str] = None
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        return cls(
            id=data['id'],
            entry_id=data['entry_id'],
            amount=int(data['amount']),
            date=datetime.date.fromisoformat(data['date']),
            title=data.get('title') or None,
            created_at=_parse_timestamp(data.get('created_at')),
            updated_at=_parse_timestamp(data.get('updated_at')),
        )


@dataclass(frozen=True)
class Page:
    """One page of transactions and the service's verdict on whether more exist."""
    items: List[Transaction] = field(default_factory=list)
    has_more: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Page':
        return cls(
            items=[Transaction.from_dict(d) for d in data.get('items', [])],
            has_more=bool(data.get('has_more', False)),
        )


@dataclass(frozen=True)
class Month:
    id: str
    month: str  # "YYYY-MM"
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Month':
        return cls(
            id=data['id'],
            month=data['month'],
            created_at=_parse_timestamp(data.get('created_at')),
            updated_at=_parse_timestamp(data.get('updated_at')),
        )


@dataclass(frozen=True)
class CategorySummary:
    id: str
    name: str
    label: Optional[str] = None

    @property
    def display_name(self) -> str:
        """The label if the category has one, otherwise its name."""
        return self.label or self.name

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CategorySummary':
        return cls(id=data['id'], name=data['name'], label=data.get('label') or None)


@dataclass(frozen=True)
class CategoryBudgetSummary:
    """One budget bar: what was budgeted for a category in a month and what was paid."""
    entry_id: str
    category: CategorySummary
    budgeted: int
    paid: int
    remaining: int
    status: BudgetStatus

    @property
    def ratio(self) -> float:
        """Paid share of the budget. Without a budget any payment counts as full."""
        if self.budgeted <= 0:
            return 1.0 if self.paid > 0 else 0.0
        return self.paid / self.budgeted

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CategoryBudgetSummary':
        return cls(
            entry_id=data['entry_id'],
            category=CategorySummary.from_dict(data['category']),
            budgeted=int(data['budgeted']),
            paid=int(data['paid']),
            remaining=int(data['remaining']),
            status=BudgetStatus(data['status']),
        )


@dataclass(frozen=True)
class MonthSummary:
    month: str
    total_budgeted: int
    total_paid: int
    remaining: int
    categories: List[CategoryBudgetSummary] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MonthSummary':
        return cls(
            month=data['month'],
            total_budgeted=int(data['total_budgeted']),
            total_paid=int(data['total_paid']),
            remaining=int(data['remaining']),
            categories=[CategoryBudgetSummary.from_dict(d) for d in data.get('categories', [])],
        )

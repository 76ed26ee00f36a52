"""
Grouping of a user's transactions into monthly and per-category buckets.

All functions here are pure: they take transaction records (dicts as read from
DynamoDB, with ``date``, ``amount``, ``type`` and ``category`` keys) and return
freshly computed buckets. Nothing is cached or persisted.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

Transaction = Dict[str, Any]

INCOME = "income"
EXPENSE = "expense"


@dataclass
class MonthlyBucket:
    year: int
    month: int
    income: float = 0.0
    expenses: float = 0.0
    transaction_count: int = 0

    @property
    def key(self) -> Tuple[int, int]:
        return (self.year, self.month)

    @property
    def savings(self) -> float:
        return round(self.income - self.expenses, 2)

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": f"{self.label}-01",
            "income": self.income,
            "expenses": self.expenses,
            "savings": self.savings,
            "transactionCount": self.transaction_count,
        }


@dataclass
class CategoryBucket:
    category: str
    total: float
    count: int
    percentage: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "total": self.total,
            "count": self.count,
            "percentage": self.percentage,
        }


@dataclass
class FinancialSummary:
    total_income: float
    total_expenses: float
    transaction_count: int

    @property
    def net_savings(self) -> float:
        return round(self.total_income - self.total_expenses, 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalIncome": self.total_income,
            "totalExpenses": self.total_expenses,
            "netSavings": self.net_savings,
            "transactionCount": self.transaction_count,
        }


def parse_date(value: Any) -> datetime:
    """Return an aware UTC datetime for a stored ISO string or a datetime."""
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _amount(tx: Transaction) -> float:
    return float(tx.get("amount", 0))


def total_amount(transactions: Iterable[Transaction], kind: Optional[str] = None) -> float:
    return round(sum(_amount(tx) for tx in transactions if not kind or tx.get("type") == kind), 2)


def summarize(transactions: Sequence[Transaction]) -> FinancialSummary:
    return FinancialSummary(
        total_income=total_amount(transactions, INCOME),
        total_expenses=total_amount(transactions, EXPENSE),
        transaction_count=len(transactions),
    )


def monthly_buckets(
    transactions: Iterable[Transaction],
    kind: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[MonthlyBucket]:
    """
    Group transactions by calendar month (UTC), ascending by (year, month).

    Only months with at least one matching transaction are returned; use
    ``fill_gaps`` to add empty months. When ``limit`` is given only the most
    recent ``limit`` months are kept.
    """
    income: Dict[Tuple[int, int], float] = defaultdict(float)
    expenses: Dict[Tuple[int, int], float] = defaultdict(float)
    counts: Dict[Tuple[int, int], int] = defaultdict(int)

    for tx in transactions:
        tx_kind = tx.get("type")
        if kind and tx_kind != kind:
            continue
        when = parse_date(tx["date"])
        key = (when.year, when.month)
        counts[key] += 1
        if tx_kind == INCOME:
            income[key] += _amount(tx)
        elif tx_kind == EXPENSE:
            expenses[key] += _amount(tx)

    buckets = [
        MonthlyBucket(
            year=year,
            month=month,
            income=round(income[(year, month)], 2),
            expenses=round(expenses[(year, month)], 2),
            transaction_count=counts[(year, month)],
        )
        for year, month in sorted(counts)
    ]
    # Callers already bound the date window; limit only guards against a wider one
    if limit is not None:
        buckets = buckets[-limit:] if limit > 0 else []
    return buckets


def _next_month(year: int, month: int) -> Tuple[int, int]:
    return (year + 1, 1) if month == 12 else (year, month + 1)


def fill_gaps(buckets: Sequence[MonthlyBucket], start: datetime, end: datetime) -> List[MonthlyBucket]:
    """Return one bucket per calendar month in [start, end], zero-valued where no data exists."""
    start, end = parse_date(start), parse_date(end)
    by_key = {bucket.key: bucket for bucket in buckets}

    filled = []
    key = (start.year, start.month)
    last = (end.year, end.month)
    while key <= last:
        filled.append(by_key.get(key) or MonthlyBucket(year=key[0], month=key[1]))
        key = _next_month(*key)
    return filled


def category_buckets(transactions: Iterable[Transaction], kind: str = EXPENSE) -> List[CategoryBucket]:
    """
    Per-category totals for one kind, descending by total.

    ``percentage`` is each category's share of the sum over all categories,
    or 0 for every category when that sum is 0.
    """
    totals: Dict[str, float] = defaultdict(float)
    counts: Dict[str, int] = defaultdict(int)
    for tx in transactions:
        if tx.get("type") != kind:
            continue
        category = tx.get("category") or "Uncategorized"
        totals[category] += _amount(tx)
        counts[category] += 1

    grand_total = sum(totals.values())
    buckets = [
        CategoryBucket(
            category=category,
            total=round(total, 2),
            count=counts[category],
            percentage=round(total / grand_total * 100, 2) if grand_total > 0 else 0.0,
        )
        for category, total in totals.items()
    ]
    buckets.sort(key=lambda bucket: (-bucket.total, bucket.category))
    return buckets


def expense_series(buckets: Sequence[MonthlyBucket]) -> List[float]:
    return [bucket.expenses for bucket in buckets]


def savings_series(buckets: Sequence[MonthlyBucket]) -> List[float]:
    return [bucket.savings for bucket in buckets]

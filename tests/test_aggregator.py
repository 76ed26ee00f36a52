from datetime import datetime, timezone

import pytest

from app.utils import aggregator

sample_transactions = [
    {"date": "2025-01-05T10:00:00.000000+00:00", "amount": 2500.0, "type": "income", "category": "Salary"},
    {"date": "2025-01-10T10:00:00.000000+00:00", "amount": 120.5, "type": "expense", "category": "Food"},
    {"date": "2025-01-20T10:00:00.000000+00:00", "amount": 80.25, "type": "expense", "category": "Transport"},
    {"date": "2025-03-02T10:00:00.000000+00:00", "amount": 60.0, "type": "expense", "category": "Food"},
    {"date": "2025-03-15T10:00:00.000000+00:00", "amount": 300.0, "type": "income", "category": "Freelance"},
    {"date": "2025-03-28T10:00:00.000000+00:00", "amount": 900.0, "type": "expense", "category": "Rent"},
]


def test_summarize_totals():
    summary = aggregator.summarize(sample_transactions)
    assert summary.total_income == 2800.0
    assert summary.total_expenses == 1160.75
    assert summary.net_savings == 1639.25
    assert summary.transaction_count == 6
    assert summary.to_dict()["netSavings"] == 1639.25


def test_summarize_empty():
    summary = aggregator.summarize([])
    assert summary.to_dict() == {"totalIncome": 0, "totalExpenses": 0, "netSavings": 0, "transactionCount": 0}


def test_monthly_buckets_omit_empty_months_and_sort_ascending():
    buckets = aggregator.monthly_buckets(reversed(sample_transactions))
    assert [bucket.key for bucket in buckets] == [(2025, 1), (2025, 3)]

    january, march = buckets
    assert january.income == 2500.0
    assert january.expenses == 200.75
    assert january.savings == 2299.25
    assert january.transaction_count == 3
    assert march.savings == 300.0 - 960.0


def test_monthly_bucket_serialization():
    january = aggregator.monthly_buckets(sample_transactions)[0]
    assert january.label == "2025-01"
    assert january.to_dict() == {
        "date": "2025-01-01",
        "income": 2500.0,
        "expenses": 200.75,
        "savings": 2299.25,
        "transactionCount": 3,
    }


def test_monthly_buckets_kind_and_limit():
    buckets = aggregator.monthly_buckets(sample_transactions, kind="expense", limit=1)
    assert len(buckets) == 1
    assert buckets[0].key == (2025, 3)
    assert buckets[0].income == 0
    assert buckets[0].transaction_count == 2


def test_monthly_buckets_group_by_utc_month():
    transactions = [
        {"date": "2025-01-31T23:30:00-02:00", "amount": 10.0, "type": "expense", "category": "Food"},
    ]
    # 2025-02-01T01:30Z
    assert aggregator.monthly_buckets(transactions)[0].key == (2025, 2)


def test_fill_gaps_adds_zero_months():
    buckets = aggregator.monthly_buckets(sample_transactions)
    filled = aggregator.fill_gaps(
        buckets,
        datetime(2024, 12, 15, tzinfo=timezone.utc),
        datetime(2025, 3, 31, tzinfo=timezone.utc),
    )
    assert [bucket.label for bucket in filled] == ["2024-12", "2025-01", "2025-02", "2025-03"]
    assert filled[0].transaction_count == 0
    assert filled[2].savings == 0
    assert filled[1] is buckets[0]


def test_category_buckets_sorted_with_percentages():
    categories = aggregator.category_buckets(sample_transactions, kind="expense")
    assert [bucket.category for bucket in categories] == ["Rent", "Food", "Transport"]
    assert categories[1].total == 180.5
    assert categories[1].count == 2
    assert sum(bucket.percentage for bucket in categories) == pytest.approx(100, abs=0.05)


def test_category_totals_match_overall_total():
    for kind in ("income", "expense"):
        categories = aggregator.category_buckets(sample_transactions, kind=kind)
        assert sum(bucket.total for bucket in categories) == pytest.approx(
            aggregator.total_amount(sample_transactions, kind)
        )


def test_category_buckets_empty():
    assert aggregator.category_buckets([], kind="expense") == []


def test_category_percentage_zero_when_total_is_zero():
    transactions = [{"date": "2025-01-01T00:00:00+00:00", "amount": 0, "type": "expense", "category": "Misc"}]
    categories = aggregator.category_buckets(transactions)
    assert categories[0].percentage == 0


def test_series_helpers():
    buckets = aggregator.monthly_buckets(sample_transactions)
    assert aggregator.expense_series(buckets) == [200.75, 960.0]
    assert aggregator.savings_series(buckets) == [2299.25, -660.0]

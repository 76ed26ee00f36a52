import math
from typing import Any, Dict, List, Optional, Sequence

from app.utils.aggregator import CategoryBucket, MonthlyBucket

TREND_THRESHOLD_PERCENT = 10.0
FREQUENT_TRANSACTION_COUNT = 5
BUDGET_SAVING_FACTOR = 0.9


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def top_category_insight(categories: Sequence[CategoryBucket]) -> Dict[str, Any]:
    top = categories[0]
    total_spending = sum(bucket.total for bucket in categories)
    percentage = round(top.total / total_spending * 100, 1) if total_spending > 0 else 0.0
    return {
        "type": "top_category",
        "title": "Highest Spending Category",
        "message": f"{top.category} accounts for {percentage:.1f}% of your total spending",
        "value": top.total,
        "percentage": percentage,
    }


def trend_insight(months: Sequence[MonthlyBucket]) -> Optional[Dict[str, Any]]:
    """Month-over-month change of the last two months, when it moves more than 10%."""
    previous, current = months[-2].expenses, months[-1].expenses
    if previous == 0:
        return None
    change = round((current - previous) / previous * 100, 1)
    if abs(change) <= TREND_THRESHOLD_PERCENT:
        return None
    return {
        "type": "trend",
        "title": "Spending Trend",
        "message": (
            f"Your spending has {'increased' if change > 0 else 'decreased'} by "
            f"{abs(change):.1f}% compared to last month"
        ),
        "value": change,
        "direction": "up" if change > 0 else "down",
    }


def frequency_insight(categories: Sequence[CategoryBucket]) -> Optional[Dict[str, Any]]:
    frequent = [bucket for bucket in categories if bucket.count > FREQUENT_TRANSACTION_COUNT]
    if not frequent:
        return None
    top = frequent[0]
    return {
        "type": "frequency",
        "title": "Frequent Spending",
        "message": f"You make frequent purchases in {top.category} ({top.count} transactions)",
        "value": top.count,
        "category": top.category,
    }


def recommendation_insight(average_monthly: float) -> Optional[Dict[str, Any]]:
    if average_monthly <= 0:
        return None
    budget = _round_half_up(average_monthly * BUDGET_SAVING_FACTOR)
    return {
        "type": "recommendation",
        "title": "Budget Recommendation",
        "message": f"Consider setting a monthly budget of ${budget} to save 10%",
        "value": budget,
        "currentAverage": _round_half_up(average_monthly),
    }


def generate_insights(
    categories: Sequence[CategoryBucket],
    months: Sequence[MonthlyBucket],
    months_analyzed: int,
) -> Dict[str, Any]:
    """
    Build textual spending insights from expense category buckets (descending
    by total) and monthly expense buckets (ascending by month).
    """
    total_spending = round(sum(bucket.total for bucket in categories), 2)
    average_monthly = sum(bucket.expenses for bucket in months) / len(months) if months else 0.0

    insights: List[Dict[str, Any]] = []
    if categories:
        insights.append(top_category_insight(categories))
    if len(months) >= 2:
        trend = trend_insight(months)
        if trend:
            insights.append(trend)
    frequency = frequency_insight(categories)
    if frequency:
        insights.append(frequency)
    recommendation = recommendation_insight(average_monthly)
    if recommendation:
        insights.append(recommendation)

    return {
        "insights": insights,
        "summary": {
            "totalCategories": len(categories),
            "totalSpending": total_spending,
            "averageMonthlySpending": round(average_monthly, 2),
            "analysisPeriod": f"{months_analyzed} months",
        },
    }

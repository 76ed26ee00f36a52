"""
ML Router
Next-month expense prediction (linear regression over monthly expenses) and
spending insights.
"""
import logging

from fastapi import APIRouter, Depends, Query

from app.db import dynamo
from app.routers.auth import get_current_user_id
from app.utils import aggregator
from app.utils.forecaster import forecast_next_month
from app.utils.insights import generate_insights
from app.utils.periods import analysis_window, iso_bound

router = APIRouter()
logger = logging.getLogger(__name__)

MAX_PREDICTION_MONTHS = 12
MAX_INSIGHT_MONTHS = 6


@router.get("/predict-expenses")
def predict_expenses(months: int = Query(6, ge=1), user_id: str = Depends(get_current_user_id)):
    """
    Predict next month's total expenses. Responds 400 when fewer than two
    months in the window have expenses.
    """
    months_to_analyze = min(months, MAX_PREDICTION_MONTHS)
    start, end = analysis_window(months_to_analyze)

    expenses = dynamo.query_transactions(
        user_id, start=iso_bound(start), end=iso_bound(end), kind=aggregator.EXPENSE
    )
    buckets = aggregator.monthly_buckets(expenses, kind=aggregator.EXPENSE, limit=months_to_analyze + 1)
    logger.info(f"Expense prediction for user {user_id}: {len(buckets)} monthly data points")

    forecast = forecast_next_month(aggregator.expense_series(buckets))

    return {
        "success": True,
        "data": {
            **forecast.to_dict(),
            "analysis": {
                "monthsAnalyzed": len(buckets),
                "rSquared": round(forecast.r_squared, 4),
                "dataPoints": [
                    {
                        "month": bucket.label,
                        "expenses": bucket.expenses,
                        "transactions": bucket.transaction_count,
                    }
                    for bucket in buckets
                ],
            },
        },
    }


@router.get("/spending-insights")
def spending_insights(months: int = Query(3, ge=1), user_id: str = Depends(get_current_user_id)):
    months_to_analyze = min(months, MAX_INSIGHT_MONTHS)
    start, end = analysis_window(months_to_analyze)

    expenses = dynamo.query_transactions(
        user_id, start=iso_bound(start), end=iso_bound(end), kind=aggregator.EXPENSE
    )
    categories = aggregator.category_buckets(expenses, kind=aggregator.EXPENSE)
    monthly = aggregator.monthly_buckets(expenses, kind=aggregator.EXPENSE)
    logger.info(f"Spending insights for user {user_id}: {len(categories)} categories, {len(monthly)} months")

    return {"success": True, "data": generate_insights(categories, monthly, months_to_analyze)}

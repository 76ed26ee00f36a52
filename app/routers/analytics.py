"""
Analytics Router
Financial summary, category breakdown, savings projection and monthly trends.
Every response is recomputed from the caller's transactions.
"""
import logging
from statistics import fmean
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from app.db import dynamo
from app.routers.auth import get_current_user_id
from app.utils import aggregator
from app.utils.periods import analysis_period, analysis_window, iso_bound, parse_date_param

router = APIRouter()
logger = logging.getLogger(__name__)

MAX_PROJECTION_MONTHS = 12
MAX_TREND_MONTHS = 24
PROJECTION_RECENT_MONTHS = 3


@router.get("/summary")
def get_financial_summary(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    user_id: str = Depends(get_current_user_id),
):
    start = parse_date_param(start_date, "startDate")
    end = parse_date_param(end_date, "endDate", end_of_day=True)

    transactions = dynamo.query_transactions(user_id, start=iso_bound(start), end=iso_bound(end))
    logger.info(f"Summary for user {user_id}: {len(transactions)} transactions")

    summary = aggregator.summarize(transactions)
    return {
        "success": True,
        "data": {
            **summary.to_dict(),
            "period": {"startDate": start_date, "endDate": end_date},
        },
    }


@router.get("/spending-by-category")
def get_spending_by_category(
    kind: Literal["income", "expense"] = Query("expense", alias="type"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    user_id: str = Depends(get_current_user_id),
):
    start = parse_date_param(start_date, "startDate")
    end = parse_date_param(end_date, "endDate", end_of_day=True)

    transactions = dynamo.query_transactions(user_id, start=iso_bound(start), end=iso_bound(end), kind=kind)
    categories = aggregator.category_buckets(transactions, kind=kind)
    logger.info(f"Category breakdown for user {user_id}: {len(categories)} {kind} categories")

    return {
        "success": True,
        "data": {
            "categories": [bucket.to_dict() for bucket in categories],
            "totalAmount": aggregator.total_amount(transactions, kind),
            "type": kind,
        },
    }


@router.get("/savings-projection")
def get_savings_projection(
    months: int = Query(6, ge=1),
    fill_gaps: bool = Query(False, alias="fillGaps"),
    user_id: str = Depends(get_current_user_id),
):
    """
    Historical monthly savings plus a projection for next month: the mean of
    the last three months' savings, or null with fewer than two months.
    """
    months_to_analyze = min(months, MAX_PROJECTION_MONTHS)
    start, end = analysis_window(months_to_analyze)

    transactions = dynamo.query_transactions(user_id, start=iso_bound(start), end=iso_bound(end))
    # A window of N months touches at most N + 1 calendar months
    buckets = aggregator.monthly_buckets(transactions, limit=months_to_analyze + 1)
    if fill_gaps:
        buckets = aggregator.fill_gaps(buckets, start, end)

    projection = None
    savings = aggregator.savings_series(buckets)
    if len(savings) >= 2:
        projection = round(fmean(savings[-PROJECTION_RECENT_MONTHS:]), 2)

    return {
        "success": True,
        "data": {
            "historical": [
                {key: value for key, value in bucket.to_dict().items() if key != "transactionCount"}
                for bucket in buckets
            ],
            "projection": projection,
            "analysisPeriod": analysis_period(start, end, months_to_analyze),
        },
    }


@router.get("/monthly-trends")
def get_monthly_trends(
    months: int = Query(12, ge=1),
    fill_gaps: bool = Query(False, alias="fillGaps"),
    user_id: str = Depends(get_current_user_id),
):
    months_to_analyze = min(months, MAX_TREND_MONTHS)
    start, end = analysis_window(months_to_analyze)

    transactions = dynamo.query_transactions(user_id, start=iso_bound(start), end=iso_bound(end))
    # A window of N months touches at most N + 1 calendar months
    buckets = aggregator.monthly_buckets(transactions, limit=months_to_analyze + 1)
    if fill_gaps:
        buckets = aggregator.fill_gaps(buckets, start, end)

    return {
        "success": True,
        "data": {
            "trends": [bucket.to_dict() for bucket in buckets],
            "analysisPeriod": analysis_period(start, end, months_to_analyze),
        },
    }

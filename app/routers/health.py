"""
Health Check Router
Liveness endpoint and DynamoDB connectivity report
"""
from fastapi import APIRouter
from datetime import datetime, timezone
import logging

from app.core.config import settings
from app.db import dynamo

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check():
    """
    Health check endpoint.
    Returns API status.
    """
    return {
        "success": True,
        "message": f"{settings.PROJECT_NAME} API is running",
        "service": settings.PROJECT_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def _table_status(table, name: str) -> dict:
    try:
        table.scan(Limit=1)
        return {"name": name, "status": "accessible", "region": settings.DYNAMO_REGION}
    except Exception as e:
        logger.error(f"DynamoDB table check failed for {name}: {str(e)}")
        return {"name": name, "status": "error", "error": str(e)}


@router.get("/status")
def dynamodb_status():
    """
    Check that the Users and Transactions tables are reachable.
    """
    tables = {
        "users": _table_status(dynamo.users_table, settings.DYNAMO_USERS_TABLE),
        "transactions": _table_status(dynamo.transactions_table, settings.DYNAMO_TRANSACTIONS_TABLE),
    }
    connected = all(table["status"] == "accessible" for table in tables.values())

    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {"dynamodb": {"connected": connected, "tables": tables}},
        "overall_status": "healthy" if connected else "degraded",
    }

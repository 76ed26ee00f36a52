import logging
import math
from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from app.core.config import settings
from app.core.errors import BadRequestError, NotFoundError
from app.db import dynamo
from app.models.transaction import TransactionCreate, TransactionInDB, TransactionPublic
from app.routers.auth import get_current_user_id
from app.utils.csv_import import CsvMapping, import_transactions
from app.utils.periods import iso_bound, parse_date_param

router = APIRouter()
logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "date": "date",
    "amount": "amount",
    "description": "description",
    "category": "category",
    "createdAt": "created_at",
}


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_transaction(transaction: TransactionCreate, user_id: str = Depends(get_current_user_id)):
    transaction_db = TransactionInDB.from_create(user_id, transaction)
    success = dynamo.put_transaction(transaction_db.to_item())
    if not success:
        raise HTTPException(status_code=500, detail="Failed to save transaction")

    logger.info(f"Created transaction {transaction_db.transaction_id} for user {user_id}")
    return {
        "success": True,
        "message": "Transaction created successfully",
        "data": {"transaction": TransactionPublic.from_item(transaction_db.to_item()).to_json()},
    }


@router.get("/")
def list_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    kind: Optional[Literal["income", "expense"]] = Query(None, alias="type"),
    category: Optional[str] = Query(None),
    sort_by: Literal["date", "amount", "description", "category", "createdAt"] = Query("date", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    user_id: str = Depends(get_current_user_id),
):
    """
    List the caller's transactions with optional filters, sorting and pagination.
    """
    start = parse_date_param(start_date, "startDate")
    end = parse_date_param(end_date, "endDate", end_of_day=True)

    items = dynamo.query_transactions(
        user_id, start=iso_bound(start), end=iso_bound(end), kind=kind, category=category
    )

    field = SORT_FIELDS[sort_by]
    items.sort(key=lambda item: item.get(field) or "", reverse=sort_order == "desc")

    total = len(items)
    offset = (page - 1) * limit
    page_items = items[offset:offset + limit]

    return {
        "success": True,
        "data": {
            "transactions": [TransactionPublic.from_item(item).to_json() for item in page_items],
            "pagination": {
                "currentPage": page,
                "totalPages": math.ceil(total / limit),
                "totalItems": total,
                "itemsPerPage": limit,
            },
        },
    }


@router.get("/categories")
def list_categories(user_id: str = Depends(get_current_user_id)):
    categories = dynamo.get_user_categories(user_id)
    return {"success": True, "data": {"categories": categories}}


@router.delete("/{transaction_id}")
def delete_transaction(transaction_id: str, user_id: str = Depends(get_current_user_id)):
    deleted = dynamo.delete_transaction(user_id, transaction_id)
    if not deleted:
        raise NotFoundError("Transaction not found")

    logger.info(f"Deleted transaction {transaction_id} for user {user_id}")
    return {"success": True, "message": "Transaction deleted successfully"}


@router.post("/upload-csv")
async def upload_csv(
    csv_file: Optional[UploadFile] = File(None, alias="csvFile"),
    date_column: Optional[str] = Form(None, alias="dateColumn"),
    description_column: Optional[str] = Form(None, alias="descriptionColumn"),
    amount_column: Optional[str] = Form(None, alias="amountColumn"),
    type_column: Optional[str] = Form(None, alias="typeColumn"),
    category_column: Optional[str] = Form(None, alias="categoryColumn"),
    default_type: Optional[str] = Form(None, alias="defaultType"),
    default_category: Optional[str] = Form(None, alias="defaultCategory"),
    user_id: str = Depends(get_current_user_id),
):
    """
    Import transactions from a CSV file using the given column mapping.
    """
    if csv_file is None:
        raise BadRequestError("No CSV file uploaded")

    filename = csv_file.filename or ""
    if csv_file.content_type != "text/csv" and not filename.lower().endswith(".csv"):
        raise BadRequestError("Only CSV files are allowed")

    mapping_fields = {
        "dateColumn": date_column,
        "descriptionColumn": description_column,
        "amountColumn": amount_column,
        "typeColumn": type_column or None,
        "categoryColumn": category_column or None,
        "defaultType": default_type or None,
        "defaultCategory": default_category or None,
    }
    try:
        mapping = CsvMapping(**{key: value for key, value in mapping_fields.items() if value is not None})
    except ValidationError as e:
        raise RequestValidationError(e.errors())

    content = await csv_file.read(settings.CSV_MAX_UPLOAD_BYTES + 1)
    if len(content) > settings.CSV_MAX_UPLOAD_BYTES:
        raise BadRequestError("CSV file exceeds the maximum upload size")

    result = import_transactions(content, mapping, user_id)

    if result.transactions:
        success = dynamo.put_transactions(txn.to_item() for txn in result.transactions)
        if not success:
            raise HTTPException(status_code=500, detail="Failed to save imported transactions")

    logger.info(f"Imported {len(result.transactions)} transactions from {filename} for user {user_id}")
    return {
        "success": True,
        "message": f"Successfully imported {len(result.transactions)} transactions",
        "data": result.to_dict(),
    }

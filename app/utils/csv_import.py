"""
CSV bank-statement import.

Rows are mapped to transactions through a caller-supplied column mapping.
Invalid rows are skipped and reported; the caller stores the valid ones.
"""
import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from app.core.errors import BadRequestError
from app.models.transaction import DEFAULT_CATEGORY, TransactionCreate, TransactionInDB, TransactionKind

logger = logging.getLogger(__name__)

MAX_REPORTED_ERRORS = 10

# Accepted date layouts besides ISO 8601
DATE_FORMATS = ("%m/%d/%Y", "%Y/%m/%d", "%d-%b-%Y", "%d %b %Y", "%b %d, %Y", "%B %d, %Y")


class CsvMapping(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    date_column: str = Field(min_length=1)
    description_column: str = Field(min_length=1)
    amount_column: str = Field(min_length=1)
    type_column: Optional[str] = None
    category_column: Optional[str] = None
    default_type: TransactionKind = TransactionKind.EXPENSE
    default_category: str = Field(default=DEFAULT_CATEGORY, min_length=1, max_length=50)

    def required_columns(self) -> List[str]:
        return [self.date_column, self.description_column, self.amount_column]


@dataclass
class ImportResult:
    transactions: List[TransactionInDB] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "imported": len(self.transactions),
            "errors": self.errors[:MAX_REPORTED_ERRORS],
            "totalErrors": len(self.errors),
        }


def parse_csv_date(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValueError(f"unrecognised date '{value}'")


def _first_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error.get("loc", ()))
    message = error.get("msg", "invalid value").removeprefix("Value error, ")
    return f"{location}: {message}" if location else message


def _read_rows(text: str) -> List[Dict[str, str]]:
    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise BadRequestError("CSV file is empty or has no valid data")
    reader.fieldnames = [name.strip() for name in reader.fieldnames]

    rows = []
    try:
        for row in reader:
            cleaned = {key: (value or "").strip() for key, value in row.items() if key is not None}
            if not any(cleaned.values()):
                continue
            rows.append(cleaned)
    except csv.Error as e:
        raise BadRequestError(f"CSV parsing error on line {reader.line_num}: {e}")
    return rows


def import_transactions(content: bytes, mapping: CsvMapping, user_id: str) -> ImportResult:
    """
    Parse an uploaded CSV into transactions for ``user_id``.

    Row numbers in error messages count the header as row 1.
    """
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise BadRequestError("CSV file must be UTF-8 encoded")

    rows = _read_rows(text)
    if not rows:
        raise BadRequestError("CSV file is empty or has no valid data")

    missing = [column for column in mapping.required_columns() if column not in rows[0]]
    if missing:
        raise BadRequestError(f"Column(s) not found in CSV header: {', '.join(missing)}")

    result = ImportResult()
    for index, row in enumerate(rows):
        row_number = index + 2
        description = row.get(mapping.description_column, "")
        try:
            amount = float(row.get(mapping.amount_column, ""))
        except ValueError:
            amount = None
        if not description or amount is None or amount <= 0:
            result.errors.append(f"Row {row_number}: Invalid description or amount")
            continue

        try:
            date = parse_csv_date(row.get(mapping.date_column, ""))
        except ValueError:
            result.errors.append(f"Row {row_number}: Invalid date format")
            continue

        kind = mapping.default_type
        if mapping.type_column and row.get(mapping.type_column):
            type_value = row[mapping.type_column].lower()
            if type_value in (TransactionKind.INCOME.value, TransactionKind.EXPENSE.value):
                kind = TransactionKind(type_value)

        category = mapping.default_category
        if mapping.category_column and row.get(mapping.category_column):
            category = row[mapping.category_column]

        try:
            data = TransactionCreate(
                description=description,
                amount=amount,
                type=kind,
                category=category,
                date=date,
            )
        except ValidationError as e:
            result.errors.append(f"Row {row_number}: {_first_error(e)}")
            continue

        result.transactions.append(TransactionInDB.from_create(user_id, data))

    logger.info(
        f"Parsed CSV for user {user_id}: {len(result.transactions)} valid rows, {len(result.errors)} errors"
    )
    return result

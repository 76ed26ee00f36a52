from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_CATEGORY = "Uncategorized"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Fixed-width UTC ISO string, so stored dates sort lexicographically."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


class TransactionKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class TransactionCreate(BaseModel):
    description: str = Field(min_length=1, max_length=200)
    amount: float = Field(gt=0, allow_inf_nan=False)
    type: TransactionKind
    category: str = Field(default=DEFAULT_CATEGORY, min_length=1, max_length=50)
    date: Optional[datetime] = None

    @field_validator("description", "category", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("amount")
    @classmethod
    def at_most_two_decimals(cls, value: float) -> float:
        if Decimal(str(value)).as_tuple().exponent < -2:
            raise ValueError("Amount must be a valid number with up to 2 decimal places")
        return value

    @field_validator("date")
    @classmethod
    def not_in_future(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return value
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        if value > utcnow():
            raise ValueError("Transaction date cannot be in the future")
        return value


class TransactionInDB(BaseModel):
    user_id: str
    transaction_id: str = ""
    description: str
    amount: float
    type: TransactionKind
    category: str = DEFAULT_CATEGORY
    date: str
    created_at: str = Field(default_factory=lambda: to_iso(utcnow()))
    updated_at: str = Field(default_factory=lambda: to_iso(utcnow()))

    @classmethod
    def from_create(cls, user_id: str, data: TransactionCreate) -> "TransactionInDB":
        date = to_iso(data.date or utcnow())
        return cls(
            user_id=user_id,
            # Sort key leads with the date so range queries are key conditions
            transaction_id=f"{date}#{uuid4().hex[:12]}",
            description=data.description,
            amount=data.amount,
            type=data.type,
            category=data.category,
            date=date,
        )

    def to_item(self) -> dict:
        return self.model_dump(mode="json")


class TransactionPublic(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    description: str
    amount: float
    type: TransactionKind
    category: str
    date: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_item(cls, item: dict) -> "TransactionPublic":
        return cls(
            id=item["transaction_id"],
            description=item["description"],
            amount=item["amount"],
            type=item["type"],
            category=item.get("category", DEFAULT_CATEGORY),
            date=item["date"],
            created_at=item.get("created_at"),
            updated_at=item.get("updated_at"),
        )

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

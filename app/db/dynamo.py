import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from app.core.config import settings
from app.core.errors import DatabaseError

logger = logging.getLogger(__name__)

# Upper bound for sort keys that start with an ISO date
_KEY_MAX_SUFFIX = "\uffff"

# Initialize DynamoDB resource
dynamodb = boto3.resource(
    "dynamodb",
    region_name=settings.DYNAMO_REGION,
    endpoint_url=settings.DYNAMO_ENDPOINT_URL,
)

# Get table references
users_table = dynamodb.Table(settings.DYNAMO_USERS_TABLE)
transactions_table = dynamodb.Table(settings.DYNAMO_TRANSACTIONS_TABLE)


def _error_message(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Message", str(e))


def get_user_by_email(email: str):
    """Query the Users table by email (uses the email-index GSI)."""
    try:
        response = users_table.query(
            IndexName="email-index",
            KeyConditionExpression=Key("email").eq(email),
        )
    except ClientError as e:
        logger.error(f"get_user_by_email failed: {_error_message(e)}")
        raise DatabaseError()
    return _from_dynamo(response["Items"][0]) if response["Items"] else None


def get_user_by_id(user_id: str):
    """Get user by user_id from the Users table."""
    try:
        response = users_table.get_item(Key={"user_id": user_id})
    except ClientError as e:
        logger.error(f"get_user_by_id failed: {_error_message(e)}")
        raise DatabaseError()
    item = response.get("Item")
    return _from_dynamo(item) if item else None


def put_user(user_item: dict) -> bool:
    """Insert a new user into the Users table."""
    try:
        users_table.put_item(Item=_convert_for_dynamo(user_item))
        return True
    except ClientError as e:
        logger.error(f"put_user failed: {_error_message(e)}")
        return False


def put_transaction(transaction_item: dict) -> bool:
    """Insert a single transaction."""
    try:
        transactions_table.put_item(Item=_convert_for_dynamo(transaction_item))
        return True
    except ClientError as e:
        logger.error(f"put_transaction failed: {_error_message(e)}")
        return False


def put_transactions(transaction_items: Iterable[dict]) -> bool:
    """Insert many transactions at once (CSV import)."""
    try:
        with transactions_table.batch_writer() as batch:
            for item in transaction_items:
                batch.put_item(Item=_convert_for_dynamo(item))
        return True
    except ClientError as e:
        logger.error(f"put_transactions failed: {_error_message(e)}")
        return False


def query_transactions(
    user_id: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
    kind: Optional[str] = None,
    category: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Return all transactions of a user, optionally restricted to an inclusive
    ISO date range [start, end] and to a kind/category.

    The date range is pushed down to DynamoDB as a sort key condition because
    transaction ids start with the transaction date.
    """
    if start and end and start > end:
        # An empty range; DynamoDB rejects BETWEEN with reversed bounds
        return []

    key_condition = Key("user_id").eq(user_id)
    if start and end:
        key_condition &= Key("transaction_id").between(start, end + _KEY_MAX_SUFFIX)
    elif start:
        key_condition &= Key("transaction_id").gte(start)
    elif end:
        key_condition &= Key("transaction_id").lte(end + _KEY_MAX_SUFFIX)

    filter_expression = None
    if kind:
        filter_expression = Attr("type").eq(kind)
    if category:
        category_filter = Attr("category").eq(category)
        filter_expression = category_filter if filter_expression is None else filter_expression & category_filter

    query_kwargs: Dict[str, Any] = {"KeyConditionExpression": key_condition}
    if filter_expression is not None:
        query_kwargs["FilterExpression"] = filter_expression

    items: List[Dict[str, Any]] = []
    try:
        while True:
            response = transactions_table.query(**query_kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            query_kwargs["ExclusiveStartKey"] = last_key
    except ClientError as e:
        logger.error(f"query_transactions failed for user {user_id}: {_error_message(e)}")
        raise DatabaseError()

    return [_from_dynamo(item) for item in items]


def get_user_categories(user_id: str) -> List[str]:
    """Distinct categories used by a user, sorted alphabetically."""
    query_kwargs: Dict[str, Any] = {
        "KeyConditionExpression": Key("user_id").eq(user_id),
        "ProjectionExpression": "category",
    }
    categories = set()
    try:
        while True:
            response = transactions_table.query(**query_kwargs)
            categories.update(item["category"] for item in response.get("Items", []) if "category" in item)
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            query_kwargs["ExclusiveStartKey"] = last_key
    except ClientError as e:
        logger.error(f"get_user_categories failed for user {user_id}: {_error_message(e)}")
        raise DatabaseError()
    return sorted(categories)


def delete_transaction(user_id: str, transaction_id: str) -> bool:
    """
    Delete a transaction owned by user_id. Returns False when nothing was
    deleted (absent, or owned by somebody else).
    """
    try:
        response = transactions_table.delete_item(
            Key={"user_id": user_id, "transaction_id": transaction_id},
            ReturnValues="ALL_OLD",
        )
    except ClientError as e:
        logger.error(f"delete_transaction failed: {_error_message(e)}")
        raise DatabaseError()
    return "Attributes" in response


def create_tables() -> List[str]:
    """
    Create the users and transactions tables when they don't exist yet.
    Returns the names of the tables that were created.
    """
    existing = set(dynamodb.meta.client.list_tables().get("TableNames", []))
    created = []

    if settings.DYNAMO_USERS_TABLE not in existing:
        table = dynamodb.create_table(
            TableName=settings.DYNAMO_USERS_TABLE,
            KeySchema=[{"AttributeName": "user_id", "KeyType": "HASH"}],
            AttributeDefinitions=[
                {"AttributeName": "user_id", "AttributeType": "S"},
                {"AttributeName": "email", "AttributeType": "S"},
            ],
            GlobalSecondaryIndexes=[
                {
                    "IndexName": "email-index",
                    "KeySchema": [{"AttributeName": "email", "KeyType": "HASH"}],
                    "Projection": {"ProjectionType": "ALL"},
                }
            ],
            BillingMode="PAY_PER_REQUEST",
        )
        table.wait_until_exists()
        created.append(settings.DYNAMO_USERS_TABLE)

    if settings.DYNAMO_TRANSACTIONS_TABLE not in existing:
        table = dynamodb.create_table(
            TableName=settings.DYNAMO_TRANSACTIONS_TABLE,
            KeySchema=[
                {"AttributeName": "user_id", "KeyType": "HASH"},
                {"AttributeName": "transaction_id", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "user_id", "AttributeType": "S"},
                {"AttributeName": "transaction_id", "AttributeType": "S"},
            ],
            BillingMode="PAY_PER_REQUEST",
        )
        table.wait_until_exists()
        created.append(settings.DYNAMO_TRANSACTIONS_TABLE)

    return created


def _convert_for_dynamo(obj: Any):
    """
    Recursively convert floats to Decimal for DynamoDB compatibility.
    """
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: _convert_for_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_convert_for_dynamo(v) for v in obj]
    return obj


def _from_dynamo(obj: Any):
    """
    Recursively convert Decimal instances back to native Python numeric types.
    """
    if isinstance(obj, list):
        return [_from_dynamo(item) for item in obj]
    if isinstance(obj, dict):
        return {k: _from_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, Decimal):
        if obj % 1 == 0:
            return int(obj)
        return float(obj)
    return obj

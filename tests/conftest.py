from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from app.core.security import create_access_token
from app.db import dynamo
from app.main import app
from app.models.transaction import to_iso

USER_ID = "user-1"


class FakeDynamo:
    """In-memory stand-in for the app.db.dynamo table helpers."""

    def __init__(self):
        self.users = {}
        self.transactions = {}

    def add_user(self, user_id=USER_ID, email="jane@example.com", **extra):
        self.users[user_id] = {"user_id": user_id, "email": email, "first_name": "Jane", **extra}

    def add_transaction(self, when: datetime, amount: float, kind: str = "expense", category: str = "Food",
                        description: str = "Purchase", user_id: str = USER_ID):
        date = to_iso(when)
        transaction_id = f"{date}#{len(self.transactions):012x}"
        self.transactions[(user_id, transaction_id)] = {
            "user_id": user_id,
            "transaction_id": transaction_id,
            "description": description,
            "amount": amount,
            "type": kind,
            "category": category,
            "date": date,
            "created_at": date,
            "updated_at": date,
        }
        return transaction_id

    # dynamo module API

    def get_user_by_id(self, user_id):
        return self.users.get(user_id)

    def get_user_by_email(self, email):
        return next((user for user in self.users.values() if user["email"] == email), None)

    def put_user(self, item):
        self.users[item["user_id"]] = dict(item)
        return True

    def put_transaction(self, item):
        self.transactions[(item["user_id"], item["transaction_id"])] = dict(item)
        return True

    def put_transactions(self, items):
        for item in items:
            self.put_transaction(item)
        return True

    def query_transactions(self, user_id, start=None, end=None, kind=None, category=None):
        results = []
        for (owner, transaction_id), item in sorted(self.transactions.items()):
            if owner != user_id:
                continue
            if start and transaction_id < start:
                continue
            if end and transaction_id > end + "\uffff":
                continue
            if kind and item["type"] != kind:
                continue
            if category and item["category"] != category:
                continue
            results.append(dict(item))
        return results

    def get_user_categories(self, user_id):
        return sorted({item["category"] for (owner, _), item in self.transactions.items() if owner == user_id})

    def delete_transaction(self, user_id, transaction_id):
        return self.transactions.pop((user_id, transaction_id), None) is not None


@pytest.fixture
def fake_db(monkeypatch):
    fake = FakeDynamo()
    fake.add_user()
    for name in (
        "get_user_by_id",
        "get_user_by_email",
        "put_user",
        "put_transaction",
        "put_transactions",
        "query_transactions",
        "get_user_categories",
        "delete_transaction",
    ):
        monkeypatch.setattr(dynamo, name, getattr(fake, name))
    return fake


@pytest.fixture
def client(fake_db):
    return TestClient(app)


@pytest.fixture
def auth_headers():
    token = create_access_token(data={"sub": USER_ID})
    return {"Authorization": f"Bearer {token}"}

"""
Seed script for local development.
Creates the DynamoDB tables when missing, then a demo user with six months of
sample transactions.

Usage:
    python seed_data.py [email] [password]
"""
import logging
import random
import sys
from datetime import timedelta

from app.core.security import get_password_hash
from app.db import dynamo
from app.models.transaction import TransactionCreate, TransactionInDB, utcnow
from app.models.user import UserInDB
from app.utils.periods import months_ago

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger("seed")

MONTHS = 6

MONTHLY_INCOME = [
    ("Salary Payment", 2500.00, "Salary"),
]

MONTHLY_EXPENSES = [
    ("Grocery Shopping", 125.50, "Food & Dining"),
    ("Restaurant Dinner", 85.00, "Food & Dining"),
    ("Coffee Shop", 4.50, "Food & Dining"),
    ("Gas Station", 45.00, "Transportation"),
    ("Netflix Subscription", 15.99, "Entertainment"),
    ("Amazon Purchase", 67.50, "Shopping"),
    ("Utility Bill", 120.00, "Utilities"),
    ("Gym Membership", 50.00, "Health & Fitness"),
]


def build_transactions(user_id: str):
    now = utcnow()
    transactions = []
    for offset in range(MONTHS, -1, -1):
        month_start = months_ago(now, offset).replace(day=1, hour=12, minute=0, second=0, microsecond=0)
        entries = [(*entry, "income") for entry in MONTHLY_INCOME] + [(*entry, "expense") for entry in MONTHLY_EXPENSES]
        for day, (description, amount, category, kind) in enumerate(entries):
            when = month_start + timedelta(days=day * 3)
            if when > now:
                continue
            # Vary expenses a little from month to month
            if kind == "expense":
                amount = round(amount * random.uniform(0.8, 1.3), 2)
            data = TransactionCreate(description=description, amount=amount, type=kind, category=category, date=when)
            transactions.append(TransactionInDB.from_create(user_id, data))
    return transactions


def main(email: str = "demo@claritydash.local", password: str = "demo-password"):
    created = dynamo.create_tables()
    if created:
        logger.info(f"Created tables: {', '.join(created)}")

    user = dynamo.get_user_by_email(email)
    if user:
        user_id = user["user_id"]
        logger.info(f"Using existing user {email}")
    else:
        user_db = UserInDB(email=email, first_name="Demo", password_hash=get_password_hash(password))
        if not dynamo.put_user(user_db.model_dump()):
            logger.error("Could not create demo user")
            return 1
        user_id = user_db.user_id
        logger.info(f"Created user {email}")

    transactions = build_transactions(user_id)
    if not dynamo.put_transactions(txn.to_item() for txn in transactions):
        logger.error("Could not insert sample transactions")
        return 1

    logger.info(f"Inserted {len(transactions)} sample transactions for {email}")
    return 0


if __name__ == "__main__":
    sys.exit(main(*sys.argv[1:3]))

import asyncio
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from database.db_manager import DatabaseManager
from main import build_services
from models.account import BankAccount
from models.category import Category, Direction
from models.transaction import Transaction
from network.errors import NoConnectivityError, ServerError
from utils.date_helpers import in_range

SALARY = Category(1, "Salary", "💰", Direction.INCOME)
GROCERIES = Category(2, "Groceries", "🛒", Direction.OUTCOME)
RESTAURANTS = Category(3, "Restaurants", "🍽", Direction.OUTCOME)


def make_tx(
    tx_id: int = 1,
    amount: str = "100",
    category_id: int = GROCERIES.id,
    when: datetime = datetime(2025, 7, 14, 10, 0, tzinfo=timezone.utc),
    comment: str | None = None,
) -> Transaction:
    return Transaction(
        id=tx_id,
        account_id=1,
        category_id=category_id,
        amount=Decimal(amount),
        transaction_date=when,
        comment=comment,
        created_at=when,
        updated_at=when,
    )


def make_account(balance: str = "100", currency: str = "RUB") -> BankAccount:
    return BankAccount(id=1, name="Main", balance=Decimal(balance), currency=currency, user_id=7)


class FakeAPI:
    """In-process stand-in for FinanceAPI.

    Set `offline` to make every call fail with NoConnectivityError, put an
    exception under a method name in `errors` to make that method fail, or
    set `gate` to make calls wait on an asyncio.Event. With `gate_on` set,
    only that method waits.
    """

    def __init__(self):
        self.offline = False
        self.errors: dict[str, BaseException] = {}
        self.gate: asyncio.Event | None = None
        self.gate_on: str | None = None
        self.calls: list[tuple] = []
        self.accounts = [make_account()]
        self.categories = [SALARY, GROCERIES, RESTAURANTS]
        self.transactions: dict[int, Transaction] = {}
        self._next_id = 100

    async def _enter(self, name: str, *args):
        self.calls.append((name, *args))
        if self.gate is not None and self.gate_on in (None, name):
            await self.gate.wait()
        if self.offline:
            raise NoConnectivityError()
        if name in self.errors:
            raise self.errors[name]

    def called(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]

    async def fetch_accounts(self):
        await self._enter("fetch_accounts")
        return [replace(a) for a in self.accounts]

    async def update_account(self, account):
        await self._enter("update_account", account)
        self.accounts = [replace(account)]
        return replace(account)

    async def fetch_categories(self):
        await self._enter("fetch_categories")
        return list(self.categories)

    async def fetch_categories_by_direction(self, direction):
        await self._enter("fetch_categories_by_direction", direction)
        return [c for c in self.categories if c.direction is direction]

    async def fetch_transactions(self, account_id, start=None, end=None):
        await self._enter("fetch_transactions", account_id, start, end)
        return [
            replace(tx) for tx in self.transactions.values()
            if in_range(tx.transaction_date, start, end)
        ]

    async def create_transaction(self, tx):
        await self._enter("create_transaction", tx)
        self._next_id += 1
        created = replace(tx, id=self._next_id)
        self.transactions[created.id] = created
        return replace(created)

    async def update_transaction(self, tx):
        await self._enter("update_transaction", tx)
        if tx.id not in self.transactions:
            raise ServerError(404)
        self.transactions[tx.id] = replace(tx)
        return replace(tx)

    async def delete_transaction(self, tx_id):
        await self._enter("delete_transaction", tx_id)
        if self.transactions.pop(tx_id, None) is None:
            raise ServerError(404)


@pytest.fixture
def db():
    manager = DatabaseManager(":memory:")
    manager.initialize()
    yield manager
    manager.close()


@pytest.fixture
def api():
    return FakeAPI()


@pytest.fixture
def services(db, api):
    return build_services(db, api, timezone.utc)

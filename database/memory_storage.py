"""Process-local mirror backends. Nothing survives a restart; used in tests
and anywhere a throwaway mirror is enough."""
from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from models.account import BankAccount
from models.category import Category, Direction
from models.transaction import Transaction
from utils.date_helpers import in_range


class InMemoryTransactionStorage:
    def __init__(self, transactions: Sequence[Transaction] = ()):
        self._rows: dict[int, Transaction] = {tx.id: replace(tx) for tx in transactions}

    def get_all(self) -> list[Transaction]:
        return [replace(tx) for tx in self._rows.values()]

    def get_by_date_range(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> list[Transaction]:
        return [
            replace(tx) for tx in self._rows.values()
            if in_range(tx.transaction_date, start, end)
        ]

    def upsert(self, tx: Transaction) -> None:
        self._rows[tx.id] = replace(tx)

    def delete(self, tx_id: int) -> None:
        self._rows.pop(tx_id, None)


class InMemoryCategoriesStorage:
    def __init__(self, categories: Sequence[Category] = ()):
        self._rows: list[Category] = list(categories)

    def get_all(self) -> list[Category]:
        return list(self._rows)

    def get_by_direction(self, direction: Direction) -> list[Category]:
        return [c for c in self._rows if c.direction is direction]

    def replace_all(
        self, categories: Sequence[Category], direction: Optional[Direction] = None
    ) -> None:
        kept = [] if direction is None else [c for c in self._rows if c.direction is not direction]
        self._rows = kept + list(categories)


class InMemoryAccountStorage:
    def __init__(self, accounts: Sequence[BankAccount] = ()):
        self._rows: dict[int, BankAccount] = {a.id: replace(a) for a in accounts}

    def get_all(self) -> list[BankAccount]:
        return [replace(a) for _, a in sorted(self._rows.items())]

    def get_current(self) -> Optional[BankAccount]:
        accounts = self.get_all()
        return accounts[0] if accounts else None

    def upsert(self, account: BankAccount) -> None:
        self._rows[account.id] = replace(account)

    def delete(self, account_id: int) -> None:
        self._rows.pop(account_id, None)

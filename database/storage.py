"""Capability interfaces for the local mirror.

The reconciliation engine and the services only depend on these protocols,
so the medium (sqlite file, in-memory for tests) can be swapped freely.
"""
from datetime import datetime
from typing import Optional, Protocol, Sequence

from models.account import BankAccount
from models.category import Category, Direction
from models.transaction import Transaction


class TransactionsStorage(Protocol):
    def get_all(self) -> list[Transaction]: ...

    def get_by_date_range(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> list[Transaction]: ...

    def upsert(self, tx: Transaction) -> None: ...

    def delete(self, tx_id: int) -> None: ...


class CategoriesStorage(Protocol):
    def get_all(self) -> list[Category]: ...

    def get_by_direction(self, direction: Direction) -> list[Category]: ...

    def replace_all(
        self, categories: Sequence[Category], direction: Optional[Direction] = None
    ) -> None: ...


class AccountStorage(Protocol):
    def get_all(self) -> list[BankAccount]: ...

    def get_current(self) -> Optional[BankAccount]: ...

    def upsert(self, account: BankAccount) -> None: ...

    def delete(self, account_id: int) -> None: ...

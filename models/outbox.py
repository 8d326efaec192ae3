"""Pending mutations that have not been confirmed by the server yet."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Union
from uuid import UUID

from models.transaction import Transaction


class OutboxAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class TransactionOutboxEntry:
    id: UUID
    action: OutboxAction
    transaction: Transaction
    created_at: datetime


# ── Account changes ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ChangeCurrency:
    currency: str

    action = "change_currency"


@dataclass(frozen=True)
class ChangeBalance:
    delta: Decimal

    action = "change_balance"


@dataclass(frozen=True)
class ChangeTransactionImpact:
    delta: Decimal

    action = "change_transaction_impact"


AccountChange = Union[ChangeCurrency, ChangeBalance, ChangeTransactionImpact]

ACCOUNT_CHANGE_TYPES = {
    ChangeCurrency.action: ChangeCurrency,
    ChangeBalance.action: ChangeBalance,
    ChangeTransactionImpact.action: ChangeTransactionImpact,
}


@dataclass(frozen=True)
class AccountOutboxEntry:
    id: UUID
    change: AccountChange
    created_at: datetime

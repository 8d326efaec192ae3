"""Pydantic schemas for API request/response validation."""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from models.account import BankAccount
from models.category import Category, Direction
from models.transaction import Transaction
from utils.constants import FALLBACK_EMOJI
from utils.currency import decimal_to_wire
from utils.date_helpers import ensure_aware, format_iso8601


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    @field_validator("*", mode="after")
    @classmethod
    def aware_datetimes(cls, value):
        if isinstance(value, datetime):
            return ensure_aware(value)
        return value


# ── Responses ─────────────────────────────────────────────────────────────────

class AccountResponse(_ApiModel):
    """Account as returned by GET /accounts and PUT /accounts/{id}."""
    id: int
    user_id: Optional[int] = Field(None, alias="userId")
    name: str
    balance: Decimal
    currency: str
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    def to_model(self) -> BankAccount:
        return BankAccount(
            id=self.id,
            user_id=self.user_id,
            name=self.name,
            balance=self.balance,
            currency=self.currency,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class CategoryResponse(_ApiModel):
    id: int
    name: str
    emoji: str
    is_income: bool = Field(..., alias="isIncome")

    def to_model(self) -> Category:
        return Category(
            id=self.id,
            name=self.name,
            emoji=self.emoji or FALLBACK_EMOJI,
            direction=Direction.from_is_income(self.is_income),
        )


class AccountBrief(_ApiModel):
    id: int
    name: Optional[str] = None


class CategoryBrief(_ApiModel):
    id: int


class TransactionResponse(_ApiModel):
    """Flat form returned by POST /transactions."""
    id: int
    account_id: int = Field(..., alias="accountId")
    category_id: int = Field(..., alias="categoryId")
    amount: Decimal
    transaction_date: datetime = Field(..., alias="transactionDate")
    comment: Optional[str] = None
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    def to_model(self) -> Transaction:
        return Transaction(
            id=self.id,
            account_id=self.account_id,
            category_id=self.category_id,
            amount=self.amount,
            transaction_date=self.transaction_date,
            comment=self.comment,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class TransactionDetailResponse(_ApiModel):
    """Nested form returned by the period query and PUT /transactions/{id}."""
    id: int
    account: AccountBrief
    category: CategoryBrief
    amount: Decimal
    transaction_date: datetime = Field(..., alias="transactionDate")
    comment: Optional[str] = None
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    def to_model(self) -> Transaction:
        return Transaction(
            id=self.id,
            account_id=self.account.id,
            category_id=self.category.id,
            amount=self.amount,
            transaction_date=self.transaction_date,
            comment=self.comment,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


# ── Requests ──────────────────────────────────────────────────────────────────

class TransactionRequest(_ApiModel):
    """Body of POST /transactions and PUT /transactions/{id}. Never carries an id."""
    account_id: int = Field(..., alias="accountId")
    category_id: int = Field(..., alias="categoryId")
    amount: Decimal
    transaction_date: datetime = Field(..., alias="transactionDate")
    comment: str = ""

    @field_serializer("amount")
    def amount_as_string(self, amount: Decimal) -> str:
        return decimal_to_wire(amount)

    @field_serializer("transaction_date")
    def date_as_iso(self, value: datetime) -> str:
        return format_iso8601(value)

    @classmethod
    def from_transaction(cls, tx: Transaction, account_id: int | None = None) -> "TransactionRequest":
        return cls(
            account_id=account_id if account_id is not None else tx.account_id,
            category_id=tx.category_id,
            amount=tx.amount,
            transaction_date=tx.transaction_date,
            comment=tx.comment or "",
        )


class AccountUpdateRequest(_ApiModel):
    name: str
    balance: Decimal
    currency: str

    @field_serializer("balance")
    def balance_as_string(self, balance: Decimal) -> str:
        return decimal_to_wire(balance)

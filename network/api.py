"""Endpoint wrappers for /api/v1/. Each call returns domain models."""
from datetime import datetime

from models.account import BankAccount
from models.category import Category, Direction
from models.transaction import Transaction
from network.client import NetworkClient
from network.schemas import (
    AccountResponse,
    AccountUpdateRequest,
    CategoryResponse,
    TransactionDetailResponse,
    TransactionRequest,
    TransactionResponse,
)
from utils.date_helpers import format_query_date


class FinanceAPI:
    def __init__(self, client: NetworkClient):
        self._client = client

    # ── Accounts ─────────────────────────────────────────────────────────────

    async def fetch_accounts(self) -> list[BankAccount]:
        rows = await self._client.request(
            "GET", "accounts", response_type=list[AccountResponse]
        )
        return [r.to_model() for r in rows]

    async def update_account(self, account: BankAccount) -> BankAccount:
        body = AccountUpdateRequest(
            name=account.name, balance=account.balance, currency=account.currency
        )
        row = await self._client.request(
            "PUT", f"accounts/{account.id}", body=body, response_type=AccountResponse
        )
        return row.to_model()

    # ── Categories ───────────────────────────────────────────────────────────

    async def fetch_categories(self) -> list[Category]:
        rows = await self._client.request(
            "GET", "categories", response_type=list[CategoryResponse]
        )
        return [r.to_model() for r in rows]

    async def fetch_categories_by_direction(self, direction: Direction) -> list[Category]:
        flag = "true" if direction.is_income else "false"
        rows = await self._client.request(
            "GET", f"categories/type/{flag}", response_type=list[CategoryResponse]
        )
        return [r.to_model() for r in rows]

    # ── Transactions ─────────────────────────────────────────────────────────

    async def fetch_transactions(
        self,
        account_id: int,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Transaction]:
        params = {}
        if start is not None:
            params["startDate"] = format_query_date(start)
        if end is not None:
            params["endDate"] = format_query_date(end)
        rows = await self._client.request(
            "GET",
            f"transactions/account/{account_id}/period",
            params=params or None,
            response_type=list[TransactionDetailResponse],
        )
        return [r.to_model() for r in rows]

    async def create_transaction(self, tx: Transaction) -> Transaction:
        row = await self._client.request(
            "POST",
            "transactions",
            body=TransactionRequest.from_transaction(tx),
            response_type=TransactionResponse,
        )
        return row.to_model()

    async def update_transaction(self, tx: Transaction) -> Transaction:
        row = await self._client.request(
            "PUT",
            f"transactions/{tx.id}",
            body=TransactionRequest.from_transaction(tx),
            response_type=TransactionDetailResponse,
        )
        return row.to_model()

    async def delete_transaction(self, tx_id: int) -> None:
        await self._client.request("DELETE", f"transactions/{tx_id}")

import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal

from database.outbox_dao import AccountOutboxDAO, TransactionOutboxDAO
from database.storage import TransactionsStorage
from models.category import Direction
from models.outbox import OutboxAction
from models.transaction import Transaction
from network.api import FinanceAPI
from network.errors import NoConnectivityError
from services.account_service import AccountService
from services.reconciliation import SyncEngine
from services.temp_id_generator import TemporaryIdGenerator
from utils.date_helpers import now_utc

logger = logging.getLogger(__name__)


def signed_impact(amount: Decimal, direction: Direction) -> Decimal:
    """Balance effect of a transaction amount in the given direction."""
    return amount if direction.is_income else -amount


class TransactionService:
    def __init__(
        self,
        api: FinanceAPI,
        mirror: TransactionsStorage,
        outbox: TransactionOutboxDAO,
        account_outbox: AccountOutboxDAO,
        id_generator: TemporaryIdGenerator,
        accounts: AccountService,
        engine: SyncEngine,
    ):
        self._api = api
        self._mirror = mirror
        self._outbox = outbox
        self._account_outbox = account_outbox
        self._ids = id_generator
        self._accounts = accounts
        self._engine = engine

    async def get_transactions(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> list[Transaction]:
        """Server transactions of the current account in [start, end].

        A successful fetch refreshes the mirror and flushes pending outbox
        entries; without connectivity the merged local view is returned.
        """
        try:
            account_id = await self._accounts.get_current_account_id()
            remote = await self._api.fetch_transactions(account_id, start, end)
        except NoConnectivityError:
            logger.info("Offline: serving transactions from the local mirror")
            return self._engine.merged_transactions(start, end)

        self._write_through(remote, start, end)
        await self._engine.sync_backups()
        return remote

    def merged_transactions(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> list[Transaction]:
        return self._engine.merged_transactions(start, end)

    async def add_transaction(self, tx: Transaction, direction: Direction) -> Transaction:
        try:
            created = await self._api.create_transaction(tx)
        except NoConnectivityError:
            now = now_utc()
            local = replace(tx, id=self._ids.generate(), created_at=now, updated_at=now)
            self._outbox.append(OutboxAction.CREATE, local)
            self._account_outbox.add_transaction_impact(signed_impact(local.amount, direction))
            return local
        self._mirror.upsert(created)
        return created

    async def edit_transaction(
        self, tx: Transaction, prev_amount: Decimal, direction: Direction
    ) -> Transaction:
        try:
            updated = await self._api.update_transaction(tx)
        except NoConnectivityError:
            local = replace(tx, updated_at=now_utc())
            self._outbox.append(OutboxAction.UPDATE, local)
            self._account_outbox.add_transaction_impact(
                signed_impact(tx.amount - prev_amount, direction)
            )
            return local
        self._mirror.upsert(updated)
        return updated

    async def delete_transaction(
        self, tx_id: int, prev_amount: Decimal, direction: Direction
    ) -> None:
        try:
            await self._api.delete_transaction(tx_id)
        except NoConnectivityError:
            self._outbox.append(OutboxAction.DELETE, self._delete_placeholder(tx_id))
            self._account_outbox.add_transaction_impact(-signed_impact(prev_amount, direction))
            return
        self._mirror.delete(tx_id)

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _write_through(
        self, remote: list[Transaction], start: datetime | None, end: datetime | None
    ):
        fresh_ids = {tx.id for tx in remote}
        for stale in self._mirror.get_by_date_range(start, end):
            if stale.id not in fresh_ids:
                self._mirror.delete(stale.id)
        for tx in remote:
            self._mirror.upsert(tx)

    @staticmethod
    def _delete_placeholder(tx_id: int) -> Transaction:
        """Outbox payload for a delete: only the id is meaningful."""
        now = now_utc()
        return Transaction(
            id=tx_id,
            account_id=0,
            category_id=0,
            amount=Decimal("0"),
            transaction_date=now,
            comment=None,
            created_at=now,
            updated_at=now,
        )

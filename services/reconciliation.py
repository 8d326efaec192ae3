"""Merging the local mirror with pending outbox entries, and replaying the
outbox against the server once it is reachable again."""
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Sequence

from database.outbox_dao import AccountOutboxDAO, TransactionOutboxDAO
from database.storage import AccountStorage, TransactionsStorage
from models.account import BankAccount
from models.outbox import (
    AccountChange,
    ChangeCurrency,
    OutboxAction,
    TransactionOutboxEntry,
)
from models.transaction import Transaction
from network.api import FinanceAPI
from network.errors import NetworkError
from utils.date_helpers import in_range, now_utc

logger = logging.getLogger(__name__)


def merge_transactions(
    mirror_rows: Iterable[Transaction],
    entries: Sequence[TransactionOutboxEntry],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Transaction]:
    """Offline read view: mirror rows in range with outbox entries applied in
    insertion order. An update only lands on an id already in the view.
    Result order is unspecified."""
    merged: dict[int, Transaction] = {
        tx.id: tx for tx in mirror_rows if in_range(tx.transaction_date, start, end)
    }
    for entry in entries:
        tx = entry.transaction
        if entry.action is OutboxAction.CREATE:
            merged[tx.id] = tx
        elif entry.action is OutboxAction.UPDATE:
            if tx.id in merged:
                merged[tx.id] = tx
        else:
            merged.pop(tx.id, None)
    # Outbox entries were not pre-filtered by date
    return [tx for tx in merged.values() if in_range(tx.transaction_date, start, end)]


def fold_account(base: BankAccount, changes: Iterable[AccountChange]) -> BankAccount:
    """Apply pending account changes in order: currency changes replace,
    balance and transaction-impact changes add."""
    balance: Decimal = base.balance
    currency = base.currency
    for change in changes:
        if isinstance(change, ChangeCurrency):
            currency = change.currency
        else:
            balance += change.delta
    return replace(base, balance=balance, currency=currency)


@dataclass
class SyncReport:
    replayed: int = 0
    failed: int = 0
    account_pushed: bool = False
    errors: list[str] = field(default_factory=list)
    skipped: bool = False

    @property
    def clean(self) -> bool:
        return not self.failed and not self.errors


class SyncEngine:
    """Owns the read-side merge and the outbox replay.

    The two outboxes are replayed in independent passes; nothing ties a
    transaction replay to its balance delta.
    """

    def __init__(
        self,
        api: FinanceAPI,
        tx_mirror: TransactionsStorage,
        tx_outbox: TransactionOutboxDAO,
        account_mirror: AccountStorage,
        account_outbox: AccountOutboxDAO,
    ):
        self._api = api
        self._tx_mirror = tx_mirror
        self._tx_outbox = tx_outbox
        self._account_mirror = account_mirror
        self._account_outbox = account_outbox
        self._running = False

    # ── Read side ────────────────────────────────────────────────────────────

    def merged_transactions(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> list[Transaction]:
        return merge_transactions(
            self._tx_mirror.get_by_date_range(start, end),
            self._tx_outbox.all_entries(),
            start,
            end,
        )

    def folded_account(self) -> BankAccount | None:
        """Mirrored account with every pending account change applied."""
        account = self._account_mirror.get_current()
        if account is None:
            return None
        return fold_account(account, [e.change for e in self._account_outbox.all_entries()])

    def pending_count(self) -> int:
        return self._tx_outbox.count() + self._account_outbox.count()

    # ── Write side ───────────────────────────────────────────────────────────

    async def sync_backups(self) -> SyncReport:
        """Replay both outboxes. Never raises NetworkError: failed entries stay
        queued for the next call."""
        if self._running:
            logger.debug("Sync already in progress; skipping")
            return SyncReport(skipped=True)
        self._running = True
        try:
            report = SyncReport()
            await self._replay_transactions(report)
            await self._push_account_changes(report)
        finally:
            self._running = False
        if report.replayed or report.failed or report.account_pushed:
            logger.info(
                "Sync finished: %d replayed, %d failed, account %s",
                report.replayed, report.failed,
                "pushed" if report.account_pushed else "unchanged",
            )
        return report

    async def _replay_transactions(self, report: SyncReport):
        for entry in self._tx_outbox.all_entries():
            local_id = entry.transaction.id
            server_id = self._tx_outbox.resolve_id(local_id)
            age = now_utc() - entry.created_at
            if entry.action is not OutboxAction.CREATE and server_id is None:
                report.failed += 1
                logger.warning(
                    "Holding %s of transaction %s until its create is confirmed; queued %s ago",
                    entry.action.value, local_id, age,
                )
                continue

            try:
                await self._replay_one(entry, server_id)
            except NetworkError as exc:
                report.failed += 1
                report.errors.append(exc.message)
                logger.warning(
                    "Replay of %s for transaction %s failed (%s); queued %s ago, kept for next sync",
                    entry.action.value, local_id, exc.message, age,
                )
                continue

            self._tx_outbox.remove(entry.id)
            report.replayed += 1

        self._tx_outbox.forget_resolved_ids()

    async def _replay_one(self, entry: TransactionOutboxEntry, server_id: int | None):
        tx = entry.transaction
        if entry.action is OutboxAction.CREATE:
            confirmed = await self._api.create_transaction(tx)
            if tx.id < 0:
                self._tx_outbox.record_server_id(tx.id, confirmed.id)
            self._tx_mirror.upsert(confirmed)
        elif entry.action is OutboxAction.UPDATE:
            confirmed = await self._api.update_transaction(replace(tx, id=server_id))
            self._tx_mirror.upsert(confirmed)
        else:
            await self._api.delete_transaction(server_id)
            self._tx_mirror.delete(server_id)

    async def _push_account_changes(self, report: SyncReport):
        entries = self._account_outbox.all_entries()
        if not entries:
            return
        try:
            accounts = await self._api.fetch_accounts()
            if not accounts:
                report.errors.append("Server returned no account.")
                logger.warning("Cannot push account changes: server returned no account")
                return
            folded = fold_account(accounts[0], [e.change for e in entries])
            pushed = await self._api.update_account(folded)
        except NetworkError as exc:
            report.errors.append(exc.message)
            logger.warning("Pushing %d account changes failed (%s)", len(entries), exc.message)
            return

        self._account_outbox.remove_many([e.id for e in entries])
        self._account_mirror.upsert(pushed)
        report.account_pushed = True

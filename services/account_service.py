import logging
from dataclasses import replace
from decimal import Decimal

from database.outbox_dao import AccountOutboxDAO
from database.storage import AccountStorage
from models.account import BankAccount
from network.api import FinanceAPI
from network.errors import NoConnectivityError
from services.reconciliation import SyncEngine

logger = logging.getLogger(__name__)


class AccountNotFoundError(LookupError):
    """The server has no account for this user."""


class AccountService:
    def __init__(
        self,
        api: FinanceAPI,
        mirror: AccountStorage,
        outbox: AccountOutboxDAO,
        engine: SyncEngine,
    ):
        self._api = api
        self._mirror = mirror
        self._outbox = outbox
        self._engine = engine

    async def get_account(self) -> BankAccount:
        """Server account, or the mirrored one with pending changes folded in
        when offline. Raises NoConnectivityError if there is nothing local."""
        try:
            account = await self._fetch_remote()
        except NoConnectivityError:
            local = self._engine.folded_account()
            if local is None:
                raise
            logger.info("Offline: showing local account %s", local.id)
            return local
        self._mirror.upsert(account)
        return account

    async def get_current_account_id(self) -> int:
        """Id of the server account, or of the mirrored one when offline.
        Never writes the mirror."""
        try:
            account = await self._fetch_remote()
        except NoConnectivityError:
            account = self._engine.folded_account()
            if account is None:
                raise
        return account.id

    async def update_account(self, amount: Decimal, new_currency: str) -> BankAccount:
        """Set the balance and currency. Offline, the difference is queued
        against the folded balance and the projected account is returned.

        A successful online update supersedes the account changes queued
        before it, so those are dropped.
        """
        superseded = [e.id for e in self._outbox.all_entries()]
        try:
            current = await self._fetch_remote()
            updated = await self._api.update_account(
                replace(current, balance=amount, currency=new_currency)
            )
        except NoConnectivityError:
            return self._update_offline(amount, new_currency)
        if superseded:
            self._outbox.remove_many(superseded)
            logger.info("Dropped %d queued account changes", len(superseded))
        self._mirror.upsert(updated)
        return updated

    # ── Helpers ──────────────────────────────────────────────────────────────

    async def _fetch_remote(self) -> BankAccount:
        accounts = await self._api.fetch_accounts()
        if not accounts:
            raise AccountNotFoundError("The server returned no bank account.")
        return accounts[0]

    def _update_offline(self, amount: Decimal, new_currency: str) -> BankAccount:
        folded = self._engine.folded_account()
        if folded is None:
            raise NoConnectivityError()
        self._outbox.add_balance_change(amount - folded.balance)
        self._outbox.add_currency_change(new_currency)
        logger.info("Offline: queued account update to %s %s", amount, new_currency)
        return replace(folded, balance=amount, currency=new_currency)

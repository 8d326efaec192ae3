"""Append-only logs of mutations the server has not confirmed yet.

Every append commits before returning, so an entry survives a crash right
after the call. Entries are never edited: replacing one means remove + append.
"""
import json
import logging
import uuid
from decimal import Decimal
from uuid import UUID

from database.db_manager import DatabaseManager
from models.outbox import (
    ACCOUNT_CHANGE_TYPES,
    AccountChange,
    AccountOutboxEntry,
    ChangeBalance,
    ChangeCurrency,
    ChangeTransactionImpact,
    OutboxAction,
    TransactionOutboxEntry,
)
from models.transaction import Transaction
from utils.date_helpers import from_storage, now_utc, to_storage

logger = logging.getLogger(__name__)


def _transaction_to_payload(tx: Transaction) -> str:
    return json.dumps({
        "id": tx.id,
        "account_id": tx.account_id,
        "category_id": tx.category_id,
        "amount": str(tx.amount),
        "transaction_date": to_storage(tx.transaction_date),
        "comment": tx.comment,
        "created_at": to_storage(tx.created_at),
        "updated_at": to_storage(tx.updated_at),
    })


def _payload_to_transaction(payload: str) -> Transaction:
    data = json.loads(payload)
    return Transaction(
        id=data["id"],
        account_id=data["account_id"],
        category_id=data["category_id"],
        amount=Decimal(data["amount"]),
        transaction_date=from_storage(data["transaction_date"]),
        comment=data.get("comment"),
        created_at=from_storage(data["created_at"]),
        updated_at=from_storage(data["updated_at"]),
    )


class TransactionOutboxDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> TransactionOutboxEntry:
        return TransactionOutboxEntry(
            id=UUID(row["id"]),
            action=OutboxAction(row["action"]),
            transaction=_payload_to_transaction(row["payload"]),
            created_at=from_storage(row["created_at"]),
        )

    def append(self, action: OutboxAction, tx: Transaction) -> TransactionOutboxEntry:
        entry = TransactionOutboxEntry(
            id=uuid.uuid4(), action=action, transaction=tx, created_at=now_utc()
        )
        conn = self._db.get_connection()
        conn.execute(
            """INSERT INTO transaction_outbox(id, action, payload, created_at)
               VALUES (?, ?, ?, ?)""",
            (str(entry.id), action.value, _transaction_to_payload(tx),
             to_storage(entry.created_at)),
        )
        conn.commit()
        logger.info("Queued %s of transaction %s for sync", action.value, tx.id)
        return entry

    def all_entries(self) -> list[TransactionOutboxEntry]:
        """Pending entries in insertion (= replay) order."""
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM transaction_outbox ORDER BY seq ASC"
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def remove(self, entry_id: UUID):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM transaction_outbox WHERE id = ?", (str(entry_id),))
        conn.commit()

    def count(self) -> int:
        conn = self._db.get_connection()
        return conn.execute("SELECT COUNT(*) FROM transaction_outbox").fetchone()[0]

    def clear(self):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM transaction_outbox")
        conn.execute("DELETE FROM outbox_id_map")
        conn.commit()

    # ── Placeholder id resolution ─────────────────────────────────────────────

    def record_server_id(self, temporary_id: int, server_id: int):
        conn = self._db.get_connection()
        conn.execute(
            "INSERT OR REPLACE INTO outbox_id_map(temporary_id, server_id) VALUES (?, ?)",
            (temporary_id, server_id),
        )
        conn.commit()

    def resolve_id(self, tx_id: int) -> int | None:
        """Server id for a placeholder, the id itself if it is already a
        server id, or None while the placeholder is unconfirmed."""
        if tx_id >= 0:
            return tx_id
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT server_id FROM outbox_id_map WHERE temporary_id = ?", (tx_id,)
        ).fetchone()
        return row["server_id"] if row else None

    def forget_resolved_ids(self):
        """Drop the id map once nothing in the outbox can refer to it."""
        conn = self._db.get_connection()
        conn.execute(
            "DELETE FROM outbox_id_map WHERE NOT EXISTS (SELECT 1 FROM transaction_outbox)"
        )
        conn.commit()


class AccountOutboxDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> AccountOutboxEntry:
        return AccountOutboxEntry(
            id=UUID(row["id"]),
            change=self._decode_change(row["action"], row["string_value"], row["decimal_value"]),
            created_at=from_storage(row["created_at"]),
        )

    @staticmethod
    def _decode_change(action: str, string_value, decimal_value) -> AccountChange:
        change_type = ACCOUNT_CHANGE_TYPES.get(action)
        if change_type is None:
            raise ValueError(f"Unknown account change '{action}'.")
        if change_type is ChangeCurrency:
            if string_value is None or decimal_value is not None:
                raise ValueError("Currency change must carry only a string value.")
            return ChangeCurrency(string_value)
        if decimal_value is None or string_value is not None:
            raise ValueError(f"{action} must carry only a decimal value.")
        return change_type(Decimal(decimal_value))

    @staticmethod
    def _encode_change(change: AccountChange) -> tuple[str, str | None, str | None]:
        if isinstance(change, ChangeCurrency):
            return change.action, change.currency, None
        return change.action, None, str(change.delta)

    def append(self, change: AccountChange) -> AccountOutboxEntry:
        entry = AccountOutboxEntry(id=uuid.uuid4(), change=change, created_at=now_utc())
        action, string_value, decimal_value = self._encode_change(change)
        conn = self._db.get_connection()
        conn.execute(
            """INSERT INTO account_outbox(id, action, string_value, decimal_value, created_at)
               VALUES (?, ?, ?, ?, ?)""",
            (str(entry.id), action, string_value, decimal_value,
             to_storage(entry.created_at)),
        )
        conn.commit()
        logger.info("Queued account change %s", change)
        return entry

    def add_currency_change(self, currency: str) -> AccountOutboxEntry:
        return self.append(ChangeCurrency(currency))

    def add_balance_change(self, delta: Decimal) -> AccountOutboxEntry:
        return self.append(ChangeBalance(delta))

    def add_transaction_impact(self, delta: Decimal) -> AccountOutboxEntry:
        return self.append(ChangeTransactionImpact(delta))

    def all_entries(self) -> list[AccountOutboxEntry]:
        """Pending entries in insertion (= fold) order."""
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM account_outbox ORDER BY seq ASC"
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def remove(self, entry_id: UUID):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM account_outbox WHERE id = ?", (str(entry_id),))
        conn.commit()

    def remove_many(self, entry_ids: list[UUID]):
        """Drop several entries in one commit."""
        conn = self._db.get_connection()
        try:
            conn.executemany(
                "DELETE FROM account_outbox WHERE id = ?",
                [(str(i),) for i in entry_ids],
            )
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def count(self) -> int:
        conn = self._db.get_connection()
        return conn.execute("SELECT COUNT(*) FROM account_outbox").fetchone()[0]

    def clear(self):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM account_outbox")
        conn.commit()

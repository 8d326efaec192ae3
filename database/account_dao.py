from decimal import Decimal
from typing import Optional
from database.db_manager import DatabaseManager
from models.account import BankAccount
from utils.date_helpers import from_storage, to_storage


class AccountDAO:
    """Local mirror of the user's bank account (one per installation)."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> BankAccount:
        return BankAccount(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            balance=Decimal(row["balance"]),
            currency=row["currency"],
            created_at=from_storage(row["created_at"]),
            updated_at=from_storage(row["updated_at"]),
        )

    def get_all(self) -> list[BankAccount]:
        conn = self._db.get_connection()
        rows = conn.execute("SELECT * FROM accounts ORDER BY id").fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_current(self) -> Optional[BankAccount]:
        """The first mirrored account, mirroring the server's 'take first' rule."""
        conn = self._db.get_connection()
        row = conn.execute("SELECT * FROM accounts ORDER BY id LIMIT 1").fetchone()
        return self._row_to_model(row) if row else None

    def upsert(self, account: BankAccount):
        conn = self._db.get_connection()
        conn.execute(
            """INSERT INTO accounts
               (id, user_id, name, balance, currency, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                   user_id = excluded.user_id,
                   name = excluded.name,
                   balance = excluded.balance,
                   currency = excluded.currency,
                   created_at = excluded.created_at,
                   updated_at = excluded.updated_at""",
            (
                account.id, account.user_id, account.name, str(account.balance),
                account.currency,
                to_storage(account.created_at) if account.created_at else None,
                to_storage(account.updated_at) if account.updated_at else None,
            ),
        )
        conn.commit()

    def delete(self, account_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM accounts WHERE id = ?", (account_id,))
        conn.commit()

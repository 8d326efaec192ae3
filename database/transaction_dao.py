from decimal import Decimal
from datetime import datetime
from database.db_manager import DatabaseManager
from models.transaction import Transaction
from utils.date_helpers import from_storage, to_storage


class TransactionDAO:
    """Local mirror of server-confirmed transactions."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Transaction:
        return Transaction(
            id=row["id"],
            account_id=row["account_id"],
            category_id=row["category_id"],
            amount=Decimal(row["amount"]),
            transaction_date=from_storage(row["transaction_date"]),
            comment=row["comment"],
            created_at=from_storage(row["created_at"]),
            updated_at=from_storage(row["updated_at"]),
        )

    def get_all(self) -> list[Transaction]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM transactions ORDER BY transaction_date ASC, id ASC"
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_date_range(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Transaction]:
        """Inclusive on both ends; a missing bound is open."""
        conn = self._db.get_connection()
        sql = "SELECT * FROM transactions WHERE 1=1"
        params: list = []

        if start is not None:
            sql += " AND transaction_date >= ?"
            params.append(to_storage(start))
        if end is not None:
            sql += " AND transaction_date <= ?"
            params.append(to_storage(end))

        sql += " ORDER BY transaction_date ASC, id ASC"
        rows = conn.execute(sql, params).fetchall()
        return [self._row_to_model(r) for r in rows]

    def upsert(self, tx: Transaction):
        conn = self._db.get_connection()
        conn.execute(
            """INSERT INTO transactions
               (id, account_id, category_id, amount, transaction_date,
                comment, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                   account_id = excluded.account_id,
                   category_id = excluded.category_id,
                   amount = excluded.amount,
                   transaction_date = excluded.transaction_date,
                   comment = excluded.comment,
                   created_at = excluded.created_at,
                   updated_at = excluded.updated_at""",
            (
                tx.id, tx.account_id, tx.category_id, str(tx.amount),
                to_storage(tx.transaction_date), tx.comment,
                to_storage(tx.created_at), to_storage(tx.updated_at),
            ),
        )
        conn.commit()

    def delete(self, tx_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM transactions WHERE id = ?", (tx_id,))
        conn.commit()

from typing import Sequence
from database.db_manager import DatabaseManager
from models.category import Category, Direction


class CategoryDAO:
    """Local mirror of the server's category list, replaced wholesale."""

    def __init__(self, db: DatabaseManager):
        self._db = db
        self._all_cache: list | None = None

    def _invalidate_cache(self):
        self._all_cache = None

    def _row_to_model(self, row) -> Category:
        return Category(
            id=row["id"],
            name=row["name"],
            emoji=row["emoji"],
            direction=Direction(row["direction"]),
        )

    def get_all(self) -> list[Category]:
        if self._all_cache is None:
            conn = self._db.get_connection()
            rows = conn.execute(
                "SELECT * FROM categories ORDER BY id"
            ).fetchall()
            self._all_cache = [self._row_to_model(r) for r in rows]
        return list(self._all_cache)

    def get_by_direction(self, direction: Direction) -> list[Category]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM categories WHERE direction = ? ORDER BY id",
            (direction.value,),
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def replace_all(
        self,
        categories: Sequence[Category],
        direction: Direction | None = None,
    ):
        """Swap the mirrored list for a fresh server copy in one transaction.
        With a direction, only that direction's rows are replaced."""
        conn = self._db.get_connection()
        try:
            if direction is None:
                conn.execute("DELETE FROM categories")
            else:
                conn.execute(
                    "DELETE FROM categories WHERE direction = ?", (direction.value,)
                )
            conn.executemany(
                """INSERT OR REPLACE INTO categories(id, name, emoji, direction)
                   VALUES (?, ?, ?, ?)""",
                [(c.id, c.name, c.emoji, c.direction.value) for c in categories],
            )
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._invalidate_cache()

import logging
import os
import sqlite3

from utils.constants import DB_FILE

logger = logging.getLogger(__name__)


class DatabaseManager:
    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or DB_FILE
        self._conn: sqlite3.Connection | None = None

    def get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            if self.db_path != ":memory:":
                self._conn.execute("PRAGMA journal_mode = WAL")
            self._conn.execute("PRAGMA synchronous = FULL")
        return self._conn

    def initialize(self):
        """Create schema."""
        conn = self.get_connection()
        self._create_schema(conn)
        conn.commit()

    def _create_schema(self, conn: sqlite3.Connection):
        conn.executescript("""
            -- Local mirror: last known-good server state
            CREATE TABLE IF NOT EXISTS accounts (
                id         INTEGER PRIMARY KEY,
                user_id    INTEGER,
                name       TEXT NOT NULL,
                balance    TEXT NOT NULL,
                currency   TEXT NOT NULL,
                created_at TEXT,
                updated_at TEXT
            );

            CREATE TABLE IF NOT EXISTS categories (
                id         INTEGER PRIMARY KEY,
                name       TEXT NOT NULL,
                emoji      TEXT NOT NULL,
                direction  TEXT NOT NULL CHECK(direction IN ('income','outcome'))
            );

            CREATE TABLE IF NOT EXISTS transactions (
                id               INTEGER PRIMARY KEY,
                account_id       INTEGER NOT NULL,
                category_id      INTEGER NOT NULL,
                amount           TEXT NOT NULL,
                transaction_date TEXT NOT NULL,
                comment          TEXT,
                created_at       TEXT NOT NULL,
                updated_at       TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_transactions_date ON transactions(transaction_date);

            -- Outbox: mutations waiting for the server, replayed in seq order
            CREATE TABLE IF NOT EXISTS transaction_outbox (
                seq        INTEGER PRIMARY KEY AUTOINCREMENT,
                id         TEXT NOT NULL UNIQUE,
                action     TEXT NOT NULL CHECK(action IN ('create','update','delete')),
                payload    TEXT NOT NULL,
                created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS account_outbox (
                seq           INTEGER PRIMARY KEY AUTOINCREMENT,
                id            TEXT NOT NULL UNIQUE,
                action        TEXT NOT NULL CHECK(action IN (
                                  'change_currency','change_balance','change_transaction_impact')),
                string_value  TEXT,
                decimal_value TEXT,
                created_at    TEXT NOT NULL
            );

            -- Server ids assigned to placeholder ids by replayed creates
            CREATE TABLE IF NOT EXISTS outbox_id_map (
                temporary_id INTEGER PRIMARY KEY,
                server_id    INTEGER NOT NULL
            );

            CREATE TABLE IF NOT EXISTS app_settings (
                key   TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );
        """)

    def get_setting(self, key: str, default: str = "") -> str:
        conn = self.get_connection()
        row = conn.execute(
            "SELECT value FROM app_settings WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else default

    def set_setting(self, key: str, value: str):
        conn = self.get_connection()
        conn.execute(
            "INSERT OR REPLACE INTO app_settings(key, value) VALUES (?, ?)",
            (key, value),
        )
        conn.commit()

    def delete_setting(self, key: str):
        conn = self.get_connection()
        conn.execute("DELETE FROM app_settings WHERE key = ?", (key,))
        conn.commit()

    @staticmethod
    def open(data_folder: str | None = None) -> "DatabaseManager":
        """Startup factory: opens (creating if needed) the local database.

        data_folder: if provided, the DB file is stored in that directory instead of CWD.
        """
        if data_folder:
            os.makedirs(data_folder, exist_ok=True)
            path = os.path.join(data_folder, DB_FILE)
        else:
            path = DB_FILE
        logger.debug("Opening local store at %s", path)
        db = DatabaseManager(path)
        db.initialize()
        return db

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None

from database.db_manager import DatabaseManager
from utils.constants import TEMPORARY_ID_SETTING


class TemporaryIdGenerator:
    """Hands out placeholder ids -1, -2, -3, ... for transactions created
    offline. The counter lives in app_settings so the sequence continues
    across restarts."""

    def __init__(self, db: DatabaseManager, key: str = TEMPORARY_ID_SETTING):
        self._db = db
        self._key = key

    def _last(self) -> int:
        raw = self._db.get_setting(self._key, "0")
        try:
            return max(0, int(raw))
        except ValueError:
            return 0

    def generate(self) -> int:
        last = self._last() + 1
        self._db.set_setting(self._key, str(last))
        return -last

    def reset(self):
        """Maintenance only: the next generate() starts over at -1."""
        self._db.delete_setting(self._key)

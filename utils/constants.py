APP_NAME = "Finance"
DB_FILE = "finance.db"

API_BASE_PATH = "/api/v1/"
DEFAULT_BASE_URL = "http://localhost:8000" + API_BASE_PATH
REQUEST_TIMEOUT_SECONDS = 10.0

DEFAULT_TIMEZONE = "UTC"
DEFAULT_LOG_LEVEL = "INFO"

# Wire formats
QUERY_DATE_FORMAT = "%Y-%m-%d"

# Shown when the server sends a category without an emoji
FALLBACK_EMOJI = "💋"

# app_settings key holding the magnitude of the last placeholder id handed out
TEMPORARY_ID_SETTING = "last_temporary_id"

HISTORY_DEFAULT_MONTHS = 1
SORT_MODES = ("date", "amount")

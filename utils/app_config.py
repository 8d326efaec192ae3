"""Pre-DB bootstrap configuration. Depends on nothing but utils.constants.

Stores settings that must be known before opening the DB or the API client
(data folder, server URL, token, timezone, log level).
Config lives in ~/.finance/config.json; FINANCE_* environment variables
take precedence over the file.
"""
import json
import os
from dataclasses import dataclass
from pathlib import Path

CONFIG_DIR = Path.home() / ".finance"
CONFIG_FILE = CONFIG_DIR / "config.json"

_ENV_OVERRIDES = {
    "base_url": "FINANCE_BASE_URL",
    "token": "FINANCE_API_TOKEN",
    "data_folder": "FINANCE_DATA_FOLDER",
    "timezone": "FINANCE_TIMEZONE",
    "log_level": "FINANCE_LOG_LEVEL",
}


@dataclass(frozen=True)
class Settings:
    base_url: str
    token: str
    data_folder: str | None
    timezone: str
    log_level: str


def load_config(path: Path = CONFIG_FILE) -> dict:
    """Returns {} on a missing or corrupt file; never raises."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(config: dict, path: Path = CONFIG_FILE) -> None:
    """Creates the config folder if needed; atomic write via .tmp + os.replace()."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        os.replace(tmp, path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def load_settings(path: Path = CONFIG_FILE, environ: dict | None = None) -> Settings:
    """Merge the config file with environment overrides and fill defaults."""
    from utils.constants import DEFAULT_BASE_URL, DEFAULT_LOG_LEVEL, DEFAULT_TIMEZONE

    env = os.environ if environ is None else environ
    config = load_config(path)
    for key, var in _ENV_OVERRIDES.items():
        if env.get(var):
            config[key] = env[var]
    return Settings(
        base_url=config.get("base_url") or DEFAULT_BASE_URL,
        token=config.get("token", ""),
        data_folder=config.get("data_folder"),
        timezone=config.get("timezone") or DEFAULT_TIMEZONE,
        log_level=str(config.get("log_level") or DEFAULT_LOG_LEVEL).upper(),
    )


def set_value(key: str, value: str | None, path: Path = CONFIG_FILE) -> None:
    """Update one key in the config file and save. None removes the key."""
    config = load_config(path)
    if value is None:
        config.pop(key, None)
    else:
        config[key] = value
    save_config(config, path)

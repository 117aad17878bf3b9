import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv


DEFAULT_FEED_URL = "https://eapps.ncdot.gov/services/traffic-prod/v1/counties/92/incidents"
DEFAULT_CATEGORY = "Vehicle Crash"
DEFAULT_TIMEZONE = "America/New_York"
DEFAULT_STATE_FILE = "sent_incidents_ncdot.json"
DEFAULT_TABLE = "ncdot_incidents"


class ConfigError(RuntimeError):
    pass


def get_str(name: str, default: str = "") -> str:
    return (os.getenv(name, default) or "").strip()


def get_int(name: str, default: int | None = None) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default



@dataclass(frozen=True)
class Settings:
    feed_url: str
    feed_timeout_s: int
    webhook_url: str
    webhook_timeout_s: int
    category: str
    timezone: str
    state_file: str
    table: str


def load_settings(dotenv_path: str | None = None) -> Settings:
    load_dotenv(dotenv_path or find_dotenv(usecwd=True))
    return Settings(
        feed_url=get_str("NCDOT_FEED_URL", DEFAULT_FEED_URL) or DEFAULT_FEED_URL,
        feed_timeout_s=get_int("FEED_TIMEOUT_SEC", 15) or 15,
        webhook_url=get_str("DISCORD_WEBHOOK_URL"),
        webhook_timeout_s=get_int("WEBHOOK_TIMEOUT_SEC", 20) or 20,
        category=get_str("INCIDENT_CATEGORY", DEFAULT_CATEGORY) or DEFAULT_CATEGORY,
        timezone=get_str("INCIDENT_TIMEZONE", DEFAULT_TIMEZONE) or DEFAULT_TIMEZONE,
        state_file=get_str("INCIDENTS_STATE_FILE", DEFAULT_STATE_FILE) or DEFAULT_STATE_FILE,
        table=get_str("INCIDENTS_TABLE", DEFAULT_TABLE) or DEFAULT_TABLE,
    )


def database_dsn() -> str:
    """
    DATABASE_URL wins when set; otherwise a libpq keyword DSN is assembled
    from the split DATABASE_* variables.
    """
    url = get_str("DATABASE_URL")
    if url:
        return url

    parts = {
        "host": get_str("DATABASE_HOST"),
        "port": get_str("DATABASE_PORT", "5432") or "5432",
        "user": get_str("DATABASE_USERNAME"),
        "password": os.getenv("DATABASE_PASSWORD") or "",
        "dbname": get_str("DATABASE_NAME"),
        "sslmode": get_str("DATABASE_SSLMODE", "require") or "require",
    }
    missing = [
        env_name
        for env_name, key in (
            ("DATABASE_HOST", "host"),
            ("DATABASE_USERNAME", "user"),
            ("DATABASE_NAME", "dbname"),
        )
        if not parts[key]
    ]
    if missing:
        raise ConfigError(f"Missing {', '.join(missing)} (or DATABASE_URL)")
    return " ".join(f"{k}={_quote_dsn_value(v)}" for k, v in parts.items() if v)


def _quote_dsn_value(value: str) -> str:
    if value and not any(ch in value for ch in " '\\"):
        return value
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"

import os
from dataclasses import dataclass


DEFAULT_UPSTREAM_URL = "https://s3.amazonaws.com/roxiler.com/product_transaction.json"


@dataclass(frozen=True)
class Settings:
    upstream_url: str
    upstream_timeout: float | None
    host: str
    port: int
    page_size: int
    log_level: str


def _optional_float(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number") from e
    if value <= 0:
        raise ValueError(f"{name} must be positive")
    return value


def _positive_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer") from e
    if value < 1:
        raise ValueError(f"{name} must be at least 1")
    return value


def get_settings() -> Settings:
    return Settings(
        upstream_url=os.getenv("DASHBOARD_UPSTREAM_URL", "").strip()
        or DEFAULT_UPSTREAM_URL,
        upstream_timeout=_optional_float("DASHBOARD_UPSTREAM_TIMEOUT"),
        host=os.getenv("DASHBOARD_HOST", "").strip() or "127.0.0.1",
        port=_positive_int("DASHBOARD_PORT", 3001),
        page_size=_positive_int("DASHBOARD_PAGE_SIZE", 5),
        log_level=(os.getenv("DASHBOARD_LOG_LEVEL", "").strip() or "INFO").upper(),
    )

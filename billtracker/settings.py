from __future__ import annotations

import os
from dataclasses import dataclass

DEV_USER_EMAIL = "local@development.com"


def _env(key: str, default: str | None = None) -> str | None:
    """
    Read an env var.

    We treat empty strings as "unset" to avoid surprising behavior when users
    export variables but forget to assign values.
    """
    v = os.environ.get(key)
    if v is not None and str(v).strip() != "":
        return v
    return default


def _parse_bool(v: str | None, default: bool) -> bool:
    if v is None:
        return default
    s = str(v).strip().lower()
    if s in {"1", "true", "yes", "y", "on"}:
        return True
    if s in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _parse_int(v: str | None, default: int) -> int:
    if v is None:
        return default
    try:
        return int(str(v).strip())
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    log_level: str
    log_json: bool
    log_path: str | None
    log_rotation_mb: int
    log_retention_days: int
    db_path: str | None
    api_token: str | None
    skip_auth: bool
    dev_user_email: str
    expand_on_list: bool


def load_settings() -> Settings:
    host = _env("BILLTRACKER_HOST", "127.0.0.1") or "127.0.0.1"
    port = _parse_int(_env("BILLTRACKER_PORT", "8000"), 8000)

    log_level = (_env("BILLTRACKER_LOG_LEVEL", "INFO") or "INFO").upper()
    log_json = _parse_bool(_env("BILLTRACKER_LOG_JSON", None), False)
    log_path = _env("BILLTRACKER_LOG_PATH", None)
    log_rotation_mb = _parse_int(_env("BILLTRACKER_LOG_ROTATION_MB", "10"), 10)
    if log_rotation_mb <= 0:
        log_rotation_mb = 10
    log_retention_days = _parse_int(_env("BILLTRACKER_LOG_RETENTION_DAYS", "14"), 14)
    if log_retention_days <= 0:
        log_retention_days = 14

    db_path = _env("BILLTRACKER_DB_PATH", None)
    api_token = _env("BILLTRACKER_API_TOKEN", None)

    skip_auth = _parse_bool(_env("BILLTRACKER_SKIP_AUTH", None), False)
    dev_user_email = (
        (_env("BILLTRACKER_DEV_USER_EMAIL", DEV_USER_EMAIL) or DEV_USER_EMAIL).strip().lower()
    )

    expand_on_list = _parse_bool(_env("BILLTRACKER_EXPAND_ON_LIST", None), True)

    return Settings(
        host=host,
        port=port,
        log_level=log_level,
        log_json=log_json,
        log_path=log_path,
        log_rotation_mb=log_rotation_mb,
        log_retention_days=log_retention_days,
        db_path=db_path,
        api_token=api_token,
        skip_auth=skip_auth,
        dev_user_email=dev_user_email,
        expand_on_list=expand_on_list,
    )

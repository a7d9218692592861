from __future__ import annotations

from .engine import build_db_url, get_engine, resolve_db_path
from .repositories import SqlBillRepository, ensure_bills_schema
from .session import connection_scope

__all__ = [
    "SqlBillRepository",
    "build_db_url",
    "connection_scope",
    "ensure_bills_schema",
    "get_engine",
    "resolve_db_path",
]

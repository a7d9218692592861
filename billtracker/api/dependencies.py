from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Annotated, Any

from fastapi import Depends, Request

from billtracker.domain.errors import UnauthorizedError
from billtracker.infrastructure.persistence.sqla import (
    SqlBillRepository,
    get_engine,
    resolve_db_path,
)
from billtracker.logger import get_logger
from billtracker.settings import Settings


@dataclass(slots=True)
class ApiContext:
    settings: Settings
    logger: Any
    bills: SqlBillRepository


def build_context(root: Path, settings: Settings) -> ApiContext:
    logger = get_logger()
    db_path = resolve_db_path(root, settings.db_path)
    bills = SqlBillRepository(get_engine(db_path))
    logger.info(f"bill store ready at {db_path}")
    return ApiContext(settings=settings, logger=logger, bills=bills)


def get_ctx(request: Request) -> ApiContext:
    return request.app.state.ctx


def get_today() -> date:
    return date.today()


def resolve_owner_email(
    settings: Settings,
    *,
    user_email: str | None,
    authorization: str | None,
) -> str:
    """
    Decide which user a request acts for.

    The user email comes from a trusted upstream authenticator; when an API
    token is configured the bearer token must match as well. With
    ``skip_auth`` on, anonymous requests run as the development user.
    """
    email = str(user_email or "").strip().lower()
    token_ok = True
    if settings.api_token:
        scheme, _, supplied = str(authorization or "").partition(" ")
        token_ok = scheme.lower() == "bearer" and secrets.compare_digest(
            supplied.strip(), settings.api_token
        )
    if email and token_ok:
        return email
    if settings.skip_auth:
        return settings.dev_user_email
    raise UnauthorizedError("Unauthorized")


def get_owner_email(request: Request, ctx: Annotated[ApiContext, Depends(get_ctx)]) -> str:
    owner = resolve_owner_email(
        ctx.settings,
        user_email=request.headers.get("x-user-email"),
        authorization=request.headers.get("authorization"),
    )
    if owner == ctx.settings.dev_user_email and ctx.settings.skip_auth:
        ctx.logger.debug("auth skipped, acting as development user")
    return owner

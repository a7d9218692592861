from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends

from billtracker.api.dependencies import ApiContext, get_ctx, get_owner_email, get_today
from billtracker.api.schemas.bills import CreateBillPayload, UpdateBillPayload
from billtracker.api.schemas.common import ok
from billtracker.application.services.bill_service import (
    create_bill_payload,
    delete_bill_payload,
    get_bill_payload,
    list_bills_payload,
    summary_payload,
    toggle_paid_payload,
    update_bill_payload,
)
from billtracker.application.services.recurrence_service import (
    expand_recurring,
    expand_recurring_payload,
)
from billtracker.logger import current_request_id

router = APIRouter(tags=["bills"])

Ctx = Annotated[ApiContext, Depends(get_ctx)]
Owner = Annotated[str, Depends(get_owner_email)]
Today = Annotated[date, Depends(get_today)]


@router.get("/bills")
async def list_bills(ctx: Ctx, owner: Owner, today: Today) -> dict:
    if ctx.settings.expand_on_list:
        expand_recurring(ctx.bills, owner, today=today)
    return ok(list_bills_payload(ctx.bills, owner), request_id=current_request_id())


@router.post("/bills")
async def create_bill(payload: CreateBillPayload, ctx: Ctx, owner: Owner, today: Today) -> dict:
    bill = create_bill_payload(ctx.bills, owner, payload.model_dump(), today=today)
    return ok(bill, request_id=current_request_id())


@router.get("/bills/summary")
async def bills_summary(ctx: Ctx, owner: Owner) -> dict:
    return ok(summary_payload(ctx.bills, owner), request_id=current_request_id())


@router.post("/bills/recurrence/run")
async def run_recurrence(ctx: Ctx, owner: Owner, today: Today) -> dict:
    return ok(
        expand_recurring_payload(ctx.bills, owner, today=today),
        request_id=current_request_id(),
    )


@router.get("/bills/{bill_id}")
async def get_bill(bill_id: str, ctx: Ctx, owner: Owner) -> dict:
    return ok(get_bill_payload(ctx.bills, owner, bill_id), request_id=current_request_id())


@router.put("/bills/{bill_id}")
async def update_bill(
    bill_id: str,
    payload: UpdateBillPayload,
    ctx: Ctx,
    owner: Owner,
    today: Today,
) -> dict:
    result = update_bill_payload(ctx.bills, owner, bill_id, payload.changes(), today=today)
    return ok(result, request_id=current_request_id())


@router.post("/bills/{bill_id}/toggle-paid")
async def toggle_bill_paid(bill_id: str, ctx: Ctx, owner: Owner, today: Today) -> dict:
    return ok(
        toggle_paid_payload(ctx.bills, owner, bill_id, today=today),
        request_id=current_request_id(),
    )


@router.delete("/bills/{bill_id}")
async def delete_bill(bill_id: str, ctx: Ctx, owner: Owner) -> dict:
    return ok(delete_bill_payload(ctx.bills, owner, bill_id), request_id=current_request_id())

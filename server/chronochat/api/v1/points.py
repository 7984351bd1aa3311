from fastapi import APIRouter, Depends
from typing import Any, Dict, List

from chronochat.core.auth import AuthUser, current_user
from chronochat.db import repository
from chronochat.db.session import get_session
from chronochat.schemas.chat import PurchaseRequest
from chronochat.services import shop

router = APIRouter()


@router.get("/points")
async def get_points(user: AuthUser = Depends(current_user)) -> Dict[str, Any]:
    """The caller's point ledger, created on first access."""
    async with get_session() as session:
        ledger = await repository.get_or_create_ledger(session, user.id)
        return ledger.model_dump()


@router.get("/shop", dependencies=[Depends(current_user)])
async def get_shop() -> Dict[str, Any]:
    return {"items": [item.model_dump() for item in shop.CATALOG]}


@router.post("/shop/purchase", status_code=201)
async def purchase_item(body: PurchaseRequest, user: AuthUser = Depends(current_user)) -> Dict[str, Any]:
    """Buy a catalog item; fails with 402 when the balance is too low."""
    record, ledger = await shop.purchase(user.id, body.itemType, body.itemName)
    return {"purchase": record.model_dump(), "points": ledger.model_dump()}


@router.get("/purchases")
async def list_purchases(user: AuthUser = Depends(current_user)) -> List[Dict[str, Any]]:
    async with get_session() as session:
        rows = await repository.list_purchases(session, user.id)
        return [r.model_dump() for r in rows]

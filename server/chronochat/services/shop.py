from __future__ import annotations
import logging
from typing import List, Tuple

from chronochat.core.errors import InvalidRequest
from chronochat.db import repository
from chronochat.db.models import Purchase, UserPoints
from chronochat.db.session import get_session
from chronochat.schemas.chat import ShopItem
from chronochat.services.rewards import BOOST_COST, debit

logger = logging.getLogger(__name__)

STYLE_PACK_COST = 5

CATALOG: List[ShopItem] = [
    ShopItem(item_type="boost", item_name="Response Boost", points_cost=BOOST_COST,
             description="Priority response with extra detail"),
    ShopItem(item_type="style_pack", item_name="Creative", points_cost=STYLE_PACK_COST,
             description="Imaginative responses"),
    ShopItem(item_type="style_pack", item_name="Professional", points_cost=STYLE_PACK_COST,
             description="Formal tone"),
    ShopItem(item_type="style_pack", item_name="Casual", points_cost=STYLE_PACK_COST,
             description="Relaxed style"),
    ShopItem(item_type="style_pack", item_name="Technical", points_cost=STYLE_PACK_COST,
             description="Expert details"),
]


def find_item(item_type: str, item_name: str) -> ShopItem:
    for item in CATALOG:
        if item.item_type == item_type and item.item_name == item_name:
            return item
    raise InvalidRequest(f"Unknown shop item: {item_type}/{item_name}")


async def purchase(user_id: str, item_type: str, item_name: str) -> Tuple[Purchase, UserPoints]:
    """Record a purchase and debit the ledger in one unit of work."""
    item = find_item(item_type, item_name)
    async with get_session() as session:
        ledger = await repository.get_or_create_ledger(session, user_id)
        debit(ledger, item.points_cost)
        session.add(ledger)
        record = await repository.add_purchase(session, user_id, item.item_type, item.item_name, item.points_cost)
        await session.flush()
        await session.refresh(ledger)
    logger.info("Purchase user=%s item=%s/%s cost=%d", user_id, item.item_type, item.item_name, item.points_cost)
    return record, ledger

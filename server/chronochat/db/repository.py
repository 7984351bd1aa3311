from __future__ import annotations
from typing import List, Optional
from sqlmodel import select, desc
from sqlmodel.ext.asyncio.session import AsyncSession

from chronochat.core.errors import ConversationNotFound
from chronochat.db.models import Conversation, Message, Purchase, UserPoints, utcnow


# Conversations
async def list_conversations(session: AsyncSession, user_id: str) -> List[Conversation]:
    stmt = (
        select(Conversation)
        .where(Conversation.user_id == user_id)
        .order_by(desc(Conversation.updated_at))
    )
    result = await session.exec(stmt)
    return list(result.all())


async def create_conversation(session: AsyncSession, user_id: str, title: str) -> Conversation:
    conv = Conversation(user_id=user_id, title=title)
    session.add(conv)
    await session.flush()
    await session.refresh(conv)
    return conv


async def get_owned_conversation(session: AsyncSession, user_id: str, conversation_id: str) -> Conversation:
    """Fetch a conversation, treating other users' conversations as missing."""
    conv = await session.get(Conversation, conversation_id)
    if not conv or conv.user_id != user_id:
        raise ConversationNotFound()
    return conv


async def delete_conversation(session: AsyncSession, conv: Conversation) -> None:
    # Delete messages first (no relationship cascade defined)
    res = await session.exec(select(Message).where(Message.conversation_id == conv.id))
    for m in res.all():
        await session.delete(m)
    await session.delete(conv)


# Messages
async def list_messages(session: AsyncSession, conversation_id: str, limit: Optional[int] = None) -> List[Message]:
    """Messages in ascending creation order; ``limit`` keeps only the most recent N."""
    stmt = select(Message).where(Message.conversation_id == conversation_id)
    if limit is not None:
        stmt = stmt.order_by(desc(Message.created_at), desc(Message.id)).limit(limit)
        result = await session.exec(stmt)
        return list(reversed(result.all()))
    stmt = stmt.order_by(Message.created_at, Message.id)
    result = await session.exec(stmt)
    return list(result.all())


async def has_messages(session: AsyncSession, conversation_id: str) -> bool:
    stmt = select(Message.id).where(Message.conversation_id == conversation_id).limit(1)
    result = await session.exec(stmt)
    return result.first() is not None


async def add_message(session: AsyncSession, conv: Conversation, **fields) -> Message:
    msg = Message(conversation_id=conv.id, user_id=conv.user_id, **fields)
    session.add(msg)
    # Touch conversation
    conv.updated_at = msg.created_at
    session.add(conv)
    await session.flush()
    await session.refresh(msg)
    return msg


# Points
async def get_or_create_ledger(session: AsyncSession, user_id: str) -> UserPoints:
    ledger = await session.get(UserPoints, user_id)
    if ledger is None:
        ledger = UserPoints(user_id=user_id)
        session.add(ledger)
        await session.flush()
    return ledger


async def add_purchase(session: AsyncSession, user_id: str, item_type: str, item_name: str, points_cost: int) -> Purchase:
    purchase = Purchase(user_id=user_id, item_type=item_type, item_name=item_name, points_cost=points_cost)
    session.add(purchase)
    await session.flush()
    await session.refresh(purchase)
    return purchase


async def list_purchases(session: AsyncSession, user_id: str) -> List[Purchase]:
    stmt = (
        select(Purchase)
        .where(Purchase.user_id == user_id)
        .order_by(desc(Purchase.created_at), desc(Purchase.id))
    )
    result = await session.exec(stmt)
    return list(result.all())


def touch(conv: Conversation) -> None:
    conv.updated_at = utcnow()

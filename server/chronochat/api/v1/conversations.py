from fastapi import APIRouter, Depends
from typing import List, Dict

from chronochat.core.auth import AuthUser, current_user
from chronochat.db import repository
from chronochat.db.session import get_session
from chronochat.schemas.chat import ConversationCreate, ConversationRename

router = APIRouter()


@router.get("/conversations")
async def get_conversations(user: AuthUser = Depends(current_user)) -> List[Dict]:
    """Get the caller's conversations (most recently updated first)."""
    async with get_session() as session:
        rows = await repository.list_conversations(session, user.id)
        return [row.model_dump() for row in rows]


@router.post("/conversations", status_code=201)
async def create_conversation(body: ConversationCreate, user: AuthUser = Depends(current_user)) -> Dict:
    """Create a new conversation."""
    async with get_session() as session:
        conv = await repository.create_conversation(session, user.id, body.title)
        return conv.model_dump()


@router.patch("/conversations/{conversation_id}")
async def rename_conversation(
    conversation_id: str, body: ConversationRename, user: AuthUser = Depends(current_user)
) -> Dict:
    """Rename a conversation."""
    async with get_session() as session:
        conv = await repository.get_owned_conversation(session, user.id, conversation_id)
        conv.title = body.title
        repository.touch(conv)
        session.add(conv)
        await session.flush()
        await session.refresh(conv)
        return conv.model_dump()


@router.delete("/conversations/{conversation_id}")
async def delete_conversation(conversation_id: str, user: AuthUser = Depends(current_user)) -> Dict[str, str]:
    """Delete a conversation and its messages."""
    async with get_session() as session:
        conv = await repository.get_owned_conversation(session, user.id, conversation_id)
        await repository.delete_conversation(session, conv)
        return {"status": "deleted", "id": conversation_id}


@router.get("/conversations/{conversation_id}/messages")
async def list_messages(conversation_id: str, user: AuthUser = Depends(current_user)) -> List[Dict]:
    """List messages for a conversation (oldest first)."""
    async with get_session() as session:
        await repository.get_owned_conversation(session, user.id, conversation_id)
        rows = await repository.list_messages(session, conversation_id)
        return [r.model_dump() for r in rows]

"""Message orchestration: one chat request end to end.

Steps run in order, each in its own store session, so a failure part-way
leaves earlier writes in place:

1. load the conversation history
2. persist the user turn (skipped when regenerating)
3. build the prompt and call the response provider
4. apply the reward to the caller's ledger
5. persist the assistant turn with its metadata

Secondary writes are best-effort: they return a ``WriteOutcome`` that is
logged here instead of failing the request, except the user-turn write when
``FAIL_ON_USER_MESSAGE_WRITE`` is set.
"""
from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Awaitable, Callable, List, Optional, Tuple, TypeVar

from chronochat.config import get_settings
from chronochat.core.errors import ChatError, InsufficientPoints, InvalidRequest, StoreError
from chronochat.db import repository
from chronochat.db.models import Message
from chronochat.db.session import get_session
from chronochat.providers.base import ResponseProvider
from chronochat.schemas.chat import ChatRequest, ChatResponse, RegenerateRequest
from chronochat.services.prompts import build_turns, generation_config
from chronochat.services.rewards import BASE_POINTS, BOOST_COST, apply_reward, compute_reward, today_utc

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 50

T = TypeVar("T")


@dataclass(frozen=True)
class WriteOutcome:
    ok: bool
    value: object = None
    error: Optional[str] = None


async def _best_effort(label: str, write: Callable[[], Awaitable[T]]) -> WriteOutcome:
    try:
        value = await write()
    except ChatError as e:
        logger.error("Error %s: %s", label, e)
        return WriteOutcome(ok=False, error=str(e))
    return WriteOutcome(ok=True, value=value)


def title_from_message(message: str) -> str:
    if len(message) <= TITLE_MAX_LENGTH:
        return message
    return message[: TITLE_MAX_LENGTH - 3] + "..."


async def _load_history(user_id: str, conversation_id: str) -> Tuple[List[Message], bool]:
    """Prompt history (capped by HISTORY_LIMIT) and whether the conversation had any messages."""
    limit = get_settings().history_limit
    async with get_session() as session:
        await repository.get_owned_conversation(session, user_id, conversation_id)
        has_earlier = await repository.has_messages(session, conversation_id)
        history = await repository.list_messages(session, conversation_id, limit=limit)
    return history, has_earlier


async def _save_user_message(user_id: str, conversation_id: str, content: str) -> Message:
    async with get_session() as session:
        conv = await repository.get_owned_conversation(session, user_id, conversation_id)
        return await repository.add_message(session, conv, content=content, role="user")


async def _set_title(user_id: str, conversation_id: str, title: str) -> None:
    async with get_session() as session:
        conv = await repository.get_owned_conversation(session, user_id, conversation_id)
        conv.title = title
        session.add(conv)


async def _check_boost_balance(user_id: str, boost: bool) -> None:
    if not boost or not get_settings().enforce_boost_balance:
        return
    async with get_session() as session:
        ledger = await repository.get_or_create_ledger(session, user_id)
        if ledger.total_points < BOOST_COST:
            raise InsufficientPoints(required=BOOST_COST, available=ledger.total_points)


async def _update_ledger(user_id: str, boost: bool, today: date) -> int:
    async with get_session() as session:
        ledger = await repository.get_or_create_ledger(session, user_id)
        reward = compute_reward(ledger.last_activity_date, today, ledger.current_streak, boost)
        apply_reward(ledger, reward, today)
        session.add(ledger)
    logger.info(
        "Ledger user=%s awarded=%d cost=%d streak=%d total=%d",
        user_id, reward.points_awarded, reward.points_cost, reward.new_streak, ledger.total_points,
    )
    return reward.points_awarded


async def _save_assistant_message(
    user_id: str, conversation_id: str, content: str, tokens_used: int, response_time_ms: int, points_awarded: int
) -> Message:
    async with get_session() as session:
        conv = await repository.get_owned_conversation(session, user_id, conversation_id)
        return await repository.add_message(
            session,
            conv,
            content=content,
            role="assistant",
            tokens_used=tokens_used,
            response_time_ms=response_time_ms,
            points_awarded=points_awarded,
        )


async def _respond(
    user_id: str,
    conversation_id: str,
    message: str,
    style: str,
    boost: bool,
    provider: ResponseProvider,
    history: List[Message],
    started: float,
    today: Optional[date],
) -> ChatResponse:
    today = today or today_utc()
    turns = build_turns(style, boost, history, message)
    generation = await provider.generate(turns, generation_config(boost))
    response_time = int((time.perf_counter() - started) * 1000)

    ledger = await _best_effort("updating user points", lambda: _update_ledger(user_id, boost, today))
    points_awarded = ledger.value if ledger.ok else BASE_POINTS

    await _best_effort(
        "saving assistant message",
        lambda: _save_assistant_message(
            user_id, conversation_id, generation.text, generation.tokens_used, response_time, points_awarded
        ),
    )
    logger.info(
        "Chat user=%s conversation=%s style=%s boost=%s tokens=%d time_ms=%d points=%d",
        user_id, conversation_id, style, boost, generation.tokens_used, response_time, points_awarded,
    )
    return ChatResponse(
        response=generation.text,
        tokensUsed=generation.tokens_used,
        responseTime=response_time,
        pointsAwarded=points_awarded,
    )


async def handle_message(
    user_id: str,
    request: ChatRequest,
    provider: ResponseProvider,
    today: Optional[date] = None,
) -> ChatResponse:
    message = request.message.strip() if request.message else ""
    if not message or not request.conversationId:
        raise InvalidRequest()
    conversation_id = request.conversationId
    settings = get_settings()
    await _check_boost_balance(user_id, request.boost)

    started = time.perf_counter()
    history, has_earlier = await _load_history(user_id, conversation_id)

    saved = await _best_effort("saving user message", lambda: _save_user_message(user_id, conversation_id, message))
    if not saved.ok and settings.fail_on_user_message_write:
        raise StoreError(saved.error)

    if not has_earlier:
        await _best_effort(
            "setting conversation title",
            lambda: _set_title(user_id, conversation_id, title_from_message(message)),
        )

    return await _respond(
        user_id, conversation_id, message, request.style, request.boost, provider, history, started, today
    )


def _regeneration_source(messages: List[Message], message_id: int) -> Tuple[Message, int]:
    """Return the user turn to re-send and its index within ``messages``."""
    for idx, m in enumerate(messages):
        if m.id != message_id:
            continue
        if m.role == "user":
            return m, idx
        if idx > 0 and messages[idx - 1].role == "user":
            return messages[idx - 1], idx - 1
        break
    raise InvalidRequest("No user message precedes the message to regenerate")


async def regenerate_response(
    user_id: str,
    request: RegenerateRequest,
    provider: ResponseProvider,
    today: Optional[date] = None,
) -> ChatResponse:
    """Re-answer a stored user message without inserting it again."""
    if not request.conversationId or request.messageId is None:
        raise InvalidRequest("Conversation ID and message ID are required")
    conversation_id = request.conversationId
    await _check_boost_balance(user_id, request.boost)

    started = time.perf_counter()
    async with get_session() as session:
        await repository.get_owned_conversation(session, user_id, conversation_id)
        messages = await repository.list_messages(session, conversation_id)
    source, idx = _regeneration_source(messages, request.messageId)

    history = messages[:idx]
    limit = get_settings().history_limit
    if limit is not None:
        history = history[-limit:]

    return await _respond(
        user_id, conversation_id, source.content, request.style, request.boost, provider, history, started, today
    )

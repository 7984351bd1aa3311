from __future__ import annotations
from datetime import date, datetime, timezone
from typing import Optional
from uuid import uuid4
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Conversation(SQLModel, table=True):
    __tablename__ = "conversations"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    user_id: str = Field(index=True)
    title: str = "New Conversation"
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Message(SQLModel, table=True):
    __tablename__ = "messages"

    id: Optional[int] = Field(default=None, primary_key=True)
    conversation_id: str = Field(index=True, foreign_key="conversations.id")
    user_id: str = Field(index=True)
    content: str
    role: str  # "user" or "assistant"
    tokens_used: Optional[int] = None
    response_time_ms: Optional[int] = None
    points_awarded: Optional[int] = None
    created_at: datetime = Field(default_factory=utcnow, index=True)


class UserPoints(SQLModel, table=True):
    __tablename__ = "user_points"

    user_id: str = Field(primary_key=True)
    total_points: int = 0
    points_spent: int = 0
    current_streak: int = 0
    last_activity_date: Optional[date] = None


class Purchase(SQLModel, table=True):
    __tablename__ = "purchases"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    item_type: str
    item_name: str
    points_cost: int
    created_at: datetime = Field(default_factory=utcnow)

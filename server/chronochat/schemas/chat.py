from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    # Emptiness is checked by the orchestrator so it surfaces as InvalidRequest
    message: Optional[str] = None
    conversationId: Optional[str] = None
    style: str = "default"
    boost: bool = False


class RegenerateRequest(BaseModel):
    conversationId: Optional[str] = None
    messageId: Optional[int] = None
    style: str = "default"
    boost: bool = False


class ChatResponse(BaseModel):
    response: str
    tokensUsed: int
    responseTime: int
    pointsAwarded: int


class ConversationCreate(BaseModel):
    title: str = Field(default="New Conversation", min_length=1, max_length=200)


class ConversationRename(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)


class PurchaseRequest(BaseModel):
    itemType: str
    itemName: str


class ShopItem(BaseModel):
    item_type: str
    item_name: str
    points_cost: int
    description: str = ""

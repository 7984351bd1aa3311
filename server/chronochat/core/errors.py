from __future__ import annotations
from typing import Optional


class ChatError(Exception):
    """Base for failures surfaced to the caller as ``{"error": message}``."""

    status_code: int = 500
    default_message: str = "An error occurred while processing your request"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self.args[0])


class Unauthorized(ChatError):
    status_code = 401
    default_message = "Unauthorized"


class InvalidRequest(ChatError):
    status_code = 400
    default_message = "Message and conversation ID are required"


class ConversationNotFound(ChatError):
    status_code = 404
    default_message = "Conversation not found"


class InsufficientPoints(ChatError):
    status_code = 402
    default_message = "Insufficient points"

    def __init__(self, required: int, available: int) -> None:
        super().__init__(f"You need {required} points but only have {available}.")
        self.required = required
        self.available = available


class ProviderError(ChatError):
    status_code = 500
    default_message = "Failed to get response from Gemini"


class StoreError(ChatError):
    status_code = 500
    default_message = "Persistent store operation failed"

from __future__ import annotations
from enum import Enum
from typing import Dict, Iterable, List

from chronochat.db.models import Message
from chronochat.providers.base import GenerationConfig, Turn


class Style(str, Enum):
    default = "default"
    creative = "creative"
    professional = "professional"
    casual = "casual"
    technical = "technical"


STYLE_PROMPTS: Dict[str, str] = {
    Style.default.value: (
        "You are a helpful AI assistant powered by Gemini. "
        "Provide accurate, helpful, and engaging responses."
    ),
    Style.creative.value: (
        "You are a creative and imaginative AI assistant. "
        "Respond with flair, creativity, and engaging storytelling elements."
    ),
    Style.professional.value: (
        "You are a professional AI assistant. "
        "Provide formal, structured, and business-appropriate responses."
    ),
    Style.casual.value: (
        "You are a casual and friendly AI assistant. "
        "Use a relaxed, conversational tone with occasional humor."
    ),
    Style.technical.value: (
        "You are a technical expert AI assistant. "
        "Provide detailed, precise, and technically accurate responses."
    ),
}

BOOST_DIRECTIVE = "This is a boosted request - provide an especially detailed and comprehensive response."

MAX_OUTPUT_TOKENS = 2048
BOOSTED_MAX_OUTPUT_TOKENS = 4096


def system_prompt(style: str, boost: bool) -> str:
    # Unknown styles fall back to the default template
    prompt = STYLE_PROMPTS.get(style, STYLE_PROMPTS[Style.default.value])
    if boost:
        prompt += " " + BOOST_DIRECTIVE
    return prompt


def build_turns(style: str, boost: bool, history: Iterable[Message], message: str) -> List[Turn]:
    """System instruction first (sent as a user turn), then history, then the new message."""
    turns = [Turn(role="user", text=system_prompt(style, boost))]
    for m in history:
        turns.append(Turn(role="model" if m.role == "assistant" else "user", text=m.content))
    turns.append(Turn(role="user", text=message))
    return turns


def generation_config(boost: bool) -> GenerationConfig:
    return GenerationConfig(max_output_tokens=BOOSTED_MAX_OUTPUT_TOKENS if boost else MAX_OUTPUT_TOKENS)

from __future__ import annotations
from typing import List

from chronochat.providers.base import Generation, GenerationConfig, Turn


class EchoProvider:
    """Offline stand-in used when no Gemini key is configured."""

    id = "echo"

    async def generate(self, turns: List[Turn], config: GenerationConfig) -> Generation:
        last = turns[-1].text if turns else ""
        text = f"[gemini-mock] You said: '{last}'"
        return Generation(text=text, tokens_used=len(text.split()))

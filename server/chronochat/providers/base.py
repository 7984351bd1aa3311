from __future__ import annotations
from dataclasses import dataclass
from typing import List, Protocol


@dataclass(frozen=True)
class Turn:
    role: str  # "user" or "model"
    text: str


@dataclass(frozen=True)
class GenerationConfig:
    temperature: float = 0.7
    top_k: int = 40
    top_p: float = 0.95
    max_output_tokens: int = 2048


@dataclass(frozen=True)
class Generation:
    text: str
    tokens_used: int = 0


class ResponseProvider(Protocol):
    id: str

    async def generate(self, turns: List[Turn], config: GenerationConfig) -> Generation:
        """Return the first candidate's text; raise ProviderError on failure."""
        ...

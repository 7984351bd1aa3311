from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional
import httpx

from chronochat.core.errors import ProviderError
from chronochat.providers.base import Generation, GenerationConfig, Turn

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
]


class GeminiProvider:
    id = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash-exp",
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _to_gemini_payload(self, turns: List[Turn], config: GenerationConfig) -> Dict[str, Any]:
        contents: List[Dict[str, Any]] = [
            {"role": t.role, "parts": [{"text": t.text}]} for t in turns
        ]
        return {
            "contents": contents,
            "generationConfig": {
                "temperature": config.temperature,
                "topK": config.top_k,
                "topP": config.top_p,
                "maxOutputTokens": config.max_output_tokens,
            },
            "safetySettings": SAFETY_SETTINGS,
        }

    async def generate(self, turns: List[Turn], config: GenerationConfig) -> Generation:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        payload = self._to_gemini_payload(turns, config)
        # Single attempt; the caller may resubmit
        timeout = httpx.Timeout(connect=10.0, read=self.timeout, write=30.0, pool=10.0)
        try:
            async with httpx.AsyncClient(timeout=timeout, trust_env=True, transport=self._transport) as client:
                resp = await client.post(url, json=payload, headers={"x-goog-api-key": self.api_key})
        except httpx.HTTPError as e:
            logger.error("Gemini request failed model=%s: %s", self.model, e)
            raise ProviderError() from e

        if not resp.is_success:
            logger.error("Gemini API error status=%s body=%s", resp.status_code, resp.text)
            raise ProviderError()

        try:
            obj = resp.json()
        except ValueError as e:
            logger.error("Gemini returned a non-JSON body: %s", resp.text[:200])
            raise ProviderError() from e

        candidates = obj.get("candidates") or []
        if not candidates:
            raise ProviderError("No response generated from Gemini")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(p.get("text") or "" for p in parts)
        if not text:
            logger.warning(
                "Gemini candidate had no text finishReason=%s", candidates[0].get("finishReason")
            )
            raise ProviderError("No response generated from Gemini")

        usage = obj.get("usageMetadata") or {}
        return Generation(text=text, tokens_used=int(usage.get("totalTokenCount") or 0))

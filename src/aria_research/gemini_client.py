"""Gemini generateContent REST wrapper (Google Search grounding)."""

from __future__ import annotations

import json

import httpx
import structlog
from tenacity import retry, stop_after_attempt, wait_exponential

from aria_research.config import Settings
from aria_research.models.research import GroundingRef, RawResponse

logger = structlog.get_logger()

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


def generate_content_url(model: str) -> str:
    model_id = model.split("/", 1)[1] if "/" in model else model
    return f"{GEMINI_API_BASE}/{model_id}:generateContent"


class GeminiClient:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    async def generate_research(self, prompt: str) -> RawResponse:
        """Grounded research call. Empty RawResponse on failure."""
        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "tools": [{"googleSearch": {}}],
            "generationConfig": {
                "thinkingConfig": {"thinkingBudget": self.settings.RESEARCH_THINKING_BUDGET},
            },
        }
        try:
            raw = await self._call_api_with_retry(self.settings.RESEARCH_MODEL, body)
        except Exception as e:
            logger.warning("gemini_api_error", model=self.settings.RESEARCH_MODEL, error=str(e))
            return RawResponse()

        response = self._parse_response(raw)
        logger.info(
            "gemini_research",
            model=self.settings.RESEARCH_MODEL,
            chars=len(response.text),
            grounding_refs=len(response.grounding_refs),
        )
        return response

    async def refine(self, prompt: str) -> list[str]:
        """JSON-mode call returning a list of rewritten decisions. [] on failure."""
        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": {"type": "ARRAY", "items": {"type": "STRING"}},
            },
        }
        try:
            raw = await self._call_api_with_retry(self.settings.REFINE_MODEL, body)
        except Exception as e:
            logger.warning("gemini_api_error", model=self.settings.REFINE_MODEL, error=str(e))
            return []

        text = self._extract_text(raw)
        try:
            data = json.loads(text or "[]")
        except json.JSONDecodeError:
            logger.warning("gemini_parse_error", raw_text=text[:200])
            return []
        if not isinstance(data, list):
            logger.warning("gemini_parse_error", raw_text=text[:200])
            return []
        return [item.strip() for item in data if isinstance(item, str) and item.strip()]

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=1, max=10), reraise=True)
    async def _call_api_with_retry(self, model: str, body: dict) -> dict:
        """Low-level HTTP POST with retry on transient errors."""
        async with httpx.AsyncClient() as http:
            response = await http.post(
                generate_content_url(model),
                params={"key": self.settings.GEMINI_API_KEY},
                headers={"Content-Type": "application/json"},
                json=body,
                timeout=self.settings.GEMINI_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            return response.json()

    @staticmethod
    def _first_candidate(raw: dict) -> dict:
        candidates = raw.get("candidates") or []
        if not candidates or not isinstance(candidates[0], dict):
            return {}
        return candidates[0]

    @classmethod
    def _extract_text(cls, raw: dict) -> str:
        """Concatenate the text parts of the first candidate, skipping thought parts."""
        content = cls._first_candidate(raw).get("content") or {}
        parts = content.get("parts") or []
        return "".join(
            part.get("text", "")
            for part in parts
            if isinstance(part, dict) and not part.get("thought")
        )

    @classmethod
    def _parse_response(cls, raw: dict) -> RawResponse:
        metadata = cls._first_candidate(raw).get("groundingMetadata") or {}
        refs = []
        for chunk in metadata.get("groundingChunks") or []:
            web = chunk.get("web") if isinstance(chunk, dict) else None
            if not isinstance(web, dict) or not web.get("uri"):
                continue
            refs.append(
                GroundingRef(uri=web["uri"], title=web.get("title"), source=web.get("domain"))
            )
        return RawResponse(text=cls._extract_text(raw), grounding_refs=refs)

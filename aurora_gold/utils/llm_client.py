from __future__ import annotations
from typing import Optional, Any
import httpx
from aurora_gold.config import Settings, settings as default_settings
from aurora_gold.utils.logger import get_logger

logger = get_logger(__name__)


class LLMError(Exception):
    """Gemini call failed: transport error, bad status or no text in the reply."""


class GeminiClient:
    """
    Minimal Gemini generateContent client over plain HTTPS.
    - API key goes in the ``key`` query parameter
    - reply text is read from candidates[0].content.parts[0].text
    - every failure is raised as LLMError; callers decide the fallback
    """

    def __init__(
        self,
        config:    Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        config          = config or default_settings
        self.enabled    = config.gemini_configured
        self.model      = config.gemini_model
        self.timeout    = config.llm_timeout_seconds
        self._api_key   = config.gemini_api_key.strip()
        self._url       = f"{config.gemini_base_url.rstrip('/')}/models/{self.model}:generateContent"
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        if self.enabled:
            logger.info("✓ Gemini LLM | model=%s", self.model)
        else:
            logger.warning("⚠ LLM disabled — set GEMINI_API_KEY in .env")

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def generate(
        self,
        prompt:            str,
        max_output_tokens: int   = 120,
        temperature:       float = 0.3,
        top_p:             float = 0.8,
    ) -> str:
        if not self.enabled:
            raise LLMError("Gemini API key not configured")

        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "maxOutputTokens": max_output_tokens,
                "temperature":     temperature,
                "topP":            top_p,
            },
        }

        try:
            response = await self._get_client().post(
                self._url,
                params={"key": self._api_key},
                json=body,
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Gemini [%s] HTTP %s: %s", self.model, e.response.status_code, e.response.text[:80])
            raise LLMError(f"Gemini returned HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Gemini [%s]: %s", self.model, str(e)[:80])
            raise LLMError(str(e)[:150] or type(e).__name__) from e

        text = self._extract_text(data)
        if not text:
            raise LLMError(f"Invalid Gemini response format: {str(data)[:150]}")
        return text.strip()

    @staticmethod
    def _extract_text(data: Any) -> Optional[str]:
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None
        if not isinstance(text, str) or not text.strip():
            return None
        return text

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

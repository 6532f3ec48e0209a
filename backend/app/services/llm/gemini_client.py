import logging
import httpx
import backoff
from typing import Any, Dict, List, Optional

from app.services.pharmacogenomics.config import LLMConfig, get_llm_config
from app.services.llm.text_generator import extract_json_object

logger = logging.getLogger(__name__)


class GeminiClient:
    """
    Client for Google's Gemini generateContent REST API.

    Keys from the configuration are tried in order; the first non-empty answer
    wins. Every failure path returns None so callers can fall back to
    deterministic text.
    """

    def __init__(
        self,
        api_keys: Optional[List[str]] = None,
        model: Optional[str] = None,
        config: Optional[LLMConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or get_llm_config()
        self.api_keys = api_keys if api_keys is not None else list(self.config.api_keys)
        self.model = model or self.config.model
        self._http_client = http_client

    @property
    def is_configured(self) -> bool:
        return bool(self.api_keys)

    def _endpoint(self) -> str:
        return f"{self.config.api_base_url}/{self.model}:generateContent"

    @backoff.on_exception(
        backoff.expo,
        (httpx.RequestError, httpx.HTTPStatusError),
        max_tries=2,
        giveup=lambda e: isinstance(e, httpx.HTTPStatusError) and e.response.status_code < 500
    )
    async def _post(self, client: httpx.AsyncClient, api_key: str, prompt: str) -> str:
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0.1, "topP": 0.85},
        }
        response = await client.post(self._endpoint(), params={"key": api_key}, json=payload)
        response.raise_for_status()

        data = response.json()
        return data["candidates"][0]["content"]["parts"][0]["text"]

    async def generate_text(self, prompt: str, *, timeout: float) -> Optional[str]:
        """Free-text completion, or None when no key produced an answer."""
        if not self.is_configured:
            logger.info("Gemini API key not configured, skipping LLM call")
            return None

        client = self._http_client or httpx.AsyncClient(timeout=timeout)
        try:
            for api_key in self.api_keys:
                logger.info("Sending request to Gemini", extra={"model": self.model})
                try:
                    text = await self._post(client, api_key, prompt)
                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    logger.warning(f"Error communicating with Gemini: {str(e)}")
                    continue
                except (KeyError, IndexError, TypeError, ValueError) as e:
                    logger.warning(f"Unexpected Gemini response shape: {str(e)}")
                    continue

                if text:
                    logger.info("Gemini request successful", extra={"response_length": len(text)})
                    return text
            return None
        finally:
            if self._http_client is None:
                await client.aclose()

    async def generate_json(self, prompt: str, *, timeout: float) -> Optional[Dict[str, Any]]:
        """Completion parsed as a JSON object, or None."""
        text = await self.generate_text(prompt, timeout=timeout)
        return extract_json_object(text)

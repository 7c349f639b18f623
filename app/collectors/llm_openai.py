"""OpenAI (ChatGPT) answer provider."""

import json
import logging
from typing import Any

import httpx

from app.collectors.llm_base import BaseLlmCollector, LlmResponse
from app.core.exceptions import ProviderError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4"
API_URL = "https://api.openai.com/v1/chat/completions"
MAX_TOKENS = 1500
TEMPERATURE = 0.7

SYSTEM_PROMPT = """You are an AI assistant that analyzes search queries and provides comprehensive responses.
Pay special attention to mentions of '{brand}'.
Analyze the sentiment towards {brand} if mentioned, and provide detailed analysis.

Context: {context}"""


class OpenAiCollector(BaseLlmCollector):
    """Query the OpenAI Chat Completions API."""

    provider = "chatgpt"

    def __init__(
        self,
        api_key: str,
        brand: str,
        model: str = DEFAULT_MODEL,
        api_url: str = API_URL,
        timeout: float = 60.0,
    ):
        super().__init__(api_key=api_key)
        self.brand = brand
        self.model = model
        self.api_url = api_url
        self.timeout = timeout

    def build_payload(self, keyword: str, query: str, context: dict[str, Any] | None = None) -> dict:
        system_prompt = SYSTEM_PROMPT.format(
            brand=self.brand,
            context=json.dumps(context or {}, ensure_ascii=False, default=str),
        )
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": f'Analyze this query about "{keyword}": {query}'},
            ],
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
        }

    async def query_llm(self, keyword: str, query: str, context: dict[str, Any] | None = None) -> LlmResponse:
        """Send the prompt and return the first completion."""
        payload = self.build_payload(keyword, query, context)
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(self.api_url, json=payload, headers=headers)

                if resp.status_code >= 400:
                    try:
                        error_msg = resp.json().get("error", {}).get("message", resp.text[:500])
                    except ValueError:
                        error_msg = resp.text[:500]
                    logger.error("OpenAI API %d for model=%s: %s", resp.status_code, self.model, error_msg)
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderError(f"OpenAI analysis failed: {e}", cause=e, provider=self.provider) from e

        try:
            text = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError("OpenAI analysis failed: malformed completion payload", cause=e) from e

        return LlmResponse(
            text=text,
            model=data.get("model", self.model),
            usage=data.get("usage", {}),
        )

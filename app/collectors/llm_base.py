"""Answer-provider interface.

A collector sends one (keyword, query, context) prompt to a generative-AI
provider and returns the raw answer plus usage metadata. Collectors do not
retry and do not classify; failures surface as ``ProviderError``.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class LlmResponse:
    """Raw response from an LLM API."""

    text: str
    model: str
    usage: dict[str, Any] = field(default_factory=dict)  # prompt_tokens, completion_tokens, total_tokens


class BaseLlmCollector(ABC):
    """Abstract base for answer providers."""

    provider: str = ""

    def __init__(self, api_key: str):
        self.api_key = api_key

    @abstractmethod
    async def query_llm(self, keyword: str, query: str, context: dict[str, Any] | None = None) -> LlmResponse:
        """Ask the provider about *query* in the context of *keyword*."""
        ...

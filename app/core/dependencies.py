from app.collectors.llm_base import BaseLlmCollector
from app.collectors.llm_openai import OpenAiCollector
from app.core.config import settings


def get_answer_provider() -> BaseLlmCollector:
    """Answer provider used by the analyze endpoint."""
    return OpenAiCollector(
        api_key=settings.openai_api_key,
        brand=settings.brand_name,
        model=settings.openai_model,
        api_url=settings.openai_api_url,
        timeout=settings.provider_timeout_seconds,
    )

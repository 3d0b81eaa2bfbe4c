from collections.abc import AsyncIterator
from functools import lru_cache

from deckgate.db.session import SessionLocal
from deckgate.services.ai_rules import AiRuleEvaluator
from deckgate.services.config_store import ConfigProvider, SqlConfigProvider
from deckgate.services.llm import LLMClient
from deckgate.services.pipeline import ValidationPipeline
from deckgate.services.url_resolver import UrlResolver


def get_config_provider() -> ConfigProvider:
    return SqlConfigProvider(SessionLocal)


@lru_cache
def get_llm_client() -> LLMClient:
    return LLMClient()


def get_ai_evaluator() -> AiRuleEvaluator:
    return AiRuleEvaluator(get_llm_client())


@lru_cache
def get_pipeline() -> ValidationPipeline:
    # One pipeline per process so a new run can mark older runs of the same deck stale.
    return ValidationPipeline(get_ai_evaluator())


async def get_resolver() -> AsyncIterator[UrlResolver]:
    resolver = UrlResolver()
    try:
        yield resolver
    finally:
        await resolver.aclose()

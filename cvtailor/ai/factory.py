from cvtailor.ai.config import AIConfig, load_ai_config
from cvtailor.ai.failover import FailoverCaller
from cvtailor.ai.keys import load_credential_pool
from cvtailor.ai.types import BackendFactory

from cvtailor.ai.providers.gemini_provider import GeminiProvider
from cvtailor.ai.providers.openai_provider import OpenAIProvider


def get_backend_factory(provider: str) -> BackendFactory:
    if provider == "gemini":
        return GeminiProvider

    if provider == "openai":
        return OpenAIProvider

    raise ValueError(f"Unsupported AI_PROVIDER='{provider}'")


def build_failover_caller(cfg: AIConfig | None = None) -> FailoverCaller:
    cfg = cfg or load_ai_config()
    backend_factory = get_backend_factory(cfg.provider)
    pool = load_credential_pool(cfg.provider)
    return FailoverCaller(
        pool,
        backend_factory,
        default_config=cfg.generation_config(),
    )

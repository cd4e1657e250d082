import os
from dataclasses import dataclass

from cvtailor.ai.types import GenerationConfig

_DEFAULT_MODELS = {
    "gemini": "gemini-1.5-flash",
    "openai": "gpt-4o-mini",
}


@dataclass(frozen=True)
class AIConfig:
    provider: str
    model: str
    temperature: float
    top_p: float
    max_output_tokens: int

    def generation_config(self) -> GenerationConfig:
        return GenerationConfig(
            model=self.model,
            temperature=self.temperature,
            top_p=self.top_p,
            max_output_tokens=self.max_output_tokens,
        )


def load_ai_config() -> AIConfig:
    provider = os.getenv("AI_PROVIDER", "gemini").strip().lower()
    model = (os.getenv("AI_MODEL") or _DEFAULT_MODELS.get(provider, "gemini-1.5-flash")).strip()
    return AIConfig(
        provider=provider,
        model=model,
        temperature=float(os.getenv("AI_TEMPERATURE", "0.7")),
        top_p=float(os.getenv("AI_TOP_P", "0.9")),
        max_output_tokens=int(os.getenv("AI_MAX_OUTPUT_TOKENS", "8192")),
    )

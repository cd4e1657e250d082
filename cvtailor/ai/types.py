from dataclasses import dataclass
from typing import Callable, Protocol


@dataclass(frozen=True)
class GenerationConfig:
    model: str
    temperature: float = 0.7
    top_p: float = 0.9
    max_output_tokens: int = 8192


class GenerationBackend(Protocol):
    async def generate(self, prompt: str, config: GenerationConfig) -> str: ...


BackendFactory = Callable[[str], GenerationBackend]

from __future__ import annotations

import os
from typing import Optional

from openai import APIError, APIStatusError, AsyncOpenAI

from cvtailor.ai.errors import BackendError
from cvtailor.ai.types import GenerationConfig


class OpenAIProvider:
    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timeout_s: float = 60.0,
    ):
        key = (api_key or "").strip()
        if not key:
            raise RuntimeError("OPENAI_API_KEY is missing")

        # Retries belong to FailoverCaller.
        self._client = AsyncOpenAI(
            api_key=key,
            base_url=(base_url or os.getenv("OPENAI_BASE_URL") or None),
            timeout=float(os.getenv("OPENAI_TIMEOUT_S", str(timeout_s))),
            max_retries=0,
        )

    async def generate(self, prompt: str, config: GenerationConfig) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=config.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=config.temperature,
                top_p=config.top_p,
                max_tokens=config.max_output_tokens,
            )
        except APIStatusError as exc:
            raise BackendError(str(exc), status=exc.status_code) from exc
        except APIError as exc:
            raise BackendError(str(exc)) from exc

        content = response.choices[0].message.content if response.choices else ""
        if not content:
            raise BackendError("Empty response from OpenAI")
        return content

    async def aclose(self) -> None:
        await self._client.close()

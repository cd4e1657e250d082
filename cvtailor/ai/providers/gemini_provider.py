from __future__ import annotations

from google import genai
from google.genai import errors, types

from cvtailor.ai.errors import BackendError
from cvtailor.ai.types import GenerationConfig


class GeminiProvider:
    def __init__(self, api_key: str):
        key = (api_key or "").strip()
        if not key:
            raise RuntimeError("GEMINI_API_KEY is missing")
        self._client = genai.Client(api_key=key)

    async def generate(self, prompt: str, config: GenerationConfig) -> str:
        try:
            response = await self._client.aio.models.generate_content(
                model=config.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=config.temperature,
                    top_p=config.top_p,
                    max_output_tokens=config.max_output_tokens,
                ),
            )
        except errors.APIError as exc:
            raise BackendError(str(exc), status=exc.code) from exc

        text = response.text
        if not text:
            raise BackendError("Empty response from Gemini")
        return text

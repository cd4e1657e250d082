from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Iterator, Mapping

from cvtailor.ai.errors import ConfigurationError
from cvtailor.core.config import settings

logger = logging.getLogger(__name__)

_ENV_PREFIXES = {
    "gemini": "GEMINI_API_KEY",
    "openai": "OPENAI_API_KEY",
}


def key_preview(key: str, length: int = 10) -> str:
    return f"{key[:length]}..."


def looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return (
        "your-" in lower
        or "your_" in lower
        or lower.startswith("replace_")
        or lower in {"changeme", "todo"}
    )


def is_valid_key(value: str | None, min_length: int | None = None) -> bool:
    if not value:
        return False
    cleaned = value.strip()
    limit = settings.ai_key_min_length if min_length is None else min_length
    if len(cleaned) < limit:
        return False
    return not looks_like_placeholder(cleaned)


@dataclass(frozen=True)
class CredentialPool:
    """Ordered credentials; position 0 is the primary key."""

    keys: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.keys:
            raise ConfigurationError("Credential pool must contain at least one API key.")
        if len(set(self.keys)) != len(self.keys):
            raise ConfigurationError("Credential pool contains duplicate API keys.")

    def __len__(self) -> int:
        return len(self.keys)

    def __getitem__(self, index: int) -> str:
        return self.keys[index]

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys)

    def previews(self) -> list[str]:
        return [key_preview(key) for key in self.keys]


def load_credential_pool(
    provider: str = "gemini",
    environ: Mapping[str, str] | None = None,
    *,
    min_length: int | None = None,
    max_numbered: int | None = None,
) -> CredentialPool:
    """Collect `<PREFIX>_1..N` keys, falling back to the bare `<PREFIX>` variable."""
    env = os.environ if environ is None else environ
    prefix = _ENV_PREFIXES.get(provider)
    if prefix is None:
        raise ConfigurationError(f"Unsupported AI_PROVIDER='{provider}'")

    limit = settings.ai_max_numbered_keys if max_numbered is None else max_numbered
    keys: list[str] = []
    for idx in range(1, limit + 1):
        candidate = (env.get(f"{prefix}_{idx}") or "").strip()
        if not is_valid_key(candidate, min_length):
            continue
        if candidate not in keys:
            keys.append(candidate)

    if not keys:
        primary = (env.get(prefix) or "").strip()
        if is_valid_key(primary, min_length):
            keys.append(primary)

    if not keys:
        raise ConfigurationError(
            f"No valid API keys found. Set {prefix} or {prefix}_1..{prefix}_{limit}."
        )

    pool = CredentialPool(tuple(keys))
    logger.info("credential_pool_loaded provider=%s keys=%s", provider, len(pool))
    for idx, preview in enumerate(pool.previews(), start=1):
        logger.info("credential_pool_key index=%s preview=%s", idx, preview)
    return pool

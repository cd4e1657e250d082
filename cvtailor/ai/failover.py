from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from cvtailor.ai.errors import FailureClass, KeysExhaustedError
from cvtailor.ai.keys import CredentialPool, key_preview
from cvtailor.ai.types import BackendFactory, GenerationBackend, GenerationConfig
from cvtailor.core.config import settings

logger = logging.getLogger(__name__)

_INVALID_KEY_MARKERS = (
    "api_key_invalid",
    "api key not valid",
    "invalid api key",
    "invalid_api_key",
    "incorrect api key",
)
_QUOTA_MARKERS = (
    "quota",
    "resource_exhausted",
)
_RATE_LIMIT_MARKERS = (
    "rate_limit_exceeded",
    "rate limit",
    "too many requests",
    "429",
)


def _error_status(exc: BaseException) -> int | None:
    for attr in ("status", "status_code", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _error_message(exc: BaseException) -> str:
    parts = [str(exc)]
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message not in parts:
        parts.append(message)
    return " ".join(parts).lower()


def classify_failure(exc: BaseException) -> FailureClass | None:
    """Return the retryable failure class of `exc`, or None when it must not be retried."""
    message = _error_message(exc)
    status = _error_status(exc)

    if any(marker in message for marker in _INVALID_KEY_MARKERS) or status == 401:
        return "invalid_key"
    if any(marker in message for marker in _QUOTA_MARKERS) or status == 403:
        return "quota"
    if any(marker in message for marker in _RATE_LIMIT_MARKERS) or status == 429:
        return "rate_limit"
    return None


@dataclass
class FailoverState:
    current_index: int = 0


class FailoverCaller:
    """Runs generation requests against a credential pool with key rotation.

    Quota, rate-limit and invalid-key failures rotate to the next credential
    after a short backoff. Every other error propagates immediately. After a
    success the shared state goes back to the primary credential.

    Rotation inside one call is tracked locally; the shared `FailoverState` is
    only read at the start and written under a lock, so concurrent calls never
    observe each other's intermediate index.
    """

    def __init__(
        self,
        pool: CredentialPool,
        backend_factory: BackendFactory,
        *,
        default_config: GenerationConfig,
        timeout_s: float | None = None,
        backoff_s: float | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        state: FailoverState | None = None,
    ):
        self._pool = pool
        self._backend_factory = backend_factory
        self._default_config = default_config
        self._timeout_s = settings.ai_timeout_s if timeout_s is None else timeout_s
        self._backoff_s = settings.ai_retry_backoff_s if backoff_s is None else backoff_s
        self._sleep = sleep
        self._state = state or FailoverState()
        self._lock = asyncio.Lock()
        self._backends: dict[int, GenerationBackend] = {}

    @property
    def pool(self) -> CredentialPool:
        return self._pool

    @property
    def current_index(self) -> int:
        return self._state.current_index

    @property
    def default_config(self) -> GenerationConfig:
        return self._default_config

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    def backend_for(self, index: int) -> GenerationBackend:
        """Backend for the credential at `index`, built once and reused for every call."""
        backend = self._backends.get(index)
        if backend is None:
            backend = self._backend_factory(self._pool[index])
            self._backends[index] = backend
            logger.info("failover_backend_created key=%s", index + 1)
        return backend

    async def aclose(self) -> None:
        backends = list(self._backends.values())
        self._backends.clear()
        for backend in backends:
            close = getattr(backend, "aclose", None)
            if close is not None:
                await close()

    def describe_keys(self) -> dict[str, Any]:
        current = self._state.current_index
        return {
            "total": len(self._pool),
            "current": current + 1,
            "keys": [
                {"id": idx + 1, "preview": preview, "active": idx == current}
                for idx, preview in enumerate(self._pool.previews())
            ],
        }

    async def rotate(self) -> bool:
        """Move the shared state to the next credential; False when there is no alternative."""
        if len(self._pool) <= 1:
            logger.warning("failover_rotate_skipped reason=single_key")
            return False
        async with self._lock:
            old_index = self._state.current_index
            self._state.current_index = (old_index + 1) % len(self._pool)
            logger.info(
                "failover_rotate from_key=%s to_key=%s",
                old_index + 1,
                self._state.current_index + 1,
            )
        return True

    async def generate(
        self,
        prompt: str,
        config: GenerationConfig | None = None,
        max_retries: int | None = None,
    ) -> str:
        if not prompt or not prompt.strip():
            raise ValueError("prompt must be a non-empty string")

        pool_size = len(self._pool)
        budget = pool_size if max_retries is None else max_retries
        if budget < 1:
            raise ValueError("max_retries must be at least 1")

        generation_config = config or self._default_config

        async with self._lock:
            index = self._state.current_index

        last_error: Exception | None = None
        last_class: FailureClass | None = None
        attempts = 0

        for attempt in range(budget):
            attempts += 1
            credential = self._pool[index]
            logger.info(
                "failover_attempt attempt=%s/%s key=%s/%s preview=%s",
                attempt + 1,
                budget,
                index + 1,
                pool_size,
                key_preview(credential),
            )
            backend = self.backend_for(index)
            try:
                text = await asyncio.wait_for(
                    backend.generate(prompt, generation_config),
                    timeout=self._timeout_s,
                )
            except Exception as exc:
                failure = classify_failure(exc)
                logger.warning(
                    "failover_attempt_failed key=%s class=%s error=%s",
                    index + 1,
                    failure or "unclassified",
                    exc,
                )
                if failure is None:
                    raise
                last_error, last_class = exc, failure

                if pool_size <= 1:
                    logger.warning("failover_no_alternative_key")
                    break
                if attempt >= budget - 1:
                    break

                index = (index + 1) % pool_size
                async with self._lock:
                    self._state.current_index = index
                logger.info("failover_switch key=%s backoff_s=%s", index + 1, self._backoff_s)
                await self._sleep(self._backoff_s)
                continue

            async with self._lock:
                if self._state.current_index != 0:
                    logger.info("failover_success_reset_primary used_key=%s", index + 1)
                    self._state.current_index = 0
            return text

        assert last_error is not None and last_class is not None
        logger.error(
            "failover_exhausted attempts=%s keys=%s reason=%s error=%s",
            attempts,
            pool_size,
            last_class,
            last_error,
        )
        raise KeysExhaustedError(
            f"All {pool_size} API key(s) failed: {last_error}",
            reason=last_class,
            attempts=attempts,
            keys_total=pool_size,
        ) from last_error

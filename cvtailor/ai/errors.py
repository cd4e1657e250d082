from __future__ import annotations

from typing import Literal

FailureClass = Literal["quota", "rate_limit", "invalid_key"]


class ConfigurationError(RuntimeError):
    """Raised when the credential pool cannot be built."""

    code = "configuration_error"


class BackendError(RuntimeError):
    """Error returned by a generation backend, carrying an HTTP-like status when known."""

    def __init__(self, message: str, *, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status


class KeysExhaustedError(RuntimeError):
    code = "all_keys_exhausted"

    def __init__(self, message: str, *, reason: FailureClass, attempts: int, keys_total: int):
        super().__init__(message)
        self.reason = reason
        self.attempts = attempts
        self.keys_total = keys_total

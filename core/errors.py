# core/errors.py
"""
PulseCraft — Error Taxonomy

Every failure the core can raise internally. The public boundary
(council/orchestrator.py) converts these into well-formed result objects;
nothing here escapes to callers of PulseCraftCore.

- ProviderError: transport/auth/quota failure from one provider (retryable)
- OperationTimeout: an outward-facing operation exceeded its deadline
- MalformedJson: provider output could not be coerced to a JSON object
- ExtractionFailed: the authoritative source failed after retries (fatal)
- ValidationError: caller supplied malformed input (fatal, no retry)
"""

from typing import Optional


class PulseCraftError(Exception):
    """Base exception for all PulseCraft core errors."""
    pass


class ProviderError(PulseCraftError):
    """
    Raised by a provider adapter when the underlying SDK call fails.

    Carries the provider identity so retry logs and failure records can
    say which backend misbehaved.
    """

    def __init__(self, provider: str, message: str):
        self.provider = provider
        self.message = message
        super().__init__(f"[{provider}] {message}")


class OperationTimeout(PulseCraftError):
    """Raised when an operation does not finish inside its hard deadline."""

    def __init__(self, operation: str, seconds: float):
        self.operation = operation
        self.seconds = seconds
        super().__init__(f"{operation} timed out after {seconds:g}s")


class MalformedJson(PulseCraftError):
    """Raised when no JSON object can be extracted from provider output."""

    def __init__(self, message: str, raw: Optional[str] = None):
        self.raw = raw
        super().__init__(message)


class ExtractionFailed(PulseCraftError):
    """
    Raised when the authoritative (strict-JSON) source fails entirely.

    `detail` holds the underlying reason for logging; the user-facing
    message stays generic.
    """

    user_message = "Voice extraction failed. Please try again."

    def __init__(self, detail: str, cause: Optional[BaseException] = None):
        self.detail = detail
        self.cause = cause
        super().__init__(f"Authoritative extraction failed: {detail}")


class ValidationError(PulseCraftError):
    """Raised when the caller's input is malformed (e.g. <2 kits to fuse)."""
    pass


__all__ = [
    "PulseCraftError",
    "ProviderError",
    "OperationTimeout",
    "MalformedJson",
    "ExtractionFailed",
    "ValidationError",
]

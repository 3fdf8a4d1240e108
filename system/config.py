# system/config.py
"""
PulseCraft — Configuration

Environment-driven settings for providers, timeouts, retry and the
latent/drift analytics. Values come from the process environment after
an optional .env file has been loaded (project root first, then CWD).
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger("pulsecraft.system.config")


# -----------------------------------------------------------------------------
# .env Loading
# -----------------------------------------------------------------------------

def _get_project_root() -> Path:
    """Project root is the parent of the system/ package."""
    return Path(__file__).resolve().parent.parent


def load_env_file() -> bool:
    """
    Load environment variables from a .env file.

    Returns True if a .env was found and loaded, False otherwise.
    """
    from dotenv import load_dotenv

    env_path = _get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=True)
        logger.info("Loaded .env from %s", env_path)
        return True

    cwd_env = Path.cwd() / ".env"
    if cwd_env.exists():
        load_dotenv(cwd_env, override=True)
        logger.info("Loaded .env from %s", cwd_env)
        return True

    logger.debug("No .env file found")
    return False


def mask_key(key: str) -> str:
    """Mask an API key for logging."""
    return f"{key[:8]}...{key[-4:]}" if len(key) > 12 else "***"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %d", name, raw, default)
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r, using %g", name, raw, default)
        return default


# -----------------------------------------------------------------------------
# Config
# -----------------------------------------------------------------------------

@dataclass
class PulseConfig:
    """Runtime configuration for the PulseCraft core."""
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    gemini_api_key: str = ""

    openai_model: str = "gpt-4o"
    classifier_model: str = "gpt-4o-mini"
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    gemini_model: str = "gemini-2.5-pro"
    embedding_model: str = "text-embedding-3-small"

    # Seconds. operation_timeout bounds a whole public call, retries included.
    operation_timeout: float = 60.0
    provider_timeout: float = 45.0
    embedding_timeout: float = 10.0

    retry_max_attempts: int = 3
    retry_initial_delay_ms: int = 1000

    history_window: int = 5
    drift_window: int = 5

    telemetry_backend: str = "memory"  # "memory" or "kv"

    @classmethod
    def from_env(cls, load_dotenv_file: bool = True) -> "PulseConfig":
        """Load config from environment variables."""
        if load_dotenv_file:
            load_env_file()

        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY", ""),
            openai_model=os.getenv("PULSE_OPENAI_MODEL", cls.openai_model),
            classifier_model=os.getenv("PULSE_CLASSIFIER_MODEL", cls.classifier_model),
            anthropic_model=os.getenv("PULSE_ANTHROPIC_MODEL", cls.anthropic_model),
            gemini_model=os.getenv("PULSE_GEMINI_MODEL", cls.gemini_model),
            embedding_model=os.getenv("PULSE_EMBEDDING_MODEL", cls.embedding_model),
            operation_timeout=_env_float("PULSE_OPERATION_TIMEOUT", cls.operation_timeout),
            provider_timeout=_env_float("PULSE_PROVIDER_TIMEOUT", cls.provider_timeout),
            embedding_timeout=_env_float("PULSE_EMBEDDING_TIMEOUT", cls.embedding_timeout),
            retry_max_attempts=_env_int("PULSE_RETRY_MAX_ATTEMPTS", cls.retry_max_attempts),
            retry_initial_delay_ms=_env_int("PULSE_RETRY_INITIAL_DELAY_MS", cls.retry_initial_delay_ms),
            history_window=_env_int("PULSE_HISTORY_WINDOW", cls.history_window),
            drift_window=_env_int("PULSE_DRIFT_WINDOW", cls.drift_window),
            telemetry_backend=os.getenv("PULSE_TELEMETRY_BACKEND", cls.telemetry_backend).lower(),
        )

    def to_dict(self) -> dict:
        """Serialize for debugging, keys masked."""
        return {
            "openai_api_key": mask_key(self.openai_api_key) if self.openai_api_key else "",
            "anthropic_api_key": mask_key(self.anthropic_api_key) if self.anthropic_api_key else "",
            "gemini_api_key": mask_key(self.gemini_api_key) if self.gemini_api_key else "",
            "openai_model": self.openai_model,
            "classifier_model": self.classifier_model,
            "anthropic_model": self.anthropic_model,
            "gemini_model": self.gemini_model,
            "embedding_model": self.embedding_model,
            "operation_timeout": self.operation_timeout,
            "provider_timeout": self.provider_timeout,
            "embedding_timeout": self.embedding_timeout,
            "retry_max_attempts": self.retry_max_attempts,
            "retry_initial_delay_ms": self.retry_initial_delay_ms,
            "history_window": self.history_window,
            "drift_window": self.drift_window,
            "telemetry_backend": self.telemetry_backend,
        }


__all__ = [
    "PulseConfig",
    "load_env_file",
    "mask_key",
]

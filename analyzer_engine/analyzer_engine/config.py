"""Analyzer configuration.

Two layers:

* :class:`Settings` holds process-level knobs read from ``SQL_ANALYZER_*``
  environment variables (log level, worker count, cache size).
* :class:`AnalyzerConfig` is the per-project TOML file.  It enables,
  disables and re-grades rules, and configures the optional LLM review::

      max_workers = 4

      [rules]
      disabled = ["STYLE001", "PERF011"]

      [rules.severity]
      PERF001 = "error"
      SCHEMA001 = "info"

      [llm]
      enabled = true
      provider = "anthropic"
      model = "claude-sonnet-4-20250514"

      [retry]
      max_retries = 5

Unknown tables and keys in the TOML file are ignored.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from analyzer_engine.errors import ConfigError

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover – Python < 3.11 fallback
    import tomli as tomllib  # type: ignore[no-redef]

logger = logging.getLogger(__name__)

LOCAL_CONFIG_NAME = ".sql-analyzer.toml"
DEFAULT_CACHE_SIZE = 100
DEFAULT_OLLAMA_URL = "http://localhost:11434"


def user_config_path() -> Path:
    return Path.home() / ".config" / "sql-analyzer" / "config.toml"


# ---------------------------------------------------------------------------
# Environment settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """Process settings loaded from environment variables with SQL_ANALYZER_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="SQL_ANALYZER_",
        case_sensitive=False,
    )

    log_level: str = "WARNING"
    structured_logging: bool = False

    # Explicit configuration file; skips discovery when set.
    config_path: Path | None = None

    # Runner
    max_workers: int | None = Field(default=None, ge=1)

    # Parsed-query cache
    cache_size: int = Field(default=DEFAULT_CACHE_SIZE, ge=1)

    # LLM review; takes precedence over the config file key
    llm_api_key: SecretStr | None = None

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment, with optional overrides for testing."""
    return Settings(**overrides)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Project configuration file
# ---------------------------------------------------------------------------


class RulesConfig(BaseModel):
    """Which rules run, and at what severity."""

    model_config = ConfigDict(extra="ignore")

    disabled: list[str] = Field(default_factory=list, description="Rule IDs to skip.")
    severity: dict[str, str] = Field(
        default_factory=dict,
        description="Rule ID to severity name (error, warning, info).",
    )


class LlmProvider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"

    @property
    def default_model(self) -> str:
        return _DEFAULT_MODELS[self]

    @property
    def requires_api_key(self) -> bool:
        return self != LlmProvider.OLLAMA


_DEFAULT_MODELS: dict[LlmProvider, str] = {
    LlmProvider.OPENAI: "gpt-4",
    LlmProvider.ANTHROPIC: "claude-sonnet-4-20250514",
    LlmProvider.OLLAMA: "llama3.2",
}


class LlmConfig(BaseModel):
    """The ``[llm]`` table: optional LLM review of the analysed queries.

    The review is off unless ``enabled`` is true or a provider is chosen on
    the command line.
    """

    model_config = ConfigDict(extra="ignore")

    enabled: bool = Field(default=False, description="Run the LLM review after static analysis.")
    provider: LlmProvider = Field(default=LlmProvider.OLLAMA, description="Which LLM backend to call.")
    api_key: SecretStr | None = Field(default=None, description="API key for the cloud providers.")
    model: str | None = Field(default=None, description="Model name; the provider default when unset.")
    ollama_url: str = Field(default=DEFAULT_OLLAMA_URL, description="Base URL of the Ollama server.")
    timeout: float = Field(default=60.0, gt=0.0, description="Per-request timeout in seconds.")
    max_tokens: int = Field(default=4096, ge=1, description="Response token cap (Anthropic only).")


class RetryConfig(BaseModel):
    """The ``[retry]`` table: backoff for transient LLM request failures."""

    model_config = ConfigDict(extra="ignore")

    max_retries: int = Field(default=3, ge=0, description="Retries after the first attempt.")
    initial_delay_ms: int = Field(default=1000, ge=0, description="Delay before the first retry.")
    max_delay_ms: int = Field(default=30_000, ge=0, description="Upper bound on any single delay.")
    backoff_factor: float = Field(default=2.0, ge=1.0, description="Delay multiplier per retry.")

    def delay_seconds(self, retry: int) -> float:
        """Return the sleep before retry number *retry* (0-based), in seconds."""
        delay_ms = min(self.initial_delay_ms * self.backoff_factor**retry, self.max_delay_ms)
        return delay_ms / 1000.0


class AnalyzerConfig(BaseModel):
    """Contents of a ``.sql-analyzer.toml`` file."""

    model_config = ConfigDict(extra="ignore")

    rules: RulesConfig = Field(default_factory=RulesConfig)
    llm: LlmConfig = Field(default_factory=LlmConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    max_workers: int | None = Field(default=None, ge=1, description="Rule runner thread count.")
    cache_size: int = Field(default=DEFAULT_CACHE_SIZE, ge=1, description="Parsed-query cache capacity.")


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except OSError as exc:
        raise ConfigError(path, exc.strerror or str(exc)) from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(path, str(exc)) from exc


def discover_config_path() -> Path | None:
    """Return the first existing configuration file, local before user-wide."""
    for candidate in (Path(LOCAL_CONFIG_NAME), user_config_path()):
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | str | None = None) -> AnalyzerConfig:
    """Load the analyzer configuration.

    Parameters
    ----------
    path:
        Explicit TOML file.  When ``None`` the file is discovered: first
        ``.sql-analyzer.toml`` in the working directory, then
        ``~/.config/sql-analyzer/config.toml``.  With no file found the
        defaults are returned.

    Raises
    ------
    ConfigError
        The file cannot be read, is not valid TOML, or has values of the
        wrong type.
    """
    resolved = Path(path) if path is not None else discover_config_path()
    if resolved is None:
        logger.debug("No configuration file found, using defaults")
        return AnalyzerConfig()

    logger.info("Loading configuration from %s", resolved)
    data = _read_toml(resolved)
    try:
        return AnalyzerConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(resolved, _first_validation_error(exc)) from exc


def _first_validation_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    location = ".".join(str(part) for part in err["loc"])
    return f"{location}: {err['msg']}" if location else err["msg"]

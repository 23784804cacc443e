# backend/src/morpheus/config.py
"""Configuration system for the Morpheus backend.

Settings come from an optional INI file plus environment variables. Every
INI key is declared in CONFIG_SCHEMA with its type, default and allowed
range, so a missing file simply yields the defaults.
"""

from configparser import ConfigParser
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional
import os


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


# Schema: section -> key -> (type, default, min, max, description)
CONFIG_SCHEMA: dict[str, dict[str, tuple[type, Any, Any, Any, str]]] = {
    "search": {
        "default_limit": (int, 10, 0, 1000, "Results per list when a query gives no limit"),
    },
    "context": {
        "tag_limit": (int, 5, 1, 50, "Tags derived from the query for context retrieval"),
        "search_limit": (int, 20, 1, 1000, "Candidates fetched before prioritizing"),
        "max_results": (int, 4, 1, 50, "Items kept per list after prioritizing"),
    },
    "tagging": {
        "llm_suggestions": (bool, False, None, None, "Ask the LLM for suggested tags"),
        "max_suggested_tags": (int, 5, 1, 20, "Suggested tags returned with search results"),
    },
    "llm": {
        "max_tokens": (int, 1024, 64, 32768, "Max response tokens"),
        "default_temperature": (float, 0.7, 0.0, 2.0, "Default LLM temperature"),
        "json_temperature": (float, 0.3, 0.0, 1.0, "Temperature for structured output"),
    },
    "storage": {
        "backend": (str, "memory", None, None, "Store implementation: memory or sqlite"),
        "db_file": (str, "morpheus.db", None, None, "SQLite file name inside the data dir"),
        "seed_default_tags": (bool, True, None, None, "Create the default tags in a new store"),
    },
}

STORAGE_BACKENDS = ("memory", "sqlite")


@dataclass(frozen=True)
class SearchConfig:
    """Search configuration."""

    default_limit: int


@dataclass(frozen=True)
class ContextConfig:
    """Context retrieval configuration."""

    tag_limit: int
    search_limit: int
    max_results: int


@dataclass(frozen=True)
class TaggingConfig:
    """Tag suggestion configuration."""

    llm_suggestions: bool
    max_suggested_tags: int


@dataclass(frozen=True)
class LLMConfig:
    """LLM client configuration."""

    max_tokens: int
    default_temperature: float
    json_temperature: float


@dataclass(frozen=True)
class StorageConfig:
    """Storage backend configuration."""

    backend: str
    db_file: str
    seed_default_tags: bool


_SECTION_TYPES: dict[str, type] = {
    "search": SearchConfig,
    "context": ContextConfig,
    "tagging": TaggingConfig,
    "llm": LLMConfig,
    "storage": StorageConfig,
}


def _load_section(
    parser: ConfigParser, section: str, schema: dict[str, tuple[type, Any, Any, Any, str]]
) -> dict[str, Any]:
    """Load and validate a configuration section.

    Args:
        parser: ConfigParser instance with loaded config
        section: Section name to load
        schema: Schema definition for the section

    Returns:
        Dictionary of validated configuration values

    Raises:
        ConfigError: If validation fails
    """
    result = {}

    for key, (typ, default, min_val, max_val, _) in schema.items():
        if parser.has_option(section, key):
            raw_value = parser.get(section, key)
            value: bool | int | float | str
            try:
                if typ is bool:
                    value = raw_value.lower() in ("true", "1", "yes", "on")
                elif typ is int:
                    value = int(raw_value)
                elif typ is float:
                    value = float(raw_value)
                else:
                    value = raw_value.strip()
            except ValueError as e:
                raise ConfigError(
                    f"Invalid value for [{section}].{key}: {raw_value!r} (expected {typ.__name__})"
                ) from e
        else:
            value = default

        if typ in (int, float) and value is not None:
            if min_val is not None and value < min_val:
                raise ConfigError(
                    f"Value for [{section}].{key} is {value}, but minimum is {min_val}"
                )
            if max_val is not None and value > max_val:
                raise ConfigError(
                    f"Value for [{section}].{key} is {value}, but maximum is {max_val}"
                )

        result[key] = value

    return result


def _default_section(section: str) -> Any:
    """Build a section dataclass populated purely from schema defaults."""
    values = {key: default for key, (_, default, _, _, _) in CONFIG_SCHEMA[section].items()}
    return _SECTION_TYPES[section](**values)


def _validate_backend(backend: str) -> str:
    if backend not in STORAGE_BACKENDS:
        raise ConfigError(
            f"Unknown storage backend {backend!r} (expected one of {', '.join(STORAGE_BACKENDS)})"
        )
    return backend


def _load_config(config_path: Optional[Path] = None) -> "Config":
    """Load configuration from an INI file (internal use only).

    Environment overrides are applied afterwards by load_settings().

    Args:
        config_path: Path to config file. If None, uses defaults from schema.

    Returns:
        Config object with all sections populated.

    Raises:
        ConfigError: If validation fails
    """
    parser = ConfigParser()

    if config_path and config_path.exists():
        parser.read(config_path)

    sections = {
        name: _SECTION_TYPES[name](**_load_section(parser, name, CONFIG_SCHEMA[name]))
        for name in CONFIG_SCHEMA
    }
    _validate_backend(sections["storage"].backend)

    return Config(**sections)


@dataclass(frozen=True)
class Config:
    """Complete application configuration."""

    data_dir: Path = None  # type: ignore[assignment]  # Set in __post_init__ if None
    active_provider: str = "ollama"
    active_model: str = "llama2"
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    google_api_key: Optional[str] = None
    ollama_endpoint: str = "http://localhost:11434"

    # Section configs - defaults set in __post_init__
    search: SearchConfig = None  # type: ignore[assignment]
    context: ContextConfig = None  # type: ignore[assignment]
    tagging: TaggingConfig = None  # type: ignore[assignment]
    llm: LLMConfig = None  # type: ignore[assignment]
    storage: StorageConfig = None  # type: ignore[assignment]

    def __post_init__(self):
        """Initialize section configs with defaults if not provided."""
        # frozen=True, so object.__setattr__ is required
        if self.data_dir is None:
            object.__setattr__(self, "data_dir", Path.home() / ".morpheus")
        for section in CONFIG_SCHEMA:
            if getattr(self, section) is None:
                object.__setattr__(self, section, _default_section(section))

    @property
    def db_path(self) -> Path:
        """Path to the SQLite database used by the sqlite backend."""
        return self.data_dir / self.storage.db_file

    @property
    def llm_log_path(self) -> Path:
        """Path to the JSONL log of LLM queries."""
        return self.data_dir / "logs" / "llm-queries.jsonl"

    @property
    def llm_provider(self) -> str:
        """LLM provider name."""
        return self.active_provider

    @property
    def llm_model(self) -> str:
        """LLM model name."""
        return self.active_model

    @property
    def llm_api_key(self) -> Optional[str]:
        """API key for the active LLM provider."""
        provider_keys = {
            "openai": self.openai_api_key,
            "anthropic": self.anthropic_api_key,
            "google": self.google_api_key,
        }
        return provider_keys.get(self.active_provider)

    @property
    def llm_endpoint(self) -> Optional[str]:
        """Endpoint for LLM provider (mainly for Ollama)."""
        if self.active_provider == "ollama":
            return self.ollama_endpoint
        return None


PROVIDER_DEFAULT_MODELS = {
    "openai": "gpt-4o",
    "anthropic": "claude-3-5-sonnet-20241022",
    "google": "gemini-1.5-pro",
    "ollama": "llama2",
}


def _detect_provider_from_keys() -> tuple[str, str]:
    """Auto-detect provider from available API keys.

    Returns:
        Tuple of (provider, model) based on available keys.
        Falls back to ollama if no keys are found.
    """
    for provider, env_var in (
        ("openai", "OPENAI_API_KEY"),
        ("anthropic", "ANTHROPIC_API_KEY"),
        ("google", "GOOGLE_API_KEY"),
    ):
        if os.getenv(env_var):
            return (provider, PROVIDER_DEFAULT_MODELS[provider])
    return ("ollama", PROVIDER_DEFAULT_MODELS["ollama"])


@lru_cache(maxsize=1)
def load_settings() -> Config:
    """Load settings from environment variables and config file.

    Settings are cached for the lifetime of the application.
    Use load_settings.cache_clear() to reload settings.

    Returns:
        Config object populated from environment variables and config file.

    Raises:
        ConfigError: If the config file or STORAGE_BACKEND is invalid.
    """
    data_dir_str = os.getenv("MORPHEUS_DATA_DIR")
    data_dir = Path(data_dir_str) if data_dir_str else Path.home() / ".morpheus"

    config_path_str = os.getenv("MORPHEUS_CONFIG")
    config_file = Path(config_path_str) if config_path_str else data_dir / "config.ini"
    try:
        config_exists = config_file.exists()
    except PermissionError:
        config_exists = False
    base_config = _load_config(config_file if config_exists else None)

    storage = base_config.storage
    backend_env = os.getenv("STORAGE_BACKEND")
    if backend_env:
        storage = StorageConfig(
            backend=_validate_backend(backend_env.strip().lower()),
            db_file=storage.db_file,
            seed_default_tags=storage.seed_default_tags,
        )

    active_provider = os.getenv("ACTIVE_PROVIDER")
    active_model = os.getenv("ACTIVE_MODEL")

    if not active_provider:
        detected_provider, detected_model = _detect_provider_from_keys()
        active_provider = detected_provider
        if not active_model:
            active_model = detected_model
    elif not active_model:
        active_model = PROVIDER_DEFAULT_MODELS.get(active_provider, "llama2")

    return Config(
        data_dir=data_dir,
        active_provider=active_provider,
        active_model=active_model,
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY"),
        google_api_key=os.getenv("GOOGLE_API_KEY"),
        ollama_endpoint=os.getenv("OLLAMA_ENDPOINT", "http://localhost:11434"),
        search=base_config.search,
        context=base_config.context,
        tagging=base_config.tagging,
        llm=base_config.llm,
        storage=storage,
    )


"""Configuration tests.

Tests verify behavior (types, ranges, loading) not specific values.
"""

import tempfile
from pathlib import Path

import pytest

from morpheus.config import (
    CONFIG_SCHEMA,
    Config,
    ConfigError,
    _load_config,
    load_settings,
)


@pytest.fixture
def temp_workspace():
    """Create temporary workspace directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        workspace = Path(tmpdir) / "workspace"
        workspace.mkdir()
        yield workspace


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    """Clear the load_settings cache and provider env vars around each test."""
    for var in (
        "MORPHEUS_DATA_DIR",
        "MORPHEUS_CONFIG",
        "STORAGE_BACKEND",
        "ACTIVE_PROVIDER",
        "ACTIVE_MODEL",
        "OPENAI_API_KEY",
        "ANTHROPIC_API_KEY",
        "GOOGLE_API_KEY",
    ):
        monkeypatch.delenv(var, raising=False)
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


def write_config(workspace: Path, content: str) -> Path:
    """Write a config.ini file to the workspace and return the path."""
    config_path = workspace / "config.ini"
    config_path.write_text(content)
    return config_path


# =============================================================================
# Type Validation Tests
# =============================================================================


def test_all_settings_have_correct_types():
    """Every setting matches its declared type from schema."""
    config = _load_config(None)

    for section_name, keys in CONFIG_SCHEMA.items():
        section = getattr(config, section_name)
        for key, (expected_type, *_) in keys.items():
            value = getattr(section, key)
            assert isinstance(value, expected_type), (
                f"{section_name}.{key}: expected {expected_type.__name__}, "
                f"got {type(value).__name__}"
            )


def test_invalid_type_raises_clear_error(temp_workspace: Path):
    """Non-numeric value for int setting gives helpful message."""
    config_path = write_config(temp_workspace, "[search]\ndefault_limit = lots")

    with pytest.raises(ConfigError) as exc_info:
        _load_config(config_path)

    assert "search" in str(exc_info.value)
    assert "default_limit" in str(exc_info.value)
    assert "int" in str(exc_info.value)


def test_invalid_float_raises_clear_error(temp_workspace: Path):
    """Non-numeric value for float setting gives helpful message."""
    config_path = write_config(temp_workspace, "[llm]\njson_temperature = very_hot")

    with pytest.raises(ConfigError) as exc_info:
        _load_config(config_path)

    assert "json_temperature" in str(exc_info.value)
    assert "float" in str(exc_info.value)


# =============================================================================
# Range Validation Tests
# =============================================================================


def test_defaults_are_within_their_ranges():
    """Every numeric default lies inside its declared range."""
    for section, keys in CONFIG_SCHEMA.items():
        for key, (typ, default, min_val, max_val, _) in keys.items():
            if typ not in (int, float):
                continue
            assert min_val <= default <= max_val, f"[{section}].{key}"


def test_value_below_minimum_raises_error(temp_workspace: Path):
    """Value below declared minimum raises ConfigError."""
    config_path = write_config(temp_workspace, "[context]\nmax_results = 0")

    with pytest.raises(ConfigError) as exc_info:
        _load_config(config_path)

    assert "context" in str(exc_info.value)
    assert "minimum" in str(exc_info.value)


def test_value_above_maximum_raises_error(temp_workspace: Path):
    """Value above declared maximum raises ConfigError."""
    config_path = write_config(temp_workspace, "[llm]\ndefault_temperature = 5.0")

    with pytest.raises(ConfigError) as exc_info:
        _load_config(config_path)

    assert "maximum" in str(exc_info.value)


def test_unknown_backend_is_rejected(temp_workspace: Path):
    config_path = write_config(temp_workspace, "[storage]\nbackend = postgres")

    with pytest.raises(ConfigError, match="postgres"):
        _load_config(config_path)


# =============================================================================
# Loading Behavior Tests
# =============================================================================


def test_missing_config_uses_defaults():
    """No config file means schema defaults everywhere."""
    config = _load_config(None)

    assert config.search.default_limit == CONFIG_SCHEMA["search"]["default_limit"][1]
    assert config.storage.backend == "memory"


def test_partial_config_keeps_other_defaults(temp_workspace: Path):
    config_path = write_config(
        temp_workspace, "[context]\nmax_results = 2\n\n[tagging]\nllm_suggestions = yes"
    )

    config = _load_config(config_path)

    assert config.context.max_results == 2
    assert config.context.tag_limit == CONFIG_SCHEMA["context"]["tag_limit"][1]
    assert config.tagging.llm_suggestions is True


def test_load_settings_reads_data_dir_config(temp_workspace: Path, monkeypatch):
    write_config(temp_workspace, "[search]\ndefault_limit = 7")
    monkeypatch.setenv("MORPHEUS_DATA_DIR", str(temp_workspace))

    settings = load_settings()

    assert settings.data_dir == temp_workspace
    assert settings.search.default_limit == 7
    assert settings.db_path == temp_workspace / "morpheus.db"


def test_explicit_config_path_wins(temp_workspace: Path, monkeypatch):
    other = temp_workspace / "elsewhere.ini"
    other.write_text("[search]\ndefault_limit = 3")
    monkeypatch.setenv("MORPHEUS_DATA_DIR", str(temp_workspace))
    monkeypatch.setenv("MORPHEUS_CONFIG", str(other))

    assert load_settings().search.default_limit == 3


def test_storage_backend_env_override(temp_workspace: Path, monkeypatch):
    monkeypatch.setenv("MORPHEUS_DATA_DIR", str(temp_workspace))
    monkeypatch.setenv("STORAGE_BACKEND", "SQLite")

    assert load_settings().storage.backend == "sqlite"


def test_invalid_storage_backend_env(temp_workspace: Path, monkeypatch):
    monkeypatch.setenv("MORPHEUS_DATA_DIR", str(temp_workspace))
    monkeypatch.setenv("STORAGE_BACKEND", "redis")

    with pytest.raises(ConfigError):
        load_settings()


def test_settings_are_cached(temp_workspace: Path, monkeypatch):
    monkeypatch.setenv("MORPHEUS_DATA_DIR", str(temp_workspace))

    assert load_settings() is load_settings()


# =============================================================================
# Provider Selection Tests
# =============================================================================


def test_provider_detected_from_api_key(temp_workspace: Path, monkeypatch):
    monkeypatch.setenv("MORPHEUS_DATA_DIR", str(temp_workspace))
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")

    settings = load_settings()

    assert settings.llm_provider == "anthropic"
    assert settings.llm_api_key == "sk-ant-test"
    assert settings.llm_endpoint is None


def test_falls_back_to_ollama_without_keys(temp_workspace: Path, monkeypatch):
    monkeypatch.setenv("MORPHEUS_DATA_DIR", str(temp_workspace))

    settings = load_settings()

    assert settings.llm_provider == "ollama"
    assert settings.llm_endpoint == "http://localhost:11434"


def test_explicit_provider_gets_its_default_model(temp_workspace: Path, monkeypatch):
    monkeypatch.setenv("MORPHEUS_DATA_DIR", str(temp_workspace))
    monkeypatch.setenv("ACTIVE_PROVIDER", "google")

    assert load_settings().llm_model == "gemini-1.5-pro"


def test_config_defaults_sections():
    config = Config(data_dir=Path("/tmp/morpheus"))

    assert config.context.max_results == CONFIG_SCHEMA["context"]["max_results"][1]
    assert config.llm_log_path == Path("/tmp/morpheus/logs/llm-queries.jsonl")

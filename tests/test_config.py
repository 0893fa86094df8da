"""Tests for YAML run configuration."""

import pytest
import yaml

from pdfields.core.config import ExtractionConfig, load_config
from pdfields.core.errors import ConfigError


def _write(tmp_path, data) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(data))
    return str(path)


def test_defaults_without_file():
    config = load_config(None)
    assert config.backend == "openrouter"
    assert config.batch_size == 20
    assert config.openrouter.model == "google/gemini-2.5-flash"
    assert config.openrouter.api_key_env == "OPENROUTER_API_KEY"


def test_load_yaml(tmp_path):
    path = _write(tmp_path, {
        "backend": "ollama",
        "batch_size": 5,
        "ollama": {"model": "llava:13b", "host": "http://gpu:11434"},
    })
    config = load_config(path)
    assert config.backend == "ollama"
    assert config.batch_size == 5
    assert config.ollama.host == "http://gpu:11434"
    assert config.openrouter.retry_attempts == 3


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(path) == ExtractionConfig()


@pytest.mark.parametrize("batch_size", [0, -3])
def test_non_positive_batch_size_rejected(tmp_path, batch_size):
    with pytest.raises(ConfigError, match="batch_size"):
        load_config(_write(tmp_path, {"batch_size": batch_size}))


def test_unknown_backend_rejected(tmp_path):
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, {"backend": "carrier-pigeon"}))


def test_non_mapping_rejected(tmp_path):
    with pytest.raises(ConfigError, match="mapping"):
        load_config(_write(tmp_path, ["batch_size", 3]))


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Cannot read"):
        load_config(tmp_path / "nope.yaml")


# ── Overrides ────────────────────────────────────────────────────────


def test_overrides_skip_none():
    config = ExtractionConfig(batch_size=7).with_overrides(batch_size=None, backend=None)
    assert config.batch_size == 7


def test_overrides_are_validated():
    with pytest.raises(ConfigError, match="batch_size"):
        ExtractionConfig().with_overrides(batch_size=0)


def test_model_override_targets_selected_backend():
    config = ExtractionConfig().with_overrides(backend="ollama", model="llava:7b")
    assert config.ollama.model == "llava:7b"
    assert config.openrouter.model == "google/gemini-2.5-flash"


@pytest.mark.parametrize("backend", ["openrouter", "ollama"])
def test_empty_model_override_rejected(backend):
    with pytest.raises(ConfigError, match="model"):
        ExtractionConfig().with_overrides(backend=backend, model="")


def test_empty_model_in_file_rejected(tmp_path):
    path = _write(tmp_path, {"backend": "ollama", "ollama": {"model": ""}})
    with pytest.raises(ConfigError, match="model"):
        load_config(path)

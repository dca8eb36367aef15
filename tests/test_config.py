"""Tests for configuration loading."""
import pytest
import yaml
from pydantic import ValidationError

from quillnote import config as config_module
from quillnote.config import AIConfig, AppConfig, get_config, load_config, reload_config


def test_defaults():
    cfg = AppConfig()
    assert cfg.ai.api_key is None
    assert cfg.ai.timeout is None
    assert cfg.ai.completions_url == "https://api.openai.com/v1/chat/completions"
    assert cfg.allowed_origins == ["*"]


def test_env_fallback(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    monkeypatch.setenv("OPENAI_MODEL", "env-model")
    ai = AIConfig()
    assert (ai.api_key, ai.model) == ("sk-env", "env-model")


def test_file_key_wins_over_env(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    assert AIConfig(api_key="sk-file").api_key == "sk-file"


def test_base_url_trailing_slash():
    ai = AIConfig(base_url="https://proxy.local/v1/")
    assert ai.completions_url == "https://proxy.local/v1/chat/completions"


def test_paging_validation():
    with pytest.raises(ValidationError):
        AppConfig(per_page=0)
    with pytest.raises(ValidationError):
        AppConfig(per_page=20, max_per_page=10)


def test_load_and_reload(tmp_path, monkeypatch):
    monkeypatch.setattr(config_module, "_config", None)
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"ai": {"model": "m1", "timeout": 30}}))

    cfg = load_config(str(path))
    assert get_config() is cfg
    assert (cfg.ai.model, cfg.ai.timeout) == ("m1", 30.0)

    path.write_text(yaml.safe_dump({"ai": {"model": "m2"}}))
    assert reload_config().ai.model == "m2"


def test_missing_file_uses_defaults(tmp_path):
    cfg = load_config(str(tmp_path / "absent.yaml"))
    assert cfg == AppConfig()


def test_empty_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert load_config(str(path)).per_page == 12


def test_get_config_before_load(monkeypatch):
    monkeypatch.setattr(config_module, "_config", None)
    with pytest.raises(RuntimeError):
        get_config()


def test_file_model_wins_over_env(tmp_path, monkeypatch):
    monkeypatch.setenv("OPENAI_MODEL", "env-model")
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"ai": {"model": "file-model"}}))
    assert load_config(str(path)).ai.model == "file-model"


def test_env_model_fills_missing_model(monkeypatch):
    monkeypatch.setenv("OPENAI_MODEL", "env-model")
    assert AIConfig(model=None).model == "env-model"
    assert AppConfig().ai.model == "env-model"


def test_env_key_set_after_import_is_picked_up(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"per_page": 5}))
    monkeypatch.setenv("OPENAI_API_KEY", "sk-late")
    assert load_config(str(path)).ai.api_key == "sk-late"


def test_default_ai_section_not_shared():
    assert AppConfig().ai is not AppConfig().ai


def test_reload_rereads_environment(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({}))
    assert load_config(str(path)).ai.api_key is None
    monkeypatch.setenv("OPENAI_API_KEY", "sk-rotated")
    assert reload_config().ai.api_key == "sk-rotated"

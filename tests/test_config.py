import json

import pytest

from hub.config import CONFIG_KEYS
from hub.errors import NotFound, ValidationError
from hub.models import DEFAULT_FILTER_KEYWORD, DEFAULT_PRIMARY_COLOR


def test_defaults(config):
    assert config.get("siteTitle") == "Local Network Hub"
    assert config.get("homepageMessage") == "Welcome to your local network hub"
    assert config.get("chatConfig").provider == "flowise"
    assert config.get("filterConfig").keyword == DEFAULT_FILTER_KEYWORD
    assert config.get("colorConfig").primary_color == DEFAULT_PRIMARY_COLOR
    assert set(CONFIG_KEYS) == {"siteTitle", "homepageMessage", "chatConfig", "filterConfig", "colorConfig"}


def test_bad_color_leaves_previous_value(config):
    with pytest.raises(ValidationError):
        config.set("colorConfig", {"primaryColor": "bad"})
    assert config.get("colorConfig").primary_color == DEFAULT_PRIMARY_COLOR

    config.set("colorConfig", {"primaryColor": "#ABCDEF"})
    assert config.get("colorConfig").primary_color == "#ABCDEF"

    with pytest.raises(ValidationError):
        config.set("colorConfig", {})
    assert config.get("colorConfig").primary_color == "#ABCDEF"


def test_scalar_settings_are_trimmed_and_required(config, data_file):
    assert config.set("siteTitle", {"title": "  Home Lab "}) == "Home Lab"
    assert json.loads(data_file.read_text())["siteTitle"] == "Home Lab"
    with pytest.raises(ValidationError):
        config.set("homepageMessage", {"message": "   "})
    assert config.get("homepageMessage") == "Welcome to your local network hub"


def test_chat_config_replaces_whole_object(config):
    config.set("chatConfig", {"provider": "ollama", "ollamaBaseUrl": "http://ollama:11434", "ollamaModel": "llama3"})
    config.set("chatConfig", {"provider": "none"})
    chat = config.get("chatConfig")
    assert chat.provider == "none"
    assert chat.ollama_model == ""


def test_chat_config_provider(config):
    assert config.set("chatConfig", {}).provider == "flowise"
    with pytest.raises(ValidationError):
        config.set("chatConfig", {"provider": "openai"})


def test_filter_config_default_keyword(config):
    f = config.set("filterConfig", {"enabled": True, "keyword": ""})
    assert f.enabled is True
    assert f.keyword == DEFAULT_FILTER_KEYWORD


def test_get_returns_copy(config):
    config.get("colorConfig").primary_color = "#000000"
    assert config.get("colorConfig").primary_color == DEFAULT_PRIMARY_COLOR


def test_unknown_key(config):
    with pytest.raises(NotFound):
        config.get("fontSize")
    with pytest.raises(NotFound):
        config.set("fontSize", {})

"""Site configuration: title, homepage message, chat, filter and colour settings.

Every key follows the same contract: ``get`` returns a copy of the current
value and ``set`` validates a payload (shaped like the API request body),
replaces the whole value and persists the document.
"""

from dataclasses import dataclass, is_dataclass, replace
from typing import Any, Callable

from hub.errors import NotFound, ValidationError, require_fields
from hub.models import (
    CHAT_PROVIDERS,
    DEFAULT_CHAT_PROVIDER,
    DEFAULT_FILTER_KEYWORD,
    ChatConfig,
    ColorConfig,
    FilterConfig,
    is_hex_color,
)
from hub.store import DocumentStore


def _text(payload: dict, key: str) -> str:
    value = payload.get(key)
    return str(value) if value else ""


def _parse_site_title(payload: dict) -> str:
    require_fields({"title": payload.get("title")})
    return str(payload["title"]).strip()


def _parse_homepage_message(payload: dict) -> str:
    require_fields({"message": payload.get("message")})
    return str(payload["message"]).strip()


def _parse_chat_config(payload: dict) -> ChatConfig:
    provider = payload.get("provider") or DEFAULT_CHAT_PROVIDER
    if provider not in CHAT_PROVIDERS:
        raise ValidationError(f"Unknown chat provider: {provider} (expected one of {', '.join(CHAT_PROVIDERS)})")
    # Fields for the other provider are kept as given; the client decides which are active.
    return ChatConfig(
        provider=provider,
        api_url=_text(payload, "apiUrl"),
        chatflow_id=_text(payload, "chatflowId"),
        ollama_base_url=_text(payload, "ollamaBaseUrl"),
        ollama_model=_text(payload, "ollamaModel"),
    )


def _parse_filter_config(payload: dict) -> FilterConfig:
    return FilterConfig(
        enabled=bool(payload.get("enabled")),
        keyword=_text(payload, "keyword") or DEFAULT_FILTER_KEYWORD,
    )


def _parse_color_config(payload: dict) -> ColorConfig:
    color = payload.get("primaryColor")
    require_fields({"primaryColor": color})
    if not is_hex_color(color):
        raise ValidationError("Valid hex color code is required (e.g., #330099)")
    return ColorConfig(primary_color=color)


@dataclass(frozen=True)
class _Entry:
    attr: str
    parse: Callable[[dict], Any]


_ENTRIES = {
    "siteTitle": _Entry("site_title", _parse_site_title),
    "homepageMessage": _Entry("homepage_message", _parse_homepage_message),
    "chatConfig": _Entry("chat_config", _parse_chat_config),
    "filterConfig": _Entry("filter_config", _parse_filter_config),
    "colorConfig": _Entry("color_config", _parse_color_config),
}

CONFIG_KEYS = tuple(_ENTRIES)


class ConfigRegistry:
    def __init__(self, store: DocumentStore):
        self.store = store

    @staticmethod
    def _entry(key: str) -> _Entry:
        try:
            return _ENTRIES[key]
        except KeyError:
            raise NotFound(f"Unknown configuration key: {key}")

    def get(self, key: str):
        entry = self._entry(key)
        with self.store.lock:
            value = getattr(self.store, entry.attr)
            return replace(value) if is_dataclass(value) else value

    def set(self, key: str, payload: dict | None):
        """Validate payload and replace the stored value; nothing changes on error."""
        entry = self._entry(key)
        value = entry.parse(payload or {})
        with self.store.mutate() as store:
            setattr(store, entry.attr, value)
        return replace(value) if is_dataclass(value) else value

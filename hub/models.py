"""Data classes for the hub document and their persisted JSON shapes."""

import re
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

# The navigation category is tagged by its flag and by this reserved id.
DEFAULT_CATEGORY_ID = -1
DEFAULT_CATEGORY_NAME = "NAVIGATION"
DEFAULT_CATEGORY_ORDER = -1

DEFAULT_SITE_TITLE = "Local Network Hub"
DEFAULT_HOMEPAGE_MESSAGE = "Welcome to your local network hub"

CHAT_PROVIDERS = ("flowise", "ollama", "none")
DEFAULT_CHAT_PROVIDER = "flowise"
DEFAULT_FILTER_KEYWORD = "</think>"
DEFAULT_PRIMARY_COLOR = "#330099"

HEX_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


def utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


# ── Data classes ──────────────────────────────────────────────────────────


@dataclass
class Link:
    id: int
    name: str
    url: str
    category_id: int | None
    created_at: str
    updated_at: str | None = None


@dataclass
class Category:
    id: int
    name: str
    private: bool
    order: int
    is_default: bool
    created_at: str


@dataclass
class ChatConfig:
    provider: str = DEFAULT_CHAT_PROVIDER
    api_url: str = ""
    chatflow_id: str = ""
    ollama_base_url: str = ""
    ollama_model: str = ""


@dataclass
class FilterConfig:
    enabled: bool = False
    keyword: str = DEFAULT_FILTER_KEYWORD


@dataclass
class ColorConfig:
    primary_color: str = DEFAULT_PRIMARY_COLOR


# ── JSON shapes ───────────────────────────────────────────────────────────


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def to_json(obj) -> dict:
    """Return the camelCase dict used on disk and over the API."""
    return {_camel(k): v for k, v in asdict(obj).items()}


def is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_hex_color(value) -> bool:
    return isinstance(value, str) and HEX_COLOR_RE.match(value) is not None


def _is_str(value) -> bool:
    return isinstance(value, str)


def _is_text(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _pick(raw: dict, key: str, default, valid):
    """Take raw[key] when present and valid, otherwise the default."""
    value = raw.get(key, default)
    return value if valid(value) else default


def link_from_json(raw) -> Link | None:
    """Parse a persisted link; None when the entry has no usable id."""
    if not isinstance(raw, dict) or not is_int(raw.get("id")):
        return None
    return Link(
        id=raw["id"],
        name=_pick(raw, "name", "", _is_str),
        url=_pick(raw, "url", "", _is_str),
        category_id=_pick(raw, "categoryId", None, is_int),
        created_at=_pick(raw, "createdAt", "", _is_str),
        updated_at=_pick(raw, "updatedAt", None, _is_str),
    )


def category_from_json(raw) -> Category | None:
    """Parse a persisted category; None when the entry has no usable id.

    Only the reserved id marks the default category, whatever the stored
    isDefault flag says.
    """
    if not isinstance(raw, dict) or not is_int(raw.get("id")):
        return None
    return Category(
        id=raw["id"],
        name=_pick(raw, "name", "", _is_str),
        private=raw.get("private") is True,
        order=_pick(raw, "order", 0, is_int),
        is_default=raw["id"] == DEFAULT_CATEGORY_ID,
        created_at=_pick(raw, "createdAt", "", _is_str),
    )


def chat_config_from_json(raw) -> ChatConfig:
    if not isinstance(raw, dict):
        return ChatConfig()
    return ChatConfig(
        provider=_pick(raw, "provider", DEFAULT_CHAT_PROVIDER, lambda v: v in CHAT_PROVIDERS),
        api_url=_pick(raw, "apiUrl", "", _is_str),
        chatflow_id=_pick(raw, "chatflowId", "", _is_str),
        ollama_base_url=_pick(raw, "ollamaBaseUrl", "", _is_str),
        ollama_model=_pick(raw, "ollamaModel", "", _is_str),
    )


def filter_config_from_json(raw) -> FilterConfig:
    if not isinstance(raw, dict):
        return FilterConfig()
    return FilterConfig(
        enabled=_pick(raw, "enabled", False, lambda v: isinstance(v, bool)),
        keyword=_pick(raw, "keyword", DEFAULT_FILTER_KEYWORD, _is_text),
    )


def color_config_from_json(raw) -> ColorConfig:
    if not isinstance(raw, dict):
        return ColorConfig()
    return ColorConfig(primary_color=_pick(raw, "primaryColor", DEFAULT_PRIMARY_COLOR, is_hex_color))


def text_from_json(raw: dict, key: str, default: str) -> str:
    return _pick(raw, key, default, _is_text)

"""JSON-file persistence for the hub document (links, categories, config)."""

import json
import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path

from hub.models import (
    DEFAULT_CATEGORY_ID,
    DEFAULT_HOMEPAGE_MESSAGE,
    DEFAULT_SITE_TITLE,
    Category,
    ChatConfig,
    ColorConfig,
    FilterConfig,
    Link,
    category_from_json,
    chat_config_from_json,
    color_config_from_json,
    filter_config_from_json,
    is_int,
    link_from_json,
    text_from_json,
    to_json,
)

DATA_DIR = Path(os.getenv("HUB_DATA_DIR", Path(__file__).resolve().parent.parent / "data"))
DATA_FILE_NAME = "data.json"

logger = logging.getLogger(__name__)


def _next_counter(persisted, ids) -> int:
    """Return a counter strictly above every id in use, never below persisted."""
    floor = max([0, *ids]) + 1
    if is_int(persisted) and persisted > floor:
        return persisted
    return floor


def _parse_entries(raw_entries, parse, kind: str) -> list:
    entries = []
    seen: set[int] = set()
    for raw in raw_entries:
        entry = parse(raw)
        if entry is None:
            logger.warning("Skipping malformed %s entry: %r", kind, raw)
            continue
        if entry.id in seen:
            logger.warning("Skipping duplicate %s id %s", kind, entry.id)
            continue
        seen.add(entry.id)
        entries.append(entry)
    return entries


class DocumentStore:
    """Owns the in-memory document and its on-disk copy.

    Mutations go through ``mutate()``, which holds ``lock`` for the whole
    read-modify-write and rewrites the file afterwards. Readers take the
    same lock.
    """

    def __init__(self, path: Path | None = None):
        self.path = Path(path) if path is not None else DATA_DIR / DATA_FILE_NAME
        self.lock = threading.RLock()
        self._reset()

    def _reset(self) -> None:
        self.links: list[Link] = []
        self.categories: list[Category] = []
        self.next_id = 1
        self.next_category_id = 1
        self.homepage_message = DEFAULT_HOMEPAGE_MESSAGE
        self.site_title = DEFAULT_SITE_TITLE
        self.chat_config = ChatConfig()
        self.filter_config = FilterConfig()
        self.color_config = ColorConfig()

    # ── Load / save ──────────────────────────────────────────────────────

    def load(self) -> None:
        """Reload from disk over the defaults. Never raises on bad files."""
        from hub.categories import ensure_default_category

        with self.lock:
            self._reset()
            try:
                if self.path.is_file():
                    self._merge(json.loads(self.path.read_text(encoding="utf-8")))
                    logger.info("Loaded %d link(s) and %d categories from %s",
                                len(self.links), len(self.categories), self.path)
            except (OSError, ValueError) as e:
                logger.error("Could not load %s: %s; using default data", self.path, e)
                self._reset()
            ensure_default_category(self)

    def _merge(self, raw) -> None:
        if not isinstance(raw, dict):
            raise ValueError("document root is not a JSON object")

        if isinstance(raw.get("links"), list):
            self.links = _parse_entries(raw["links"], link_from_json, "link")
        if isinstance(raw.get("categories"), list):
            self.categories = _parse_entries(raw["categories"], category_from_json, "category")

        known = {c.id for c in self.categories} | {DEFAULT_CATEGORY_ID}
        for link in self.links:
            if link.category_id is not None and link.category_id not in known:
                logger.warning("Link %s refers to missing category %s; unassigning it", link.id, link.category_id)
                link.category_id = None

        self.next_id = _next_counter(raw.get("nextId"), (link.id for link in self.links))
        self.next_category_id = _next_counter(raw.get("nextCategoryId"), (c.id for c in self.categories))

        self.homepage_message = text_from_json(raw, "homepageMessage", DEFAULT_HOMEPAGE_MESSAGE)
        self.site_title = text_from_json(raw, "siteTitle", DEFAULT_SITE_TITLE)
        self.chat_config = chat_config_from_json(raw.get("chatConfig"))
        self.filter_config = filter_config_from_json(raw.get("filterConfig"))
        self.color_config = color_config_from_json(raw.get("colorConfig"))

    def to_dict(self) -> dict:
        with self.lock:
            return {
                "links": [to_json(link) for link in self.links],
                "categories": [to_json(c) for c in self.categories],
                "nextId": self.next_id,
                "nextCategoryId": self.next_category_id,
                "homepageMessage": self.homepage_message,
                "siteTitle": self.site_title,
                "chatConfig": to_json(self.chat_config),
                "filterConfig": to_json(self.filter_config),
                "colorConfig": to_json(self.color_config),
            }

    def save(self) -> bool:
        """Rewrite the whole file. Failures are logged, not raised."""
        with self.lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
            except OSError as e:
                logger.error("Error saving %s: %s", self.path, e)
                return False
            return True

    @contextmanager
    def mutate(self):
        """Hold the lock for a read-modify-write; persist if the block succeeds."""
        with self.lock:
            yield self
            self.save()

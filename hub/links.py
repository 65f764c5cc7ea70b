"""Link CRUD and liveness checks."""

import logging
from dataclasses import replace
from typing import Callable

from hub import upstream
from hub.errors import NotFound, ValidationError, require_fields
from hub.models import Link, utcnow
from hub.store import DocumentStore

logger = logging.getLogger(__name__)


def coerce_category_id(value) -> int | None:
    """Blank and zero mean "no category"; anything else must be an integer."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        cat_id = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid categoryId: {value!r}")
    return cat_id or None


class LinkManager:
    """Links refer to categories by id; the relation is never stored twice."""

    def __init__(self, store: DocumentStore, checker: Callable[..., bool] | None = None):
        self.store = store
        self.checker = checker or upstream.check_status

    def _find(self, link_id: int) -> Link:
        link = next((l for l in self.store.links if l.id == link_id), None)
        if link is None:
            raise NotFound("Link not found")
        return link

    def _check_category(self, cat_id: int | None) -> None:
        if cat_id is not None and not any(c.id == cat_id for c in self.store.categories):
            raise ValidationError(f"Category not found: {cat_id}")

    def list(self) -> list[Link]:
        # Private categories are hidden by the client only.
        with self.store.lock:
            return [replace(l) for l in self.store.links]

    def get(self, link_id: int) -> Link:
        with self.store.lock:
            return replace(self._find(link_id))

    def create(self, name: str, url: str, category_id=None) -> Link:
        require_fields({"name": name, "url": url})
        cat_id = coerce_category_id(category_id)
        with self.store.mutate() as store:
            self._check_category(cat_id)
            link = Link(
                id=store.next_id,
                name=str(name).strip(),
                url=str(url).strip(),
                category_id=cat_id,
                created_at=utcnow(),
            )
            store.next_id += 1
            store.links.append(link)
            return replace(link)

    def update(self, link_id: int, name: str, url: str, category_id=None) -> Link:
        require_fields({"name": name, "url": url})
        cat_id = coerce_category_id(category_id)
        with self.store.mutate():
            link = self._find(link_id)
            self._check_category(cat_id)
            link.name = str(name).strip()
            link.url = str(url).strip()
            link.category_id = cat_id
            link.updated_at = utcnow()
            return replace(link)

    def delete(self, link_id: int) -> None:
        with self.store.mutate() as store:
            self._find(link_id)
            store.links = [l for l in store.links if l.id != link_id]

    def check_status(self, url: str) -> bool:
        """Best-effort reachability of url; never raises for network errors."""
        require_fields({"url": url})
        online = self.checker(str(url).strip(), timeout=upstream.STATUS_TIMEOUT)
        logger.debug("Status check %s -> %s", url, "online" if online else "offline")
        return online

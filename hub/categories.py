"""Category CRUD, ordering and the protected navigation category."""

import logging
from dataclasses import replace
from typing import Iterable

from hub.errors import Forbidden, NotFound, ValidationError, require_fields
from hub.models import (
    DEFAULT_CATEGORY_ID,
    DEFAULT_CATEGORY_NAME,
    DEFAULT_CATEGORY_ORDER,
    Category,
    is_int,
    utcnow,
)
from hub.store import DocumentStore

logger = logging.getLogger(__name__)


def ensure_default_category(store: DocumentStore) -> Category:
    """Make sure the navigation category exists and sorts first. Idempotent."""
    with store.lock:
        default = next((c for c in store.categories if c.is_default), None)
        if default is not None:
            default.order = DEFAULT_CATEGORY_ORDER
            return default

        default = Category(
            id=DEFAULT_CATEGORY_ID,
            name=DEFAULT_CATEGORY_NAME,
            private=False,
            order=DEFAULT_CATEGORY_ORDER,
            is_default=True,
            created_at=utcnow(),
        )
        store.categories.insert(0, default)
        if store.next_category_id <= 0:
            store.next_category_id = 1
        logger.info("Created default %s category", DEFAULT_CATEGORY_NAME)
        return default


class CategoryManager:
    def __init__(self, store: DocumentStore):
        self.store = store

    def _find(self, cat_id: int) -> Category:
        cat = next((c for c in self.store.categories if c.id == cat_id), None)
        if cat is None:
            raise NotFound("Category not found")
        return cat

    def get(self, cat_id: int) -> Category:
        with self.store.lock:
            return replace(self._find(cat_id))

    def create(self, name: str) -> Category:
        require_fields({"name": name})
        with self.store.mutate() as store:
            cat = Category(
                id=store.next_category_id,
                name=str(name).strip(),
                private=False,
                order=sum(1 for c in store.categories if not c.is_default),
                is_default=False,
                created_at=utcnow(),
            )
            store.next_category_id += 1
            store.categories.append(cat)
            return replace(cat)

    def delete(self, cat_id: int) -> int:
        """Remove a category and orphan its links. Returns the orphan count."""
        with self.store.mutate() as store:
            cat = self._find(cat_id)
            if cat.is_default:
                raise Forbidden("Cannot delete default system category")
            orphaned = 0
            for link in store.links:
                if link.category_id == cat_id:
                    link.category_id = None
                    orphaned += 1
            store.categories = [c for c in store.categories if c.id != cat_id]
        logger.info("Deleted category %s (%d link(s) orphaned)", cat_id, orphaned)
        return orphaned

    def set_privacy(self, cat_id: int, private: bool) -> Category:
        with self.store.mutate():
            cat = self._find(cat_id)
            cat.private = bool(private)
            return replace(cat)

    def reorder(self, assignments: Iterable[tuple[int, int]]) -> list[Category]:
        """Apply (id, order) pairs, skipping unknown ids and the default category."""
        assignments = list(assignments)
        for _cat_id, order in assignments:
            if not is_int(order) or order < 0:
                raise ValidationError(f"Category order must be a non-negative integer, got {order!r}")

        with self.store.mutate() as store:
            by_id = {c.id: c for c in store.categories}
            for cat_id, order in assignments:
                cat = by_id.get(cat_id)
                if cat is None or cat.is_default:
                    continue
                cat.order = order
            store.categories.sort(key=lambda c: c.order)
        return self.list()

    # Defined last so "list" in the annotations above means the builtin.
    def list(self) -> list[Category]:
        """Categories in display order; ties keep insertion order."""
        with self.store.lock:
            return [replace(c) for c in sorted(self.store.categories, key=lambda c: c.order)]

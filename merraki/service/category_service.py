"""Template and blog category management."""

from __future__ import annotations

import contextlib
from collections.abc import MutableMapping
from typing import Any

from slugify import slugify

from merraki.errors import AppError, NotFoundError, wrap


class CategoryService:
    """Manages template and blog categories and logs admin actions."""

    def __init__(self, category_repo: Any, log_repo: Any) -> None:
        self.category_repo = category_repo
        self.log_repo = log_repo

    def _log(self, admin_id: int, action: str, entity_id: Any, name: Any) -> None:
        with contextlib.suppress(Exception):
            self.log_repo.create(
                {
                    "admin_id": admin_id,
                    "action": action,
                    "entity_type": "template_category",
                    "entity_id": entity_id,
                    "details": {"name": name},
                }
            )

    def _find_template_category(self, category_id: int) -> dict | None:
        try:
            return self.category_repo.get_template_category_by_id(category_id)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to find category", 500) from exc

    def create_template_category(
        self, category: MutableMapping[str, Any], created_by: int
    ) -> MutableMapping[str, Any]:
        """Store a template category, deriving its slug from the name when missing."""
        if not category.get("slug"):
            category["slug"] = slugify(category.get("name", ""))
        try:
            existing = self.category_repo.get_template_category_by_slug(category["slug"])
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to check slug", 500) from exc
        if existing is not None:
            raise AppError("SLUG_EXISTS", "Category with this slug already exists", 409)
        try:
            self.category_repo.create_template_category(category)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to create category", 500) from exc
        self._log(created_by, "create_template_category", category.get("id"), category.get("name"))
        return category

    def get_template_categories(self, active_only: bool = False) -> list[dict]:
        return self.category_repo.get_template_categories(active_only)

    def get_template_category_by_id(self, category_id: int) -> dict:
        category = self._find_template_category(category_id)
        if category is None:
            raise NotFoundError()
        return category

    def update_template_category(
        self, category: MutableMapping[str, Any], updated_by: int
    ) -> MutableMapping[str, Any]:
        if self._find_template_category(category["id"]) is None:
            raise NotFoundError()
        try:
            self.category_repo.update_template_category(category)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to update category", 500) from exc
        self._log(updated_by, "update_template_category", category["id"], category.get("name"))
        return category

    def delete_template_category(self, category_id: int, deleted_by: int) -> None:
        """Delete a template category that holds no templates."""
        category = self._find_template_category(category_id)
        if category is None:
            raise NotFoundError()
        if (category.get("templates_count") or 0) > 0:
            raise AppError("CATEGORY_HAS_TEMPLATES", "Cannot delete category with templates", 400)
        try:
            self.category_repo.delete_template_category(category_id)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to delete category", 500) from exc
        self._log(deleted_by, "delete_template_category", category_id, category.get("name"))

    def create_blog_category(
        self, category: MutableMapping[str, Any], created_by: int
    ) -> MutableMapping[str, Any]:
        """Store a blog category, deriving its slug from the name when missing."""
        if not category.get("slug"):
            category["slug"] = slugify(category.get("name", ""))
        try:
            self.category_repo.create_blog_category(category)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to create category", 500) from exc
        return category

    def get_blog_categories(self, active_only: bool = False) -> list[dict]:
        return self.category_repo.get_blog_categories(active_only)

    def update_blog_category(self, category: MutableMapping[str, Any]) -> Any:
        return self.category_repo.update_blog_category(category)

    def delete_blog_category(self, category_id: int) -> None:
        self.category_repo.delete_blog_category(category_id)
"""Downloadable template management."""

from __future__ import annotations

import contextlib
from collections.abc import Mapping, MutableMapping, Sequence
from typing import Any

from slugify import slugify

from merraki.errors import AppError, NotFoundError, wrap


class TemplateService:
    """Creates, reads, updates and deletes templates and logs admin actions."""

    def __init__(self, template_repo: Any, category_repo: Any, log_repo: Any) -> None:
        self.template_repo = template_repo
        self.category_repo = category_repo
        self.log_repo = log_repo

    def _log(self, admin_id: int, action: str, entity_id: Any, details: dict) -> None:
        with contextlib.suppress(Exception):
            self.log_repo.create(
                {
                    "admin_id": admin_id,
                    "action": action,
                    "entity_type": "template",
                    "entity_id": entity_id,
                    "details": details,
                }
            )

    def _find_by_id(self, template_id: int) -> dict | None:
        try:
            return self.template_repo.find_by_id(template_id)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to find template", 500) from exc

    def _find_by_slug(self, slug: str, message: str) -> dict | None:
        try:
            return self.template_repo.find_by_slug(slug)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", message, 500) from exc

    def create_template(
        self, template: MutableMapping[str, Any], created_by: int
    ) -> MutableMapping[str, Any]:
        """Store a new template in an existing category, with a unique slug."""
        if not template.get("slug"):
            template["slug"] = slugify(template.get("title", ""))
        if self._find_by_slug(template["slug"], "Failed to check slug") is not None:
            raise AppError("SLUG_EXISTS", "Template with this slug already exists", 409)
        try:
            category = self.category_repo.get_template_category_by_id(template.get("category_id"))
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to find category", 500) from exc
        if category is None:
            raise AppError("CATEGORY_NOT_FOUND", "Category not found", 404)
        template["created_by"] = created_by
        try:
            self.template_repo.create(template)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to create template", 500) from exc
        self._log(
            created_by,
            "create_template",
            template.get("id"),
            {"title": template.get("title"), "slug": template["slug"]},
        )
        return template

    def get_template_by_id(self, template_id: int) -> dict:
        template = self._find_by_id(template_id)
        if template is None:
            raise NotFoundError()
        return template

    def get_template_by_slug(self, slug: str, increment_views: bool = False) -> dict:
        """Return a template; count a view when asked and the template is active."""
        template = self._find_by_slug(slug, "Failed to find template")
        if template is None:
            raise NotFoundError()
        if increment_views and template.get("status") == "active":
            with contextlib.suppress(Exception):
                self.template_repo.increment_views(template["id"])
        return template

    def get_all_templates(
        self, filters: Mapping[str, Any] | None, limit: int, offset: int
    ) -> tuple[list[dict], int]:
        try:
            return self.template_repo.get_all(filters, limit, offset)
        except Exception as exc:
            raise RuntimeError(f"repository error: {exc}") from exc

    def update_template(
        self, template: MutableMapping[str, Any], updated_by: int
    ) -> MutableMapping[str, Any]:
        """Save changes to a template; a changed slug must be free."""
        existing = self._find_by_id(template["id"])
        if existing is None:
            raise NotFoundError()
        if template.get("slug") != existing.get("slug"):
            if self._find_by_slug(template.get("slug"), "Failed to check slug") is not None:
                raise AppError("SLUG_EXISTS", "Template with this slug already exists", 409)
        try:
            self.template_repo.update(template)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to update template", 500) from exc
        self._log(updated_by, "update_template", template["id"], {"title": template.get("title")})
        return template

    def delete_template(self, template_id: int, deleted_by: int) -> None:
        """Delete a template permanently."""
        template = self._find_by_id(template_id)
        if template is None:
            raise NotFoundError()
        try:
            self.template_repo.delete(template_id)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to delete template", 500) from exc
        self._log(
            deleted_by,
            "delete_template",
            template_id,
            {"title": template.get("title"), "id": template_id, "permanent": True},
        )

    def get_featured_templates(self, limit: int) -> list[dict]:
        return self.template_repo.get_featured(limit)

    def get_popular_templates(self, limit: int) -> list[dict]:
        return self.template_repo.get_popular(limit)

    def search_templates(self, query: str, limit: int) -> list[dict]:
        if not query:
            return []
        return self.template_repo.search(query, limit)

    def get_templates_by_ids(self, ids: Sequence[int]) -> list[dict]:
        return self.template_repo.get_by_ids(list(ids))

    def get_analytics(self) -> dict[str, Any]:
        try:
            return self.template_repo.get_analytics()
        except Exception as exc:
            raise RuntimeError(f"repository error: {exc}") from exc
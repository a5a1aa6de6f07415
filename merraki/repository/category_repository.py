"""Storage of template and blog categories."""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any


def _returning(row: dict | None) -> dict:
    if row is None:
        raise LookupError("no rows in result set")
    return row


class CategoryRepository:
    """Reads and writes rows of ``template_categories`` and ``blog_categories``."""

    def __init__(self, db: Any) -> None:
        self.db = db

    def create_template_category(self, category: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        """Insert a template category and fill in its id and timestamps."""
        query = """
		INSERT INTO template_categories 
		(slug, name, description, icon_name, display_order, color_hex, meta_title, meta_description, is_active)
		VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
		RETURNING id, created_at, updated_at"""
        row = self.db.fetch_one(
            query,
            category["slug"],
            category["name"],
            category.get("description"),
            category.get("icon_name"),
            category.get("display_order", 0),
            category.get("color_hex"),
            category.get("meta_title"),
            category.get("meta_description"),
            category.get("is_active", False),
        )
        category.update(_returning(row))
        return category

    def get_template_categories(self, active_only: bool) -> list[dict]:
        query = "SELECT * FROM template_categories WHERE 1=1"
        if active_only:
            query += " AND is_active = true"
        query += " ORDER BY display_order ASC, name ASC"
        return list(self.db.fetch_all(query))

    def get_template_category_by_id(self, category_id: int) -> dict | None:
        return self.db.fetch_one("SELECT * FROM template_categories WHERE id = $1", category_id)

    def get_template_category_by_slug(self, slug: str) -> dict | None:
        return self.db.fetch_one("SELECT * FROM template_categories WHERE slug = $1", slug)

    def update_template_category(self, category: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        """Save a template category; raise LookupError if it does not exist."""
        query = """
		UPDATE template_categories 
		SET name = $1, description = $2, icon_name = $3, display_order = $4, 
		    color_hex = $5, meta_title = $6, meta_description = $7, is_active = $8, updated_at = NOW()
		WHERE id = $9
		RETURNING updated_at"""
        row = self.db.fetch_one(
            query,
            category.get("name"),
            category.get("description"),
            category.get("icon_name"),
            category.get("display_order", 0),
            category.get("color_hex"),
            category.get("meta_title"),
            category.get("meta_description"),
            category.get("is_active", False),
            category["id"],
        )
        category.update(_returning(row))
        return category

    def delete_template_category(self, category_id: int) -> None:
        self.db.execute("DELETE FROM template_categories WHERE id = $1", category_id)

    def create_blog_category(self, category: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        """Insert a blog category and fill in its id and timestamps."""
        query = """
		INSERT INTO blog_categories 
		(slug, name, description, display_order, is_active)
		VALUES ($1, $2, $3, $4, $5)
		RETURNING id, created_at, updated_at"""
        row = self.db.fetch_one(
            query,
            category["slug"],
            category["name"],
            category.get("description"),
            category.get("display_order", 0),
            category.get("is_active", False),
        )
        category.update(_returning(row))
        return category

    def get_blog_categories(self, active_only: bool) -> list[dict]:
        query = "SELECT * FROM blog_categories WHERE 1=1"
        if active_only:
            query += " AND is_active = true"
        query += " ORDER BY display_order ASC, name ASC"
        return list(self.db.fetch_all(query))

    def get_blog_category_by_id(self, category_id: int) -> dict | None:
        return self.db.fetch_one("SELECT * FROM blog_categories WHERE id = $1", category_id)

    def update_blog_category(self, category: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        """Save a blog category; raise LookupError if it does not exist."""
        query = """
		UPDATE blog_categories 
		SET name = $1, description = $2, display_order = $3, is_active = $4, updated_at = NOW()
		WHERE id = $5
		RETURNING updated_at"""
        row = self.db.fetch_one(
            query,
            category.get("name"),
            category.get("description"),
            category.get("display_order", 0),
            category.get("is_active", False),
            category["id"],
        )
        category.update(_returning(row))
        return category

    def delete_blog_category(self, category_id: int) -> None:
        self.db.execute("DELETE FROM blog_categories WHERE id = $1", category_id)
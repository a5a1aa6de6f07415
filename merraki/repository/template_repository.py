"""Storage of downloadable templates."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any

from merraki.database import FilterBuilder

_SORTS = {
    "newest": "created_at DESC",
    "oldest": "created_at ASC",
    "popular": "downloads_count DESC",
    "price_low": "price_inr ASC",
    "price_high": "price_inr DESC",
    "rating": "rating DESC",
}


def _array(value: Any) -> list | None:
    return None if value is None else list(value)


def _positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _int(value: Any) -> int:
    return int(value or 0)


class TemplateRepository:
    """Reads and writes rows of the ``templates`` table."""

    def __init__(self, db: Any) -> None:
        self.db = db

    def create(self, template: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        """Insert ``template`` and fill in its id and timestamps."""
        query = """
		INSERT INTO templates 
		(slug, title, description, detailed_description, price_inr, thumbnail_url, 
		 preview_urls, file_url, file_size_bytes, category_id, tags, status, 
		 is_featured, meta_title, meta_description, created_by)
		VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15, $16)
		RETURNING id, created_at, updated_at"""
        row = self.db.fetch_one(
            query,
            template["slug"],
            template["title"],
            template.get("description"),
            template.get("detailed_description"),
            template.get("price_inr", 0),
            template.get("thumbnail_url"),
            _array(template.get("preview_urls")),
            template.get("file_url"),
            template.get("file_size_bytes"),
            template.get("category_id"),
            _array(template.get("tags")),
            template.get("status"),
            template.get("is_featured", False),
            template.get("meta_title"),
            template.get("meta_description"),
            template.get("created_by"),
        )
        if row is None:
            raise LookupError("no rows in result set")
        template.update(row)
        return template

    def find_by_id(self, template_id: int) -> dict | None:
        return self.db.fetch_one("SELECT * FROM templates WHERE id = $1", template_id)

    def find_by_slug(self, slug: str) -> dict | None:
        return self.db.fetch_one("SELECT * FROM templates WHERE slug = $1", slug)

    def get_all(
        self, filters: Mapping[str, Any] | None, limit: int, offset: int
    ) -> tuple[list[dict], int]:
        """Return one page of templates and the total number that match."""
        filters = filters or {}
        builder = FilterBuilder(
            "SELECT * FROM templates WHERE 1=1", "SELECT COUNT(*) FROM templates WHERE 1=1"
        )
        status = filters.get("status")
        if isinstance(status, str) and status:
            builder.add("status = {p}", status)
        category_id = filters.get("category_id")
        if _positive_int(category_id):
            builder.add("category_id = {p}", category_id)
        if filters.get("featured") is True:
            builder.add("is_featured = {p}", True)
        search = filters.get("search")
        if isinstance(search, str) and search:
            builder.add("(title ILIKE {p} OR description ILIKE {p})", f"%{search}%")
        min_price = filters.get("min_price")
        if _positive_int(min_price):
            builder.add("price_inr >= {p}", min_price)
        max_price = filters.get("max_price")
        if _positive_int(max_price):
            builder.add("price_inr <= {p}", max_price)
        tags = filters.get("tags")
        if isinstance(tags, (list, tuple)) and tags and all(isinstance(t, str) for t in tags):
            builder.add("tags && {p}", list(tags))
        sort = filters.get("sort")
        builder.order_by(_SORTS.get(sort, "created_at DESC") if isinstance(sort, str) else "created_at DESC")

        count_query, count_args = builder.count_sql()
        try:
            total = _int(self.db.fetch_value(count_query, *count_args))
        except Exception as exc:
            raise RuntimeError(f"count query failed: {exc}") from exc
        select_query, args = builder.select_sql(limit, offset)
        try:
            templates = list(self.db.fetch_all(select_query, *args))
        except Exception as exc:
            raise RuntimeError(f"select query failed: {exc}") from exc
        return templates, total

    def update(self, template: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        """Save ``template``; raise LookupError when no template has its id."""
        query = """
		UPDATE templates 
		SET slug = $1, title = $2, description = $3, detailed_description = $4, 
		    price_inr = $5, thumbnail_url = $6, preview_urls = $7, file_url = $8,
		    file_size_bytes = $9, category_id = $10, tags = $11, status = $12,
		    is_featured = $13, meta_title = $14, meta_description = $15, updated_at = NOW()
		WHERE id = $16
		RETURNING updated_at"""
        row = self.db.fetch_one(
            query,
            template.get("slug"),
            template.get("title"),
            template.get("description"),
            template.get("detailed_description"),
            template.get("price_inr", 0),
            template.get("thumbnail_url"),
            _array(template.get("preview_urls")),
            template.get("file_url"),
            template.get("file_size_bytes"),
            template.get("category_id"),
            _array(template.get("tags")),
            template.get("status"),
            template.get("is_featured", False),
            template.get("meta_title"),
            template.get("meta_description"),
            template["id"],
        )
        if row is None:
            raise LookupError("no rows in result set")
        template.update(row)
        return template

    def delete(self, template_id: int) -> None:
        """Delete a template; raise LookupError when none has that id."""
        affected = self.db.execute("DELETE FROM templates WHERE id = $1", template_id)
        if affected == 0:
            raise LookupError(f"template with id {template_id} not found")

    def increment_views(self, template_id: int) -> None:
        self.db.execute(
            "UPDATE templates SET views_count = views_count + 1 WHERE id = $1", template_id
        )

    def increment_downloads(self, template_id: int) -> None:
        self.db.execute(
            "UPDATE templates SET downloads_count = downloads_count + 1 WHERE id = $1", template_id
        )

    def get_featured(self, limit: int) -> list[dict]:
        query = """
		SELECT * FROM templates 
		WHERE status = 'active' AND is_featured = true 
		ORDER BY created_at DESC 
		LIMIT $1"""
        return list(self.db.fetch_all(query, limit))

    def get_popular(self, limit: int) -> list[dict]:
        query = """
		SELECT * FROM templates 
		WHERE status = 'active' 
		ORDER BY downloads_count DESC 
		LIMIT $1"""
        return list(self.db.fetch_all(query, limit))

    def search(self, search_query: str, limit: int) -> list[dict]:
        """Full-text search over active templates, best matches first."""
        query = """
		SELECT * FROM templates 
		WHERE status = 'active' 
		  AND to_tsvector('english', title || ' ' || COALESCE(description, '')) @@ plainto_tsquery('english', $1)
		ORDER BY ts_rank(to_tsvector('english', title || ' ' || COALESCE(description, '')), plainto_tsquery('english', $1)) DESC
		LIMIT $2"""
        return list(self.db.fetch_all(query, search_query, limit))

    def get_by_ids(self, ids: list[int]) -> list[dict]:
        """Return the active templates among ``ids``."""
        if not ids:
            return []
        query = "SELECT * FROM templates WHERE id = ANY($1) AND status = 'active'"
        return list(self.db.fetch_all(query, list(ids)))

    def get_analytics(self) -> dict[str, Any]:
        """Return template counts, top and recent templates and revenue figures."""
        analytics: dict[str, Any] = {}

        try:
            status_rows = self.db.fetch_all(
                "SELECT status, COUNT(*) as count FROM templates GROUP BY status"
            )
        except Exception as exc:
            raise RuntimeError(f"failed to get status counts: {exc}") from exc
        analytics["by_status"] = [
            {"status": row.get("status"), "count": _int(row.get("count"))} for row in status_rows
        ]

        category_query = """
		SELECT 
			t.category_id,
			tc.name as category_name,
			COUNT(t.id) as count
		FROM templates t
		LEFT JOIN template_categories tc ON t.category_id = tc.id
		WHERE t.status = 'active'
		GROUP BY t.category_id, tc.name
		ORDER BY count DESC"""
        try:
            category_rows = self.db.fetch_all(category_query)
        except Exception as exc:
            raise RuntimeError(f"failed to get category counts: {exc}") from exc
        analytics["by_category"] = [
            {
                "category_id": row.get("category_id"),
                "category_name": row.get("category_name"),
                "count": _int(row.get("count")),
            }
            for row in category_rows
        ]

        top_query = """
		SELECT 
			id, title, downloads_count, views_count, rating
		FROM templates
		WHERE status = 'active'
		ORDER BY downloads_count DESC
		LIMIT 10"""
        try:
            top_rows = self.db.fetch_all(top_query)
        except Exception as exc:
            raise RuntimeError(f"failed to get top templates: {exc}") from exc
        analytics["top_templates"] = [
            {
                "id": row.get("id"),
                "title": row.get("title"),
                "downloads": _int(row.get("downloads_count")),
                "views": _int(row.get("views_count")),
                "rating": float(row.get("rating") or 0.0),
            }
            for row in top_rows
        ]

        totals_query = """
		SELECT 
			COUNT(*) as total_templates,
			COUNT(*) FILTER (WHERE status = 'active') as active_templates,
			COALESCE(SUM(downloads_count), 0) as total_downloads,
			COALESCE(SUM(views_count), 0) as total_views
		FROM templates"""
        try:
            totals = self.db.fetch_one(totals_query) or {}
        except Exception as exc:
            raise RuntimeError(f"failed to get totals: {exc}") from exc
        analytics["totals"] = {
            name: _int(totals.get(name))
            for name in ("total_templates", "active_templates", "total_downloads", "total_views")
        }

        analytics["revenue_by_template"] = self._revenue_by_template()

        recent_query = """
		SELECT id, title, status, created_at
		FROM templates
		ORDER BY created_at DESC
		LIMIT 5"""
        try:
            recent_rows = self.db.fetch_all(recent_query)
        except Exception as exc:
            raise RuntimeError(f"failed to get recent templates: {exc}") from exc
        analytics["recent_templates"] = [
            {
                "id": row.get("id"),
                "title": row.get("title"),
                "status": row.get("status"),
                "created_at": row.get("created_at"),
            }
            for row in recent_rows
        ]
        return analytics

    def _revenue_by_template(self) -> list[dict]:
        try:
            items = _int(self.db.fetch_value("SELECT COUNT(*) FROM order_items"))
        except Exception:
            return []
        if items <= 0:
            return []
        revenue_query = """
			SELECT 
				oi.template_id,
				t.title,
				COUNT(oi.id) as sold_count,
				SUM(oi.price_inr) as revenue
			FROM order_items oi
			LEFT JOIN templates t ON oi.template_id = t.id
			WHERE oi.template_id IS NOT NULL
			GROUP BY oi.template_id, t.title
			ORDER BY revenue DESC
			LIMIT 10"""
        try:
            rows = self.db.fetch_all(revenue_query)
        except Exception:
            return []
        return [
            {
                "template_id": row.get("template_id"),
                "title": row.get("title"),
                "sold_count": _int(row.get("sold_count")),
                "revenue": _int(row.get("revenue")),
            }
            for row in rows
        ]
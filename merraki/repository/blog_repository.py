"""Storage of blog posts."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any

from merraki.database import FilterBuilder

_SORTS = {
    "newest": "published_at DESC NULLS LAST",
    "oldest": "published_at ASC NULLS LAST",
    "popular": "views_count DESC",
}


def _array(value: Any) -> list | None:
    return None if value is None else list(value)


def _int_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class BlogRepository:
    """Reads and writes rows of the ``blog_posts`` table."""

    def __init__(self, db: Any) -> None:
        self.db = db

    def create(self, post: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        """Insert ``post`` and fill in its id and timestamps."""
        query = """
		INSERT INTO blog_posts 
		(slug, title, excerpt, content, featured_image_url, category_id, tags,
		 meta_title, meta_description, seo_keywords, reading_time_minutes, 
		 author_id, status, published_at)
		VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14)
		RETURNING id, created_at, updated_at"""
        row = self.db.fetch_one(
            query,
            post["slug"],
            post["title"],
            post.get("excerpt"),
            post.get("content"),
            post.get("featured_image_url"),
            post.get("category_id"),
            _array(post.get("tags")),
            post.get("meta_title"),
            post.get("meta_description"),
            _array(post.get("seo_keywords")),
            post.get("reading_time_minutes"),
            post.get("author_id"),
            post.get("status"),
            post.get("published_at"),
        )
        if row is None:
            raise LookupError("failed to create blog post: no rows in result set")
        post.update(row)
        return post

    def find_by_id(self, post_id: int) -> dict | None:
        return self.db.fetch_one("SELECT * FROM blog_posts WHERE id = $1", post_id)

    def find_by_slug(self, slug: str) -> dict | None:
        return self.db.fetch_one("SELECT * FROM blog_posts WHERE slug = $1", slug)

    def get_all(
        self, filters: Mapping[str, Any] | None, limit: int, offset: int
    ) -> tuple[list[dict], int]:
        """Return one page of posts and the total number that match."""
        filters = filters or {}
        builder = FilterBuilder(
            "SELECT * FROM blog_posts WHERE 1=1", "SELECT COUNT(*) FROM blog_posts WHERE 1=1"
        )
        status = filters.get("status")
        if isinstance(status, str) and status:
            builder.add("status = {p}", status)
        category_id = filters.get("category_id")
        if _int_id(category_id):
            builder.add("category_id = {p}", category_id)
        tag = filters.get("tag")
        if isinstance(tag, str) and tag:
            builder.add("{p} = ANY(tags)", tag)
        search = filters.get("search")
        if isinstance(search, str) and search:
            builder.add("(title ILIKE {p} OR excerpt ILIKE {p} OR content ILIKE {p})", f"%{search}%")
        sort = filters.get("sort")
        builder.order_by(_SORTS.get(sort, "created_at DESC") if isinstance(sort, str) else "created_at DESC")

        count_query, count_args = builder.count_sql()
        total = int(self.db.fetch_value(count_query, *count_args) or 0)
        select_query, args = builder.select_sql(limit, offset)
        return list(self.db.fetch_all(select_query, *args)), total

    def update(self, post: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        """Save ``post``; raise LookupError when no post has its id."""
        query = """
		UPDATE blog_posts 
		SET slug = $1, title = $2, excerpt = $3, content = $4, 
		    featured_image_url = $5, category_id = $6, tags = $7,
		    meta_title = $8, meta_description = $9, seo_keywords = $10,
		    reading_time_minutes = $11, status = $12, published_at = $13,
		    updated_at = NOW()
		WHERE id = $14
		RETURNING updated_at"""
        row = self.db.fetch_one(
            query,
            post.get("slug"),
            post.get("title"),
            post.get("excerpt"),
            post.get("content"),
            post.get("featured_image_url"),
            post.get("category_id"),
            _array(post.get("tags")),
            post.get("meta_title"),
            post.get("meta_description"),
            _array(post.get("seo_keywords")),
            post.get("reading_time_minutes"),
            post.get("status"),
            post.get("published_at"),
            post["id"],
        )
        if row is None:
            raise LookupError(f"blog post with id {post['id']} not found")
        post.update(row)
        return post

    def delete(self, post_id: int) -> None:
        self.db.execute("DELETE FROM blog_posts WHERE id = $1", post_id)

    def increment_views(self, post_id: int) -> None:
        self.db.execute("UPDATE blog_posts SET views_count = views_count + 1 WHERE id = $1", post_id)

    def get_featured(self, limit: int) -> list[dict]:
        query = """
		SELECT * FROM blog_posts 
		WHERE status = 'published' 
		ORDER BY published_at DESC 
		LIMIT $1"""
        return list(self.db.fetch_all(query, limit))

    def get_popular(self, limit: int) -> list[dict]:
        query = """
		SELECT * FROM blog_posts 
		WHERE status = 'published' 
		ORDER BY views_count DESC 
		LIMIT $1"""
        return list(self.db.fetch_all(query, limit))

    def search(self, search_query: str, limit: int) -> list[dict]:
        """Full-text search over published posts, best matches first."""
        query = """
		SELECT * FROM blog_posts 
		WHERE status = 'published' 
		  AND to_tsvector('english', title || ' ' || excerpt || ' ' || content) @@ plainto_tsquery('english', $1)
		ORDER BY ts_rank(to_tsvector('english', title || ' ' || excerpt || ' ' || content), plainto_tsquery('english', $1)) DESC
		LIMIT $2"""
        return list(self.db.fetch_all(query, search_query, limit))

    def get_analytics(self) -> dict[str, Any]:
        """Return post totals, the most viewed posts and counts per category."""
        totals_query = """
		SELECT 
			COUNT(*) as total_posts,
			COUNT(*) FILTER (WHERE status = 'published') as published_posts,
			COUNT(*) FILTER (WHERE status = 'draft') as draft_posts,
			COALESCE(SUM(views_count), 0) as total_views
		FROM blog_posts"""
        totals = self.db.fetch_one(totals_query) or {}
        analytics: dict[str, Any] = {
            name: int(totals.get(name) or 0)
            for name in ("total_posts", "published_posts", "draft_posts", "total_views")
        }

        popular_query = """
		SELECT id, title, views_count, published_at
		FROM blog_posts
		WHERE status = 'published'
		ORDER BY views_count DESC
		LIMIT 10"""
        analytics["popular_posts"] = [
            {
                "id": row.get("id"),
                "title": row.get("title"),
                "views_count": int(row.get("views_count") or 0),
                "published_at": row.get("published_at"),
            }
            for row in self.db.fetch_all(popular_query)
        ]

        category_query = """
		SELECT 
			bp.category_id,
			bc.name as category_name,
			COUNT(bp.id) as posts_count,
			COALESCE(SUM(bp.views_count), 0) as total_views
		FROM blog_posts bp
		LEFT JOIN blog_categories bc ON bp.category_id = bc.id
		WHERE bp.status = 'published'
		GROUP BY bp.category_id, bc.name
		ORDER BY posts_count DESC"""
        analytics["by_category"] = [
            {
                "category_id": row.get("category_id"),
                "category_name": row.get("category_name"),
                "posts_count": int(row.get("posts_count") or 0),
                "total_views": int(row.get("total_views") or 0),
            }
            for row in self.db.fetch_all(category_query)
        ]
        return analytics
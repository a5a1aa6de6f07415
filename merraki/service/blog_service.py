"""Blog post management."""

from __future__ import annotations

import contextlib
from collections.abc import Mapping, MutableMapping
from typing import Any

from slugify import slugify

from merraki.errors import AppError, NotFoundError, wrap


class BlogService:
    """Creates, reads, updates and deletes blog posts and logs admin actions."""

    def __init__(self, blog_repo: Any, log_repo: Any) -> None:
        self.blog_repo = blog_repo
        self.log_repo = log_repo

    def _log(self, admin_id: int, action: str, entity_id: Any, details: dict) -> None:
        with contextlib.suppress(Exception):
            self.log_repo.create(
                {
                    "admin_id": admin_id,
                    "action": action,
                    "entity_type": "blog_post",
                    "entity_id": entity_id,
                    "details": details,
                }
            )

    def _find_by_id(self, post_id: int) -> dict | None:
        try:
            return self.blog_repo.find_by_id(post_id)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to find post", 500) from exc

    def create_post(self, post: MutableMapping[str, Any], created_by: int) -> MutableMapping[str, Any]:
        """Store a new post, deriving its slug from the title when missing."""
        if not post.get("slug"):
            post["slug"] = slugify(post.get("title", ""))
        try:
            existing = self.blog_repo.find_by_slug(post["slug"])
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to check slug", 500) from exc
        if existing is not None:
            raise AppError("SLUG_EXISTS", "Post with this slug already exists", 409)
        try:
            self.blog_repo.create(post)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to create post", 500) from exc
        self._log(created_by, "create_blog_post", post.get("id"), {"title": post.get("title")})
        return post

    def get_post_by_slug(self, slug: str, increment_views: bool = False) -> dict:
        """Return a post; count a view when asked and the post is published."""
        try:
            post = self.blog_repo.find_by_slug(slug)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to find post", 500) from exc
        if post is None:
            raise NotFoundError()
        if increment_views and post.get("status") == "published":
            with contextlib.suppress(Exception):
                self.blog_repo.increment_views(post["id"])
        return post

    def get_post_by_id(self, post_id: int) -> dict:
        post = self._find_by_id(post_id)
        if post is None:
            raise NotFoundError()
        return post

    def get_all_posts(
        self, filters: Mapping[str, Any] | None, limit: int, offset: int
    ) -> tuple[list[dict], int]:
        return self.blog_repo.get_all(filters, limit, offset)

    def update_post(self, post: MutableMapping[str, Any], updated_by: int) -> MutableMapping[str, Any]:
        """Save changes to a post, keeping slugs unique."""
        existing = self._find_by_id(post["id"])
        if existing is None:
            raise NotFoundError()
        if post.get("slug") != existing.get("slug"):
            try:
                other = self.blog_repo.find_by_slug(post.get("slug"))
            except Exception as exc:
                raise wrap(exc, "DATABASE_ERROR", "Failed to check slug", 500) from exc
            if other is not None and other.get("id") != post["id"]:
                raise AppError("SLUG_EXISTS", "Post with this slug already exists", 409)
        try:
            self.blog_repo.update(post)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to update post", 500) from exc
        self._log(
            updated_by,
            "update_blog_post",
            post["id"],
            {"title": post.get("title"), "status": post.get("status")},
        )
        return post

    def delete_post(self, post_id: int, deleted_by: int) -> None:
        post = self._find_by_id(post_id)
        if post is None:
            raise NotFoundError()
        try:
            self.blog_repo.delete(post_id)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to delete post", 500) from exc
        self._log(deleted_by, "delete_blog_post", post_id, {"title": post.get("title")})

    def get_featured_posts(self, limit: int) -> list[dict]:
        return self.blog_repo.get_featured(limit)

    def get_popular_posts(self, limit: int) -> list[dict]:
        return self.blog_repo.get_popular(limit)

    def search_posts(self, query: str, limit: int) -> list[dict]:
        return self.blog_repo.search(query, limit)

    def get_analytics(self) -> dict[str, Any]:
        return self.blog_repo.get_analytics()
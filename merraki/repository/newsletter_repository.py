"""Storage of newsletter subscribers."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any

from merraki.database import FilterBuilder


class NewsletterRepository:
    """Reads and writes rows of the ``newsletter_subscribers`` table."""

    def __init__(self, db: Any) -> None:
        self.db = db

    def create(self, subscriber: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        """Insert ``subscriber`` and fill in its id and subscription time."""
        query = """
		INSERT INTO newsletter_subscribers (email, name, status, source, ip_address)
		VALUES ($1, $2, $3, $4, $5)
		RETURNING id, subscribed_at"""
        row = self.db.fetch_one(
            query,
            subscriber["email"],
            subscriber.get("name"),
            subscriber.get("status"),
            subscriber.get("source"),
            subscriber.get("ip_address"),
        )
        if row is None:
            raise LookupError("no rows in result set")
        subscriber.update(row)
        return subscriber

    def find_by_email(self, email: str) -> dict | None:
        return self.db.fetch_one("SELECT * FROM newsletter_subscribers WHERE email = $1", email)

    def get_all(
        self, filters: Mapping[str, Any] | None, limit: int, offset: int
    ) -> tuple[list[dict], int]:
        """Return one page of subscribers and the total number that match."""
        filters = filters or {}
        builder = FilterBuilder(
            "SELECT * FROM newsletter_subscribers WHERE 1=1",
            "SELECT COUNT(*) FROM newsletter_subscribers WHERE 1=1",
        )
        status = filters.get("status")
        if isinstance(status, str) and status:
            builder.add("status = {p}", status)
        search = filters.get("search")
        if isinstance(search, str) and search:
            builder.add("(email ILIKE {p} OR name ILIKE {p})", f"%{search}%")
        builder.order_by("subscribed_at DESC")

        count_query, count_args = builder.count_sql()
        total = int(self.db.fetch_value(count_query, *count_args) or 0)
        select_query, args = builder.select_sql(limit, offset)
        return list(self.db.fetch_all(select_query, *args)), total

    def unsubscribe(self, email: str) -> None:
        query = """
		UPDATE newsletter_subscribers 
		SET status = 'unsubscribed', unsubscribed_at = NOW()
		WHERE email = $1"""
        self.db.execute(query, email)

    def delete(self, subscriber_id: int) -> None:
        self.db.execute("DELETE FROM newsletter_subscribers WHERE id = $1", subscriber_id)

    def get_analytics(self) -> dict[str, Any]:
        """Return subscriber counts and active subscribers per source."""
        counts_query = """
		SELECT 
			COUNT(*) as total,
			COUNT(*) FILTER (WHERE status = 'active') as active,
			COUNT(*) FILTER (WHERE status = 'unsubscribed') as unsubscribed
		FROM newsletter_subscribers"""
        counts = self.db.fetch_one(counts_query) or {}
        source_query = """
		SELECT source, COUNT(*) as count 
		FROM newsletter_subscribers 
		WHERE status = 'active'
		GROUP BY source"""
        by_source = [
            {"source": row.get("source"), "count": int(row.get("count") or 0)}
            for row in self.db.fetch_all(source_query)
        ]
        return {
            "total_subscribers": int(counts.get("total") or 0),
            "active_subscribers": int(counts.get("active") or 0),
            "unsubscribed": int(counts.get("unsubscribed") or 0),
            "by_source": by_source,
        }
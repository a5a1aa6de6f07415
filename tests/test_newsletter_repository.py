from collections import deque

import pytest

from merraki.repository.newsletter_repository import NewsletterRepository


class FakeDB:
    """Records queries and answers them from queued results."""

    def __init__(self, one=(), rows=(), values=()):
        self.calls = []
        self._one = deque(one)
        self._rows = deque(rows)
        self._values = deque(values)

    def fetch_one(self, query, *args):
        self.calls.append(("fetch_one", query, args))
        return self._one.popleft() if self._one else None

    def fetch_all(self, query, *args):
        self.calls.append(("fetch_all", query, args))
        return self._rows.popleft() if self._rows else []

    def fetch_value(self, query, *args):
        self.calls.append(("fetch_value", query, args))
        return self._values.popleft() if self._values else None

    def execute(self, query, *args):
        self.calls.append(("execute", query, args))
        return 1


def test_create_fills_returned_columns():
    db = FakeDB(one=[{"id": 4, "subscribed_at": "t"}])
    subscriber = {"email": "reader@example.com", "name": "Reader", "status": "active", "source": "footer"}
    result = NewsletterRepository(db).create(subscriber)
    assert result["id"] == 4
    assert result["subscribed_at"] == "t"
    assert db.calls[0][2] == ("reader@example.com", "Reader", "active", "footer", None)


def test_create_without_row_raises():
    with pytest.raises(LookupError):
        NewsletterRepository(FakeDB()).create({"email": "reader@example.com"})


def test_find_by_email():
    db = FakeDB(one=[{"id": 1, "email": "reader@example.com"}])
    assert NewsletterRepository(db).find_by_email("reader@example.com")["id"] == 1
    assert NewsletterRepository(FakeDB()).find_by_email("x@example.com") is None


def test_get_all_with_filters():
    db = FakeDB(rows=[[{"id": 1}]], values=[1])
    subscribers, total = NewsletterRepository(db).get_all({"status": "active", "search": "ann"}, 10, 5)
    assert subscribers == [{"id": 1}]
    assert total == 1
    count_call, select_call = db.calls
    assert "status = $1" in count_call[1]
    assert "(email ILIKE $2 OR name ILIKE $2)" in count_call[1]
    assert count_call[2] == ("active", "%ann%")
    assert select_call[1].endswith("ORDER BY subscribed_at DESC LIMIT $3 OFFSET $4")
    assert select_call[2] == ("active", "%ann%", 10, 5)


def test_get_all_without_filters():
    db = FakeDB(values=[0])
    subscribers, total = NewsletterRepository(db).get_all(None, 2, 0)
    assert (subscribers, total) == ([], 0)
    assert db.calls[1][2] == (2, 0)


def test_unsubscribe_and_delete():
    db = FakeDB()
    repo = NewsletterRepository(db)
    repo.unsubscribe("reader@example.com")
    repo.delete(8)
    assert "status = 'unsubscribed'" in db.calls[0][1]
    assert db.calls[0][2] == ("reader@example.com",)
    assert db.calls[1] == ("execute", "DELETE FROM newsletter_subscribers WHERE id = $1", (8,))


def test_get_analytics():
    db = FakeDB(
        one=[{"total": 5, "active": 3, "unsubscribed": 2}],
        rows=[[{"source": "footer", "count": 3}]],
    )
    analytics = NewsletterRepository(db).get_analytics()
    assert analytics == {
        "total_subscribers": 5,
        "active_subscribers": 3,
        "unsubscribed": 2,
        "by_source": [{"source": "footer", "count": 3}],
    }


def test_get_analytics_on_empty_table():
    analytics = NewsletterRepository(FakeDB()).get_analytics()
    assert analytics["total_subscribers"] == 0
    assert analytics["by_source"] == []
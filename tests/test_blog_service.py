import pytest

from merraki.errors import AppError, NotFoundError
from merraki.service.blog_service import BlogService


class FakeBlogRepo:
    def __init__(self):
        self.posts = {}
        self.next_id = 1
        self.views = []
        self.deleted = []

    def find_by_slug(self, slug):
        return next((dict(p) for p in self.posts.values() if p["slug"] == slug), None)

    def find_by_id(self, post_id):
        post = self.posts.get(post_id)
        return dict(post) if post else None

    def create(self, post):
        post["id"] = self.next_id
        self.next_id += 1
        self.posts[post["id"]] = dict(post)
        return post

    def update(self, post):
        self.posts[post["id"]] = dict(post)
        return post

    def delete(self, post_id):
        self.deleted.append(post_id)
        self.posts.pop(post_id, None)

    def increment_views(self, post_id):
        self.views.append(post_id)

    def get_all(self, filters, limit, offset):
        items = list(self.posts.values())
        return items[offset : offset + limit], len(items)

    def get_featured(self, limit):
        return list(self.posts.values())[:limit]

    def get_popular(self, limit):
        return list(self.posts.values())[:limit]

    def search(self, query, limit):
        return [p for p in self.posts.values() if query in p["title"]][:limit]

    def get_analytics(self):
        return {"total_posts": len(self.posts)}


class FakeLogRepo:
    def __init__(self, fail=False):
        self.logs = []
        self.fail = fail

    def create(self, log):
        if self.fail:
            raise RuntimeError("log down")
        self.logs.append(log)


class BrokenRepo(FakeBlogRepo):
    def find_by_slug(self, slug):
        raise RuntimeError("db down")

    def find_by_id(self, post_id):
        raise RuntimeError("db down")


@pytest.fixture
def repo():
    return FakeBlogRepo()


@pytest.fixture
def logs():
    return FakeLogRepo()


@pytest.fixture
def service(repo, logs):
    return BlogService(repo, logs)


def test_create_post_derives_slug_and_logs(service, repo, logs):
    post = service.create_post({"title": "Hello World", "status": "draft"}, 7)
    assert post["slug"] == "hello-world"
    assert post["id"] in repo.posts
    assert logs.logs[0]["action"] == "create_blog_post"
    assert logs.logs[0]["admin_id"] == 7
    assert logs.logs[0]["entity_type"] == "blog_post"
    assert logs.logs[0]["details"] == {"title": "Hello World"}


def test_create_post_keeps_given_slug(service):
    post = service.create_post({"title": "Anything", "slug": "custom"}, 1)
    assert post["slug"] == "custom"


def test_create_post_duplicate_slug(service):
    service.create_post({"title": "A", "slug": "same"}, 1)
    with pytest.raises(AppError) as info:
        service.create_post({"title": "B", "slug": "same"}, 1)
    assert info.value.code == "SLUG_EXISTS"
    assert info.value.status == 409


def test_create_post_ignores_log_failure(repo):
    service = BlogService(repo, FakeLogRepo(fail=True))
    post = service.create_post({"title": "T", "slug": "t"}, 1)
    assert repo.posts[post["id"]]["slug"] == "t"


def test_database_errors_are_wrapped():
    service = BlogService(BrokenRepo(), FakeLogRepo())
    with pytest.raises(AppError) as info:
        service.create_post({"title": "T", "slug": "t"}, 1)
    assert info.value.code == "DATABASE_ERROR"
    assert info.value.message == "Failed to check slug"
    with pytest.raises(AppError) as info:
        service.get_post_by_id(1)
    assert info.value.message == "Failed to find post"


def test_get_post_by_slug_counts_published_views(service, repo):
    post = service.create_post({"title": "P", "slug": "p", "status": "published"}, 1)
    draft = service.create_post({"title": "D", "slug": "d", "status": "draft"}, 1)
    assert service.get_post_by_slug("p", True)["id"] == post["id"]
    service.get_post_by_slug("d", True)
    service.get_post_by_slug("p", False)
    assert repo.views == [post["id"]]
    assert draft["id"] not in repo.views


def test_missing_posts_raise_not_found(service):
    with pytest.raises(NotFoundError):
        service.get_post_by_slug("nope")
    with pytest.raises(NotFoundError):
        service.get_post_by_id(99)
    with pytest.raises(NotFoundError):
        service.update_post({"id": 99, "slug": "x"}, 1)
    with pytest.raises(NotFoundError):
        service.delete_post(99, 1)


def test_update_post_rejects_taken_slug(service):
    service.create_post({"title": "A", "slug": "a"}, 1)
    second = service.create_post({"title": "B", "slug": "b"}, 1)
    with pytest.raises(AppError) as info:
        service.update_post({"id": second["id"], "slug": "a", "title": "B"}, 1)
    assert info.value.code == "SLUG_EXISTS"


def test_update_post_saves_and_logs(service, repo, logs):
    post = service.create_post({"title": "A", "slug": "a", "status": "draft"}, 1)
    service.update_post({"id": post["id"], "slug": "a2", "title": "A", "status": "published"}, 3)
    assert repo.posts[post["id"]]["slug"] == "a2"
    assert logs.logs[-1]["action"] == "update_blog_post"
    assert logs.logs[-1]["details"] == {"title": "A", "status": "published"}


def test_delete_post(service, repo, logs):
    post = service.create_post({"title": "Gone", "slug": "gone"}, 1)
    service.delete_post(post["id"], 4)
    assert repo.deleted == [post["id"]]
    assert logs.logs[-1]["action"] == "delete_blog_post"
    assert logs.logs[-1]["entity_id"] == post["id"]


def test_pass_through_queries(service):
    service.create_post({"title": "Alpha", "slug": "alpha"}, 1)
    service.create_post({"title": "Beta", "slug": "beta"}, 1)
    posts, total = service.get_all_posts({}, 1, 0)
    assert total == 2 and len(posts) == 1
    assert [p["slug"] for p in service.search_posts("Beta", 5)] == ["beta"]
    assert len(service.get_featured_posts(1)) == 1
    assert len(service.get_popular_posts(5)) == 2
    assert service.get_analytics() == {"total_posts": 2}
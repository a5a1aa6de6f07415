import pytest

from merraki.errors import AppError, NotFoundError
from merraki.service.template_service import TemplateService


class FakeTemplateRepo:
    def __init__(self):
        self.rows = {}
        self.next_id = 1
        self.views = []
        self.searches = []
        self.fail = False

    def create(self, template):
        template["id"] = self.next_id
        self.rows[self.next_id] = dict(template)
        self.next_id += 1
        return template

    def find_by_id(self, template_id):
        row = self.rows.get(template_id)
        return None if row is None else dict(row)

    def find_by_slug(self, slug):
        if self.fail:
            raise RuntimeError("db down")
        for row in self.rows.values():
            if row["slug"] == slug:
                return dict(row)
        return None

    def update(self, template):
        self.rows[template["id"]] = dict(template)
        return template

    def delete(self, template_id):
        del self.rows[template_id]

    def increment_views(self, template_id):
        self.views.append(template_id)

    def get_all(self, filters, limit, offset):
        if self.fail:
            raise RuntimeError("db down")
        return list(self.rows.values()), len(self.rows)

    def get_featured(self, limit):
        return [r for r in self.rows.values() if r.get("is_featured")][:limit]

    def get_popular(self, limit):
        return list(self.rows.values())[:limit]

    def search(self, query, limit):
        self.searches.append(query)
        return [r for r in self.rows.values() if query in r["title"]][:limit]

    def get_by_ids(self, ids):
        return [self.rows[i] for i in ids if i in self.rows]

    def get_analytics(self):
        if self.fail:
            raise RuntimeError("db down")
        return {"totals": {"total_templates": len(self.rows)}}


class FakeCategoryRepo:
    def __init__(self, ids):
        self.ids = ids

    def get_template_category_by_id(self, category_id):
        return {"id": category_id} if category_id in self.ids else None


class FakeLogRepo:
    def __init__(self):
        self.entries = []

    def create(self, log):
        self.entries.append(log)
        return log


def make():
    repo, logs = FakeTemplateRepo(), FakeLogRepo()
    return TemplateService(repo, FakeCategoryRepo({1}), logs), repo, logs


def new_template(**extra):
    template = {"title": "Budget Planner Pro", "category_id": 1, "status": "active"}
    template.update(extra)
    return template


def test_create_template_derives_slug_and_sets_creator():
    service, repo, logs = make()
    template = service.create_template(new_template(), 9)
    assert template["slug"] == "budget-planner-pro"
    assert repo.rows[template["id"]]["created_by"] == 9
    assert logs.entries[-1]["details"] == {"title": "Budget Planner Pro", "slug": template["slug"]}


def test_create_template_duplicate_slug():
    service, _, _ = make()
    service.create_template(new_template(slug="dup"), 1)
    with pytest.raises(AppError) as info:
        service.create_template(new_template(slug="dup"), 1)
    assert info.value.code == "SLUG_EXISTS"


def test_create_template_unknown_category():
    service, repo, _ = make()
    with pytest.raises(AppError) as info:
        service.create_template(new_template(category_id=5), 1)
    assert info.value.code == "CATEGORY_NOT_FOUND"
    assert repo.rows == {}


def test_slug_check_failure_is_database_error():
    service, repo, _ = make()
    repo.fail = True
    with pytest.raises(AppError) as info:
        service.create_template(new_template(), 1)
    assert info.value.code == "DATABASE_ERROR"


def test_get_template_by_slug_counts_views_for_active_only():
    service, repo, _ = make()
    active = service.create_template(new_template(slug="a"), 1)
    service.create_template(new_template(slug="d", status="draft"), 1)
    assert service.get_template_by_slug("a", True)["id"] == active["id"]
    service.get_template_by_slug("d", True)
    service.get_template_by_slug("a", False)
    assert repo.views == [active["id"]]


def test_get_missing_template():
    service, _, _ = make()
    with pytest.raises(NotFoundError):
        service.get_template_by_id(3)
    with pytest.raises(NotFoundError):
        service.get_template_by_slug("nope")


def test_update_template_rejects_taken_slug():
    service, _, _ = make()
    service.create_template(new_template(slug="one"), 1)
    second = service.create_template(new_template(slug="two"), 1)
    second["slug"] = "one"
    with pytest.raises(AppError) as info:
        service.update_template(second, 1)
    assert info.value.code == "SLUG_EXISTS"


def test_update_template_saves_and_logs():
    service, repo, logs = make()
    template = service.create_template(new_template(slug="one"), 1)
    template["title"] = "Renamed"
    service.update_template(template, 4)
    assert repo.rows[template["id"]]["title"] == "Renamed"
    assert logs.entries[-1]["action"] == "update_template"


def test_update_missing_template():
    service, _, _ = make()
    with pytest.raises(NotFoundError):
        service.update_template({"id": 8, "slug": "x"}, 1)


def test_delete_template_logs_permanent():
    service, repo, logs = make()
    template = service.create_template(new_template(), 1)
    service.delete_template(template["id"], 2)
    assert repo.rows == {}
    assert logs.entries[-1]["details"]["permanent"] is True
    assert logs.entries[-1]["details"]["id"] == template["id"]


def test_search_with_empty_query_skips_repository():
    service, repo, _ = make()
    assert service.search_templates("", 10) == []
    assert repo.searches == []


def test_search_and_lookup_by_ids():
    service, _, _ = make()
    template = service.create_template(new_template(), 1)
    assert [t["id"] for t in service.search_templates("Budget", 5)] == [template["id"]]
    assert service.get_templates_by_ids([template["id"], 77])[0]["slug"] == template["slug"]


def test_repository_errors_become_runtime_errors():
    service, repo, _ = make()
    repo.fail = True
    with pytest.raises(RuntimeError, match="repository error"):
        service.get_all_templates({}, 10, 0)
    with pytest.raises(RuntimeError, match="repository error"):
        service.get_analytics()
"""
Unit Tests for the section controllers
Tests for: complaint helpers, dashboard overview, complaints table, analytics, users
"""
import json

import httpx
import pytest

from dashboard.errors import HttpError
from dashboard.sections import (
    AnalyticsSection,
    ComplaintsSection,
    DashboardSection,
    SectionController,
    UsersSection,
    compute_department_counts,
    compute_stats,
    filter_complaints,
    next_status,
    paginate,
    register_sections,
    sort_complaints,
)


class FakeAuth:
    def __init__(self):
        self.unauthorized_calls = 0

    def handle_unauthorized(self):
        self.unauthorized_calls += 1


@pytest.fixture
def fake_auth() -> FakeAuth:
    return FakeAuth()


@pytest.fixture
def complaints_api(server, complaint_rows):
    server.routes["GET /api/complaints"] = complaint_rows

    def update(request):
        complaint_id = request.url.path.split("/")[3]
        status = json.loads(request.content)["status"]
        row = next(r for r in complaint_rows if r["id"] == complaint_id)
        return {**row, "status": status}

    for row in complaint_rows:
        server.routes[f"PUT /api/complaints/{row['id']}/status"] = update
    return server


class TestHelpers:
    """Test pure complaint helpers"""

    @pytest.mark.parametrize("current,expected", [
        ("pending", "in-progress"),
        ("in-progress", "resolved"),
        ("resolved", "pending"),
        ("unknown", "pending"),
    ])
    def test_next_status(self, current, expected):
        assert next_status(current) == expected

    def test_compute_stats(self, complaint_rows):
        assert compute_stats(complaint_rows) == {"total": 6, "pending": 3, "in_progress": 1, "resolved": 2}

    def test_compute_stats_empty(self):
        assert compute_stats([]) == {"total": 0, "pending": 0, "in_progress": 0, "resolved": 0}

    def test_filter_by_status_and_search(self, complaint_rows):
        assert len(filter_complaints(complaint_rows, status="pending")) == 3
        assert [c["title"] for c in filter_complaints(complaint_rows, search="WATER")] == ["Complaint number 3"]
        assert len(filter_complaints(complaint_rows, search="csc/2020/00")) == 6
        assert filter_complaints(complaint_rows, status="resolved", search="student 1") == []

    def test_sort(self, complaint_rows):
        newest_first = sort_complaints(complaint_rows)
        assert newest_first[0]["title"] == "Complaint number 6"

        by_department = sort_complaints(complaint_rows, "department", descending=False)
        assert by_department[0]["department"] == "Computer Science"

    def test_paginate_clamps(self, complaint_rows):
        page = paginate(complaint_rows, page=10, per_page=4)

        assert page.page == 2
        assert page.total_pages == 2
        assert len(page.items) == 2

        assert paginate([], page=0).page == 1
        assert paginate([], page=0).total_pages == 1


class TestDashboardSection:
    """Test the overview section"""

    @pytest.mark.asyncio
    async def test_init_renders_stats_and_recent(self, gateway, complaints_api, view):
        section = DashboardSection(gateway, view)

        await section.init()

        assert section.stats["total"] == 6
        overview, recent = view.tables
        assert overview[2] == [[6, 3, 1, 2]]
        assert len(recent[2]) == 5
        assert recent[2][0][0] == "Complaint number 6"
        assert recent[2][0][4] == "2024-03-06"

    @pytest.mark.asyncio
    async def test_cleanup_drops_data(self, gateway, complaints_api, view):
        section = DashboardSection(gateway, view)
        await section.init()

        section.cleanup()

        assert section.stats is None
        assert section.recent == []

    @pytest.mark.asyncio
    async def test_unauthorized_hands_off_to_auth(self, gateway, server, view, fake_auth):
        server.routes["GET /api/complaints"] = httpx.Response(401, json={"detail": "Invalid token"})
        section = DashboardSection(gateway, view, auth=fake_auth)

        await section.init()

        assert fake_auth.unauthorized_calls == 1
        assert view.tables == []

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self, gateway, server, view, fake_auth):
        server.routes["GET /api/complaints"] = httpx.Response(500, json={"message": "db down"})
        section = DashboardSection(gateway, view, auth=fake_auth)

        with pytest.raises(HttpError):
            await section.init()


class TestComplaintsSection:
    """Test the complaints table"""

    @pytest.fixture
    async def section(self, gateway, complaints_api, view, notifier, fake_auth):
        section = ComplaintsSection(gateway, view, auth=fake_auth, notifier=notifier, per_page=4)
        await section.init()
        return section

    @pytest.mark.asyncio
    async def test_init_shows_first_page_newest_first(self, section, view):
        title, columns, rows = view.tables[-1]

        assert title == "Complaints (page 1/2, 6 total)"
        assert columns[0] == "ID"
        assert [row[0] for row in rows] == ["00000006", "00000005", "00000004", "00000003"]

    @pytest.mark.asyncio
    async def test_filter_resets_page(self, section):
        section.go_to_page(2)

        page = section.set_filter(status="pending")

        assert page.page == 1
        assert page.total == 3
        assert all(c["status"] == "pending" for c in page.items)

    @pytest.mark.asyncio
    async def test_sort_toggles_direction(self, section):
        page = section.sort_by("title")
        assert page.items[0]["title"] == "Complaint number 1"

        page = section.sort_by("title")
        assert page.items[0]["title"] == "Complaint number 6"

    @pytest.mark.asyncio
    async def test_page_is_clamped(self, section):
        assert section.go_to_page(9).page == 2
        assert section.page == 2

    @pytest.mark.asyncio
    async def test_find_by_prefix(self, section):
        assert section.find("00000003")["title"] == "Complaint number 3"
        assert section.find("0000000") is None
        assert section.find("zzz") is None

    @pytest.mark.asyncio
    async def test_advance_status(self, section, complaints_api, toasts):
        updated = await section.advance_status("00000002")

        assert updated["status"] == "resolved"
        assert section.find("00000002")["status"] == "resolved"
        assert json.loads(complaints_api.requests[-1].content) == {"status": "resolved"}
        assert toasts[-1].message == "Complaint marked as resolved"

    @pytest.mark.asyncio
    async def test_advance_unknown_complaint(self, section, toasts):
        assert await section.advance_status("nope") is None
        assert toasts[-1].message == "Complaint nope not found"

    @pytest.mark.asyncio
    async def test_set_status_unauthorized(self, section, server, fake_auth, complaint_rows):
        complaint_id = complaint_rows[0]["id"]
        server.routes[f"PUT /api/complaints/{complaint_id}/status"] = httpx.Response(401, json={})

        assert await section.set_status(complaint_id, "resolved") is None
        assert fake_auth.unauthorized_calls == 1

    @pytest.mark.asyncio
    async def test_refresh_reloads_and_notifies(self, section, complaints_api, toasts):
        await section.refresh()

        assert complaints_api.count("/api/complaints") == 2
        assert toasts[-1].message == "Complaints refreshed"

    @pytest.mark.asyncio
    async def test_delete_removes_row(self, section, server, complaint_rows, toasts):
        complaint_id = complaint_rows[0]["id"]
        server.routes[f"DELETE /api/complaints/{complaint_id}"] = {"success": True, "message": "Complaint deleted"}

        assert await section.delete("00000001") is True

        assert section.find("00000001") is None
        assert len(section.complaints) == 5
        assert toasts[-1].message == "Complaint deleted"

    @pytest.mark.asyncio
    async def test_delete_unauthorized(self, section, server, fake_auth, complaint_rows):
        server.routes[f"DELETE /api/complaints/{complaint_rows[0]['id']}"] = httpx.Response(401, json={})

        assert await section.delete("00000001") is False
        assert len(section.complaints) == 6
        assert fake_auth.unauthorized_calls == 1


@pytest.fixture
def stats_api(complaints_api):
    complaints_api.routes["GET /api/complaints/stats"] = {
        "total": 6, "pending": 3, "in_progress": 1, "resolved": 2,
    }
    return complaints_api


@pytest.fixture
def user_rows() -> list:
    return [
        {"id": "u1", "firstname": "Ada", "lastname": "Obi", "regno": "CSC/2021/001",
         "email": "ada@example.com", "username": "ada", "role": "user",
         "created_at": "2024-02-10T09:00:00"},
        {"id": "u2", "firstname": "Tunde", "lastname": "Bello", "regno": "MTH/2022/014",
         "email": "tunde@example.com", "username": "tbello", "role": "user",
         "created_at": "2024-01-05T12:30:00"},
    ]


class TestAnalyticsSection:
    """Test the status and department breakdown"""

    def test_department_counts(self, complaint_rows):
        counts = compute_department_counts(complaint_rows)

        assert list(counts) == ["Computer Science", "Mathematics"]
        assert counts["Computer Science"] == {"total": 3, "pending": 2, "in_progress": 1, "resolved": 0}
        assert counts["Mathematics"] == {"total": 3, "pending": 1, "in_progress": 0, "resolved": 2}

    def test_department_counts_unspecified(self):
        counts = compute_department_counts([{"status": "pending"}])

        assert counts == {"Unspecified": {"total": 1, "pending": 1, "in_progress": 0, "resolved": 0}}

    @pytest.mark.asyncio
    async def test_init_renders_both_tables(self, gateway, stats_api, view):
        section = AnalyticsSection(gateway, view)

        await section.init()

        assert stats_api.paths() == ["/api/complaints/stats", "/api/complaints"]
        by_status, by_department = view.tables
        assert by_status[2] == [["Pending", 3, "50%"], ["In Progress", 1, "17%"], ["Resolved", 2, "33%"]]
        assert by_department[2] == [
            ["Computer Science", 3, 2, 1, 0],
            ["Mathematics", 3, 1, 0, 2],
        ]

    @pytest.mark.asyncio
    async def test_empty_stats_show_zero_share(self, gateway, server, view):
        server.routes["GET /api/complaints/stats"] = {"total": 0, "pending": 0, "in_progress": 0, "resolved": 0}
        server.routes["GET /api/complaints"] = []
        section = AnalyticsSection(gateway, view)

        await section.init()

        assert [row[2] for row in view.tables[0][2]] == ["0%", "0%", "0%"]
        assert view.tables[1][2] == []

    @pytest.mark.asyncio
    async def test_refresh_refetches_and_notifies(self, gateway, stats_api, view, notifier, toasts):
        section = AnalyticsSection(gateway, view, notifier=notifier)
        await section.init()

        await section.refresh()

        assert stats_api.count("/api/complaints/stats") == 2
        assert stats_api.count("/api/complaints") == 2
        assert toasts[-1].message == "Analytics refreshed"

    @pytest.mark.asyncio
    async def test_unauthorized_stops_before_listing(self, gateway, server, view, fake_auth):
        server.routes["GET /api/complaints/stats"] = httpx.Response(401, json={"detail": "Invalid token"})
        section = AnalyticsSection(gateway, view, auth=fake_auth)

        await section.init()

        assert fake_auth.unauthorized_calls == 1
        assert server.paths() == ["/api/complaints/stats"]
        assert view.tables == []

    @pytest.mark.asyncio
    async def test_cleanup_drops_counts(self, gateway, stats_api, view):
        section = AnalyticsSection(gateway, view)
        await section.init()

        section.cleanup()

        assert section.status_counts is None
        assert section.department_counts == {}


class TestUsersSection:
    """Test the student account table"""

    @pytest.mark.asyncio
    async def test_init_lists_students(self, gateway, server, view, user_rows):
        server.routes["GET /api/users"] = user_rows
        section = UsersSection(gateway, view)

        await section.init()

        title, columns, rows = view.tables[-1]
        assert title == "Students (2 registered)"
        assert columns == ["Username", "Name", "Reg No", "Email", "Joined"]
        assert rows[0] == ["ada", "Ada Obi", "CSC/2021/001", "ada@example.com", "2024-02-10"]

    @pytest.mark.asyncio
    async def test_refresh_refetches_and_notifies(self, gateway, server, view, notifier, toasts, user_rows):
        server.routes["GET /api/users"] = user_rows
        section = UsersSection(gateway, view, notifier=notifier)
        await section.init()

        await section.refresh()

        assert server.count("/api/users") == 2
        assert toasts[-1].message == "Users refreshed"

    @pytest.mark.asyncio
    async def test_unauthorized_hands_off_to_auth(self, gateway, server, view, fake_auth):
        server.routes["GET /api/users"] = httpx.Response(401, json={"detail": "Invalid token"})
        section = UsersSection(gateway, view, auth=fake_auth)

        await section.init()

        assert fake_auth.unauthorized_calls == 1
        assert section.users == []

    @pytest.mark.asyncio
    async def test_forbidden_propagates(self, gateway, server, view, fake_auth):
        server.routes["GET /api/users"] = httpx.Response(403, json={"detail": "Admin access required"})
        section = UsersSection(gateway, view, auth=fake_auth)

        with pytest.raises(HttpError):
            await section.init()

    @pytest.mark.asyncio
    async def test_cleanup_drops_users(self, gateway, server, view, user_rows):
        server.routes["GET /api/users"] = user_rows
        section = UsersSection(gateway, view)
        await section.init()

        section.cleanup()

        assert section.users == []


def test_controllers_must_define_hooks():
    class Incomplete(SectionController):
        name = "incomplete"

        async def load(self):
            pass

    with pytest.raises(TypeError):
        Incomplete(None, None)


@pytest.mark.asyncio
async def test_register_sections(registry, gateway, complaints_api, view):
    controllers = register_sections(registry, gateway, view)

    assert set(controllers) == {"dashboard", "complaints", "users", "analytics"}
    assert all(name in registry for name in controllers)

    assert await registry.init("complaints") is True
    assert view.tables


@pytest.mark.asyncio
async def test_failed_load_is_reported_through_registry(registry, gateway, server, view, toasts):
    server.routes["GET /api/complaints"] = httpx.Response(500, json={"message": "db down"})
    register_sections(registry, gateway, view)

    assert await registry.init("dashboard") is False
    assert toasts[0].message == "Failed to initialize this section."

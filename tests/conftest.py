"""
NACOS Dashboard Client - Test Configuration and Fixtures
"""
from typing import Any, Dict, List

import pytest

from client_fakes import BASE_URL, FakeServer, RecordingRedirector, RecordingView, fragment_routes
from dashboard.cache import SectionCache
from dashboard.clock import ManualClock
from dashboard.gateway import RemoteGateway
from dashboard.lifecycle import LifecycleRegistry
from dashboard.navigation import NavigationController
from dashboard.notifications import Notifier
from dashboard.session import SessionCredentials, SessionStore
from dashboard.view import MemoryHistory, Viewport


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def view() -> RecordingView:
    return RecordingView()


@pytest.fixture
def redirector() -> RecordingRedirector:
    return RecordingRedirector()


@pytest.fixture
def toasts() -> list:
    return []


@pytest.fixture
def error_records() -> list:
    return []


@pytest.fixture
def notifier(clock, toasts, error_records) -> Notifier:
    return Notifier(
        clock,
        presenter=toasts.append,
        sink=lambda record, error: error_records.append((record, error)),
    )


@pytest.fixture
def server() -> FakeServer:
    return FakeServer(fragment_routes())


@pytest.fixture
def session_store(tmp_path) -> SessionStore:
    return SessionStore(tmp_path / "credentials.json")


@pytest.fixture
def admin_session(session_store) -> SessionStore:
    session_store.save(SessionCredentials(role="admin", username="admin", token="admin-token"))
    return session_store


@pytest.fixture
async def gateway(server, session_store):
    gw = RemoteGateway(BASE_URL, token_provider=lambda: session_store.token, transport=server.transport)
    yield gw
    await gw.aclose()


@pytest.fixture
def cache(clock) -> SectionCache:
    return SectionCache(clock)


@pytest.fixture
def registry(notifier) -> LifecycleRegistry:
    return LifecycleRegistry(notifier)


@pytest.fixture
def history() -> MemoryHistory:
    return MemoryHistory()


@pytest.fixture
def viewport() -> Viewport:
    return Viewport(width=1280)


@pytest.fixture
def navigation(gateway, cache, registry, notifier, clock, view, history, viewport) -> NavigationController:
    controller = NavigationController(
        gateway, cache, registry, notifier, clock,
        view=view, chrome=view, history=history, viewport=viewport,
    )
    notifier.set_location_provider(controller.location)
    history.set_popstate_listener(controller.handle_popstate)
    return controller


@pytest.fixture
def complaint_rows() -> List[Dict[str, Any]]:
    rows = []
    statuses = ["pending", "in-progress", "resolved", "pending", "resolved", "pending"]
    for i, status in enumerate(statuses, start=1):
        rows.append({
            "id": f"{i:08d}-aaaa-bbbb-cccc-dddddddddddd",
            "name": f"Student {i}",
            "matric": f"CSC/2020/{i:03d}",
            "email": f"student{i}@example.com",
            "department": "Mathematics" if i % 2 else "Computer Science",
            "title": f"Complaint number {i}",
            "details": "Hostel water supply" if i == 3 else "Course registration portal",
            "status": status,
            "created_at": f"2024-03-{i:02d}T10:00:00",
            "updated_at": f"2024-03-{i:02d}T10:00:00",
        })
    return rows

"""
Section controllers layered on the navigation core.

Each controller registers init/cleanup/refresh hooks with the lifecycle
registry. Data comes from the complaints and users APIs; a 401 from them
ends the session rather than surfacing as a section failure.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from dashboard.errors import HttpError
from dashboard.gateway import RemoteGateway
from dashboard.lifecycle import LifecycleRegistry
from dashboard.logging_config import logger


STATUS_CYCLE = ("pending", "in-progress", "resolved")
RECENT_LIMIT = 5
PER_PAGE = 10

Complaint = Dict[str, Any]


def next_status(status: str) -> str:
    """pending -> in-progress -> resolved -> pending"""
    try:
        index = STATUS_CYCLE.index(status)
    except ValueError:
        return STATUS_CYCLE[0]
    return STATUS_CYCLE[(index + 1) % len(STATUS_CYCLE)]


def compute_stats(complaints: List[Complaint]) -> Dict[str, int]:
    stats = {"total": len(complaints), "pending": 0, "in_progress": 0, "resolved": 0}
    for complaint in complaints:
        key = (complaint.get("status") or "").replace("-", "_")
        if key in stats and key != "total":
            stats[key] += 1
    return stats


def filter_complaints(complaints: List[Complaint], status: Optional[str] = None,
                      search: Optional[str] = None) -> List[Complaint]:
    term = (search or "").strip().lower()
    result = []
    for complaint in complaints:
        if status and complaint.get("status") != status:
            continue
        if term:
            haystack = " ".join(
                str(complaint.get(field) or "") for field in ("title", "details", "email", "name", "matric")
            ).lower()
            if term not in haystack:
                continue
        result.append(complaint)
    return result


def _sort_value(value: Any):
    if value is None:
        return ""
    if isinstance(value, str):
        return value.lower()
    return value


def sort_complaints(complaints: List[Complaint], key: str = "created_at",
                    descending: bool = True) -> List[Complaint]:
    return sorted(complaints, key=lambda c: _sort_value(c.get(key)), reverse=descending)


@dataclass
class Page:
    items: List[Complaint]
    page: int
    total_pages: int
    total: int


def paginate(complaints: List[Complaint], page: int = 1, per_page: int = PER_PAGE) -> Page:
    total = len(complaints)
    total_pages = max(1, math.ceil(total / per_page))
    page = min(max(page, 1), total_pages)
    start = (page - 1) * per_page
    return Page(items=complaints[start:start + per_page], page=page, total_pages=total_pages, total=total)


class SectionController(ABC):
    """Shared plumbing: API access with 401 handling"""

    name = ""

    def __init__(self, gateway: RemoteGateway, view, auth=None, notifier=None):
        self.gateway = gateway
        self.view = view
        self.auth = auth
        self.notifier = notifier

    async def _guarded(self, call: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """Await a gateway call; a 401 ends the session and yields None"""
        try:
            return await call(*args, **kwargs)
        except HttpError as e:
            if e.is_unauthorized and self.auth is not None:
                self.auth.handle_unauthorized()
                return None
            raise

    async def _fetch_complaints(self) -> Optional[List[Complaint]]:
        return await self._guarded(self.gateway.get_complaints)

    def register(self, registry: LifecycleRegistry) -> None:
        registry.register(self.name, init=self.init, cleanup=self.cleanup, refresh=self.refresh)

    async def init(self) -> None:
        await self.load()

    async def refresh(self) -> None:
        await self.load()
        if self.notifier is not None:
            self.notifier.notify("success", f"{self.name.capitalize()} refreshed")

    @abstractmethod
    def cleanup(self) -> None:
        ...

    @abstractmethod
    async def load(self) -> None:
        ...


class DashboardSection(SectionController):
    """Headline counts and the most recent complaints"""

    name = "dashboard"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.stats: Optional[Dict[str, int]] = None
        self.recent: List[Complaint] = []

    async def load(self) -> None:
        complaints = await self._fetch_complaints()
        if complaints is None:
            return
        self.stats = compute_stats(complaints)
        self.recent = sort_complaints(complaints, "created_at", descending=True)[:RECENT_LIMIT]
        self.render()

    def cleanup(self) -> None:
        self.stats = None
        self.recent = []

    def render(self) -> None:
        stats = self.stats or compute_stats([])
        self.view.show_table(
            "Complaint Overview",
            ["Total", "Pending", "In Progress", "Resolved"],
            [[stats["total"], stats["pending"], stats["in_progress"], stats["resolved"]]],
        )
        self.view.show_table(
            "Recent Complaints",
            ["Title", "Matric", "Department", "Status", "Date"],
            [[c.get("title"), c.get("matric"), c.get("department"), c.get("status"),
              (c.get("created_at") or "")[:10]] for c in self.recent],
        )


class ComplaintsSection(SectionController):
    """Filterable, sortable, paginated complaint table"""

    name = "complaints"

    def __init__(self, *args, per_page: int = PER_PAGE, **kwargs):
        super().__init__(*args, **kwargs)
        self.per_page = per_page
        self.complaints: List[Complaint] = []
        self.status_filter: Optional[str] = None
        self.search: Optional[str] = None
        self.sort_key = "created_at"
        self.descending = True
        self.page = 1

    async def load(self) -> None:
        complaints = await self._fetch_complaints()
        if complaints is None:
            return
        self.complaints = complaints
        self.render()

    def cleanup(self) -> None:
        self.complaints = []

    def visible(self) -> Page:
        filtered = filter_complaints(self.complaints, self.status_filter, self.search)
        ordered = sort_complaints(filtered, self.sort_key, self.descending)
        return paginate(ordered, self.page, self.per_page)

    def set_filter(self, status: Optional[str] = None, search: Optional[str] = None) -> Page:
        self.status_filter = status or None
        self.search = search or None
        self.page = 1
        return self.render()

    def sort_by(self, key: str) -> Page:
        """Same column flips direction; a new column starts ascending"""
        if key == self.sort_key:
            self.descending = not self.descending
        else:
            self.sort_key = key
            self.descending = False
        return self.render()

    def go_to_page(self, page: int) -> Page:
        self.page = page
        return self.render()

    def find(self, id_prefix: str) -> Optional[Complaint]:
        """Match a full ID or the short prefix shown in the table"""
        matches = [c for c in self.complaints if (c.get("id") or "").startswith(id_prefix)]
        return matches[0] if len(matches) == 1 else None

    async def advance_status(self, complaint_id: str) -> Optional[Complaint]:
        complaint = self.find(complaint_id)
        if complaint is None:
            if self.notifier is not None:
                self.notifier.notify("error", f"Complaint {complaint_id} not found")
            return None
        return await self.set_status(complaint["id"], next_status(complaint.get("status", "")))

    async def set_status(self, complaint_id: str, status: str) -> Optional[Complaint]:
        updated = await self._guarded(self.gateway.update_complaint_status, complaint_id, status)
        if updated is None:
            return None

        self.complaints = [updated if c.get("id") == complaint_id else c for c in self.complaints]
        logger.info(f"Complaint {complaint_id} marked {status}")
        if self.notifier is not None:
            self.notifier.notify("success", f"Complaint marked as {status}")
        self.render()
        return updated

    async def delete(self, id_prefix: str) -> bool:
        complaint = self.find(id_prefix)
        if complaint is None:
            if self.notifier is not None:
                self.notifier.notify("error", f"Complaint {id_prefix} not found")
            return False
        try:
            await self.gateway.delete_complaint(complaint["id"])
        except HttpError as e:
            if e.is_unauthorized and self.auth is not None:
                self.auth.handle_unauthorized()
                return False
            raise

        self.complaints = [c for c in self.complaints if c.get("id") != complaint["id"]]
        logger.info(f"Complaint {complaint['id']} deleted")
        if self.notifier is not None:
            self.notifier.notify("success", "Complaint deleted")
        self.render()
        return True

    def render(self) -> Page:
        page_view = self.visible()
        self.page = page_view.page
        self.view.show_table(*self._table(page_view))
        return page_view

    def _table(self, page_view: Page):
        title = f"Complaints (page {page_view.page}/{page_view.total_pages}, {page_view.total} total)"
        columns = ["ID", "Title", "Student", "Department", "Status", "Date"]
        rows = [[(c.get("id") or "")[:8], c.get("title"), c.get("name"), c.get("department"),
                 c.get("status"), (c.get("created_at") or "")[:10]] for c in page_view.items]
        return title, columns, rows


def compute_department_counts(complaints: List[Complaint]) -> Dict[str, Dict[str, int]]:
    """Per-department totals and status breakdown, departments in name order"""
    counts: Dict[str, Dict[str, int]] = {}
    for complaint in complaints:
        department = complaint.get("department") or "Unspecified"
        bucket = counts.setdefault(department, compute_stats([]))
        bucket["total"] += 1
        key = (complaint.get("status") or "").replace("-", "_")
        if key in bucket and key != "total":
            bucket[key] += 1
    return dict(sorted(counts.items()))


class AnalyticsSection(SectionController):
    """Complaint counts per status and per department"""

    name = "analytics"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.status_counts: Optional[Dict[str, int]] = None
        self.department_counts: Dict[str, Dict[str, int]] = {}

    async def load(self) -> None:
        stats = await self._guarded(self.gateway.get_complaint_stats)
        if stats is None:
            return
        complaints = await self._fetch_complaints()
        if complaints is None:
            return
        self.status_counts = {key: int(stats.get(key, 0))
                              for key in ("total", "pending", "in_progress", "resolved")}
        self.department_counts = compute_department_counts(complaints)
        self.render()

    def cleanup(self) -> None:
        self.status_counts = None
        self.department_counts = {}

    def render(self) -> None:
        counts = self.status_counts or compute_stats([])
        total = counts["total"]
        self.view.show_table(
            "Complaints by Status",
            ["Status", "Count", "Share"],
            [[label, counts[key], f"{counts[key] / total:.0%}" if total else "0%"]
             for key, label in (("pending", "Pending"), ("in_progress", "In Progress"),
                                ("resolved", "Resolved"))],
        )
        self.view.show_table(
            "Complaints by Department",
            ["Department", "Total", "Pending", "In Progress", "Resolved"],
            [[department, c["total"], c["pending"], c["in_progress"], c["resolved"]]
             for department, c in self.department_counts.items()],
        )


class UsersSection(SectionController):
    """Registered student accounts"""

    name = "users"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.users: List[Dict[str, Any]] = []

    async def load(self) -> None:
        users = await self._guarded(self.gateway.get_users)
        if users is None:
            return
        self.users = users
        self.render()

    def cleanup(self) -> None:
        self.users = []

    def render(self) -> None:
        self.view.show_table(
            f"Students ({len(self.users)} registered)",
            ["Username", "Name", "Reg No", "Email", "Joined"],
            [[u.get("username"), f"{u.get('firstname', '')} {u.get('lastname', '')}".strip(),
              u.get("regno"), u.get("email"), (u.get("created_at") or "")[:10]] for u in self.users],
        )


def register_sections(registry: LifecycleRegistry, gateway: RemoteGateway, view,
                      auth=None, notifier=None) -> Dict[str, SectionController]:
    controllers = {
        "dashboard": DashboardSection(gateway, view, auth=auth, notifier=notifier),
        "complaints": ComplaintsSection(gateway, view, auth=auth, notifier=notifier),
        "users": UsersSection(gateway, view, auth=auth, notifier=notifier),
        "analytics": AnalyticsSection(gateway, view, auth=auth, notifier=notifier),
    }
    for controller in controllers.values():
        controller.register(registry)
    return controllers

"""
Client-side state for the attendance dashboard.

``Dashboard`` mirrors the server's sections and students, resolves which
student is being shown, and keeps the simulated history cache in step with
attendance marks. Consistency is pull-after-write: every mutation is followed
by a full reload of ``/api/sections`` and nothing is edited optimistically.
Failures never raise out of an action; they land in ``error`` or go through
``alert``.

The student/teacher login here is a demo placeholder. Nothing is checked
against credentials and it is not an access-control boundary.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from api_client import ApiClient
from errors import ApiError, NoDataToExport
from export import ExportRow, export_filename, to_csv, to_pdf
from history import HistoryCache, HistoryEntry, stats
from local_store import STUDENT_ID_KEY, TEACHER_NAME_KEY, THEME_KEY, USER_TYPE_KEY, LocalStore
from seed import build_demo_sections

logger = logging.getLogger(__name__)

DEFAULT_STUDENT_ID = "231FA04001"
DEFAULT_NOTICE = "Your recent attendance needs attention."


@dataclass(frozen=True)
class StudentInfo:
    id: str
    name: str
    status: str
    section: str
    section_ref: Optional[str]  # None when the student comes from the demo roster


@dataclass(frozen=True)
class BulkResult:
    succeeded: int
    failed: int


class Dashboard:
    def __init__(self, api: ApiClient, store: LocalStore, *, history: Optional[HistoryCache] = None,
                 demo_sections: Optional[list] = None, alert: Optional[Callable[[str], None]] = None,
                 max_workers: int = 8):
        self.api = api
        self.store = store
        self.history = history or HistoryCache(store)
        self.demo_sections = demo_sections if demo_sections is not None else build_demo_sections()
        self.alert = alert or (lambda message: logger.info("ALERT: %s", message))
        self.max_workers = max_workers

        self.sections: list = []
        self.section_id: Optional[str] = None
        self.error = ""
        self.loading = False
        self.notifications: list = []
        self._load_lock = threading.Lock()
        self._requested = 0
        self._applied = 0

    # -----------------------------
    # Persisted preferences
    # -----------------------------
    @property
    def student_id(self) -> str:
        return self.store.get(STUDENT_ID_KEY, DEFAULT_STUDENT_ID)

    @student_id.setter
    def student_id(self, value: str) -> None:
        self.store.set(STUDENT_ID_KEY, value.strip())

    @property
    def teacher_name(self) -> str:
        return self.store.get(TEACHER_NAME_KEY, "")

    @teacher_name.setter
    def teacher_name(self, value: str) -> None:
        self.store.set(TEACHER_NAME_KEY, value)

    @property
    def user_type(self) -> Optional[str]:
        return self.store.get(USER_TYPE_KEY)

    @user_type.setter
    def user_type(self, value: Optional[str]) -> None:
        if value:
            self.store.set(USER_TYPE_KEY, value)
        else:
            self.store.delete(USER_TYPE_KEY)

    @property
    def dark(self) -> bool:
        return self.store.get(THEME_KEY, True)

    def toggle_theme(self) -> bool:
        self.store.set(THEME_KEY, not self.dark)
        return self.dark

    # -----------------------------
    # Loading
    # -----------------------------
    def load_sections(self) -> bool:
        """Replace the mirror with the server's section list.

        Selects the first section when none is selected yet. On failure the
        previous sections stay in place and ``error`` is set. Each call is
        numbered when it starts; a response older than the newest one already
        applied is dropped, so overlapping refreshes cannot roll the mirror back.
        """
        with self._load_lock:
            self._requested += 1
            generation = self._requested
        self.loading = True
        self.error = ""
        try:
            sections = self.api.list_sections()
        except ApiError as e:
            logger.warning("Loading sections failed: %s", e)
            with self._load_lock:
                if generation > self._applied:
                    self.error = str(e) or "Failed to load sections. Ensure backend is running on port 5000."
            return False
        finally:
            self.loading = False

        with self._load_lock:
            if generation < self._applied:
                logger.debug("Dropping section listing #%d, #%d already applied", generation, self._applied)
                return True
            self._applied = generation
            self.sections = sections or []
            if not self.section_id and self.sections:
                self.section_id = self.sections[0]["_id"]
        return True

    refresh_after_change = load_sections

    def select_section(self, section_ref: str) -> None:
        self.section_id = section_ref

    @property
    def current_section(self) -> Optional[dict]:
        if not self.sections or not self.section_id:
            return None
        return next((s for s in self.sections if s["_id"] == self.section_id), None)

    # -----------------------------
    # Student resolution
    # -----------------------------
    def resolve_student(self, business_id: Optional[str] = None) -> Optional[StudentInfo]:
        """Find a student in the live sections, else in the demo roster."""
        business_id = business_id or self.student_id
        if not business_id:
            return None
        for sec in self.sections:
            for st in sec.get("students") or []:
                if st.get("id") == business_id:
                    return StudentInfo(st["id"], st["name"], st.get("status") or "present", sec["name"], sec["_id"])
        for sec in self.demo_sections:
            for st in sec["students"]:
                if st["id"] == business_id:
                    return StudentInfo(st["id"], st["name"], st["status"], sec["name"], None)
        return None

    @property
    def student_info(self) -> Optional[StudentInfo]:
        return self.resolve_student(self.student_id)

    def history_for(self, student: Optional[StudentInfo] = None) -> List[HistoryEntry]:
        student = student or self.student_info
        if student is None:
            return []
        return self.history.ensure(student.id, student.status or "present")

    def stats_for(self, student: Optional[StudentInfo] = None) -> dict:
        return stats(self.history_for(student))

    # -----------------------------
    # Mutations
    # -----------------------------
    def add_student(self, name: str, business_id: str, section_ref: str) -> bool:
        name, business_id = (name or "").strip(), (business_id or "").strip()
        if not name or not business_id or not section_ref:
            self.alert("Fill all fields")
            return False
        self.loading = True
        self.error = ""
        try:
            self.api.create_student(business_id, name, section_ref)
        except ApiError as e:
            self.alert(f"Add student failed: {e}")
            return False
        finally:
            self.loading = False
        self.refresh_after_change()
        self.alert("Student added ✅")
        return True

    def mark_attendance(self, business_id: str, status: str, quiet: bool = False) -> bool:
        self.error = ""
        try:
            self.api.mark_attendance(business_id, status)
        except ApiError as e:
            if not quiet:
                self.alert(f"Mark failed: {e}")
            return False
        self.history.mark_today(business_id, status)
        self.refresh_after_change()
        return True

    def notify_one(self, business_id: str, message: str, quiet: bool = False) -> bool:
        teacher = self.teacher_name or "Unknown"
        try:
            self.api.send_notification(business_id, teacher, message)
        except ApiError as e:
            if not quiet:
                self.alert(f"Notification failed: {e}")
            return False
        student = self.student_info
        if self.user_type == "student" and student is not None and student.id == business_id:
            self.load_notifications(business_id)
        if not quiet:
            self.alert("Notification sent! ✅")
        return True

    # -----------------------------
    # Bulk fan-out
    # -----------------------------
    def _fan_out(self, action: Callable[[str], bool]) -> Optional[BulkResult]:
        section = self.current_section
        if section is None:
            return None
        ids = [st["id"] for st in section.get("students") or []]
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            outcomes = list(pool.map(action, ids))
        succeeded = sum(1 for ok in outcomes if ok)
        return BulkResult(succeeded=succeeded, failed=len(outcomes) - succeeded)

    def mark_all(self, status: str) -> Optional[BulkResult]:
        result = self._fan_out(lambda sid: self.mark_attendance(sid, status, quiet=True))
        if result is not None and result.failed:
            self.alert(f"{result.failed} of {result.succeeded + result.failed} updates failed")
        return result

    def notify_all(self, message: str = DEFAULT_NOTICE) -> Optional[BulkResult]:
        section = self.current_section
        self.loading = True
        try:
            result = self._fan_out(lambda sid: self.notify_one(sid, message, quiet=True))
        finally:
            self.loading = False
        if result is None:
            return None
        if result.failed:
            self.alert(f"Notifications sent to {section['name']} ({result.failed} failed)")
        else:
            self.alert(f"Notifications sent to {section['name']}")
        return result

    # -----------------------------
    # Notifications
    # -----------------------------
    def load_notifications(self, business_id: str) -> list:
        try:
            self.notifications = self.api.notifications_for(business_id)
        except ApiError as e:
            logger.warning("Loading notifications for %s failed: %s", business_id, e)
            self.notifications = []
        return self.notifications

    def latest_notifications(self) -> list:
        return list(reversed(self.notifications))

    # -----------------------------
    # Export
    # -----------------------------
    def section_today_rows(self, section_ref) -> List[ExportRow]:
        section = next((s for s in self.sections if s["_id"] == section_ref), None)
        if section is None:
            section = next((s for s in self.demo_sections if str(s["id"]) == str(section_ref)), None)
        if section is None:
            return []
        rows = []
        for st in section.get("students") or []:
            today = self.history.ensure(st["id"], st.get("status") or "present")[0]
            rows.append(ExportRow(id=st["id"], name=st["name"], date=today.date, status=today.status))
        return rows

    def student_history_rows(self, student: Optional[StudentInfo] = None) -> List[ExportRow]:
        student = student or self.student_info
        if student is None:
            return []
        return [ExportRow(id=student.id, name=student.name, date=h.date, status=h.status)
                for h in self.history_for(student)]

    def export(self, name: str, rows: List[ExportRow], fmt: str = "csv") -> Optional[Tuple[str, Union[str, bytes]]]:
        """Render rows as (filename, payload); alerts and returns None when there is nothing to export."""
        try:
            if fmt == "pdf":
                return export_filename(name, "pdf"), to_pdf(rows, name)
            return export_filename(name, "csv"), to_csv(rows)
        except NoDataToExport as e:
            self.alert(str(e))
            return None

    # -----------------------------
    # Demo login
    # -----------------------------
    def login_student(self, business_id: Optional[str] = None) -> bool:
        if business_id:
            self.student_id = business_id
        if self.resolve_student(self.student_id) is None:
            self.alert(f"Invalid Student ID. Try {DEFAULT_STUDENT_ID}.")
            return False
        self.user_type = "student"
        self.load_notifications(self.student_id)
        return True

    def login_teacher(self, username: str, password: str) -> bool:
        if not username or not password:
            self.alert("Enter both username & password")
            return False
        self.teacher_name = username
        self.user_type = "teacher"
        return True

    def logout(self) -> None:
        self.user_type = None
        self.teacher_name = ""

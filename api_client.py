"""
Thin HTTP client for the HyperAttend API, used by the dashboard.

Any non-2xx answer is raised as ``ApiError`` carrying the status and the raw
body; there is no retry. JSON bodies are decoded, anything else comes back as
text (the root and seed routes answer plain text).
"""
import logging
from typing import Optional

import requests
from requests.utils import quote

import settings
from errors import ApiError

logger = logging.getLogger(__name__)


class ApiClient:
    def __init__(self, base_url: Optional[str] = None, session=None):
        self.base_url = (base_url or settings.API_URL).rstrip("/")
        # Anything exposing requests-style get/post works here.
        self.session = session or requests.Session()

    def request(self, method: str, path: str, json: Optional[dict] = None):
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=json, headers={"Content-Type": "application/json"})
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise ApiError(str(e))

        if response.status_code >= 400:
            raise ApiError(f"{response.status_code} — {response.text}", status_code=response.status_code)

        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            return response.json()
        return response.text

    def get(self, path: str):
        return self.request("GET", path)

    def post(self, path: str, body: dict):
        return self.request("POST", path, json=body)

    # -----------------------------
    # Endpoints
    # -----------------------------
    def list_sections(self) -> list:
        return self.get("/api/sections") or []

    def list_students(self) -> list:
        return self.get("/api/students") or []

    def create_section(self, name: str) -> dict:
        return self.post("/api/sections", {"name": name})

    def create_student(self, business_id: str, name: str, section_ref: str) -> dict:
        return self.post("/api/students", {"id": business_id, "name": name, "sectionId": section_ref})

    def mark_attendance(self, business_id: str, status: str) -> dict:
        return self.post("/api/attendance/mark", {"studentId": business_id, "status": status})

    def attendance_summary(self, business_id: str) -> dict:
        return self.get(f"/api/attendance/summary/{quote(business_id, safe='')}")

    def send_notification(self, business_id: str, teacher: str, message: str) -> dict:
        return self.post("/api/notifications", {"studentId": business_id, "teacher": teacher, "message": message})

    def notifications_for(self, business_id: str) -> list:
        data = self.get(f"/api/notifications/{quote(business_id, safe='')}")
        return data if isinstance(data, list) else []

    def seed(self) -> str:
        return self.get("/api/seed")

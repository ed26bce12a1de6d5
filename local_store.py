"""
Key -> JSON state kept on the client between runs.

Plays the role browser storage plays for a web dashboard: theme flag, user
role, last student id, teacher name and the attendance history cache. With no
path the store lives in memory only.
"""
import json
import logging
import os
import threading
from typing import Any, Optional

logger = logging.getLogger(__name__)

THEME_KEY = "darkMode"
USER_TYPE_KEY = "userType"
STUDENT_ID_KEY = "studentId"
TEACHER_NAME_KEY = "teacherName"
HISTORY_KEY = "attendanceHistory"


class LocalStore:
    def __init__(self, path: Optional[str] = None):
        self.path = path
        self._lock = threading.RLock()
        self._data = self._read()

    def _read(self) -> dict:
        if not self.path or not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _flush(self) -> None:
        if not self.path:
            return
        tmp = f"{self.path}.tmp"
        with open(tmp, "w", encoding="utf-8") as fh:
            json.dump(self._data, fh)
        os.replace(tmp, self.path)

    def get(self, key: str, fallback: Any = None) -> Any:
        with self._lock:
            if key not in self._data:
                return fallback
            # Hand out copies so callers never mutate stored state in place.
            return json.loads(json.dumps(self._data[key]))

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = json.loads(json.dumps(value))
            self._flush()

    def delete(self, key: str) -> None:
        with self._lock:
            if key in self._data:
                del self._data[key]
                self._flush()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._data

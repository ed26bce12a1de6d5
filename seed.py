"""
Demo roster generation.

``reset_and_seed`` is destructive: it drops every section and student before
regenerating the roster. Callers must pass ``confirm=True``; the HTTP route is
further gated by ``settings.ALLOW_SEED``.
"""
import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from bson.objectid import ObjectId
from pymongo.database import Database

from errors import SeedNotConfirmed

logger = logging.getLogger(__name__)

ID_PREFIX = "231FA04"
DEFAULT_SECTIONS = 19
DEFAULT_STUDENTS_PER_SECTION = 30


@dataclass(frozen=True)
class SeedSummary:
    sections: int
    students: int
    first_id: Optional[str]
    last_id: Optional[str]

    def __str__(self) -> str:
        per_section = self.students // self.sections if self.sections else 0
        text = f"Seeded {self.sections} sections × {per_section} students each"
        if self.first_id:
            text += f" ({self.first_id}–{self.last_id})"
        return text


def business_id(counter: int) -> str:
    return f"{ID_PREFIX}{counter:03d}"


def _roster(section_count: int, students_per_section: int, absent_rate: float, rng: random.Random):
    """Yield (section_number, [(business_id, name, status), ...]) with one running counter."""
    counter = 1
    for sec_num in range(1, section_count + 1):
        members = []
        for _ in range(students_per_section):
            sid = business_id(counter)
            status = "present" if rng.random() > absent_rate else "absent"
            members.append((sid, f"Student {sid}", status))
            counter += 1
        yield sec_num, members


def reset_and_seed(db: Database, section_count: int = DEFAULT_SECTIONS,
                   students_per_section: int = DEFAULT_STUDENTS_PER_SECTION, *,
                   confirm: bool = False, rng: Optional[random.Random] = None) -> SeedSummary:
    if not confirm:
        raise SeedNotConfirmed("reset_and_seed deletes all sections and students; pass confirm=True")
    rng = rng or random.Random()

    db["section"].delete_many({})
    db["student"].delete_many({})
    logger.info("Cleared old sections and students")

    total = 0
    first_id = last_id = None
    for sec_num, members in _roster(section_count, students_per_section, 0.2, rng):
        now = datetime.now(timezone.utc)
        section_id = ObjectId()
        docs = [
            {"_id": ObjectId(), "id": sid, "name": name, "section": section_id, "status": status,
             "created_at": now, "updated_at": now}
            for sid, name, status in members
        ]
        if docs:
            db["student"].insert_many(docs)
            first_id = first_id or docs[0]["id"]
            last_id = docs[-1]["id"]
        db["section"].insert_one({
            "_id": section_id,
            "name": f"Section {sec_num}",
            "students": [d["_id"] for d in docs],
            "created_at": now,
            "updated_at": now,
        })
        total += len(docs)

    summary = SeedSummary(sections=section_count, students=total, first_id=first_id, last_id=last_id)
    logger.info("%s", summary)
    return summary


def build_demo_sections(section_count: int = DEFAULT_SECTIONS,
                        students_per_section: int = DEFAULT_STUDENTS_PER_SECTION,
                        rng: Optional[random.Random] = None) -> list:
    """Static roster the dashboard falls back on before the backend answers."""
    rng = rng or random.Random()
    return [
        {
            "id": sec_num,
            "name": f"Section {sec_num}",
            "students": [{"id": sid, "name": name, "status": status} for sid, name, status in members],
        }
        for sec_num, members in _roster(section_count, students_per_section, 0.15, rng)
    ]

"""
Record store operations for sections, students and notifications.

Every function takes the pymongo ``Database`` first so the API layer can hand
in whatever ``get_db`` resolves to. Documents are returned JSON-ready: ObjectIds
as strings, datetimes as ISO-8601 text.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from bson.errors import InvalidId
from bson.objectid import ObjectId
from pymongo import ASCENDING
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import create_document, get_documents
from errors import DuplicateKey, NotFound, ValidationMissing
from schemas import STATUSES, Notification, Section, Student

logger = logging.getLogger(__name__)


def serialize(doc):
    """Make a Mongo document (or nested value) JSON-ready."""
    if isinstance(doc, ObjectId):
        return str(doc)
    if isinstance(doc, datetime):
        return doc.isoformat()
    if isinstance(doc, dict):
        return {k: serialize(v) for k, v in doc.items()}
    if isinstance(doc, list):
        return [serialize(v) for v in doc]
    return doc


def oid(value: str) -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ValidationMissing(f'Cast to ObjectId failed for value "{value}"')


def _require(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationMissing(f"{field} is required")
    return str(value).strip()


# -----------------------------
# Students
# -----------------------------
def create_student(db: Database, business_id: str, name: str, section_ref: Optional[str] = None) -> dict:
    """Insert a student and append it to its section's membership list.

    The insert and the ``$push`` are two separate writes. Between them the
    student already exists but its section does not list it yet. A section
    id that resolves to nothing keeps the reference on the student and skips
    the membership update.
    """
    business_id = _require(business_id, "id")
    name = _require(name, "name")
    section_oid = oid(section_ref) if section_ref else None

    # Stored shape comes from the model: default status, ObjectId reference.
    doc = Student(id=business_id, name=name, section=section_oid).model_dump()

    try:
        stored = create_document("student", doc, database=db)
    except DuplicateKeyError as e:
        raise DuplicateKey(str(e))

    if section_oid is not None:
        result = db["section"].update_one({"_id": section_oid}, {"$push": {"students": stored["_id"]}})
        if result.matched_count == 0:
            logger.info("Section %s not found; student %s left without membership", section_ref, business_id)
    return serialize(stored)


def mark_attendance(db: Database, business_id: str, status: str) -> dict:
    business_id = _require(business_id, "studentId")
    if status not in STATUSES:
        raise ValidationMissing(f"`{status}` is not a valid enum value for path `status`.")
    result = db["student"].update_one(
        {"id": business_id},
        {"$set": {"status": status, "updated_at": datetime.now(timezone.utc)}},
    )
    if result.matched_count == 0:
        raise NotFound("Student not found")
    return {"message": "Attendance updated successfully"}


def get_student(db: Database, business_id: str) -> dict:
    doc = db["student"].find_one({"id": business_id})
    if not doc:
        raise NotFound("Student not found")
    return serialize(doc)


def list_students(db: Database) -> list:
    """All students, each with its section joined in (members left as ids)."""
    students = get_documents("student", database=db)
    section_ids = {s["section"] for s in students if s.get("section") is not None}
    sections = {}
    if section_ids:
        for sec in db["section"].find({"_id": {"$in": list(section_ids)}}):
            sections[sec["_id"]] = sec
    out = []
    for s in students:
        joined = dict(s)
        joined["section"] = sections.get(s.get("section"))
        out.append(serialize(joined))
    return out


# -----------------------------
# Sections
# -----------------------------
def create_section(db: Database, name: str) -> dict:
    section = Section(name=_require(name, "name"))
    stored = create_document("section", section.model_dump(), database=db)
    return serialize(stored)


def list_sections(db: Database) -> list:
    """Sections in insertion order with members populated in list order."""
    sections = get_documents("section", database=db)
    member_ids = [mid for sec in sections for mid in sec.get("students", [])]
    members = {}
    if member_ids:
        for st in db["student"].find({"_id": {"$in": member_ids}}):
            members[st["_id"]] = st
    out = []
    for sec in sections:
        joined = dict(sec)
        # Ids whose student is gone are dropped, as a populate would.
        joined["students"] = [members[mid] for mid in sec.get("students", []) if mid in members]
        out.append(serialize(joined))
    return out


# -----------------------------
# Notifications
# -----------------------------
def create_notification(db: Database, student_id: str, teacher: Optional[str], message: str) -> dict:
    # The recipient is not checked against the student collection.
    notification = Notification(
        studentId=_require(student_id, "studentId"),
        teacher=teacher or "",
        message=_require(message, "message"),
        date=datetime.now(timezone.utc),
    )
    stored = create_document("notification", notification.model_dump(), database=db)
    return serialize(stored)


def list_notifications_for(db: Database, student_id: str) -> list:
    cursor = db["notification"].find({"studentId": student_id}).sort([("date", ASCENDING), ("_id", ASCENDING)])
    return [serialize(n) for n in cursor]

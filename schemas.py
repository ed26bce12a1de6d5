"""
Database Schemas for HyperAttend

Each Pydantic model maps to a MongoDB collection with the lowercased class
name as the collection name.

Collections used:
- section
- student
- notification
"""

from datetime import datetime
from typing import List, Literal, Optional

from bson.objectid import ObjectId
from pydantic import BaseModel, ConfigDict, Field

AttendanceStatus = Literal["present", "absent"]
STATUSES = ("present", "absent")


class Section(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(..., description="Display name, e.g. 'Section 4'")
    students: List[ObjectId] = Field(default_factory=list, description="Ordered member student _ids")


class Student(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str = Field(..., description="Unique business id (roll number)")
    name: str = Field(..., description="Student display name")
    section: Optional[ObjectId] = Field(None, description="_id of the owning section")
    status: AttendanceStatus = Field("present", description="present | absent")


class Notification(BaseModel):
    studentId: str = Field(..., description="Business id of the recipient")
    teacher: str = Field(..., description="Sender name")
    message: str = Field(..., description="Message contents")
    date: Optional[datetime] = Field(None, description="Assigned at creation")


# -----------------------------
# Request bodies
# -----------------------------
class StudentCreate(BaseModel):
    id: str
    name: str
    sectionId: Optional[str] = None


class AttendanceMark(BaseModel):
    studentId: str
    status: AttendanceStatus


class NotificationCreate(BaseModel):
    studentId: str
    teacher: Optional[str] = None
    message: str


class SectionCreate(BaseModel):
    name: str

import pytest
from bson.objectid import ObjectId
from pydantic import ValidationError

from errors import DuplicateKey, NotFound, ValidationMissing
from records import (create_section, create_student, get_student, list_sections, list_students,
                     mark_attendance, serialize)
from schemas import Section, Student


def test_create_student_links_both_sides(mongo_db):
    section = create_section(mongo_db, "Section 20")

    student = create_student(mongo_db, "Z1", "Zoe", section["_id"])

    assert student["section"] == section["_id"]
    stored = mongo_db["section"].find_one({"_id": ObjectId(section["_id"])})
    assert [str(i) for i in stored["students"]] == [student["_id"]]


def test_duplicate_business_id_raises(mongo_db):
    create_student(mongo_db, "D1", "Dana")

    with pytest.raises(DuplicateKey):
        create_student(mongo_db, "D1", "Other")


def test_malformed_section_id_is_rejected(mongo_db):
    with pytest.raises(ValidationMissing):
        create_student(mongo_db, "B1", "Bad", "not-an-object-id")
    assert mongo_db["student"].count_documents({}) == 0


def test_blank_fields_are_rejected(mongo_db):
    with pytest.raises(ValidationMissing):
        create_student(mongo_db, "  ", "Blank")
    with pytest.raises(ValidationMissing):
        create_section(mongo_db, "")


def test_mark_is_idempotent(mongo_db):
    create_student(mongo_db, "M1", "Max")

    mark_attendance(mongo_db, "M1", "absent")
    mark_attendance(mongo_db, "M1", "absent")

    assert get_student(mongo_db, "M1")["status"] == "absent"


def test_mark_unknown_student_raises(mongo_db):
    with pytest.raises(NotFound):
        mark_attendance(mongo_db, "ghost", "present")


def test_deleted_member_is_skipped_in_section_listing(mongo_db):
    section = create_section(mongo_db, "S")
    create_student(mongo_db, "K1", "Keep", section["_id"])
    create_student(mongo_db, "G1", "Gone", section["_id"])
    mongo_db["student"].delete_one({"id": "G1"})

    members = list_sections(mongo_db)[0]["students"]

    assert [m["id"] for m in members] == ["K1"]
    assert [s["id"] for s in list_students(mongo_db)] == ["K1"]


def test_serialize_converts_nested_ids():
    oid = ObjectId()

    assert serialize({"_id": oid, "students": [oid], "n": 1}) == {"_id": str(oid), "students": [str(oid)], "n": 1}


def test_stored_student_keeps_section_as_object_id(mongo_db):
    section = create_section(mongo_db, "S")

    create_student(mongo_db, "O1", "Olga", section["_id"])

    stored = mongo_db["student"].find_one({"id": "O1"})
    assert stored["section"] == ObjectId(section["_id"])
    assert stored["status"] == "present"
    assert isinstance(mongo_db["section"].find_one()["students"][0], ObjectId)


def test_collection_models_reject_string_references():
    with pytest.raises(ValidationError):
        Student(id="S1", name="Sam", section="not-an-object-id")
    with pytest.raises(ValidationError):
        Section(name="S", students=["not-an-object-id"])

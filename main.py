import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError

import records
import settings
from database import ensure_indexes, get_db
from errors import AttendanceError, NotFound
from schemas import AttendanceMark, NotificationCreate, SectionCreate, StudentCreate
from seed import reset_and_seed

logger = logging.getLogger(__name__)

# -----------------------------
# App Setup
# -----------------------------
app = FastAPI(title="HyperAttend API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    ensure_indexes()


# -----------------------------
# Error mapping
# -----------------------------
# Not-found is the only distinct status; everything else is a 500 carrying
# the raw message.
@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"message": str(exc)})


@app.exception_handler(AttendanceError)
async def attendance_error_handler(request: Request, exc: AttendanceError):
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(PyMongoError)
async def storage_error_handler(request: Request, exc: PyMongoError):
    logger.error("%s %s storage fault: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    messages = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'][1:]) or 'body'}: {err['msg']}" for err in exc.errors()
    )
    return JSONResponse(status_code=500, content={"error": messages})


# -----------------------------
# Health
# -----------------------------
@app.get("/", response_class=PlainTextResponse)
def read_root():
    return "✅ HyperAttend backend is running"


# -----------------------------
# Students
# -----------------------------
@app.get("/api/students")
def list_students(db: Database = Depends(get_db)):
    return records.list_students(db)


@app.post("/api/students", status_code=201)
def create_student(payload: StudentCreate, db: Database = Depends(get_db)):
    return records.create_student(db, payload.id, payload.name, payload.sectionId)


# -----------------------------
# Attendance
# -----------------------------
@app.post("/api/attendance/mark")
def mark_attendance(payload: AttendanceMark, db: Database = Depends(get_db)):
    return records.mark_attendance(db, payload.studentId, payload.status)


@app.get("/api/attendance/summary/{student_id}")
def attendance_summary(student_id: str, db: Database = Depends(get_db)):
    return records.get_student(db, student_id)


# -----------------------------
# Notifications
# -----------------------------
@app.post("/api/notifications", status_code=201)
def create_notification(payload: NotificationCreate, db: Database = Depends(get_db)):
    return records.create_notification(db, payload.studentId, payload.teacher, payload.message)


@app.get("/api/notifications/{student_id}")
def list_notifications(student_id: str, db: Database = Depends(get_db)):
    return records.list_notifications_for(db, student_id)


# -----------------------------
# Sections
# -----------------------------
@app.post("/api/sections", status_code=201)
def create_section(payload: SectionCreate, db: Database = Depends(get_db)):
    return records.create_section(db, payload.name)


@app.get("/api/sections")
def list_sections(db: Database = Depends(get_db)):
    return records.list_sections(db)


# -----------------------------
# Seed (destructive)
# -----------------------------
@app.get("/api/seed", response_class=PlainTextResponse)
def seed(db: Database = Depends(get_db)):
    if not settings.ALLOW_SEED:
        return PlainTextResponse("Seeding is disabled (ALLOW_SEED=0)", status_code=403)
    try:
        summary = reset_and_seed(db, confirm=True)
    except PyMongoError as e:
        logger.error("Seed error: %s", e)
        return PlainTextResponse("Seeding failed", status_code=500)
    return f"✅ {summary}"


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)

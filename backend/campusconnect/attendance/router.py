import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campusconnect.attendance import service
from campusconnect.attendance.schemas import (
    AttendanceDeleteResponse,
    AttendanceSaveResponse,
    AttendanceSheetRequest,
    AttendanceViewResponse,
)
from campusconnect.auth.dependencies import require_permission, require_roles
from campusconnect.auth.session import Role
from campusconnect.database import get_db
from campusconnect.filters import ClassMatch
from campusconnect.students.crud import list_students_for_class

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin/attendance",
    tags=["attendance"],
    dependencies=[Depends(require_roles(Role.ADMIN))],
)

student_router = APIRouter(
    prefix="/api/student/attendance",
    tags=["attendance"],
    dependencies=[Depends(require_roles(Role.STUDENT))],
)


@router.post("", response_model=AttendanceSaveResponse,
             dependencies=[Depends(require_permission("insert", Role.ADMIN))])
def save_attendance(request: AttendanceSheetRequest, db: Session = Depends(get_db)):
    """Save one marking sheet: a row per student per subject column."""
    students = list_students_for_class(db, request.class_name)
    if not students:
        raise HTTPException(status_code=400, detail="Please select a class and ensure students are loaded.")

    sheet = service.AttendanceSheet(students, request.subjects)
    try:
        for student_id, marks in request.statuses.items():
            for subject, status in marks.items():
                if subject in sheet.subjects:
                    sheet.mark(student_id, subject, status)
    except KeyError as e:
        raise HTTPException(status_code=400, detail=str(e))

    records = sheet.to_records(request.class_name, request.date)
    if not records:
        raise HTTPException(status_code=400, detail="Please add at least one subject.")

    try:
        saved = service.save_attendance(db, records)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving attendance: {e}")
        raise HTTPException(status_code=500, detail="Error saving attendance. Please try again.")

    return {"success": True, "message": "Attendance saved successfully!", "saved": saved}


@router.get("/view", response_model=AttendanceViewResponse)
def view_attendance(class_name: str = Query(...), db: Session = Depends(get_db)):
    records = service.fetch_attendance(db, class_name, ClassMatch.CASE_INSENSITIVE)
    return {"class_name": class_name, "groups": service.build_attendance_view(records)}


@router.delete("/view", response_model=AttendanceDeleteResponse,
               dependencies=[Depends(require_permission("delete", Role.ADMIN))])
def delete_attendance_date_group(
    class_name: str = Query(...),
    on: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Delete all attendance records of a class for one date."""
    try:
        deleted = service.delete_date_group(db, class_name, on)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Delete error: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete attendance records.")
    return {"success": True, "message": "Attendance records deleted.", "deleted": deleted}


@student_router.get("", response_model=AttendanceViewResponse)
def view_class_attendance(class_name: str = Query(...), db: Session = Depends(get_db)):
    records = service.fetch_attendance(db, class_name, ClassMatch.CASE_INSENSITIVE)
    return {
        "class_name": class_name,
        "groups": service.build_attendance_view(records, sort_subjects=True),
    }

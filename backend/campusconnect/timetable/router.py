import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campusconnect.auth.dependencies import require_permission, require_roles
from campusconnect.auth.session import Role
from campusconnect.database import get_db
from campusconnect.timetable import service
from campusconnect.timetable.schemas import (
    StudentTimetableResponse,
    TimetableDeleteResponse,
    TimetableEditorResponse,
    TimetableSaveRequest,
    TimetableSaveResponse,
    TimetableViewResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin/timetable",
    tags=["timetable"],
    dependencies=[Depends(require_roles(Role.ADMIN))],
)

student_router = APIRouter(
    prefix="/api/student/timetable",
    tags=["timetable"],
    dependencies=[Depends(require_roles(Role.STUDENT))],
)


@router.get("", response_model=TimetableEditorResponse)
def timetable_editor(class_name: str = Query(...), db: Session = Depends(get_db)):
    """Entries of a class laid out on the editing grid (at least 7 periods)."""
    entries = service.fetch_timetable(db, class_name)
    return {
        "class_name": class_name,
        "entries": entries,
        "grid": service.build_grid(entries, min_periods=service.DEFAULT_PERIODS),
    }


@router.post("", response_model=TimetableSaveResponse,
             dependencies=[Depends(require_permission("insert", Role.ADMIN))])
def save_timetable(request: TimetableSaveRequest, db: Session = Depends(get_db)):
    try:
        updated, inserted = service.save_timetable(db, request)
    except LookupError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving timetable: {e}")
        raise HTTPException(status_code=500, detail="Error saving timetable. Please try again.")
    return {
        "success": True,
        "message": "Timetable saved successfully!",
        "updated": updated,
        "inserted": inserted,
    }


@router.delete("/entries/{entry_id}", response_model=TimetableDeleteResponse,
               dependencies=[Depends(require_permission("delete", Role.ADMIN))])
def delete_timetable_entry(entry_id: int, db: Session = Depends(get_db)):
    try:
        deleted = service.delete_entry(db, entry_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting timetable entry {entry_id}: {e}")
        raise HTTPException(status_code=500, detail="Error deleting entry.")
    if not deleted:
        raise HTTPException(status_code=404, detail="Timetable entry not found")
    return {"success": True, "message": "Entry deleted.", "deleted": deleted}


@router.get("/view", response_model=TimetableViewResponse)
def view_timetables(class_name: str = Query(...), db: Session = Depends(get_db)):
    """Saved timetables of a class, newest first, one grid per timetable date."""
    entries = service.fetch_timetable(db, class_name, newest_first=True)
    return {"class_name": class_name, "groups": service.build_timetable_view(entries)}


@router.delete("/view", response_model=TimetableDeleteResponse,
               dependencies=[Depends(require_permission("delete", Role.ADMIN))])
def delete_timetable_group(
    class_name: str = Query(...),
    on: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    try:
        deleted = service.delete_group(db, class_name, on)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting timetable: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete timetable. Please try again.")
    return {"success": True, "message": "Timetable deleted successfully!", "deleted": deleted}


@student_router.get("", response_model=StudentTimetableResponse)
def student_timetable(class_name: str = Query(...), db: Session = Depends(get_db)):
    entries = service.fetch_timetable(db, class_name)
    return {
        "class_name": class_name,
        "timetable_date": entries[0].date if entries else None,
        "grid": service.build_grid(entries, min_periods=service.DEFAULT_PERIODS),
    }

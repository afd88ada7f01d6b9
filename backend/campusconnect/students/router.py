import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campusconnect.auth.dependencies import require_permission, require_roles
from campusconnect.auth.session import Role
from campusconnect.database import get_db
from campusconnect.grouping import group_by
from campusconnect.students import crud
from campusconnect.students.schemas import (
    StudentCreate,
    StudentDeleteResponse,
    StudentDirectoryResponse,
    StudentResponse,
    StudentUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin/students",
    tags=["students"],
    dependencies=[Depends(require_roles(Role.ADMIN))],
)

classes_router = APIRouter(
    prefix="/api/classes",
    tags=["classes"],
    dependencies=[Depends(require_roles(Role.ADMIN, Role.OFFICE, Role.STUDENT))],
)


@router.get("", response_model=StudentDirectoryResponse)
def list_students(db: Session = Depends(get_db)):
    """All students, with per-class counts and the students grouped by class."""
    students = crud.list_students(db)
    by_class = group_by(students, lambda s: s.class_name)
    class_counts: Dict[str, int] = {name: len(members) for name, members in by_class.items()}
    return {
        "students": students,
        "class_counts": class_counts,
        "by_class": by_class,
    }


@router.post("", response_model=StudentResponse, status_code=201,
             dependencies=[Depends(require_permission("insert", Role.ADMIN))])
def add_student(student: StudentCreate, db: Session = Depends(get_db)):
    try:
        return crud.create_student(db, student)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error adding student: {e}")
        raise HTTPException(status_code=500, detail="Failed to add student. Please try again.")


@router.put("/{student_id}", response_model=StudentResponse,
            dependencies=[Depends(require_permission("update", Role.ADMIN))])
def update_student(student_id: int, student: StudentUpdate, db: Session = Depends(get_db)):
    db_student = crud.get_student(db, student_id)
    if db_student is None:
        raise HTTPException(status_code=404, detail="Student not found")
    try:
        return crud.update_student(db, db_student, student)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating student {student_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update student. Please try again.")


@router.delete("/{student_id}", response_model=StudentDeleteResponse,
               dependencies=[Depends(require_permission("delete", Role.ADMIN))])
def delete_student(student_id: int, db: Session = Depends(get_db)):
    """Delete a student together with all of that student's fee records."""
    db_student = crud.get_student(db, student_id)
    if db_student is None:
        raise HTTPException(status_code=404, detail="Student not found")

    try:
        deleted_fees = crud.delete_student_cascade(db, db_student)
    except crud.CascadeDeleteError:
        raise HTTPException(status_code=500, detail="Failed to delete associated fee records. Please try again.")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting student {student_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete student. Please try again.")

    return {
        "success": True,
        "message": "Student and associated fee records deleted successfully!",
        "deleted_fee_records": deleted_fees,
    }


@classes_router.get("", response_model=List[str])
def list_classes(db: Session = Depends(get_db)):
    return crud.list_classes(db)


@classes_router.get("/{class_name}/students", response_model=List[StudentResponse])
def list_class_students(class_name: str, db: Session = Depends(get_db)):
    return crud.list_students_for_class(db, class_name)

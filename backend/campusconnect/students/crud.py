import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campusconnect.models import FeeRecord, Student
from campusconnect.students.schemas import StudentCreate, StudentUpdate

logger = logging.getLogger(__name__)


class CascadeDeleteError(Exception):
    """A dependent delete failed; the parent row was left in place."""


def list_students(db: Session) -> List[Student]:
    """All students ordered by class, then roll number. Empty on read failure."""
    try:
        return db.query(Student).order_by(Student.class_name.asc(), Student.roll_no.asc()).all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching students: {e}")
        return []


def list_classes(db: Session) -> List[str]:
    """Distinct, trimmed, non-empty class labels in first-seen order."""
    try:
        rows = db.query(Student.class_name).order_by(Student.id.asc()).all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching classes: {e}")
        return []
    classes = {}
    for (class_name,) in rows:
        label = (class_name or "").strip()
        if label:
            classes.setdefault(label, None)
    return list(classes)


def list_students_for_class(db: Session, class_name: str) -> List[Student]:
    try:
        return (
            db.query(Student)
            .filter(Student.class_name == class_name)
            .order_by(Student.roll_no.asc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error fetching students for class {class_name}: {e}")
        return []


def get_student(db: Session, student_id: int) -> Optional[Student]:
    return db.query(Student).filter(Student.id == student_id).first()


def create_student(db: Session, student: StudentCreate) -> Student:
    db_student = Student(
        full_name=student.full_name,
        class_name=student.class_name,
        roll_no=student.roll_no,
    )
    db.add(db_student)
    db.commit()
    db.refresh(db_student)
    return db_student


def update_student(db: Session, db_student: Student, student: StudentUpdate) -> Student:
    db_student.full_name = student.full_name
    db_student.class_name = student.class_name
    db_student.roll_no = student.roll_no
    db.commit()
    db.refresh(db_student)
    return db_student


def delete_fees_for_student(db: Session, student_id: int) -> int:
    """Delete a student's fee records without committing."""
    return (
        db.query(FeeRecord)
        .filter(FeeRecord.student_id == student_id)
        .delete(synchronize_session=False)
    )


def delete_student_cascade(db: Session, db_student: Student) -> int:
    """
    Delete the student's fee records, then the student, in one transaction.

    Returns the number of fee records removed. If the fee deletion fails the
    transaction is rolled back and the student row stays.
    """
    try:
        deleted_fees = delete_fees_for_student(db, db_student.id)
        db.flush()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting fee records for student {db_student.id}: {e}")
        raise CascadeDeleteError("Failed to delete associated fee records") from e

    db.delete(db_student)
    db.commit()
    return deleted_fees

import logging
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campusconnect.filters import ClassMatch, class_filter
from campusconnect.grouping import cross_tab, flatten, group_nested
from campusconnect.models import AttendanceEntry, Student

logger = logging.getLogger(__name__)

NOT_MARKED = "Not Marked"


def named_subjects(subjects: List[str]) -> List[str]:
    """Subject columns that are not blank or whitespace."""
    return [s for s in subjects if s and s.strip()]


class AttendanceSheet:
    """
    The marking grid for one class and date: students down the side, subject
    columns across, each cell present/absent/unset.
    """

    def __init__(self, students: List[Student], subjects: Optional[List[str]] = None):
        self.students = list(students)
        self.subjects: List[str] = []
        self.statuses: Dict[int, Dict[str, Optional[str]]] = {s.id: {} for s in self.students}
        self.set_subjects(subjects or [""])

    def set_subjects(self, subjects: List[str]) -> None:
        """Replace the subject columns, keeping marks for columns that survive."""
        self.subjects = list(subjects)
        named = named_subjects(self.subjects)
        for student_id, marks in self.statuses.items():
            for subject in named:
                marks.setdefault(subject, None)
            for subject in list(marks):
                if subject not in self.subjects:
                    del marks[subject]

    def mark(self, student_id: int, subject: str, status: Optional[str]) -> None:
        if student_id not in self.statuses:
            raise KeyError(f"Student {student_id} is not on this sheet")
        self.statuses[student_id][subject] = status

    def to_records(self, class_name: str, on: date) -> List[AttendanceEntry]:
        """One entry per student per non-blank subject column."""
        subjects = named_subjects(self.subjects)
        return [
            AttendanceEntry(
                student=student.full_name,
                roll_no=student.roll_no,
                class_name=class_name,
                date=on,
                subject=subject,
                status=self.statuses.get(student.id, {}).get(subject),
            )
            for student in self.students
            for subject in subjects
        ]


def save_attendance(db: Session, records: List[AttendanceEntry]) -> int:
    db.add_all(records)
    db.commit()
    return len(records)


def fetch_attendance(db: Session, class_name: str, match: ClassMatch = ClassMatch.EXACT) -> List[AttendanceEntry]:
    """Attendance of a class, newest date first, then by roll number."""
    try:
        return (
            db.query(AttendanceEntry)
            .filter(class_filter(AttendanceEntry.class_name, class_name, match))
            .order_by(AttendanceEntry.date.desc(), AttendanceEntry.roll_no.asc(), AttendanceEntry.id.asc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error fetching attendance: {e}")
        return []


def build_attendance_view(records: List[AttendanceEntry], sort_subjects: bool = False) -> List[dict]:
    """
    Group by date then subject, and render each date as a full student x
    subject table. Students without a record for a subject show "Not Marked".
    """
    groups = []
    for on, by_subject in group_nested(records, lambda r: r.date, lambda r: r.subject).items():
        table = cross_tab(
            flatten(by_subject),
            row_key=lambda r: r.student,
            column_key=lambda r: r.subject,
            value=lambda r: r.status,
            sentinel=NOT_MARKED,
            row_sort=lambda r: r.roll_no or 0,
            column_sort=(lambda s: s) if sort_subjects else None,
        )
        groups.append({
            "date": on,
            "subjects": table.columns,
            "rows": [
                {
                    "student": student,
                    "roll_no": table.row_records[student].roll_no,
                    "statuses": table.cells[student],
                }
                for student in table.rows
            ],
        })
    return groups


def delete_date_group(db: Session, class_name: str, on: date) -> int:
    """Remove every entry for (class, date) and nothing else."""
    deleted = (
        db.query(AttendanceEntry)
        .filter(AttendanceEntry.class_name == class_name, AttendanceEntry.date == on)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted

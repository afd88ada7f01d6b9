import logging
import time
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campusconnect.config.settings import settings
from campusconnect.grouping import cross_tab, group_by
from campusconnect.models import ResultEntry
from campusconnect.results.schemas import ResultEntryRequest
from campusconnect.storage.schemas import Attachment
from campusconnect.storage.service import ObjectStorage, safe_file_name

logger = logging.getLogger(__name__)

NO_MARKS = "—"

GRADE_BANDS = (
    (90, "A+"),
    (80, "A"),
    (70, "B+"),
    (60, "B"),
    (50, "C+"),
    (40, "C"),
)


def format_marks(marks: float) -> str:
    return str(int(marks)) if float(marks).is_integer() else str(marks)


def parse_marks(marks: Optional[str]) -> float:
    """Stored marks are text; anything unparsable counts as zero."""
    try:
        return float(marks)
    except (TypeError, ValueError):
        return 0.0


def grade_for(marks: float) -> str:
    for floor, grade in GRADE_BANDS:
        if marks >= floor:
            return grade
    return "F"


def upload_result_file(storage: ObjectStorage, attachment: Attachment) -> str:
    """Store a supporting file and return its public URL."""
    path = f"results_files/{int(time.time() * 1000)}_{safe_file_name(attachment.file_name)}"
    storage.upload(settings.FILES_BUCKET, path, attachment.content, attachment.content_type)
    return storage.get_public_url(settings.FILES_BUCKET, path)


def upsert_results(db: Session, request: ResultEntryRequest, file_url: Optional[str]) -> List[ResultEntry]:
    """Insert or overwrite one row per subject, keyed on (student, subject, date)."""
    saved = {}
    for entry in request.subjects:
        existing = saved.get(entry.subject) or (
            db.query(ResultEntry)
            .filter(
                ResultEntry.full_name == request.full_name,
                ResultEntry.subject == entry.subject,
                ResultEntry.date == request.date,
            )
            .first()
        )
        if existing is None:
            existing = ResultEntry(full_name=request.full_name, subject=entry.subject, date=request.date)
            db.add(existing)
        existing.class_name = request.class_name
        existing.marks = format_marks(entry.marks)
        existing.exam_type = request.exam_type
        existing.file_url = file_url
        saved[entry.subject] = existing
    db.commit()
    for result in saved.values():
        db.refresh(result)
    return list(saved.values())


def fetch_results(db: Session, class_name: str, full_name: Optional[str] = None) -> List[ResultEntry]:
    try:
        query = (
            db.query(ResultEntry)
            .filter(ResultEntry.class_name == class_name.strip())
        )
        if full_name:
            query = query.filter(ResultEntry.full_name == full_name)
        return query.order_by(ResultEntry.full_name.asc(), ResultEntry.id.asc()).all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching results: {e}")
        return []


def build_results_view(records: List[ResultEntry]) -> List[dict]:
    """One group per (date, exam type), each with a student x subject marks table."""
    groups = []
    for (on, exam_type), entries in group_by(records, lambda r: (r.date, r.exam_type or "")).items():
        table = cross_tab(
            entries,
            row_key=lambda r: r.full_name,
            column_key=lambda r: r.subject,
            value=lambda r: r.marks or None,
            sentinel=NO_MARKS,
        )
        file_record = next((r for r in entries if r.file_url), None)
        groups.append({
            "date": on,
            "exam_type": exam_type,
            "students": table.rows,
            "subjects": table.columns,
            "marks": table.cells,
            "student_count": len(table.rows),
            "subject_count": len(table.columns),
            "file_url": file_record.file_url if file_record else None,
            "records": entries,
        })
    return groups


def update_marks(db: Session, result: ResultEntry, marks: float) -> ResultEntry:
    result.marks = format_marks(marks)
    db.commit()
    db.refresh(result)
    return result


def delete_results_for_date(db: Session, class_name: str, on: date) -> int:
    deleted = (
        db.query(ResultEntry)
        .filter(ResultEntry.date == on, ResultEntry.class_name == class_name)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted


def summarize(records: List[ResultEntry]) -> dict:
    values = [parse_marks(r.marks) for r in records]
    total = sum(values)
    average = f"{total / len(values):.1f}" if values else "0.0"
    return {
        "total_marks": total,
        "average_marks": average,
        "max_marks": max(values) if values else 0,
    }

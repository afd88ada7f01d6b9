import logging
import math
import time
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from campusconnect.config.settings import settings
from campusconnect.fees.schemas import FeeBatchRequest, FeeItem
from campusconnect.models import FeeRecord
from campusconnect.storage.schemas import Attachment
from campusconnect.storage.service import ObjectStorage, StorageError, safe_file_name

logger = logging.getLogger(__name__)

PAID = "Paid"
PENDING = "Pending"


def parse_amount(value) -> float:
    """Blank, unparsable or non-finite amounts count as 0."""
    if value is None:
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        # float() also reads digit separators like "1_000"
        if not value or "_" in value:
            return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    return amount if math.isfinite(amount) else 0.0


def compute_due(total, paid) -> float:
    # Overpayment yields a negative due; it is not clamped.
    return parse_amount(total) - parse_amount(paid)


def fee_status(due: float) -> str:
    return PAID if due == 0 else PENDING


@dataclass
class FeeDraft:
    """Editable fee row of one student; ``due`` follows every change to total or paid."""
    student_id: int
    total: str = ""
    paid: str = ""
    due: float = 0.0

    def set_total(self, value: str) -> None:
        self.total = value
        self.due = compute_due(self.total, self.paid)

    def set_paid(self, value: str) -> None:
        self.paid = value
        self.due = compute_due(self.total, self.paid)

    @property
    def status(self) -> str:
        return fee_status(self.due)


def upload_receipt(storage: ObjectStorage, student_id: int, attachment: Attachment) -> str:
    path = f"fees_files/{student_id}_{int(time.time() * 1000)}_{safe_file_name(attachment.file_name)}"
    storage.upload(settings.FILES_BUCKET, path, attachment.content, attachment.content_type)
    return storage.get_public_url(settings.FILES_BUCKET, path)


def upsert_fee(db: Session, class_name: str, year: str, item: FeeItem, file_url: Optional[str]) -> FeeRecord:
    """Write the fee row of a student for a year, replacing any existing one."""
    total = parse_amount(item.total)
    paid = parse_amount(item.paid)
    record = (
        db.query(FeeRecord)
        .filter(FeeRecord.student_id == item.student_id, FeeRecord.year == year)
        .first()
    )
    if record is None:
        record = FeeRecord(student_id=item.student_id, year=year)
        db.add(record)
    record.class_name = class_name
    record.total = total
    record.paid = paid
    record.due = total - paid
    record.file_url = file_url
    db.commit()
    db.refresh(record)
    return record


def save_fee_batch(db: Session, storage: ObjectStorage, request: FeeBatchRequest) -> List[dict]:
    """Save each student's fees in turn; a failing item never stops the ones after it."""
    outcomes = []
    for item in request.items:
        if item.total is None and item.paid is None:
            outcomes.append({"student_id": item.student_id, "status": "skipped"})
            continue

        file_url = None
        if item.receipt is not None:
            try:
                file_url = upload_receipt(storage, item.student_id, item.receipt)
            except StorageError as e:
                logger.error(f"File upload failed for student {item.student_id}: {e}")
                outcomes.append({
                    "student_id": item.student_id,
                    "status": "upload_failed",
                    "message": "File upload failed",
                })
                continue

        try:
            record = upsert_fee(db, request.class_name, request.year, item, file_url)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error saving fees for student {item.student_id}: {e}")
            outcomes.append({
                "student_id": item.student_id,
                "status": "failed",
                "message": "Failed to save fee record",
            })
            continue

        outcomes.append({
            "student_id": item.student_id,
            "status": "saved",
            "due": record.due,
            "file_url": record.file_url,
        })
    return outcomes


def to_view_row(record: FeeRecord) -> dict:
    return {
        "id": record.id,
        "student_id": record.student_id,
        "class_name": record.class_name,
        "year": record.year,
        "total": record.total,
        "paid": record.paid,
        "due": record.due,
        "file_url": record.file_url,
        "created_at": record.created_at,
        "full_name": record.student.full_name if record.student else None,
        "status": fee_status(record.due),
    }


def list_fees_for_class(db: Session, class_name: str) -> List[FeeRecord]:
    try:
        return (
            db.query(FeeRecord)
            .options(joinedload(FeeRecord.student))
            .filter(FeeRecord.class_name == class_name)
            .order_by(FeeRecord.id.asc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error fetching fees: {e}")
        return []


def latest_fee_for_student(db: Session, student_id: int) -> Optional[FeeRecord]:
    try:
        return (
            db.query(FeeRecord)
            .options(joinedload(FeeRecord.student))
            .filter(FeeRecord.student_id == student_id)
            .order_by(FeeRecord.year.desc())
            .first()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error fetching fee for student {student_id}: {e}")
        return None


def delete_fee(db: Session, fee_id: int) -> int:
    deleted = db.query(FeeRecord).filter(FeeRecord.id == fee_id).delete(synchronize_session=False)
    db.commit()
    return deleted

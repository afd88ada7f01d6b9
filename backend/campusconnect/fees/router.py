import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campusconnect.auth.dependencies import require_roles
from campusconnect.auth.session import Role
from campusconnect.database import get_db
from campusconnect.fees import service
from campusconnect.fees.schemas import (
    FeeBatchRequest,
    FeeBatchResponse,
    FeeDeleteResponse,
    FeeViewResponse,
    StudentFeeResponse,
)
from campusconnect.storage.service import ObjectStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/office/fees",
    tags=["fees"],
    dependencies=[Depends(require_roles(Role.OFFICE))],
)

student_router = APIRouter(
    prefix="/api/student/fees",
    tags=["fees"],
    dependencies=[Depends(require_roles(Role.STUDENT))],
)


@router.post("", response_model=FeeBatchResponse)
def save_fees(
    request: FeeBatchRequest,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
):
    """Save the fee form of a class. Every item reports its own outcome."""
    outcomes = service.save_fee_batch(db, storage, request)
    failed = [o for o in outcomes if o["status"] in ("upload_failed", "failed")]
    if failed:
        message = f"Saved with {len(failed)} error(s)."
    else:
        message = "Fees saved successfully!"
    return {"success": not failed, "message": message, "outcomes": outcomes}


@router.get("/view", response_model=FeeViewResponse)
def view_fees(class_name: str = Query(...), db: Session = Depends(get_db)):
    records = service.list_fees_for_class(db, class_name)
    return {"class_name": class_name, "records": [service.to_view_row(r) for r in records]}


@router.delete("/{fee_id}", response_model=FeeDeleteResponse)
def delete_fee(fee_id: int, db: Session = Depends(get_db)):
    try:
        deleted = service.delete_fee(db, fee_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting fee record {fee_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete record.")
    if not deleted:
        raise HTTPException(status_code=404, detail="Fee record not found")
    return {"success": True, "message": "Record deleted."}


@student_router.get("", response_model=StudentFeeResponse)
def student_fee(student_id: int = Query(...), db: Session = Depends(get_db)):
    record = service.latest_fee_for_student(db, student_id)
    return {"student_id": student_id, "fee": service.to_view_row(record) if record else None}

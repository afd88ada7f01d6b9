import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campusconnect.auth.dependencies import require_permission, require_roles
from campusconnect.auth.session import Role
from campusconnect.database import get_db
from campusconnect.models import ResultEntry
from campusconnect.results import service
from campusconnect.results.schemas import (
    ResultDeleteResponse,
    ResultEntryRequest,
    ResultEntryResponse,
    ResultSaveResponse,
    ResultsViewResponse,
    ResultUpdateRequest,
    StudentResultsResponse,
)
from campusconnect.storage.service import ObjectStorage, StorageError, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin/results",
    tags=["results"],
    dependencies=[Depends(require_roles(Role.ADMIN))],
)

student_router = APIRouter(
    prefix="/api/student/results",
    tags=["results"],
    dependencies=[Depends(require_roles(Role.STUDENT))],
)


@router.post("", response_model=ResultSaveResponse,
             dependencies=[Depends(require_permission("insert", Role.ADMIN))])
def save_results(
    request: ResultEntryRequest,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
):
    """
    Save a student's marks for one date. A supporting file, when attached, is
    uploaded first; if that upload fails nothing is saved.
    """
    file_url = None
    if request.attachment is not None:
        try:
            file_url = service.upload_result_file(storage, request.attachment)
        except StorageError as e:
            logger.error(f"File upload failed: {e}")
            raise HTTPException(status_code=502, detail=f"File upload failed: {e}")
        logger.info(f"File uploaded successfully: {file_url}")

    try:
        results = service.upsert_results(db, request, file_url)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving results: {e}")
        raise HTTPException(status_code=500, detail="Error saving results")

    return {
        "success": True,
        "message": "Results saved successfully!",
        "total_marks": sum(entry.marks for entry in request.subjects),
        "file_url": file_url,
        "results": results,
    }


@router.get("/view", response_model=ResultsViewResponse)
def view_results(
    class_name: str = Query(...),
    student: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    records = service.fetch_results(db, class_name, student)
    return {"class_name": class_name, "groups": service.build_results_view(records)}


@router.patch("/{result_id}", response_model=ResultEntryResponse,
              dependencies=[Depends(require_permission("update", Role.ADMIN))])
def update_result(result_id: int, request: ResultUpdateRequest, db: Session = Depends(get_db)):
    result = db.query(ResultEntry).filter(ResultEntry.id == result_id).first()
    if result is None:
        raise HTTPException(status_code=404, detail="Result not found")
    try:
        return service.update_marks(db, result, request.marks)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating result: {e}")
        raise HTTPException(status_code=500, detail="Failed to update result. Please try again.")


@router.delete("/view", response_model=ResultDeleteResponse,
               dependencies=[Depends(require_permission("delete", Role.ADMIN))])
def delete_results_by_date(
    class_name: str = Query(...),
    on: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    try:
        deleted = service.delete_results_for_date(db, class_name, on)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting results: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete results. Please try again.")
    return {"success": True, "message": "Results deleted successfully!", "deleted": deleted}


@student_router.get("", response_model=StudentResultsResponse)
def student_results(
    class_name: str = Query(...),
    full_name: str = Query(...),
    db: Session = Depends(get_db),
):
    """A student's marks with totals and a letter grade per subject."""
    records = service.fetch_results(db, class_name, full_name)
    graded = [
        {
            **ResultEntryResponse.model_validate(record).model_dump(),
            "grade": service.grade_for(service.parse_marks(record.marks)),
        }
        for record in records
    ]
    return {
        "class_name": class_name,
        "full_name": full_name,
        "results": graded,
        **service.summarize(records),
    }

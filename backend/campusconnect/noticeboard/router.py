import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campusconnect.auth.dependencies import require_permission, require_roles
from campusconnect.auth.session import Role
from campusconnect.database import get_db
from campusconnect.models import Notice
from campusconnect.noticeboard import service
from campusconnect.noticeboard.schemas import (
    NoticeCreate,
    NoticeDeleteResponse,
    NoticeListResponse,
    NoticeResponse,
)
from campusconnect.storage.service import ObjectStorage, StorageError, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin/noticeboard",
    tags=["noticeboard"],
    dependencies=[Depends(require_roles(Role.ADMIN))],
)

student_router = APIRouter(
    prefix="/api/student/noticeboard",
    tags=["noticeboard"],
    dependencies=[Depends(require_roles(Role.STUDENT))],
)


@router.post("", response_model=NoticeResponse, status_code=201,
             dependencies=[Depends(require_permission("insert", Role.ADMIN))])
def create_notice(
    notice: NoticeCreate,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
):
    """Post a notice to a class, uploading its attachment before the row is written."""
    file_url = file_type = None
    if notice.attachment is not None:
        try:
            file_url, file_type = service.upload_attachment(storage, notice.attachment)
        except StorageError as e:
            logger.error(f"Upload error: {e}")
            raise HTTPException(status_code=502, detail="File upload failed. Please try again.")

    try:
        return service.create_notice(db, notice, file_url, file_type)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving notice: {e}")
        raise HTTPException(status_code=500, detail="Failed to save notice. Please try again.")


@router.get("/view", response_model=NoticeListResponse)
def view_notices(class_name: str = Query(...), db: Session = Depends(get_db)):
    return {"class_name": class_name, "notices": service.list_notices(db, class_name)}


@router.delete("/{notice_id}", response_model=NoticeDeleteResponse,
               dependencies=[Depends(require_permission("delete", Role.ADMIN))])
def delete_notice(
    notice_id: int,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
):
    db_notice = db.query(Notice).filter(Notice.id == notice_id).first()
    if db_notice is None:
        raise HTTPException(status_code=404, detail="Notice not found")

    file_removed = service.remove_attachment(storage, db_notice.file_url)
    try:
        service.delete_notice(db, db_notice)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Delete error: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete notice.")
    return {"success": True, "message": "Notice deleted successfully.", "file_removed": file_removed}


@student_router.get("", response_model=NoticeListResponse)
def student_notices(class_name: str = Query(...), db: Session = Depends(get_db)):
    return {"class_name": class_name, "notices": service.list_notices(db, class_name)}

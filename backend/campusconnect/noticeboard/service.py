import logging
import uuid
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campusconnect.config.settings import settings
from campusconnect.models import Notice
from campusconnect.noticeboard.schemas import NoticeCreate
from campusconnect.storage.schemas import Attachment
from campusconnect.storage.service import ObjectStorage, StorageError

logger = logging.getLogger(__name__)


def attachment_type(attachment: Attachment) -> str:
    return "image" if "image" in (attachment.content_type or "") else "pdf"


def upload_attachment(storage: ObjectStorage, attachment: Attachment) -> Tuple[str, str]:
    """Store a notice attachment under a random name; returns (public URL, file type)."""
    path = f"notices/{uuid.uuid4()}.{attachment.extension or 'bin'}"
    storage.upload(settings.NOTICES_BUCKET, path, attachment.content, attachment.content_type)
    return storage.get_public_url(settings.NOTICES_BUCKET, path), attachment_type(attachment)


def create_notice(db: Session, notice: NoticeCreate, file_url: Optional[str], file_type: Optional[str]) -> Notice:
    db_notice = Notice(
        class_name=notice.class_name,
        date=notice.date,
        notice=notice.notice or "",
        file_url=file_url,
        file_type=file_type,
    )
    db.add(db_notice)
    db.commit()
    db.refresh(db_notice)
    return db_notice


def list_notices(db: Session, class_name: str) -> List[Notice]:
    try:
        return (
            db.query(Notice)
            .filter(Notice.class_name == class_name)
            .order_by(Notice.date.desc(), Notice.id.desc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error fetching notices: {e}")
        return []


def remove_attachment(storage: ObjectStorage, file_url: Optional[str]) -> bool:
    """Best effort: a storage failure is logged and the notice is still deleted."""
    if not file_url:
        return False
    path = storage.path_from_public_url(settings.NOTICES_BUCKET, file_url)
    if path is None:
        logger.warning(f"Attachment URL is outside the notices bucket, not removing: {file_url}")
        return False
    try:
        return bool(storage.remove(settings.NOTICES_BUCKET, [path]))
    except StorageError as e:
        logger.error(f"Storage delete error: {e}")
        return False


def delete_notice(db: Session, db_notice: Notice) -> None:
    db.delete(db_notice)
    db.commit()

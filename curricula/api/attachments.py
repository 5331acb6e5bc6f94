"""讲义附件 API。删除记录时不删除磁盘文件。"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from curricula.access import Action, Principal, authorize, require_role
from curricula.config import Settings
from curricula.dependencies import get_current_principal, get_db, get_settings
from curricula.errors import NotFound, ValidationFailed
from curricula.models import Attachment, Lecture, Role
from curricula.schemas.base import MessageResponse
from curricula.schemas.responses import AttachmentOut
from curricula.utils.storage import store_upload

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=AttachmentOut, status_code=status.HTTP_201_CREATED)
async def create_attachment(
    title: Optional[str] = Form(None),
    lecture_id: Optional[str] = Form(None, alias="lectureId"),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(get_current_principal),
):
    """为讲义追加附件（教师权限）。"""
    require_role(principal, Role.TEACHER, "Only teachers can add attachments")
    if not title or not lecture_id or file is None:
        raise ValidationFailed("Missing required fields")

    lecture = db.get(Lecture, lecture_id)
    if lecture is None:
        raise NotFound("Lecture not found")
    authorize(db, principal, lecture, Action.MUTATE)

    file_url = await store_upload(file, settings, "attachments")
    attachment = Attachment(title=title, file_url=file_url, lecture_id=lecture.id)
    db.add(attachment)
    db.commit()
    db.refresh(attachment)
    logger.info("Attachment %s added to lecture %s", attachment.id, lecture.id)
    return attachment


@router.delete("", response_model=MessageResponse)
def delete_attachment(
    attachment_id: Optional[str] = Query(None, alias="id"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    require_role(principal, Role.TEACHER, "Only teachers can delete attachments")
    if not attachment_id:
        raise ValidationFailed("Attachment ID is required")
    attachment = db.get(Attachment, attachment_id)
    if attachment is None:
        raise NotFound("Attachment not found")
    authorize(db, principal, attachment, Action.MUTATE)
    db.delete(attachment)
    db.commit()
    logger.info("Attachment %s deleted", attachment_id)
    return {"message": "Attachment deleted successfully"}

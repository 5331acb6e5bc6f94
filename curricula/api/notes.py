"""课程公告 API。"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from curricula.access import Action, Principal, authorize, require_role
from curricula.dependencies import get_current_principal, get_db
from curricula.errors import NotFound, ValidationFailed
from curricula.models import Curriculum, Note, Role
from curricula.schemas.base import CamelModel, MessageResponse
from curricula.schemas.responses import NoteOut
from curricula.services import content

logger = logging.getLogger(__name__)

router = APIRouter()


# === Schemas ===

class NoteCreate(CamelModel):
    content: Optional[str] = None
    expiry_date: Optional[datetime] = None
    curriculum_id: Optional[str] = None


# === API 端点 ===

@router.post("", response_model=NoteOut, status_code=status.HTTP_201_CREATED)
def create_note(
    data: NoteCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """发布公告；``expiryDate`` 为空表示长期有效。"""
    require_role(principal, Role.TEACHER, "Only teachers can create notes")
    if not data.content or not data.curriculum_id:
        raise ValidationFailed("Missing required fields")

    curriculum = db.get(Curriculum, data.curriculum_id)
    if curriculum is None:
        raise NotFound("Curriculum not found")
    authorize(db, principal, curriculum, Action.MUTATE)

    note = Note(content=data.content, expiry_date=data.expiry_date, curriculum_id=curriculum.id)
    db.add(note)
    db.commit()
    db.refresh(note)
    logger.info("Note %s created in curriculum %s", note.id, curriculum.id)
    return note


@router.get("", response_model=List[NoteOut])
def list_notes(
    curriculum_id: Optional[str] = Query(None, alias="curriculumId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    if not curriculum_id:
        raise ValidationFailed("Curriculum ID is required")
    curriculum = db.get(Curriculum, curriculum_id)
    if curriculum is None:
        raise NotFound("Curriculum not found")
    authorize(db, principal, curriculum, Action.READ)
    return content.active_notes(db, curriculum.id)


@router.delete("", response_model=MessageResponse)
def delete_note(
    note_id: Optional[str] = Query(None, alias="id"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    require_role(principal, Role.TEACHER, "Only teachers can delete notes")
    if not note_id:
        raise ValidationFailed("Note ID is required")
    note = db.get(Note, note_id)
    if note is None:
        raise NotFound("Note not found")
    authorize(db, principal, note, Action.MUTATE)
    db.delete(note)
    db.commit()
    logger.info("Note %s deleted", note_id)
    return {"message": "Note deleted successfully"}

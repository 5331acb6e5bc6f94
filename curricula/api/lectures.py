"""讲义 API：上传、按课程/周次查询、阅读记录、删除。"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from curricula.access import Action, Principal, authorize, require_role
from curricula.config import Settings
from curricula.dependencies import get_current_principal, get_db, get_settings
from curricula.errors import NotFound, ValidationFailed
from curricula.models import Curriculum, Lecture, Role
from curricula.schemas.base import MessageResponse
from curricula.schemas.responses import LectureDetail, LectureOut
from curricula.services import content
from curricula.utils.storage import store_upload

logger = logging.getLogger(__name__)

router = APIRouter()


# === Helpers ===

def parse_week_number(raw: Optional[str]) -> int:
    """缺省、无法解析或小于 1 时按第 1 周处理。"""
    try:
        week = int(raw) if raw is not None else 1
    except ValueError:
        return 1
    return week if week >= 1 else 1


def lecture_views(db: Session, principal: Principal, lectures: List[Lecture]) -> List[LectureDetail]:
    """转换为响应模型；学生视图附带 ``isRead``。"""
    read_ids = None
    if principal.role == Role.STUDENT and principal.student_id:
        read_ids = content.read_lecture_ids(db, principal.student_id, [l.id for l in lectures])
    views = []
    for lecture in lectures:
        view = LectureDetail.model_validate(lecture)
        if read_ids is not None:
            view.is_read = lecture.id in read_ids
        views.append(view)
    return views


def get_lecture_or_404(db: Session, lecture_id: str) -> Lecture:
    lecture = db.get(Lecture, lecture_id)
    if lecture is None:
        raise NotFound("Lecture not found")
    return lecture


# === API 端点 ===

@router.post("", response_model=LectureOut, status_code=status.HTTP_201_CREATED)
async def create_lecture(
    title: Optional[str] = Form(None),
    week_number: Optional[str] = Form(None, alias="weekNumber"),
    curriculum_id: Optional[str] = Form(None, alias="curriculumId"),
    pdf_file: Optional[UploadFile] = File(None, alias="pdfFile"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(get_current_principal),
):
    """上传讲义 PDF（教师权限），同时生成一条附件记录。"""
    require_role(principal, Role.TEACHER, "Only teachers can create lectures")
    if not title or not curriculum_id or pdf_file is None:
        raise ValidationFailed("Missing required fields")

    curriculum = db.get(Curriculum, curriculum_id)
    if curriculum is None:
        raise NotFound("Curriculum not found")
    authorize(db, principal, curriculum, Action.MUTATE)

    file_url = await store_upload(pdf_file, settings, "lectures", suffix=".pdf")
    return content.create_lecture_with_attachment(
        db, curriculum.id, title, parse_week_number(week_number), file_url
    )


@router.get("", response_model=List[LectureDetail])
def list_lectures(
    curriculum_id: Optional[str] = Query(None, alias="curriculumId"),
    week_number: Optional[int] = Query(None, alias="weekNumber"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """按课程（及可选周次）列出讲义，含作业与附件。"""
    if not curriculum_id:
        raise ValidationFailed("Curriculum ID is required")
    curriculum = db.get(Curriculum, curriculum_id)
    if curriculum is None:
        raise NotFound("Curriculum not found")
    authorize(db, principal, curriculum, Action.READ)
    lectures = content.list_lectures(db, curriculum.id, week_number)
    return lecture_views(db, principal, lectures)


@router.get("/{lecture_id}", response_model=LectureDetail)
def get_lecture(
    lecture_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """讲义详情；学生首次打开时记录已读。"""
    lecture = get_lecture_or_404(db, lecture_id)
    authorize(db, principal, lecture, Action.READ)
    if principal.role == Role.STUDENT:
        content.mark_read(db, principal.student_id, lecture.id)
    return lecture_views(db, principal, [lecture])[0]


@router.delete("/{lecture_id}", response_model=MessageResponse)
def delete_lecture(
    lecture_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    require_role(principal, Role.TEACHER, "Only teachers can delete lectures")
    lecture = get_lecture_or_404(db, lecture_id)
    authorize(db, principal, lecture, Action.MUTATE)
    db.delete(lecture)
    db.commit()
    logger.info("Lecture %s deleted", lecture_id)
    return {"message": "Lecture deleted successfully"}

"""课程 CRUD、邀请码加入与学生名单 API。"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from curricula.access import Action, Principal, authorize, require_role
from curricula.config import Settings
from curricula.dependencies import get_current_principal, get_db, get_settings
from curricula.errors import Forbidden, NotFound, ValidationFailed
from curricula.models import Curriculum, Role
from curricula.schemas.base import CamelModel, MessageResponse
from curricula.schemas.responses import (
    CurriculumDetail,
    CurriculumListItem,
    CurriculumOut,
    NoteOut,
    TeacherBrief,
)
from curricula.services import content, curriculums, enrollment
from curricula.api.lectures import lecture_views

router = APIRouter()


# === Schemas ===

class CurriculumCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None


class CurriculumUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None


class JoinRequest(CamelModel):
    code: Optional[str] = None
    student_id: Optional[str] = None


class JoinResponse(CamelModel):
    message: str
    curriculum_id: str


class EnrolledStudent(CamelModel):
    student_id: str
    name: str
    email: str
    program: Optional[str] = None
    enrolled_at: datetime


class EnrolledCurriculum(CurriculumOut):
    enrolled_at: datetime
    teacher_name: Optional[str] = None


# === Helpers ===

def get_curriculum_or_404(db: Session, curriculum_id: str) -> Curriculum:
    curriculum = db.get(Curriculum, curriculum_id)
    if curriculum is None:
        raise NotFound("Curriculum not found")
    return curriculum


def to_list_item(summary: curriculums.CurriculumSummary) -> CurriculumListItem:
    item = CurriculumListItem.model_validate(summary.curriculum)
    item.teacher_name = summary.curriculum.teacher.user.name
    item.lecture_count = summary.lecture_count
    item.enrollment_count = summary.enrollment_count
    return item


# === API 端点 ===

@router.post("", response_model=CurriculumOut, status_code=status.HTTP_201_CREATED)
def create_curriculum(
    data: CurriculumCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(get_current_principal),
):
    """创建课程（教师权限），自动分配唯一邀请码。"""
    require_role(principal, Role.TEACHER, "Only teachers can create curriculums")
    if not data.title:
        raise ValidationFailed("Title is required")
    return curriculums.create_curriculum(db, principal, settings, data.title, data.description)


@router.get("", response_model=List[CurriculumListItem])
def list_curriculums(
    teacher_id: Optional[str] = Query(None, alias="teacherId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """课程列表：教师只看自己的课程，学生只看已加入的课程。"""
    if principal.role == Role.TEACHER:
        if teacher_id and teacher_id != principal.teacher_id:
            raise Forbidden("Unauthorized")
        summaries = curriculums.list_curriculums(db, teacher_id=principal.teacher_id)
    else:
        summaries = curriculums.list_curriculums(
            db, teacher_id=teacher_id, student_id=principal.student_id
        )
    return [to_list_item(s) for s in summaries]


@router.post("/join", response_model=JoinResponse)
def join_curriculum(
    data: JoinRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """学生凭邀请码加入课程。"""
    require_role(principal, Role.STUDENT, "Only students can join curriculums")
    if not data.code:
        raise ValidationFailed("Missing required fields")
    if data.student_id is not None and data.student_id != principal.student_id:
        raise Forbidden("Unauthorized")
    record = enrollment.join_by_code(db, principal, data.code)
    return {"message": "Successfully joined curriculum", "curriculum_id": record.curriculum_id}


@router.get("/enrolled", response_model=List[EnrolledCurriculum])
def list_enrolled(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """当前学生已加入的课程，最近加入的在前。"""
    require_role(principal, Role.STUDENT, "Only students have enrollments")
    result = []
    for record in enrollment.list_enrolled(db, principal.student_id):
        item = EnrolledCurriculum.model_validate(
            {
                **CurriculumOut.model_validate(record.curriculum).model_dump(),
                "enrolled_at": record.enrolled_at,
                "teacher_name": record.curriculum.teacher.user.name,
            }
        )
        result.append(item)
    return result


@router.get("/{curriculum_id}", response_model=CurriculumDetail)
def get_curriculum(
    curriculum_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """课程详情：讲义（按周升序）、有效公告、选课人数。"""
    curriculum = get_curriculum_or_404(db, curriculum_id)
    authorize(db, principal, curriculum, Action.READ)

    detail = CurriculumDetail.model_validate(
        {
            **CurriculumOut.model_validate(curriculum).model_dump(),
            "teacher": TeacherBrief(
                id=curriculum.teacher.id,
                name=curriculum.teacher.user.name,
                email=curriculum.teacher.user.email,
            ),
        }
    )
    detail.lectures = lecture_views(db, principal, content.list_lectures(db, curriculum.id))
    detail.notes = [NoteOut.model_validate(n) for n in content.active_notes(db, curriculum.id)]
    detail.enrollment_count = curriculums.count_enrollments(db, curriculum.id)
    return detail


@router.patch("/{curriculum_id}", response_model=CurriculumOut)
def update_curriculum(
    curriculum_id: str,
    data: CurriculumUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """部分更新课程（仅课程所属教师）。"""
    require_role(principal, Role.TEACHER, "Only teachers can update curriculums")
    curriculum = get_curriculum_or_404(db, curriculum_id)
    authorize(db, principal, curriculum, Action.MUTATE)
    return curriculums.update_curriculum(db, curriculum, data.model_dump(exclude_unset=True))


@router.delete("/{curriculum_id}", response_model=MessageResponse)
def delete_curriculum(
    curriculum_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    require_role(principal, Role.TEACHER, "Only teachers can delete curriculums")
    curriculum = get_curriculum_or_404(db, curriculum_id)
    authorize(db, principal, curriculum, Action.MUTATE)
    curriculums.delete_curriculum(db, curriculum)
    return {"message": "Curriculum deleted successfully"}


@router.get("/{curriculum_id}/students", response_model=List[EnrolledStudent])
def list_students(
    curriculum_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """课程学生名单（仅课程所属教师）。"""
    curriculum = get_curriculum_or_404(db, curriculum_id)
    authorize(db, principal, curriculum, Action.MUTATE)
    return [
        EnrolledStudent(
            student_id=record.student_id,
            name=record.student.user.name,
            email=record.student.user.email,
            program=record.student.program,
            enrolled_at=record.enrolled_at,
        )
        for record in curriculums.list_students(db, curriculum.id)
    ]

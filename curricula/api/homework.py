"""作业 API：创建、详情、修改、删除。"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from curricula.access import Action, Principal, authorize, require_role
from curricula.dependencies import get_current_principal, get_db
from curricula.errors import NotFound, ValidationFailed
from curricula.models import Homework, Lecture, Role
from curricula.schemas.base import CamelModel
from curricula.schemas.responses import HomeworkOut, McqQuestionOut, SubmissionOut
from curricula.services import homework as homework_service
from curricula.services.submissions import find_submission

logger = logging.getLogger(__name__)

router = APIRouter()


# === Schemas ===

class McqQuestionIn(CamelModel):
    question: Optional[str] = None
    options: Optional[List[str]] = None
    correct_option: Optional[int] = None


class HomeworkCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    type: Optional[str] = None
    lecture_id: Optional[str] = None
    mcq_questions: Optional[List[McqQuestionIn]] = None


class HomeworkUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    type: Optional[str] = None


class HomeworkDetail(HomeworkOut):
    mcq_questions: List[McqQuestionOut] = []
    # 教师视图
    submissions: Optional[List[SubmissionOut]] = None
    # 学生视图
    submission: Optional[SubmissionOut] = None
    completed: Optional[bool] = None
    grade: Optional[float] = None


class DeleteResponse(CamelModel):
    success: bool
    message: str


# === Helpers ===

def get_homework_or_404(db: Session, homework_id: str) -> Homework:
    homework = db.get(Homework, homework_id)
    if homework is None:
        raise NotFound("Homework not found")
    return homework


# === API 端点 ===

@router.post("", response_model=HomeworkDetail, status_code=status.HTTP_201_CREATED)
def create_homework(
    data: HomeworkCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """布置作业（教师权限）；选择题可同时提交题目。"""
    require_role(principal, Role.TEACHER, "Only teachers can create homework")
    if not data.title or not data.type or not data.lecture_id:
        raise ValidationFailed("Missing required fields")
    homework_type = homework_service.parse_homework_type(data.type)

    lecture = db.get(Lecture, data.lecture_id)
    if lecture is None:
        raise NotFound("Lecture not found")
    authorize(db, principal, lecture, Action.MUTATE)

    return homework_service.create_homework(
        db,
        lecture_id=lecture.id,
        title=data.title,
        homework_type=homework_type,
        description=data.description or None,
        due_date=data.due_date,
        questions=data.mcq_questions or [],
    )


@router.get("/{homework_id}", response_model=HomeworkDetail)
def get_homework(
    homework_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """作业详情。

    教师看到全部提交；学生只看到自己的提交，且不返回选择题答案。
    """
    homework = get_homework_or_404(db, homework_id)
    authorize(db, principal, homework, Action.READ)

    detail = HomeworkDetail.model_validate(
        {
            **HomeworkOut.model_validate(homework).model_dump(),
            "mcq_questions": [McqQuestionOut.model_validate(q) for q in homework.mcq_questions],
        }
    )
    if principal.role == Role.TEACHER:
        detail.submissions = [SubmissionOut.model_validate(s) for s in homework.submissions]
        return detail

    for question in detail.mcq_questions:
        question.correct_option = None
    submission = find_submission(db, principal.student_id, homework.id)
    detail.completed = submission is not None
    if submission is not None:
        detail.submission = SubmissionOut.model_validate(submission)
        detail.grade = submission.grade
    return detail


@router.patch("/{homework_id}", response_model=HomeworkOut)
def update_homework(
    homework_id: str,
    data: HomeworkUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    require_role(principal, Role.TEACHER, "Only teachers can update homework")
    homework = get_homework_or_404(db, homework_id)
    authorize(db, principal, homework, Action.MUTATE)
    return homework_service.update_homework(db, homework, data.model_dump(exclude_unset=True))


@router.delete("/{homework_id}", response_model=DeleteResponse)
def delete_homework(
    homework_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """删除作业，提交记录随之级联删除。"""
    require_role(principal, Role.TEACHER, "Only teachers can delete homework")
    homework = get_homework_or_404(db, homework_id)
    authorize(db, principal, homework, Action.MUTATE, "You can only delete your own homework assignments")
    db.delete(homework)
    db.commit()
    logger.info("Homework %s deleted", homework_id)
    return {"success": True, "message": "Homework deleted successfully"}

"""作业提交 API：上传 PDF、查看、评分。"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from curricula.access import Action, Principal, authorize, require_role
from curricula.config import Settings
from curricula.dependencies import get_current_principal, get_db, get_settings
from curricula.errors import Conflict, Forbidden, NotFound, ValidationFailed
from curricula.models import Homework, HomeworkSubmission, Role
from curricula.schemas.base import CamelModel
from curricula.schemas.responses import SubmissionOut
from curricula.services import submissions as submission_service
from curricula.utils.storage import is_pdf, remove_upload, store_upload

logger = logging.getLogger(__name__)

router = APIRouter()


# === Schemas ===

class GradeRequest(CamelModel):
    grade: Any = None
    feedback: Optional[str] = None


class SubmissionResponse(CamelModel):
    success: bool
    message: str
    submission: SubmissionOut


# === Helpers ===

def get_submission_or_404(db: Session, submission_id: str) -> HomeworkSubmission:
    submission = db.get(HomeworkSubmission, submission_id)
    if submission is None:
        raise NotFound("Submission not found")
    return submission


# === API 端点 ===

@router.post("", response_model=SubmissionResponse)
async def submit_homework(
    homework_id: Optional[str] = Form(None, alias="homeworkId"),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(get_current_principal),
):
    """提交作业 PDF。截止前可重复提交，覆盖同一条记录。

    所有校验通过后才写文件和数据库。
    """
    require_role(principal, Role.STUDENT, "Only students can submit homework")
    if not homework_id:
        raise ValidationFailed("Homework ID is required")
    if file is None:
        raise ValidationFailed("PDF file is required")
    if not is_pdf(file):
        raise ValidationFailed("Only PDF files are accepted")

    homework = db.get(Homework, homework_id)
    if homework is None:
        raise NotFound("Homework not found")
    submission_service.ensure_can_submit(db, principal, homework)

    file_url = await store_upload(file, settings, "submissions", suffix=".pdf")
    try:
        submission, _ = submission_service.record_file_submission(db, principal, homework, file_url)
    except Conflict:
        remove_upload(file_url, settings)
        raise
    return {
        "success": True,
        "message": "Homework submitted successfully",
        "submission": SubmissionOut.model_validate(submission),
    }


@router.get("/{submission_id}", response_model=SubmissionOut)
def get_submission(
    submission_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """提交者本人或课程所属教师可查看。"""
    submission = get_submission_or_404(db, submission_id)
    if principal.role == Role.STUDENT:
        if submission.student_id != principal.student_id:
            raise Forbidden("Unauthorized")
    else:
        authorize(db, principal, submission, Action.READ)
    return submission


@router.patch("/{submission_id}/grade", response_model=SubmissionResponse)
def grade_submission(
    submission_id: str,
    data: GradeRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """评分：``grade`` 必填，null 表示清空分数。不受截止时间限制。"""
    require_role(principal, Role.TEACHER, "Only teachers can grade submissions")
    submission = get_submission_or_404(db, submission_id)
    if "grade" not in data.model_fields_set:
        raise ValidationFailed("Missing required fields")
    submission = submission_service.grade_submission(
        db, principal, submission, data.grade, data.feedback
    )
    return {
        "success": True,
        "message": "Submission graded successfully",
        "submission": SubmissionOut.model_validate(submission),
    }

"""作业提交与评分。

每个 (学生, 作业) 的状态流转：
    未提交 -> 已提交（截止前首次上传）
    已提交 -> 已提交（截止前重新提交，原地覆盖文件/内容/时间）
    已提交 -> 已评分（教师给出 0-100 的分数，可清空回未评分）
截止时间只限制提交，不限制评分。
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from curricula.access import Action, Principal, authorize, require_role
from curricula.db import utcnow
from curricula.errors import Conflict, ValidationFailed
from curricula.models import Homework, HomeworkSubmission, Role

logger = logging.getLogger(__name__)

GRADE_ERROR = "Grade must be a number between 0 and 100"
PAST_DUE_ERROR = "The due date for this homework has passed"


def ensure_can_submit(
    db: Session, principal: Principal, homework: Homework, now: Optional[datetime] = None
) -> None:
    """提交前的全部校验，在写文件和写库之前调用。"""
    require_role(principal, Role.STUDENT, "Only students can submit homework")
    authorize(db, principal, homework, Action.SUBMIT, "You are not enrolled in this curriculum")
    if homework.is_past_due(now or utcnow()):
        raise ValidationFailed(PAST_DUE_ERROR)


def find_submission(db: Session, student_id: str, homework_id: str) -> HomeworkSubmission | None:
    stmt = select(HomeworkSubmission).where(
        HomeworkSubmission.student_id == student_id,
        HomeworkSubmission.homework_id == homework_id,
    )
    return db.execute(stmt).scalar_one_or_none()


def record_file_submission(
    db: Session,
    principal: Principal,
    homework: Homework,
    file_url: str,
    now: Optional[datetime] = None,
) -> tuple[HomeworkSubmission, bool]:
    """创建或覆盖提交，返回 (提交, 是否新建)。已有的分数与评语保留。"""
    now = now or utcnow()
    submission = find_submission(db, principal.student_id, homework.id)
    created = submission is None
    if created:
        submission = HomeworkSubmission(
            student_id=principal.student_id,
            homework_id=homework.id,
            file_url=file_url,
            content=None,
            submitted_at=now,
        )
        db.add(submission)
    else:
        submission.file_url = file_url
        submission.content = None
        submission.submitted_at = now

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict("A submission for this homework is already being saved") from exc
    db.refresh(submission)
    logger.info(
        "Submission %s %s for homework %s",
        submission.id,
        "created" if created else "overwritten",
        homework.id,
    )
    return submission, created


def parse_grade(value: Any) -> Optional[float]:
    """null 表示未评分；其余必须是 [0, 100] 内的数字或数字字符串。"""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationFailed(GRADE_ERROR)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError as exc:
            raise ValidationFailed(GRADE_ERROR) from exc
    else:
        raise ValidationFailed(GRADE_ERROR)
    if math.isnan(number) or number < 0 or number > 100:
        raise ValidationFailed(GRADE_ERROR)
    return number


def grade_submission(
    db: Session,
    principal: Principal,
    submission: HomeworkSubmission,
    grade: Any,
    feedback: Optional[str] = None,
) -> HomeworkSubmission:
    require_role(principal, Role.TEACHER, "Only teachers can grade submissions")
    authorize(
        db,
        principal,
        submission,
        Action.GRADE,
        "You can only grade submissions for your own curriculums",
    )
    value = parse_grade(grade)
    submission.grade = value
    submission.feedback = feedback or None
    db.commit()
    db.refresh(submission)
    logger.info("Submission %s graded: %s", submission.id, value)
    return submission

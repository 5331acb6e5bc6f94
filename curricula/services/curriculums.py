"""课程的创建、查询、更新与删除。"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from curricula.access import Principal
from curricula.config import Settings
from curricula.errors import Conflict
from curricula.models import Curriculum, Enrollment, Lecture, TeacherProfile
from curricula.services.join_codes import allocate_unique_code

logger = logging.getLogger(__name__)


@dataclass
class CurriculumSummary:
    curriculum: Curriculum
    lecture_count: int
    enrollment_count: int


def create_curriculum(
    db: Session,
    principal: Principal,
    settings: Settings,
    title: str,
    description: Optional[str] = None,
) -> Curriculum:
    code = allocate_unique_code(
        db, length=settings.join_code_length, max_attempts=settings.join_code_max_attempts
    )
    curriculum = Curriculum(
        title=title,
        description=description or None,
        unique_code=code,
        teacher_id=principal.teacher_id,
    )
    db.add(curriculum)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Join code %s lost an insert race", code)
        raise Conflict("Join code collision, please retry") from exc
    db.refresh(curriculum)
    logger.info("Curriculum %s created by teacher %s", curriculum.id, principal.teacher_id)
    return curriculum


def update_curriculum(db: Session, curriculum: Curriculum, changes: dict[str, Any]) -> Curriculum:
    """部分更新：未出现的字段保持不变。

    ``title`` 为空时忽略；``description`` 显式为 null 时清空，空字符串照常保存。
    """
    if changes.get("title"):
        curriculum.title = changes["title"]
    if "description" in changes:
        curriculum.description = changes["description"]
    db.commit()
    db.refresh(curriculum)
    return curriculum


def delete_curriculum(db: Session, curriculum: Curriculum) -> None:
    # 讲义、公告、选课、附件、作业、提交由外键级联删除
    curriculum_id = curriculum.id
    db.delete(curriculum)
    db.commit()
    logger.info("Curriculum %s deleted", curriculum_id)


def list_curriculums(
    db: Session, teacher_id: Optional[str] = None, student_id: Optional[str] = None
) -> list[CurriculumSummary]:
    """带讲义数与选课人数的课程列表；给出 ``student_id`` 时只含该学生已选的课程。"""
    lecture_count = (
        select(func.count(Lecture.id))
        .where(Lecture.curriculum_id == Curriculum.id)
        .scalar_subquery()
    )
    enrollment_count = (
        select(func.count(Enrollment.id))
        .where(Enrollment.curriculum_id == Curriculum.id)
        .scalar_subquery()
    )
    stmt = (
        select(Curriculum, lecture_count, enrollment_count)
        .options(joinedload(Curriculum.teacher).joinedload(TeacherProfile.user))
        .order_by(Curriculum.updated_at.desc())
    )
    if teacher_id:
        stmt = stmt.where(Curriculum.teacher_id == teacher_id)
    if student_id:
        enrolled = select(Enrollment.curriculum_id).where(Enrollment.student_id == student_id)
        stmt = stmt.where(Curriculum.id.in_(enrolled))
    return [
        CurriculumSummary(curriculum=row[0], lecture_count=row[1], enrollment_count=row[2])
        for row in db.execute(stmt).all()
    ]


def count_enrollments(db: Session, curriculum_id: str) -> int:
    stmt = select(func.count(Enrollment.id)).where(Enrollment.curriculum_id == curriculum_id)
    return db.execute(stmt).scalar_one()


def list_students(db: Session, curriculum_id: str) -> list[Enrollment]:
    stmt = (
        select(Enrollment)
        .where(Enrollment.curriculum_id == curriculum_id)
        .order_by(Enrollment.enrolled_at.asc())
    )
    return list(db.execute(stmt).scalars().all())

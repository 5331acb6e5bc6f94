"""学生通过邀请码加入课程。"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from curricula.access import Principal
from curricula.errors import Conflict, NotFound
from curricula.models import Curriculum, Enrollment
from curricula.services.join_codes import normalize_code

logger = logging.getLogger(__name__)

ALREADY_ENROLLED = "Already enrolled in this curriculum"


def find_by_code(db: Session, code: str) -> Curriculum | None:
    stmt = select(Curriculum).where(Curriculum.unique_code == normalize_code(code))
    return db.execute(stmt).scalar_one_or_none()


def already_enrolled(db: Session, student_id: str, curriculum_id: str) -> bool:
    stmt = select(Enrollment.id).where(
        Enrollment.student_id == student_id, Enrollment.curriculum_id == curriculum_id
    )
    return db.execute(stmt).first() is not None


def join_by_code(db: Session, principal: Principal, code: str) -> Enrollment:
    """同一学生对同一课程至多一条选课记录，重复加入返回 Conflict。"""
    curriculum = find_by_code(db, code)
    if curriculum is None:
        raise NotFound("Curriculum not found")

    if already_enrolled(db, principal.student_id, curriculum.id):
        raise Conflict(ALREADY_ENROLLED)

    enrollment = Enrollment(student_id=principal.student_id, curriculum_id=curriculum.id)
    db.add(enrollment)
    try:
        db.commit()
    except IntegrityError as exc:
        # 并发请求先插入成功
        db.rollback()
        raise Conflict(ALREADY_ENROLLED) from exc
    db.refresh(enrollment)
    logger.info("Student %s joined curriculum %s", principal.student_id, curriculum.id)
    return enrollment


def list_enrolled(db: Session, student_id: str) -> list[Enrollment]:
    stmt = (
        select(Enrollment)
        .options(joinedload(Enrollment.curriculum))
        .where(Enrollment.student_id == student_id)
        .order_by(Enrollment.enrolled_at.desc())
    )
    return list(db.execute(stmt).scalars().all())

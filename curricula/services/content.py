"""讲义、附件、公告的查询与阅读记录。"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from curricula.db import utcnow
from curricula.models import Attachment, Enrollment, Lecture, Note, ReadLecture

logger = logging.getLogger(__name__)


def create_lecture_with_attachment(
    db: Session, curriculum_id: str, title: str, week_number: int, file_url: str
) -> Lecture:
    """新建讲义，并为同一文件建一条附件记录，两者同一事务提交。"""
    lecture = Lecture(
        title=title,
        week_number=week_number,
        content=file_url,
        curriculum_id=curriculum_id,
    )
    lecture.attachments.append(Attachment(title=f"{title} PDF", file_url=file_url))
    db.add(lecture)
    db.commit()
    db.refresh(lecture)
    logger.info("Lecture %s created in curriculum %s", lecture.id, curriculum_id)
    return lecture


def list_lectures(
    db: Session, curriculum_id: str, week_number: Optional[int] = None
) -> list[Lecture]:
    stmt = (
        select(Lecture)
        .options(selectinload(Lecture.homeworks), selectinload(Lecture.attachments))
        .where(Lecture.curriculum_id == curriculum_id)
        .order_by(Lecture.week_number.asc(), Lecture.created_at.asc())
    )
    if week_number is not None:
        stmt = stmt.where(Lecture.week_number == week_number)
    return list(db.execute(stmt).scalars().all())


def read_lecture_ids(db: Session, student_id: str, lecture_ids: Iterable[str]) -> set[str]:
    ids = list(lecture_ids)
    if not ids:
        return set()
    stmt = select(ReadLecture.lecture_id).where(
        ReadLecture.student_id == student_id, ReadLecture.lecture_id.in_(ids)
    )
    return set(db.execute(stmt).scalars().all())


def has_read(db: Session, student_id: str, lecture_id: str) -> bool:
    stmt = select(ReadLecture.id).where(
        ReadLecture.student_id == student_id, ReadLecture.lecture_id == lecture_id
    )
    return db.execute(stmt).first() is not None


def mark_read(db: Session, student_id: str, lecture_id: str) -> bool:
    """记录学生已读，返回是否为首次阅读。重复插入视为已读。"""
    if has_read(db, student_id, lecture_id):
        return False
    db.add(ReadLecture(student_id=student_id, lecture_id=lecture_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return False
    return True


def active_notes(db: Session, curriculum_id: str, now: Optional[datetime] = None) -> list[Note]:
    """未过期的公告，按创建时间倒序。"""
    now = now or utcnow()
    stmt = (
        select(Note)
        .where(
            Note.curriculum_id == curriculum_id,
            or_(Note.expiry_date.is_(None), Note.expiry_date > now),
        )
        .order_by(Note.created_at.desc())
    )
    return list(db.execute(stmt).scalars().all())


def lectures_for_week(db: Session, student_id: str, week_number: int) -> list[Lecture]:
    """学生已选课程中指定周次的讲义。"""
    stmt = (
        select(Lecture)
        .join(Enrollment, Enrollment.curriculum_id == Lecture.curriculum_id)
        .options(selectinload(Lecture.curriculum))
        .where(Enrollment.student_id == student_id, Lecture.week_number == week_number)
        .order_by(Lecture.created_at.asc())
    )
    return list(db.execute(stmt).scalars().all())

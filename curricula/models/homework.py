"""作业、选择题与提交模型定义。"""

from datetime import datetime
from typing import TYPE_CHECKING, Dict, List, Optional

from sqlalchemy import Enum, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import JSON

from curricula.db import Base, UTCDateTime, new_id, utcnow
from curricula.models.enums import HomeworkType, SubmissionStatus

if TYPE_CHECKING:
    from curricula.models.lecture import Lecture
    from curricula.models.user import StudentProfile


class Homework(Base):
    """挂在讲义下的作业。

    ``due_date`` 为空表示不限期；提交时按当前 UTC 时间校验。
    """

    __tablename__ = "homeworks"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    due_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime)
    type: Mapped[HomeworkType] = mapped_column(Enum(HomeworkType), nullable=False)
    lecture_id: Mapped[str] = mapped_column(
        ForeignKey("lectures.id", ondelete="CASCADE"), nullable=False, index=True
    )

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    lecture: Mapped["Lecture"] = relationship(back_populates="homeworks")
    mcq_questions: Mapped[List["McqQuestion"]] = relationship(
        back_populates="homework", cascade="all, delete-orphan", passive_deletes=True
    )
    submissions: Mapped[List["HomeworkSubmission"]] = relationship(
        back_populates="homework", cascade="all, delete-orphan", passive_deletes=True
    )

    def is_past_due(self, now: datetime) -> bool:
        return self.due_date is not None and now > self.due_date

    def __repr__(self) -> str:
        return f"<Homework(id={self.id}, type={self.type.value}, title={self.title})>"


class McqQuestion(Base):
    """选择题题目。

    ``options`` 格式: ["A 选项", "B 选项", ...]；``correct_option`` 为下标。
    """

    __tablename__ = "mcq_questions"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    correct_option: Mapped[int] = mapped_column(Integer, nullable=False)
    homework_id: Mapped[str] = mapped_column(
        ForeignKey("homeworks.id", ondelete="CASCADE"), nullable=False, index=True
    )

    homework: Mapped[Homework] = relationship(back_populates="mcq_questions")


class HomeworkSubmission(Base):
    """学生对某份作业的唯一一份当前提交。

    重新提交时原地覆盖 ``file_url``/``content``/``submitted_at``，不新增行。
    """

    __tablename__ = "homework_submissions"
    __table_args__ = (
        UniqueConstraint("student_id", "homework_id", name="uq_submission_student_homework"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    student_id: Mapped[str] = mapped_column(
        ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False
    )
    homework_id: Mapped[str] = mapped_column(
        ForeignKey("homeworks.id", ondelete="CASCADE"), nullable=False, index=True
    )

    content: Mapped[Optional[str]] = mapped_column(Text)
    file_url: Mapped[Optional[str]] = mapped_column(String(512))
    # 格式: {"<question_id>": 2}
    mcq_answers: Mapped[Optional[Dict[str, int]]] = mapped_column(JSON)

    grade: Mapped[Optional[float]] = mapped_column(Float)  # 0-100，空表示未评分
    feedback: Mapped[Optional[str]] = mapped_column(Text)

    submitted_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    student: Mapped["StudentProfile"] = relationship(back_populates="submissions")
    homework: Mapped[Homework] = relationship(back_populates="submissions")

    @property
    def status(self) -> SubmissionStatus:
        return SubmissionStatus.GRADED if self.grade is not None else SubmissionStatus.SUBMITTED

    def __repr__(self) -> str:
        return f"<HomeworkSubmission(id={self.id}, homework_id={self.homework_id}, grade={self.grade})>"

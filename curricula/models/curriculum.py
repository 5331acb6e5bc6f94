"""课程、选课与公告模型定义。"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from curricula.db import Base, UTCDateTime, new_id, utcnow

if TYPE_CHECKING:
    from curricula.models.lecture import Lecture
    from curricula.models.user import StudentProfile, TeacherProfile


class Curriculum(Base):
    """教师创建的课程容器。

    ``unique_code`` 为学生加入课程用的邀请码，全局唯一；
    ``teacher_id`` 创建后不再变更。
    """

    __tablename__ = "curriculums"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    unique_code: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    teacher_id: Mapped[str] = mapped_column(
        ForeignKey("teacher_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    teacher: Mapped["TeacherProfile"] = relationship(back_populates="curriculums")
    lectures: Mapped[List["Lecture"]] = relationship(
        back_populates="curriculum",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Lecture.week_number",
    )
    notes: Mapped[List["Note"]] = relationship(
        back_populates="curriculum", cascade="all, delete-orphan", passive_deletes=True
    )
    enrollments: Mapped[List["Enrollment"]] = relationship(
        back_populates="curriculum", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Curriculum(id={self.id}, code={self.unique_code}, title={self.title})>"


class Enrollment(Base):
    """学生与课程的绑定关系，(student, curriculum) 唯一。"""

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("student_id", "curriculum_id", name="uq_enrollment_student_curriculum"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    student_id: Mapped[str] = mapped_column(
        ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False
    )
    curriculum_id: Mapped[str] = mapped_column(
        ForeignKey("curriculums.id", ondelete="CASCADE"), nullable=False, index=True
    )
    enrolled_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    student: Mapped["StudentProfile"] = relationship(back_populates="enrollments")
    curriculum: Mapped[Curriculum] = relationship(back_populates="enrollments")


class Note(Base):
    """课程公告。``expiry_date`` 为空或晚于当前时间时视为有效。"""

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    expiry_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime)
    curriculum_id: Mapped[str] = mapped_column(
        ForeignKey("curriculums.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    curriculum: Mapped[Curriculum] = relationship(back_populates="notes")

    def is_active(self, now: datetime) -> bool:
        return self.expiry_date is None or self.expiry_date > now

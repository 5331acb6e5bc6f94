"""课程讲义、附件与阅读记录模型定义。"""

from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from curricula.db import Base, UTCDateTime, new_id, utcnow

if TYPE_CHECKING:
    from curricula.models.curriculum import Curriculum
    from curricula.models.homework import Homework
    from curricula.models.user import StudentProfile


class Lecture(Base):
    """按周编号的讲义，``content`` 保存上传文件的相对 URL。"""

    __tablename__ = "lectures"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(String(512), nullable=False)
    week_number: Mapped[int] = mapped_column(Integer, default=1, nullable=False)  # 不要求唯一
    curriculum_id: Mapped[str] = mapped_column(
        ForeignKey("curriculums.id", ondelete="CASCADE"), nullable=False, index=True
    )

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    curriculum: Mapped["Curriculum"] = relationship(back_populates="lectures")
    attachments: Mapped[List["Attachment"]] = relationship(
        back_populates="lecture", cascade="all, delete-orphan", passive_deletes=True
    )
    homeworks: Mapped[List["Homework"]] = relationship(
        back_populates="lecture", cascade="all, delete-orphan", passive_deletes=True
    )
    reads: Mapped[List["ReadLecture"]] = relationship(
        back_populates="lecture", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Lecture(id={self.id}, week={self.week_number}, title={self.title})>"


class Attachment(Base):
    """讲义的补充文件。"""

    __tablename__ = "attachments"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    file_url: Mapped[str] = mapped_column(String(512), nullable=False)
    lecture_id: Mapped[str] = mapped_column(
        ForeignKey("lectures.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    lecture: Mapped[Lecture] = relationship(back_populates="attachments")


class ReadLecture(Base):
    """学生至少打开过一次讲义的记录，(student, lecture) 唯一。"""

    __tablename__ = "read_lectures"
    __table_args__ = (
        UniqueConstraint("student_id", "lecture_id", name="uq_read_lecture_student_lecture"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    student_id: Mapped[str] = mapped_column(
        ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False
    )
    lecture_id: Mapped[str] = mapped_column(
        ForeignKey("lectures.id", ondelete="CASCADE"), nullable=False, index=True
    )
    read_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    student: Mapped["StudentProfile"] = relationship(back_populates="read_lectures")
    lecture: Mapped[Lecture] = relationship(back_populates="reads")

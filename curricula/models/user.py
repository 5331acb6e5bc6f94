"""用户模型定义 - 教师/学生双角色。"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from curricula.db import Base, UTCDateTime, new_id, utcnow
from curricula.models.enums import Role, SubscriptionPlan

if TYPE_CHECKING:
    from curricula.models.curriculum import Curriculum, Enrollment
    from curricula.models.homework import HomeworkSubmission
    from curricula.models.lecture import ReadLecture


class User(Base):
    """用户账号。

    每个账号只有一个角色，并对应一份 TeacherProfile 或 StudentProfile。
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    university: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[Role] = mapped_column(Enum(Role), nullable=False)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    teacher_profile: Mapped[Optional["TeacherProfile"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", uselist=False
    )
    student_profile: Mapped[Optional["StudentProfile"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", uselist=False
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role.value})>"


class TeacherProfile(Base):
    """教师档案，拥有若干课程。"""

    __tablename__ = "teacher_profiles"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    bio: Mapped[Optional[str]] = mapped_column(Text)
    subscription_plan: Mapped[SubscriptionPlan] = mapped_column(
        Enum(SubscriptionPlan), default=SubscriptionPlan.FREE, nullable=False
    )

    user: Mapped[User] = relationship(back_populates="teacher_profile")
    curriculums: Mapped[List["Curriculum"]] = relationship(
        back_populates="teacher", cascade="all, delete-orphan", passive_deletes=True
    )


class StudentProfile(Base):
    """学生档案。"""

    __tablename__ = "student_profiles"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    program: Mapped[Optional[str]] = mapped_column(String(255))

    user: Mapped[User] = relationship(back_populates="student_profile")
    enrollments: Mapped[List["Enrollment"]] = relationship(
        back_populates="student", cascade="all, delete-orphan", passive_deletes=True
    )
    submissions: Mapped[List["HomeworkSubmission"]] = relationship(
        back_populates="student", cascade="all, delete-orphan", passive_deletes=True
    )
    read_lectures: Mapped[List["ReadLecture"]] = relationship(
        back_populates="student", cascade="all, delete-orphan", passive_deletes=True
    )

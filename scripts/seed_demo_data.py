"""写入一组演示数据：教师、学生、课程、讲义与作业。

直接操作数据库，不经过 HTTP 接口；重复运行时跳过已存在的账号。
"""
import sys
from datetime import timedelta
from pathlib import Path

# 添加项目根目录到 path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from curricula.config import get_settings
from curricula.db import Base, engine, ensure_sqlite_directory, session_scope, utcnow
from curricula.models import (
    Attachment,
    Curriculum,
    Enrollment,
    Homework,
    HomeworkType,
    Lecture,
    Role,
    StudentProfile,
    TeacherProfile,
    User,
)
from curricula.security import hash_password
from curricula.services.join_codes import allocate_unique_code
from curricula.services.weeks import current_week

DEMO_PASSWORD = "password123"
TEACHER_EMAIL = "teacher@demo.local"
STUDENT_EMAIL = "student@demo.local"


def seed():
    print("=" * 50)
    print("写入演示数据")
    print("=" * 50)

    settings = get_settings()
    ensure_sqlite_directory(engine)
    Base.metadata.create_all(bind=engine)

    with session_scope() as db:
        if db.execute(select(User).where(User.email == TEACHER_EMAIL)).scalar_one_or_none():
            print("\n演示账号已存在，跳过")
            return

        print("\n[1/3] 创建账号...")
        teacher = User(
            name="Demo Teacher",
            email=TEACHER_EMAIL,
            password_hash=hash_password(DEMO_PASSWORD),
            university="Demo University",
            role=Role.TEACHER,
        )
        teacher.teacher_profile = TeacherProfile(bio="Teaches the demo course")
        student = User(
            name="Demo Student",
            email=STUDENT_EMAIL,
            password_hash=hash_password(DEMO_PASSWORD),
            university="Demo University",
            role=Role.STUDENT,
        )
        student.student_profile = StudentProfile(program="Computer Science")
        db.add_all([teacher, student])
        db.flush()
        print(f"  {TEACHER_EMAIL} / {DEMO_PASSWORD}")
        print(f"  {STUDENT_EMAIL} / {DEMO_PASSWORD}")

        print("\n[2/3] 创建课程与讲义...")
        code = allocate_unique_code(
            db, length=settings.join_code_length, max_attempts=settings.join_code_max_attempts
        )
        curriculum = Curriculum(
            title="Introduction to Algorithms",
            description="Sorting, graphs and dynamic programming",
            unique_code=code,
            teacher_id=teacher.teacher_profile.id,
        )
        file_url = f"{settings.upload_url_prefix.rstrip('/')}/lectures/demo.pdf"
        week = current_week(tz_name=settings.calendar_timezone)
        lecture = Lecture(title="Sorting", content=file_url, week_number=week)
        lecture.attachments.append(Attachment(title="Sorting PDF", file_url=file_url))
        lecture.homeworks.append(
            Homework(
                title="Implement merge sort",
                description="Upload your solution as a PDF",
                type=HomeworkType.FILE_UPLOAD,
                due_date=utcnow() + timedelta(days=7),
            )
        )
        curriculum.lectures.append(lecture)
        db.add(curriculum)
        db.flush()
        print(f"  课程邀请码: {code}")

        print("\n[3/3] 学生加入课程...")
        db.add(Enrollment(student_id=student.student_profile.id, curriculum_id=curriculum.id))

    print("\n" + "=" * 50)
    print("写入完成！")
    print("=" * 50)


if __name__ == "__main__":
    seed()

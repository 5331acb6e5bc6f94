"""API 路由包入口。"""

from fastapi import APIRouter

from curricula.api import (
    attachments,
    auth,
    curriculum,
    dashboard,
    homework,
    lectures,
    notes,
    submissions,
)

router = APIRouter(prefix="/api")

# 注册子路由；公告路由需在课程 /{curriculum_id} 之前注册
router.include_router(auth.router, prefix="/auth", tags=["认证"])
router.include_router(notes.router, prefix="/curriculum/notes", tags=["公告"])
router.include_router(curriculum.router, prefix="/curriculum", tags=["课程"])
router.include_router(lectures.router, prefix="/lecture", tags=["讲义"])
router.include_router(attachments.router, prefix="/attachment", tags=["附件"])
router.include_router(homework.router, prefix="/homework", tags=["作业"])
router.include_router(submissions.router, prefix="/homework-submission", tags=["提交"])
router.include_router(dashboard.router, prefix="/dashboard", tags=["首页"])

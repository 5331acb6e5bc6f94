"""领域枚举定义 - 用户角色、订阅计划、作业类型等。"""

import enum


class Role(str, enum.Enum):
    """用户角色枚举。每个账号只有一个角色。"""
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"


class SubscriptionPlan(str, enum.Enum):
    """教师订阅计划。"""
    FREE = "FREE"
    PREMIUM = "PREMIUM"


class HomeworkType(str, enum.Enum):
    """作业类型枚举。"""
    MCQ = "MCQ"                  # 选择题
    TEXT = "TEXT"                # 文字作答
    FILE_UPLOAD = "FILE_UPLOAD"  # 上传文件


class SubmissionStatus(str, enum.Enum):
    """提交状态，由是否已有分数推导，不单独入库。"""
    SUBMITTED = "submitted"
    GRADED = "graded"

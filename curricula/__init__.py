"""Curricula：课程、讲义与作业管理后端。"""

__version__ = "0.1.0"

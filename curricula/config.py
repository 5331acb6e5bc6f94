"""应用配置管理。

使用 Pydantic Settings 统一读取环境变量，便于在本地/生产之间切换。
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """核心配置项。

    - ``database_url``：默认使用本地 SQLite，便于快速启动。
    - ``secret_key``：会话 Token 签名密钥，生产环境必须覆盖。
    - ``upload_dir``：上传文件落盘目录，通过 ``upload_url_prefix`` 对外暴露。
    - ``calendar_timezone``：计算"本周课程"时使用的时区。
    """

    database_url: str = Field(
        default="sqlite:///./storage/curricula.db", description="SQLAlchemy 数据库 URL"
    )
    secret_key: str = Field(
        default="change-me-in-production", description="会话 Token 的 HMAC 密钥"
    )
    session_cookie_name: str = Field(default="curricula_session")
    token_expire_hours: int = Field(default=24, ge=1)

    upload_dir: Path = Field(
        default=Path("./storage/uploads"), description="上传文件根目录"
    )
    upload_url_prefix: str = Field(default="/uploads", description="上传文件的公开 URL 前缀")

    join_code_length: int = Field(default=8, ge=4, le=32)
    join_code_max_attempts: int = Field(default=20, ge=1)

    calendar_timezone: str = Field(default="UTC")
    log_level: str = Field(default="INFO")

    model_config = {
        "env_prefix": "CURRICULA_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """缓存后的全局配置实例。"""

    return Settings()

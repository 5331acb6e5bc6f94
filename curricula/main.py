"""FastAPI 入口：注册路由、异常处理器、静态上传目录与建表。"""

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from curricula.api import router as api_router
from curricula.config import get_settings
from curricula.db import Base, engine, ensure_sqlite_directory
from curricula.errors import AppError
from curricula.logging_config import configure_logging
from curricula.utils.storage import ensure_directory

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def describe_validation_error(exc: RequestValidationError) -> str:
    """缺字段统一返回 "Missing required fields"，否则取第一条错误。"""
    errors = exc.errors()
    if not errors or any(e.get("type") == "missing" for e in errors):
        return "Missing required fields"
    first = errors[0]
    field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "request"
    return f"Invalid {field}: {first.get('msg', 'invalid value')}"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(400, describe_validation_error(exc))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(SQLAlchemyError)
    async def handle_db_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception("Database error on %s %s", request.method, request.url.path)
        return _error(500, "Internal server error")

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "Internal server error")


def create_app() -> FastAPI:
    """应用工厂，便于测试时替换依赖。"""

    settings = get_settings()
    configure_logging(settings.log_level)
    app = FastAPI(title="Curricula API", version="0.1.0")

    @app.on_event("startup")
    def init_models() -> None:
        """启动时确保表存在。"""

        ensure_sqlite_directory(engine)
        Base.metadata.create_all(bind=engine)

    register_exception_handlers(app)
    app.include_router(api_router)

    ensure_directory(Path(settings.upload_dir))
    app.mount(
        settings.upload_url_prefix,
        StaticFiles(directory=str(settings.upload_dir)),
        name="uploads",
    )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()

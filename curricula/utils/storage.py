"""上传文件落盘与目录管理工具。

文件保存在 ``settings.upload_dir`` 下，并以 ``settings.upload_url_prefix``
开头的相对 URL 对外引用。
"""

import logging
import shutil
import uuid
from pathlib import Path, PurePosixPath
from typing import Optional

from fastapi import UploadFile

from curricula.config import Settings

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


def ensure_directory(path: Path) -> None:
    """确保目录存在。"""

    path.mkdir(parents=True, exist_ok=True)


def unique_filename(original: Optional[str], suffix: Optional[str] = None) -> str:
    """生成不易冲突的文件名，保留原扩展名（或使用给定扩展名）。"""

    if suffix is None:
        suffix = PurePosixPath(original or "").suffix.lower()
    return f"{uuid.uuid4().hex}{suffix}"


def is_pdf(upload: UploadFile) -> bool:
    return (upload.content_type or "").split(";")[0].strip().lower() == PDF_CONTENT_TYPE


async def save_upload_file(
    upload: UploadFile, destination: Path, overwrite: bool = True
) -> int:
    """保存上传文件到指定路径，返回字节大小。

    ``await upload.read()`` 一次读入全部内容再写盘，不支持分块上传。
    """

    ensure_directory(destination.parent)
    if destination.exists() and not overwrite:
        raise FileExistsError(f"{destination} already exists and overwrite is False")

    data = await upload.read()
    with destination.open("wb") as f:
        f.write(data)
    await upload.seek(0)
    return len(data)


async def store_upload(
    upload: UploadFile,
    settings: Settings,
    category: str,
    suffix: Optional[str] = None,
) -> str:
    """把上传文件保存到 ``<upload_dir>/<category>/`` 下，返回相对 URL。"""

    filename = unique_filename(upload.filename, suffix)
    destination = Path(settings.upload_dir) / category / filename
    size_bytes = await save_upload_file(upload, destination, overwrite=False)
    url = f"{settings.upload_url_prefix.rstrip('/')}/{category}/{filename}"
    logger.info("Stored upload %s (%d bytes)", url, size_bytes)
    return url


def remove_directory(path: Path) -> None:
    """递归删除目录，忽略不存在的情况。"""

    if not path.exists():
        return
    shutil.rmtree(path)


def remove_upload(url: str, settings: Settings) -> None:
    """删除 ``store_upload`` 写入的文件，URL 不在上传前缀下时忽略。"""

    prefix = f"{settings.upload_url_prefix.rstrip('/')}/"
    if not url.startswith(prefix):
        return
    path = Path(settings.upload_dir) / url[len(prefix):]
    path.unlink(missing_ok=True)
    logger.info("Removed upload %s", url)

"""密码哈希与会话 Token 工具（无外部 JWT 依赖）。"""

import base64
import binascii
import hashlib
import hmac
import json
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from curricula.config import get_settings

PBKDF2_ITERATIONS = 260_000


def hash_password(password: str) -> str:
    """PBKDF2-SHA256 加盐哈希，格式 ``pbkdf2_sha256$<iter>$<salt>$<hex>``。"""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        algorithm, iterations, salt, expected = hashed_password.split("$", 3)
    except ValueError:
        return False
    if algorithm != "pbkdf2_sha256":
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256", plain_password.encode(), salt.encode(), int(iterations)
    )
    return hmac.compare_digest(digest.hex(), expected)


def _sign(payload_b64: str, secret_key: str) -> str:
    return hmac.new(secret_key.encode(), payload_b64.encode(), hashlib.sha256).hexdigest()


def create_token(user_id: str, role: str, now: Optional[datetime] = None) -> str:
    """创建签名 Token：``<base64 payload>.<hmac>``。"""
    settings = get_settings()
    now = now or datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "role": role,
        "exp": (now + timedelta(hours=settings.token_expire_hours)).isoformat(),
    }
    payload_b64 = base64.urlsafe_b64encode(json.dumps(payload).encode()).decode()
    return f"{payload_b64}.{_sign(payload_b64, settings.secret_key)}"


def decode_token(token: str, now: Optional[datetime] = None) -> Optional[dict]:
    """校验签名与过期时间，失败返回 None。"""
    parts = token.split(".")
    if len(parts) != 2:
        return None
    payload_b64, signature = parts
    if not hmac.compare_digest(signature, _sign(payload_b64, get_settings().secret_key)):
        return None
    try:
        payload = json.loads(base64.urlsafe_b64decode(payload_b64.encode()).decode())
        exp = datetime.fromisoformat(payload["exp"])
    except (binascii.Error, UnicodeDecodeError, ValueError, KeyError, TypeError):
        return None
    if (now or datetime.now(timezone.utc)) > exp:
        return None
    return payload

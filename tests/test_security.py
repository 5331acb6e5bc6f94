from datetime import datetime, timedelta, timezone

from curricula.security import create_token, decode_token, hash_password, verify_password


def test_password_hash_roundtrip():
    hashed = hash_password("s3cret")
    assert hashed.startswith("pbkdf2_sha256$")
    assert verify_password("s3cret", hashed)
    assert not verify_password("other", hashed)


def test_password_hash_is_salted():
    assert hash_password("same") != hash_password("same")


def test_verify_password_rejects_malformed_hash():
    assert not verify_password("x", "not-a-hash")
    assert not verify_password("x", "md5$1$salt$abc")


def test_token_payload():
    payload = decode_token(create_token("user-1", "TEACHER"))
    assert payload["sub"] == "user-1"
    assert payload["role"] == "TEACHER"


def test_token_signature_tamper():
    token = create_token("user-1", "STUDENT")
    payload_b64, signature = token.split(".")
    forged = create_token("user-2", "TEACHER").split(".")[0]
    assert decode_token(f"{forged}.{signature}") is None
    assert decode_token(f"{payload_b64}.{'0' * len(signature)}") is None
    assert decode_token("no-dot-here") is None


def test_token_expiry():
    issued = datetime(2025, 1, 1, tzinfo=timezone.utc)
    token = create_token("user-1", "STUDENT", now=issued)
    assert decode_token(token, now=issued + timedelta(hours=1)) is not None
    assert decode_token(token, now=issued + timedelta(days=2)) is None

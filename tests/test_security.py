"""
Unit tests for app.core.security helpers
"""
from datetime import datetime, timedelta, timezone

from app.core import security


def test_password_hash_roundtrip():
    hashed = security.hash_password("secret123")
    assert hashed != "secret123"
    assert security.verify_password("secret123", hashed)
    assert not security.verify_password("secret124", hashed)


def test_password_hash_is_salted():
    assert security.hash_password("secret123") != security.hash_password("secret123")


def test_generate_otp_is_six_digits():
    for _ in range(200):
        code = security.generate_otp()
        assert len(code) == 6
        assert code.isdigit()


def test_generate_otp_zero_pads(monkeypatch):
    monkeypatch.setattr(security.secrets, "randbelow", lambda n: 42)
    assert security.generate_otp() == "000042"


def test_otp_hash_is_not_plaintext():
    digest = security.hash_otp("123456")
    assert "123456" not in digest
    assert len(digest) == 64


def test_verify_otp():
    digest = security.hash_otp("123456")
    assert security.verify_otp("123456", digest)
    assert not security.verify_otp("654321", digest)
    assert not security.verify_otp("123456", None)


def test_otp_expiry_is_five_minutes():
    now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert security.otp_expiry(now) == now + timedelta(minutes=5)


def test_session_token_entropy_and_hash():
    tokens = {security.generate_session_token() for _ in range(50)}
    assert len(tokens) == 50
    token = tokens.pop()
    # 32 bytes urlsafe-base64 -> 43 chars
    assert len(token) >= 43
    assert security.hash_session_token(token) == security.hash_session_token(token)
    assert security.hash_session_token(token) != token


def test_session_expiry_disabled(monkeypatch):
    now = security.utcnow()
    monkeypatch.setattr(security.settings, "SESSION_TTL_MINUTES", 0)
    assert security.session_expiry(now) is None
    monkeypatch.setattr(security.settings, "SESSION_TTL_MINUTES", 30)
    assert security.session_expiry(now) == now + timedelta(minutes=30)


def test_as_utc_marks_naive_values():
    naive = datetime(2026, 1, 1, 12, 0)
    assert security.as_utc(naive).tzinfo == timezone.utc
    assert security.as_utc(None) is None

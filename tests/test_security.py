"""
Tests for password hashing and access tokens
"""
import pytest
from jose import ExpiredSignatureError, JWTError
from nxtbeings.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_hash_and_verify_password():
    password_hash = hash_password("secret123")
    assert password_hash != "secret123"
    assert verify_password("secret123", password_hash) == True
    assert verify_password("wrong", password_hash) == False


def test_verify_password_bad_hash():
    """Empty or malformed hashes never match"""
    assert verify_password("secret123", "") == False
    assert verify_password("secret123", "not-a-bcrypt-hash") == False


def test_access_token_round_trip():
    payload = decode_access_token(create_access_token(42, "recruiter"))
    assert payload["sub"] == "42"
    assert payload["userType"] == "recruiter"
    assert payload["exp"] > payload["iat"]


def test_expired_token():
    with pytest.raises(ExpiredSignatureError):
        decode_access_token(create_access_token(1, "applicant", expires_minutes=-1))


def test_tampered_token():
    token = create_access_token(1, "applicant")
    with pytest.raises(JWTError):
        decode_access_token(token[:-2] + ("aa" if not token.endswith("aa") else "bb"))

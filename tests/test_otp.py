"""
Tests for OTP utilities
"""
import pytest
from datetime import datetime, timedelta, timezone
from nxtbeings.utils.otp import generate_otp, get_otp_expiry, is_otp_expired


def test_generate_otp():
    """Test OTP generation"""
    otp = generate_otp()
    assert len(otp) == 6
    assert otp.isdigit()


def test_generate_otp_never_has_leading_zero():
    """Codes stay within 100000..999999"""
    for _ in range(500):
        otp = generate_otp()
        assert otp[0] != "0"
        assert 100000 <= int(otp) <= 999999


def test_generate_otp_uses_secure_source(monkeypatch):
    """Test OTP generation draws from secrets"""
    monkeypatch.setattr("nxtbeings.utils.otp.secrets.randbelow", lambda n: n - 1)
    assert generate_otp() == "999999"
    monkeypatch.setattr("nxtbeings.utils.otp.secrets.randbelow", lambda n: 0)
    assert generate_otp() == "100000"


def test_get_otp_expiry():
    """Test OTP expiry calculation"""
    now = datetime.now(timezone.utc)
    expiry = get_otp_expiry(now)
    assert expiry - now == timedelta(seconds=300)


def test_get_otp_expiry_defaults_to_now():
    """Should be about 5 minutes (300 seconds) in future"""
    expiry = get_otp_expiry()
    diff = (expiry - datetime.now(timezone.utc)).total_seconds()
    assert 290 < diff < 310


def test_is_otp_expired():
    """Test OTP expiry check"""
    now = datetime.now(timezone.utc)
    past = now - timedelta(seconds=10)
    future = now + timedelta(seconds=10)

    assert is_otp_expired(past, now) == True
    assert is_otp_expired(future, now) == False


def test_is_otp_expired_is_strict():
    """A code is still valid at the exact expiry instant"""
    now = datetime.now(timezone.utc)
    assert is_otp_expired(now, now) == False
    assert is_otp_expired(now, now + timedelta(microseconds=1)) == True

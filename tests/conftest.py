"""
Test configuration
"""
import os

# Must be set before nxtbeings.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SMS_GATEWAY_DEFAULT", "console")
os.environ.setdefault("LOG_FILE", "")

import pytest
from fakes import FakeClock, FakeGateway
from nxtbeings.services.otp_service import OtpService
from nxtbeings.services.otp_store import OtpStore


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def store():
    return OtpStore()


@pytest.fixture
def otp_service(store, gateway, clock):
    return OtpService(store=store, gateway=gateway, clock=clock)

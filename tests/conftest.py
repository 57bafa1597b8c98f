"""
Pytest fixtures for otp_handshake
Fresh platform state and deterministic time for every test
"""

import os
from datetime import datetime, timezone

import pytest

from otp_handshake.capability import TokenAuthority
from otp_handshake.clock import FixedClock
from otp_handshake.enums import CounterpartyIdentity
from otp_handshake.messages import OTP_REQUESTED_ACTION
from otp_handshake.platform import LocalPlatformContext, PackageRegistry

HOST_PACKAGE = "com.example.app"
UNTRUSTED_PACKAGE = "com.not.trusted"

CONFIG_ENV_KEYS = [
    'OTP_HANDSHAKE_CONFIG',
    'OTP_HANDSHAKE_SEND_SDK_VERSION',
]


@pytest.fixture(autouse=True)
def reset_config_environment():
    """Keep configuration environment variables from leaking between tests"""
    original_env = {key: os.environ.get(key) for key in CONFIG_ENV_KEYS}
    for key in CONFIG_ENV_KEYS:
        os.environ.pop(key, None)

    yield

    for key, value in original_env.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value


@pytest.fixture
def fixed_clock() -> FixedClock:
    """Fixed clock starting at 2023-01-01 12:00:00 UTC"""
    return FixedClock(datetime(2023, 1, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def authority(fixed_clock) -> TokenAuthority:
    """Token authority shared by every process on the simulated device"""
    return TokenAuthority(clock=fixed_clock)


@pytest.fixture
def registry() -> PackageRegistry:
    """Registry with both counterparties installed and accepting handshakes"""
    registry = PackageRegistry()
    registry.install(HOST_PACKAGE)
    for identity in CounterpartyIdentity.known():
        registry.install(identity.package_name)
        registry.register_receiver(identity.package_name, OTP_REQUESTED_ACTION)
    return registry


@pytest.fixture
def host_context(registry, authority) -> LocalPlatformContext:
    """Context of the application requesting the handshake"""
    return LocalPlatformContext(HOST_PACKAGE, registry, authority)


@pytest.fixture
def consumer_context(registry, authority) -> LocalPlatformContext:
    return LocalPlatformContext(CounterpartyIdentity.CONSUMER.package_name, registry, authority)


@pytest.fixture
def business_context(registry, authority) -> LocalPlatformContext:
    return LocalPlatformContext(CounterpartyIdentity.BUSINESS.package_name, registry, authority)


@pytest.fixture
def untrusted_context(registry, authority) -> LocalPlatformContext:
    """Context of an application impersonating a counterparty"""
    return LocalPlatformContext(UNTRUSTED_PACKAGE, registry, authority)

"""
Pytest configuration for otp_handshake
Marks trust-boundary tests and keeps their fixtures function-scoped
"""

import pytest

# Modules exercising forged-sender rejection
SENSITIVE_MODULES = {
    'test_capability',
    'test_incoming_handler',
}


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers", "sensitive: Tests that must be deterministic and isolated"
    )


def pytest_collection_modifyitems(config, items):
    """Mark sensitive tests and reject shared fixtures in them"""
    for item in items:
        module_name = item.module.__name__
        if any(sensitive in module_name for sensitive in SENSITIVE_MODULES):
            item.add_marker(pytest.mark.sensitive)
            _check_fixture_scopes(item)


def _check_fixture_scopes(item):
    """Sensitive tests may only use function-scoped fixtures"""
    fixture_info = getattr(item, "_fixtureinfo", None)
    if fixture_info is None:
        return

    for fixture_name, fixture_defs in fixture_info.name2fixturedefs.items():
        for fixture_def in fixture_defs:
            # Plugin and builtin fixtures have no baseid
            if not getattr(fixture_def, "baseid", ""):
                continue
            if fixture_def.scope != 'function':
                pytest.fail(
                    f"FIXTURE SCOPE VIOLATION in {item.nodeid}:\n"
                    f"Fixture '{fixture_name}' has scope='{fixture_def.scope}' but sensitive tests "
                    f"require scope='function'. Shared platform state can leak trust decisions "
                    f"between tests."
                )

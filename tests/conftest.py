"""Test-layer conftest: markers and failure-report hook."""

from __future__ import annotations

import pytest


# ---------------------------------------------------------------------------
# Pytest configuration hook - wire up markers
# ---------------------------------------------------------------------------

def pytest_configure(config):
    """Register custom markers so --strict-markers does not complain."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated, fake browser)")
    config.addinivalue_line("markers", "e2e: End-to-end Playwright tests against BASE_URL")
    config.addinivalue_line("markers", "smoke: Critical-path checks run on every deploy")
    config.addinivalue_line("markers", "regression: Full user-journey regression suite")
    config.addinivalue_line("markers", "visual: Screenshot baseline comparisons")
    config.addinivalue_line("markers", "slow: Slow-running tests")


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Expose each phase's report as ``item.rep_<phase>`` for fixtures to inspect."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)

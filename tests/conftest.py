import os
import sys

import pytest

# Ensure project root is in path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from workshop_service.monitoring.registry import MetricRegistry


@pytest.fixture(autouse=True)
def service_env(monkeypatch):
    """Start every test from the built-in configuration defaults."""
    for var in ("DEFAULT_SWEATER_SCORE", "WORKSHOP_HOST", "WORKSHOP_PORT", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def registry() -> MetricRegistry:
    return MetricRegistry()

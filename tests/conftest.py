"""Root pytest configuration.

Test Structure:
    tests/
    ├── unit/               # Fast, isolated tests (AsyncMock repositories)
    │   ├── bridge_auth/
    │   ├── domain/
    │   ├── application/
    │   └── infrastructure/
    └── integration/        # aiosqlite stores, FastAPI TestClient

Run only the fast suite with ``pytest -m "not integration"``.
"""

from pathlib import Path

import pytest
from dotenv import load_dotenv

from bridge_config import clear_settings_cache

PROJECT_ROOT = Path(__file__).resolve().parents[1]

# Load .env.dev for tests (same as local development)
CONFIG_DIR = PROJECT_ROOT / "config"
if (CONFIG_DIR / ".env.dev").exists():
    load_dotenv(CONFIG_DIR / ".env.dev")

TEST_SHARED_SECRET = "test-shared-secret"
TEST_JWT_SECRET = "test-jwt-secret-key-12345"


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: Tests that use real (aiosqlite) stores",
    )


def pytest_collection_modifyitems(config, items):
    """Mark everything under tests/integration as integration."""
    for item in items:
        if "integration" in Path(str(item.fspath)).parts:
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def bridge_env(monkeypatch):
    """Provide required settings and reset the settings cache per test."""
    monkeypatch.setenv("BRIDGE_SHARED_SECRET", TEST_SHARED_SECRET)
    monkeypatch.setenv("JWT_SECRET_KEY", TEST_JWT_SECRET)
    monkeypatch.setenv("POSTGRES_PASSWORD", "test-password")
    monkeypatch.setenv("LOCKED_ROLES", "")
    monkeypatch.setenv("DEFAULT_AUTO_SYNC_ROLES", "administrator")
    clear_settings_cache()
    yield
    clear_settings_cache()

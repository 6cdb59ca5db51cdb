"""
Root pytest configuration for backend tests.

Provides:
- Shared fixtures (source, app, client)
- In-memory page source and row builders live in fakes.py
"""

import sys
from pathlib import Path

# Add backend directory to Python path so imports like
# `from services.metrics import ...` and `from utils.normalize import ...` work
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

tests_dir = Path(__file__).parent
if str(tests_dir) not in sys.path:
    sys.path.insert(0, str(tests_dir))

import pytest

from constants import BASE_VIEW
from fakes import FakeSource


@pytest.fixture
def source():
    """Empty in-memory source; tests fill source.tables."""
    return FakeSource({BASE_VIEW: []})


@pytest.fixture
def app(source):
    """Create test Flask application wired to the in-memory source."""
    from app import create_app

    app = create_app(config={'TESTING': True, 'REQUEST_LOG_ENABLED': False}, source=source)
    return app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()

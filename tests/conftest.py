"""Pytest configuration and fixtures.

The Supabase dependency is overridden with ``tests.fakes.FakeSupabase`` so no
network is touched. Bearer tokens are real HS256 JWTs signed with the test
secret below (see ``tests.helpers.make_token``).
"""

import os

os.environ["PUBLIC_SUPABASE_URL"] = "https://soulmatch.test"
os.environ["SECRET_API_KEY"] = "service-role-test-key"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret-with-enough-length-123"
os.environ["PROFILE_STORAGE_BUCKET"] = "profile-photos"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from app.chat.store import ChatStore
from app.core.config import clear_settings_cache
from app.core.supabase_client import get_supabase
from app.main import create_app
from tests.fakes import FakeSupabase


@pytest.fixture(autouse=True)
def _fresh_settings():
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def supabase():
    return FakeSupabase()


@pytest.fixture
def store(supabase):
    return ChatStore(supabase)


@pytest.fixture
def app(supabase):
    application = create_app()
    application.dependency_overrides[get_supabase] = lambda: supabase
    return application


@pytest.fixture
def client(app):
    return TestClient(app)

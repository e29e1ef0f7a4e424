from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from propdesk.auth.jwt import create_access_token
from propdesk.auth.role_cache import RoleCacheRegistry
from propdesk.core.config import get_config
from propdesk.core.dependencies import get_db_session, get_role_registry
from propdesk.database.models import Profile
from propdesk.main import create_app


@pytest.fixture
def client(session):
    app = create_app()

    def _session_override():
        yield session

    registry = RoleCacheRegistry(
        fetch_role=lambda user_id: session.query(Profile.role).filter(Profile.id == user_id).scalar()
    )
    app.dependency_overrides[get_db_session] = _session_override
    app.dependency_overrides[get_role_registry] = lambda: registry
    return TestClient(app)


@pytest.fixture
def auth_header():
    def _header(profile) -> dict[str, str]:
        config = get_config()
        token = create_access_token(profile.id, config.JWT_SECRET, audience=config.JWT_AUDIENCE)
        return {"Authorization": f"Bearer {token}"}

    return _header

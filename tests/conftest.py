from __future__ import annotations

import os
import sys
from pathlib import Path

# Ensure `import backend...` works when pytest uses importlib import mode.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.movie_matcher import main, models
from backend.movie_matcher.database import build_engine
from backend.movie_matcher.movie_service import MovieServiceError


class FakeMovieProvider:
    """Stands in for the TMDB client; hands out numbered movies."""

    def __init__(self) -> None:
        self.calls = 0
        self.fail = False

    def get_trending_movie(self) -> dict:
        if self.fail:
            raise MovieServiceError("provider down")
        self.calls += 1
        return {
            "id": 1000 + self.calls,
            "title": f"Movie {self.calls}",
            "original_title": f"Original {self.calls}",
            "overview": "Something happens.",
            "release_date": "2021-06-01",
            "trailerUrl": f"https://www.youtube.com/embed/key{self.calls}",
        }


@pytest.fixture()
def session_factory():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    models.Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def provider() -> FakeMovieProvider:
    return FakeMovieProvider()


@pytest.fixture()
def client(session_factory, provider):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    main.app.dependency_overrides[main.get_db] = override_get_db
    main.app.dependency_overrides[main.get_movie_provider] = lambda: provider
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()


@pytest.fixture()
def make_user(client):
    """Register a user over HTTP and return the login payload (id, full_name, token)."""

    def _make(username: str, password: str = "s3cret-pass", full_name: str | None = None) -> dict:
        response = client.post(
            "/user",
            json={"username": username, "password": password, "fullName": full_name or username.title()},
        )
        assert response.status_code == 200, response.text
        return response.json()

    return _make

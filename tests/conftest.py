import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from article_service.app import create_app


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'articles.db'}"


@pytest.fixture
def app(database_url):
    return create_app(database_url=database_url)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def repository(app):
    return app.state.repository


@pytest.fixture
def storage_down():
    """Callable that fails like a lost database connection."""

    def boom(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection lost"))

    return boom

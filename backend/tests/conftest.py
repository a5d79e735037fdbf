import pytest
from fastapi.testclient import TestClient

from app.core.circuit_breaker import limiter
from app.core.config import Settings
from app.infra.postgres import init_db
from app.main import create_app

ADMIN_KEY = "s3cret-admin"


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        admin_key=ADMIN_KEY,
        allowed_origins=("http://localhost:5173",),
    )


@pytest.fixture
def app(settings):
    # Limiter counters live at module level; start every test clean
    limiter.reset()
    application = create_app(settings)
    init_db(application.state.engine)
    yield application
    application.state.engine.dispose()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def admin_headers():
    return {"X-Admin-Key": ADMIN_KEY}

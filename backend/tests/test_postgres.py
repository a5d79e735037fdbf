from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.infra import postgres
from app.infra.postgres import create_store_engine


def capture_engine_kwargs(monkeypatch):
    captured = {}
    real_create_engine = postgres.create_engine

    def capturing(url, **kwargs):
        captured.update(kwargs)
        return real_create_engine(url, **kwargs)

    monkeypatch.setattr(postgres, "create_engine", capturing)
    return captured


def test_postgres_engine_bounds_store_calls(monkeypatch):
    captured = capture_engine_kwargs(monkeypatch)
    settings = Settings(
        database_url="postgresql://relay:pw@db.invalid:5432/relay",
        store_timeout_seconds=2.5,
    )

    # Engines connect lazily; nothing reaches db.invalid here
    engine = create_store_engine(settings)
    try:
        assert engine.pool.timeout() == 2.5
        assert captured["pool_pre_ping"] is True
        assert captured["connect_args"] == {
            "connect_timeout": 3,
            "options": "-c statement_timeout=2500",
        }
    finally:
        engine.dispose()


def test_postgres_connect_timeout_never_zero(monkeypatch):
    captured = capture_engine_kwargs(monkeypatch)
    settings = Settings(database_url="postgresql://relay:pw@db.invalid/relay", store_timeout_seconds=0.2)

    create_store_engine(settings).dispose()

    assert captured["connect_args"]["connect_timeout"] == 1
    assert captured["connect_args"]["options"] == "-c statement_timeout=200"


def test_sqlite_memory_engine_shares_one_connection(monkeypatch):
    captured = capture_engine_kwargs(monkeypatch)

    engine = create_store_engine(Settings(database_url="sqlite://", store_timeout_seconds=4))
    try:
        assert isinstance(engine.pool, StaticPool)
        assert captured["connect_args"] == {"check_same_thread": False, "timeout": 4}
    finally:
        engine.dispose()

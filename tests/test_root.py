"""Root endpoint and startup tests."""

from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from bistro.core.config import settings
from bistro.db import session as db_session
from bistro.db.seed import DEFAULT_TABLES
from bistro.main import app
from bistro.models.reservation import Table


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def test_root_reports_status(tmp_path: Path, monkeypatch) -> None:
    engine = _build_test_engine(tmp_path / "root.db")
    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", sessionmaker(autocommit=False, autoflush=False, bind=engine))
    monkeypatch.setattr(settings, "seed_tables", False)

    with TestClient(app) as client:
        response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"name": settings.app_name, "status": "ok"}


def test_startup_seeds_default_tables_in_dev(tmp_path: Path, monkeypatch) -> None:
    engine = _build_test_engine(tmp_path / "seed.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)
    monkeypatch.setattr(settings, "app_env", "dev")
    monkeypatch.setattr(settings, "seed_tables", True)

    with TestClient(app):
        pass
    with TestClient(app):
        pass

    session: Session = testing_session_local()
    try:
        assert session.scalar(select(func.count()).select_from(Table)) == len(DEFAULT_TABLES)
        assert session.scalar(select(func.sum(Table.capacity))) == sum(capacity for _, capacity, _ in DEFAULT_TABLES)
    finally:
        session.close()


def test_startup_skips_seeding_outside_dev(tmp_path: Path, monkeypatch) -> None:
    engine = _build_test_engine(tmp_path / "prod.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)
    monkeypatch.setattr(settings, "app_env", "prod")
    monkeypatch.setattr(settings, "seed_tables", True)

    with TestClient(app):
        pass

    session: Session = testing_session_local()
    try:
        assert session.scalar(select(func.count()).select_from(Table)) == 0
    finally:
        session.close()

import os
import sys
import tempfile
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are read once at import time, so the environment has to be ready first.
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="gatepass-tests-"))
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTH_PROVIDER", "mock")
os.environ.setdefault("ADMIN_EMAIL", "alice@gatepass.com")
os.environ.setdefault("TZ", "America/Sao_Paulo")

from gatepass.db.session import Base  # noqa: E402
from gatepass import models  # noqa: E402,F401


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def db_session(engine):
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client_user(db_session):
    from gatepass.crud.users import upsert_user

    return upsert_user(
        db_session,
        {
            "id": "client-user-id",
            "email": "joao@cliente.com",
            "full_name": "João Silva",
            "phone": "+55 11 88888-8888",
            "approved": True,
        },
    )


@pytest.fixture()
def admin_user(db_session):
    from gatepass.crud.users import upsert_user

    return upsert_user(
        db_session,
        {
            "id": "admin-user-id",
            "email": "alice@gatepass.com",
            "full_name": "Alice Wonderland",
            "phone": "+55 11 99999-9999",
        },
    )

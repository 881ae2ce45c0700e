import os
import tempfile
from datetime import date

# Settings are read at import time, so the environment is prepared before any app import
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="lojagames-uploads-")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core.database import Base, get_db
from app.core.security import get_password_hash
from app.models.user import User


@pytest.fixture
def session_factory():
    """In-memory SQLite shared by every session of one test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    # Not used as a context manager: the lifespan (create_all, scheduler) stays off
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def registration_form():
    return {
        "userName": "alice",
        "email": "alice@example.com",
        "password": "s3cret!",
        "dataNascimento": "1995-04-12",
        "telefone": "+55 11 91234-5678",
    }


@pytest.fixture
def register(client, registration_form):
    """Post a registration form, with overrides applied to the default payload"""
    def _register(files=None, **overrides):
        data = {**registration_form, **overrides}
        return client.post("/auth/registro", data=data, files=files)
    return _register


@pytest.fixture
def admin_user(session_factory):
    with session_factory() as db:
        admin = User(
            user_name="admin",
            email="admin@example.com",
            hashed_password=get_password_hash("admin-password"),
            birth_date=date(1980, 1, 1),
            phone="+5511900000000",
            is_admin=True,
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)
        return admin.user_name

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FILE", "")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core import Base, get_db  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.crud import sensor_crud, station_crud, user_crud  # noqa: E402
from app.main import app  # noqa: E402
from app.models.enums import SensorType, UserRole  # noqa: E402


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def station(db):
    return station_crud.create(
        db,
        {"name": "Clean River Station", "description": "River monitoring", "latitude": -23.55, "longitude": -46.63},
    )


@pytest.fixture
def make_sensor(db, station):
    def _make(**overrides):
        data = {
            "station_id": station.id,
            "name": "pH",
            "type": SensorType.PH.value,
            "unit": "pH",
            "min_value": 6.5,
            "max_value": 8.5,
            "alert_threshold": 7.0,
        }
        data.update(overrides)
        return sensor_crud.create(db, data)

    return _make


@pytest.fixture
def ph_sensor(make_sensor):
    return make_sensor()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role: UserRole = UserRole.TECHNICIAN, is_active: bool = True):
        counter["n"] += 1
        return user_crud.create(
            db,
            {
                "email": f"{role.value.lower()}{counter['n']}@monitoring.local",
                "name": role.value.title(),
                "password_hash": "not-a-real-hash",
                "role": role.value,
                "is_active": is_active,
            },
        )

    return _make


@pytest.fixture
def auth_headers(make_user):
    def _headers(role: UserRole = UserRole.TECHNICIAN):
        user = make_user(role)
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _headers

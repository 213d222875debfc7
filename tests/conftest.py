import os

# Must be set before the app (and its settings) are imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AI_API_KEY", "")

from datetime import date, datetime, timezone  # noqa: E402
from typing import Any, Callable, Dict, List, Tuple, Union  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from app.core.clock import FixedClock, get_clock  # noqa: E402
from app.core.config import Base, enable_sqlite_savepoints, get_db  # noqa: E402
from app.crud.user import crud_user  # noqa: E402
from app.integrations.ai_chat import get_ai_http_client  # noqa: E402
from app.integrations.smartwatch import get_provider_http_client  # noqa: E402
from app.schemas.user import RegisterRequest  # noqa: E402
from main import app  # noqa: E402


NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)
TODAY = NOW.date()


# =====================================================================
# HTTP DOUBLES
# =====================================================================

Handler = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class RouteTable:
    """Canned responses for httpx.MockTransport, keyed by (method, path)."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, handler: Handler = None, *, json: Any = None, status_code: int = 200):
        if handler is None:
            handler = httpx.Response(status_code, json=json)
        self.routes[(method, path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"error": "no route"})
        if isinstance(handler, Exception):
            raise handler
        if callable(handler):
            return handler(request)
        return handler


def add_fitbit_day(routes: RouteTable, day: date, *, steps: Any, minutes_asleep: Any, resting: Any = None):
    d = day.isoformat()
    routes.add("GET", f"/1/user/-/activities/steps/date/{d}/1d.json",
               json={"activities-steps": [{"dateTime": d, "value": str(steps)}]})
    routes.add("GET", f"/1.2/user/-/sleep/date/{d}.json",
               json={"summary": {"totalMinutesAsleep": minutes_asleep}})
    heart_value = {"restingHeartRate": resting} if resting is not None else {}
    routes.add("GET", f"/1/user/-/activities/heart/date/{d}/1d.json",
               json={"activities-heart": [{"dateTime": d, "value": heart_value}]})


def add_fitbit_token(routes: RouteTable, *, access_token: str = "fitbit-access", expires_in: int = 28800):
    routes.add("POST", "/oauth2/token", json={
        "access_token": access_token,
        "refresh_token": "fitbit-refresh",
        "expires_in": expires_in,
        "token_type": "Bearer",
    })


# =====================================================================
# DATABASE
# =====================================================================

@pytest.fixture
def engine(tmp_path):
    db_engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False}
    )
    enable_sqlite_savepoints(db_engine)
    Base.metadata.create_all(bind=db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def user(db, clock):
    return crud_user.create(
        db,
        obj_in=RegisterRequest(name="Test Student", email="student@example.com", password="secret123"),
        created_at=clock.now(),
    )


@pytest.fixture
def other_user(db, clock):
    return crud_user.create(
        db,
        obj_in=RegisterRequest(name="Other Student", email="other@example.com", password="secret123"),
        created_at=clock.now(),
    )


# =====================================================================
# OUTBOUND HTTP
# =====================================================================

@pytest.fixture
def provider_routes():
    return RouteTable()


@pytest.fixture
def provider_client(provider_routes):
    with httpx.Client(transport=httpx.MockTransport(provider_routes)) as client:
        yield client


@pytest.fixture
def ai_routes():
    return RouteTable()


@pytest.fixture
def ai_client(ai_routes):
    with httpx.Client(transport=httpx.MockTransport(ai_routes)) as client:
        yield client


# =====================================================================
# API
# =====================================================================

@pytest.fixture
def client(session_factory, clock, provider_client, ai_client):
    """TestClient wired to the per-test database, fixed clock and mocked HTTP.

    Do not hold a ``db`` session open across calls made with this client:
    SQLite allows a single writer.
    """
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_provider_http_client] = lambda: provider_client
    app.dependency_overrides[get_ai_http_client] = lambda: ai_client
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    response = client.post("/auth/register", json={
        "name": "Api Student",
        "email": "api@example.com",
        "password": "secret123",
        "university": "State University",
    })
    assert response.status_code == 201, response.text
    token = response.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}

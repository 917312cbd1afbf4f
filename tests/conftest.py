# tests/conftest.py

import os

# Set before barberbook.config is imported; settings load at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.pop("OPENAI_API_KEY", None)
os.environ.pop("GOOGLE_MAPS_API_KEY", None)

from datetime import date, timedelta

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

import barberbook.models  # noqa: F401
from barberbook import db
from barberbook.auth import create_verification_token
from barberbook.main import app

PASSWORD = "s3cret-pass"

BARBER_PROFILE = {
    "full_name": "João Navalha",
    "phone": "+55 11 99999-0000",
    "description": "Cortes clássicos",
    "address": {
        "cep": "01310-100",
        "street": "Avenida Paulista",
        "number": "1000",
        "neighborhood": "Bela Vista",
        "city": "São Paulo",
        "state": "SP",
    },
    "coordinates": {"lat": -23.5614, "lng": -46.6559},
    "services": [
        {"id": "corte", "name": "Corte", "price": 40.0, "at_home_fee": 20.0, "duration": 30},
        {"id": "barba", "name": "Barba", "price": 25.0},
        {"id": "combo", "name": "Corte + Barba", "price": 60.0, "duration": 60},
    ],
}

CLIENT_PROFILE = {
    "full_name": "Maria Cliente",
    "phone": "+55 11 98888-0000",
    "address": {
        "cep": "01001-000",
        "street": "Praça da Sé",
        "number": "1",
        "neighborhood": "Sé",
        "city": "São Paulo",
        "state": "SP",
    },
    "coordinates": {"lat": -23.5505, "lng": -46.6333},
}


def next_weekday(weekday: int) -> date:
    """First date with the given weekday at least a week from today."""
    d = date.today() + timedelta(days=7)
    while d.weekday() != weekday:
        d += timedelta(days=1)
    return d


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine, monkeypatch):
    def get_session_override():
        with Session(engine) as session:
            yield session

    monkeypatch.setattr(db, "engine", engine)
    app.dependency_overrides[db.get_session] = get_session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client, email: str, role: str, verify: bool = True) -> dict:
    """Create a user, optionally verify it, and return auth headers."""
    resp = client.post("/users", json={"email": email, "password": PASSWORD, "role": role})
    assert resp.status_code == 201, resp.text
    if verify:
        resp = client.post("/auth/verify-email", json={"token": create_verification_token(email)})
        assert resp.status_code == 200, resp.text
    resp = client.post("/auth/login", data={"username": email, "password": PASSWORD})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def barber_headers(client):
    headers = register(client, "barber@example.com", "barber")
    resp = client.put("/barbers/me/profile", json=BARBER_PROFILE, headers=headers)
    assert resp.status_code == 200, resp.text
    assert resp.json()["profile_complete"] is True
    return headers


@pytest.fixture
def barber_id(client, barber_headers):
    return client.get("/me", headers=barber_headers).json()["id"]


@pytest.fixture
def client_headers(client):
    headers = register(client, "client@example.com", "client")
    resp = client.put("/clients/me/profile", json=CLIENT_PROFILE, headers=headers)
    assert resp.status_code == 200, resp.text
    return headers


@pytest.fixture
def book(client, barber_id, client_headers):
    """Book with the default client; returns the response."""
    def _book(day: date, at: str, service_id: str = "corte", headers=None, **extra):
        body = {"service_id": service_id, "date": day.isoformat(), "time": at, **extra}
        return client.post(
            f"/barbers/{barber_id}/appointments",
            json=body,
            headers=headers or client_headers,
        )
    return _book


@pytest.fixture
def mock_http(monkeypatch):
    """Route every httpx.Client created by the app through a handler."""
    real_client = httpx.Client

    def install(handler):
        def fake_client(*args, **kwargs):
            return real_client(*args, transport=httpx.MockTransport(handler), **kwargs)
        monkeypatch.setattr(httpx, "Client", fake_client)

    return install

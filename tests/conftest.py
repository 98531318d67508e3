from datetime import date, datetime, timedelta

import mongomock
import pytest
from fastapi.testclient import TestClient

from auth import token_for
from database import ensure_indexes, get_db
from main import app
from models import Role


@pytest.fixture
def db():
    database = mongomock.MongoClient()["vehicle_service_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=Role.USER, name=None):
        counter["n"] += 1
        role = Role(role)
        user = {
            "name": name or f"{role.value.title()} {counter['n']}",
            "email": f"{role.value}{counter['n']}@example.com",
            "phone": f"555-010{counter['n']}",
            "role": role.value,
            "password": "not-a-real-hash",
            "createdAt": datetime.utcnow(),
        }
        user["_id"] = db.users.insert_one(user).inserted_id
        return user

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {token_for(user)}"}
    return _headers


@pytest.fixture
def service(db):
    doc = {
        "name": "Oil Change",
        "description": "Full synthetic oil and filter",
        "price": 50,
        "duration": 45,
        "isActive": True,
    }
    doc["_id"] = db.services.insert_one(doc).inserted_id
    return doc


@pytest.fixture
def booking_payload(service):
    def _payload(**overrides):
        payload = {
            "service": str(service["_id"]),
            "vehicleDetails": {
                "type": "car",
                "make": "Toyota",
                "model": "Corolla",
                "year": 2020,
                "licensePlate": "ABC123",
            },
            "appointmentDate": (date.today() + timedelta(days=1)).isoformat(),
            "appointmentTime": "10:00",
        }
        payload.update(overrides)
        return payload
    return _payload

"""
Shared pytest fixtures.

MongoDB is replaced by mongomock before any project module is imported, so the
module-level `database.db` the app uses is an in-memory database. Each test
starts from empty collections with the unique indexes in place.
"""

import os
import sys
from datetime import datetime

import mongomock
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

os.environ["DATABASE_URL"] = "mongodb://localhost:27017"
os.environ["DATABASE_NAME"] = "ski_test"
os.environ["EXPOSE_RESET_TOKEN"] = "false"

_mongo_patch = mongomock.patch(servers=(("localhost", 27017),))
_mongo_patch.start()

from fastapi.testclient import TestClient  # noqa: E402

import database  # noqa: E402
from main import app  # noqa: E402
from security import hash_password  # noqa: E402

PASSWORD = "Secret123"


@pytest.fixture
def mongo():
    db = database.db
    for name in db.list_collection_names():
        db.drop_collection(name)
    database.ensure_indexes(db)
    yield db


@pytest.fixture
def client(mongo):
    return TestClient(app)


@pytest.fixture
def make_employee(mongo):
    counter = {"n": 100}

    def _make(**overrides):
        counter["n"] += 1
        doc = {
            "employeeID": f"EMP{counter['n']:03d}",
            "firstName": "Test",
            "lastName": f"Person{counter['n']}",
            "position": "Staff",
            "monthlyRate": 4000,
            "startDate": datetime(2023, 1, 1),
            "contactNumber": "555-0000",
            "duties": ["General"],
            "isActive": True,
            "hasUser": False,
            "role": "staff",
        }
        doc.update(overrides)
        doc["_id"] = mongo["employee"].insert_one(doc).inserted_id
        return doc

    return _make


@pytest.fixture
def make_user(mongo, make_employee):
    def _make(username, role="staff", password=PASSWORD, email=None):
        employee = make_employee(role="admin" if role == "admin" else "staff", hasUser=True)
        doc = {
            "username": username,
            "email": email or f"{username}@alpineresort.com",
            "password": hash_password(password),
            "firstName": username.capitalize(),
            "lastName": "Tester",
            "role": role,
            "employeeId": str(employee["_id"]),
        }
        doc["_id"] = mongo["user"].insert_one(doc).inserted_id
        doc["employee"] = employee
        return doc

    return _make


@pytest.fixture
def login(client):
    def _login(username, password=PASSWORD):
        response = client.post("/api/auth/login", json={"login": username, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login


@pytest.fixture
def admin_headers(make_user, login):
    make_user("admin", role="admin")
    return login("admin")


@pytest.fixture
def staff_headers(make_user, login):
    make_user("staffer", role="staff")
    return login("staffer")


@pytest.fixture
def manager_headers(make_user, login):
    make_user("boss", role="manager")
    return login("boss")

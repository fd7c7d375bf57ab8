"""
Test configuration and fixtures.

Every test gets a fresh app backed by an in-memory mongomock database,
seeded with the default roles, permissions, activities and admin user.
"""
import mongomock
import pytest

from app import create_app
from config import TestingConfig
from models.roles import SEVAK_ROLE
from models.users import User
from utils.auth import generate_tokens
from utils.db import ensure_indexes, mongo
from utils.seed import run_seed

ADMIN_PASSWORD = TestingConfig.ADMIN_PASSWORD


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    mongo.db = mongomock.MongoClient().db
    ensure_indexes(mongo.db)
    with app.app_context():
        run_seed(app.config)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return mongo.db


@pytest.fixture
def admin(db, app):
    return db.users.find_one({"email": app.config["ADMIN_EMAIL"]})


@pytest.fixture
def admin_headers(client, app):
    response = client.post("/api/v1/auth/login", json={
        "email": app.config["ADMIN_EMAIL"],
        "password": ADMIN_PASSWORD,
    })
    token = response.get_json()["data"]["token"]["accessToken"]
    return {"Authorization": f"Bearer {token}"}


def make_user(db, user_name, email, mobile, role_name=SEVAK_ROLE, password="Sevak@123"):
    role = db.roles.find_one({"name": role_name})
    inserted = User(user_name, email, password, role["_id"], mobileNumber=mobile, isVerified=True).save()
    return db.users.find_one({"_id": inserted.inserted_id})


def headers_for(app, user):
    with app.app_context():
        tokens = generate_tokens(user, SEVAK_ROLE)
    return {"Authorization": f"Bearer {tokens['accessToken']}"}


@pytest.fixture
def sevak(db):
    return make_user(db, "Ramesh Patel", "ramesh@example.com", "9876543210")


@pytest.fixture
def sevak_headers(app, sevak):
    return headers_for(app, sevak)


@pytest.fixture
def sevak_role(db):
    return db.roles.find_one({"name": SEVAK_ROLE})


@pytest.fixture
def location(db):
    return db.locations.find_one({"name": "Mandir"})

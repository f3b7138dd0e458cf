import mongomock
import pytest
from fastapi.testclient import TestClient

from evote import crud
from evote.config import Settings
from evote.database import AppContext
from evote.main import create_app
from evote.models.candidate_model import CandidateCreate
from evote.schemas import AccountCreate

TEST_SECRET = "test-secret-key"


@pytest.fixture
def settings():
    return Settings(mongo_db="evote_test", secret_key=TEST_SECRET, bcrypt_rounds=4, log_level="WARNING")


@pytest.fixture
def ctx(settings):
    return AppContext(settings, client=mongomock.MongoClient())


@pytest.fixture
def client(ctx):
    with TestClient(create_app(context=ctx)) as test_client:
        yield test_client


def account_payload(identity_number="123456789012", **overrides):
    payload = {
        "name": "Asha Rao",
        "age": 34,
        "address": "12 MG Road, Pune",
        "identity_number": identity_number,
        "password": "secret123",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_voter(ctx):
    counter = iter(range(100000000000, 999999999999))

    def _make(**overrides):
        payload = account_payload(identity_number=str(next(counter)), **overrides)
        return crud.create_account(ctx, AccountCreate(**payload))

    return _make


@pytest.fixture
def admin(ctx):
    payload = account_payload(identity_number="999999999999", name="Returning Officer", role="admin")
    return crud.create_account(ctx, AccountCreate(**payload))


@pytest.fixture
def make_candidate(ctx):
    def _make(name, party="Independent", age=45, **extra):
        return crud.add_candidate(ctx, CandidateCreate(name=name, party=party, age=age, **extra))

    return _make


def register(client, identity_number, **overrides):
    response = client.post("/api/user/signup", json=account_payload(identity_number, **overrides))
    assert response.status_code == 201, response.text
    return response.json()


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}

import mongomock
import pydantic
import pytest

from evote import crud
from evote.database import AppContext
from evote.errors import Conflict, NotFound, Unauthenticated
from evote.schemas import AccountCreate, AccountOut, PasswordChangeRequest
from evote.security import hash_password, verify_password

from conftest import account_payload


def test_create_account_stores_only_a_hash(ctx):
    account = crud.create_account(ctx, AccountCreate(**account_payload()))

    stored = ctx.accounts.find_one({"_id": account["_id"]})
    assert "password" not in stored
    assert stored["password_hash"] != "secret123"
    assert verify_password("secret123", stored["password_hash"])
    assert stored["role"] == "voter"
    assert stored["has_voted"] is False


def test_account_output_has_no_password_hash(ctx):
    account = crud.create_account(ctx, AccountCreate(**account_payload()))
    out = AccountOut.from_document(account).model_dump()
    assert "password_hash" not in out
    assert out["identity_number"] == "123456789012"


def test_eleven_digit_identity_number_is_rejected():
    with pytest.raises(pydantic.ValidationError):
        AccountCreate(**account_payload(identity_number="12345678901"))


@pytest.mark.parametrize("identity_number", ["1234567890123", "12345678901a", "١٢٣٤٥٦٧٨٩٠١٢"])
def test_malformed_identity_numbers_are_rejected(identity_number):
    with pytest.raises(pydantic.ValidationError):
        AccountCreate(**account_payload(identity_number=identity_number))


def test_numeric_identity_number_is_accepted():
    data = AccountCreate(**account_payload(identity_number=123456789012))
    assert data.identity_number == "123456789012"


def test_duplicate_identity_number_is_a_conflict(ctx):
    crud.create_account(ctx, AccountCreate(**account_payload()))
    with pytest.raises(Conflict) as excinfo:
        crud.create_account(ctx, AccountCreate(**account_payload(name="Someone Else")))
    assert excinfo.value.code == "duplicate_identity"


def test_second_admin_is_a_conflict(ctx, admin):
    with pytest.raises(Conflict) as excinfo:
        crud.create_account(ctx, AccountCreate(**account_payload("111111111111", role="admin")))
    assert excinfo.value.code == "duplicate_admin"
    assert ctx.accounts.count_documents({"role": "admin"}) == 1


def test_unique_index_catches_admin_race(ctx, admin, monkeypatch):
    # both registrations pass the pre-check before either is written
    real_find_one = ctx.accounts.find_one

    def stale_find_one(filter, *args, **kwargs):
        if filter == {"role": "admin"}:
            return None
        return real_find_one(filter, *args, **kwargs)

    monkeypatch.setattr(ctx.accounts, "find_one", stale_find_one)
    with pytest.raises(Conflict) as excinfo:
        crud.create_account(ctx, AccountCreate(**account_payload("111111111111", role="admin")))
    assert excinfo.value.code == "duplicate_admin"


def test_many_voters_can_register(make_voter, ctx):
    for _ in range(3):
        make_voter()
    assert ctx.accounts.count_documents({"role": "voter"}) == 3


def test_authenticate(ctx):
    created = crud.create_account(ctx, AccountCreate(**account_payload()))
    account = crud.authenticate(ctx, "123456789012", "secret123")
    assert account["_id"] == created["_id"]


def test_authenticate_does_not_reveal_which_part_was_wrong(ctx):
    crud.create_account(ctx, AccountCreate(**account_payload()))
    with pytest.raises(Unauthenticated) as unknown:
        crud.authenticate(ctx, "000000000000", "secret123")
    with pytest.raises(Unauthenticated) as wrong:
        crud.authenticate(ctx, "123456789012", "wrong-password")
    assert unknown.value.message == wrong.value.message


def test_change_password(ctx):
    account = crud.create_account(ctx, AccountCreate(**account_payload()))
    crud.change_password(ctx, account, "secret123", "newsecret456")

    crud.authenticate(ctx, "123456789012", "newsecret456")
    with pytest.raises(Unauthenticated):
        crud.authenticate(ctx, "123456789012", "secret123")


def test_change_password_requires_current_password(ctx):
    account = crud.create_account(ctx, AccountCreate(**account_payload()))
    with pytest.raises(Unauthenticated):
        crud.change_password(ctx, account, "not-it", "newsecret456")
    crud.authenticate(ctx, "123456789012", "secret123")


def test_get_account_unknown_or_malformed_id(ctx):
    with pytest.raises(NotFound):
        crud.get_account(ctx, "64b7f0000000000000000000")
    with pytest.raises(NotFound):
        crud.get_account(ctx, "nope")


LONG_MULTIBYTE_PASSWORD = "é" * 36 + "a"  # 37 characters, 73 bytes


def test_password_over_72_bytes_is_rejected_at_signup():
    with pytest.raises(pydantic.ValidationError):
        AccountCreate(**account_payload(password=LONG_MULTIBYTE_PASSWORD))


def test_password_of_72_bytes_is_accepted(ctx):
    password = "é" * 36
    crud.create_account(ctx, AccountCreate(**account_payload(password=password)))
    crud.authenticate(ctx, "123456789012", password)
    with pytest.raises(Unauthenticated):
        crud.authenticate(ctx, "123456789012", "é" * 35 + "e")


def test_new_password_over_72_bytes_is_rejected():
    with pytest.raises(pydantic.ValidationError):
        PasswordChangeRequest(current_password="secret123", new_password=LONG_MULTIBYTE_PASSWORD)


def test_bcrypt_cost_comes_from_settings(settings):
    settings.bcrypt_rounds = 5
    AppContext(settings, client=mongomock.MongoClient())
    assert hash_password("secret123").startswith("$2b$05$")

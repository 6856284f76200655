from datetime import timedelta

import pytest
from flask_jwt_extended import create_access_token

from library_app.errors import AuthError, ConflictError, ValidationError
from library_app.models.user import Role
from library_app.schemas import RegisterIn, parse
from library_app.services.auth_service import AuthService
from tests.conftest import PASSWORD


def test_register_hashes_password_and_defaults_to_member(alice):
    assert alice.role == Role.MEMBER
    assert alice.password_hash != PASSWORD


def test_register_duplicate_email_is_rejected(alice):
    with pytest.raises(ConflictError) as exc:
        AuthService.register(username="alice2", email=alice.email, password=PASSWORD)
    assert exc.value.code == "USER_EXISTS"
    assert exc.value.message == "Email already registered"


def test_register_duplicate_username_is_rejected(alice):
    with pytest.raises(ConflictError) as exc:
        AuthService.register(username="alice", email="other@library.org", password=PASSWORD)
    assert exc.value.message == "Username already taken"


def test_login_returns_verifiable_token(alice):
    token, user = AuthService.login(alice.email, PASSWORD)

    assert user.id == alice.id
    assert AuthService.verify_token(token) == {"subject_id": alice.id, "role": Role.MEMBER}


def test_login_with_wrong_password_fails(alice):
    with pytest.raises(AuthError) as exc:
        AuthService.login(alice.email, "Wrong123")
    assert exc.value.code == "INVALID_CREDENTIALS"


def test_verify_rejects_tampered_and_expired_tokens(alice):
    token = AuthService.issue_token(alice.id, alice.role)
    assert AuthService.verify_token(token + "x") is None
    assert AuthService.verify_token("not-a-token") is None

    expired = create_access_token(
        identity=str(alice.id), additional_claims={"role": alice.role}, expires_delta=timedelta(seconds=-10)
    )
    assert AuthService.verify_token(expired) is None


@pytest.mark.parametrize("payload, fragment", [
    ({"username": "ab", "email": "ab@library.org", "password": PASSWORD}, "username"),
    ({"username": "bad name", "email": "x@library.org", "password": PASSWORD}, "username"),
    ({"username": "carol", "email": "not-an-email", "password": PASSWORD}, "email"),
    ({"username": "carol", "email": "carol@library.org", "password": "alllowercase1"}, "uppercase"),
    ({"username": "carol", "email": "carol@library.org", "password": PASSWORD, "role": "ADMIN"}, "role"),
])
def test_register_input_validation(payload, fragment):
    with pytest.raises(ValidationError) as exc:
        parse(RegisterIn, payload)
    assert fragment in exc.value.message

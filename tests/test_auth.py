from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from supabase import AuthError

from auth import CurrentUser, SupabaseAuth
from exceptions import AuthenticationError


class FakeAuthError(AuthError):
    def __init__(self, message):
        Exception.__init__(self, message)
        self.message = message


def user(uid="u1", email="jana@example.com"):
    return SimpleNamespace(id=uid, email=email)


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def auth(client):
    return SupabaseAuth(client)


class TestCurrentUser:

    def test_returns_opaque_identity(self, auth, client):
        client.auth.get_user.return_value = SimpleNamespace(user=user())
        assert auth.current_user() == CurrentUser("u1", "jana@example.com")

    def test_no_session(self, auth, client):
        client.auth.get_user.return_value = None
        assert auth.current_user() is None

    def test_provider_error_means_anonymous(self, auth, client):
        client.auth.get_user.side_effect = FakeAuthError("Auth session missing!")
        assert auth.current_user() is None


class TestSignIn:

    def test_password_sign_in(self, auth, client):
        client.auth.sign_in_with_password.return_value = SimpleNamespace(user=user(), session=object())
        assert auth.sign_in("jana@example.com", "pw").id == "u1"
        client.auth.sign_in_with_password.assert_called_once_with({"email": "jana@example.com", "password": "pw"})

    def test_rejected_credentials(self, auth, client):
        client.auth.sign_in_with_password.side_effect = FakeAuthError("Invalid login credentials")
        with pytest.raises(AuthenticationError, match="Invalid login credentials"):
            auth.sign_in("jana@example.com", "bad")

    def test_sign_up_awaiting_confirmation(self, auth, client):
        client.auth.sign_up.return_value = SimpleNamespace(user=user(), session=None)
        assert auth.sign_up("jana@example.com", "pw") is None

    def test_sign_up_with_session(self, auth, client):
        client.auth.sign_up.return_value = SimpleNamespace(user=user(), session=object())
        assert auth.sign_up("jana@example.com", "pw") == CurrentUser("u1", "jana@example.com")

    def test_provider_sign_in_returns_url(self, auth, client):
        client.auth.sign_in_with_oauth.return_value = SimpleNamespace(provider="google", url="https://accounts")
        assert auth.sign_in_with_provider("google", "http://localhost/auth/callback") == "https://accounts"
        client.auth.sign_in_with_oauth.assert_called_once_with(
            {"provider": "google", "options": {"redirect_to": "http://localhost/auth/callback"}}
        )

    def test_complete_sign_in_exchanges_code(self, auth, client):
        client.auth.get_session.return_value = SimpleNamespace(user=user())
        assert auth.complete_sign_in("abc").id == "u1"
        client.auth.exchange_code_for_session.assert_called_once_with({"auth_code": "abc"})

    def test_complete_sign_in_without_session(self, auth, client):
        client.auth.get_session.return_value = None
        assert auth.complete_sign_in() is None
        client.auth.exchange_code_for_session.assert_not_called()

    def test_sign_out(self, auth, client):
        auth.sign_out()
        client.auth.sign_out.assert_called_once_with()


def test_from_settings_requires_url_and_key():
    with pytest.raises(ValueError):
        SupabaseAuth.from_settings("", "key")

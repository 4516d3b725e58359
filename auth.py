# auth.py
"""
Thin gateway over Supabase Auth. The app only ever sees an opaque
CurrentUser (or None); sessions and tokens stay inside the Supabase client.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from supabase import AuthError, Client, create_client

from exceptions import AuthenticationError

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "google"


@dataclass(frozen=True)
class CurrentUser:
    id: str
    email: Optional[str] = None

    def to_dict(self) -> dict:
        return {"id": self.id, "email": self.email}


def _as_current_user(user) -> Optional[CurrentUser]:
    if user is None:
        return None
    return CurrentUser(id=str(user.id), email=getattr(user, "email", None))


class SupabaseAuth:
    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def from_settings(cls, url: str, key: str) -> "SupabaseAuth":
        if not url or not key:
            raise ValueError("Supabase configuration is incomplete.")
        logger.info("Initializing Supabase client with URL: %s...", url[:20])
        return cls(create_client(url, key))

    def current_user(self) -> Optional[CurrentUser]:
        try:
            response = self.client.auth.get_user()
        except AuthError as e:
            logger.info("No authenticated user: %s", e)
            return None
        return _as_current_user(response.user if response else None)

    def sign_in(self, email: str, password: str) -> CurrentUser:
        try:
            response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except AuthError as e:
            raise AuthenticationError(e.message) from e
        user = _as_current_user(response.user)
        if user is None:
            raise AuthenticationError("Sign-in returned no user.")
        return user

    def sign_up(self, email: str, password: str) -> Optional[CurrentUser]:
        """Returns None while the address still awaits email confirmation."""
        try:
            response = self.client.auth.sign_up({"email": email, "password": password})
        except AuthError as e:
            raise AuthenticationError(e.message) from e
        return _as_current_user(response.user) if response.session else None

    def sign_in_with_provider(self, provider: str = DEFAULT_PROVIDER, redirect_to: Optional[str] = None) -> str:
        options = {"redirect_to": redirect_to} if redirect_to else {}
        try:
            response = self.client.auth.sign_in_with_oauth({"provider": provider, "options": options})
        except AuthError as e:
            raise AuthenticationError(e.message) from e
        return response.url

    def complete_sign_in(self, code: Optional[str] = None) -> Optional[CurrentUser]:
        try:
            if code:
                self.client.auth.exchange_code_for_session({"auth_code": code})
            session = self.client.auth.get_session()
        except AuthError as e:
            raise AuthenticationError(e.message) from e
        return _as_current_user(session.user) if session else None

    def sign_out(self) -> None:
        try:
            self.client.auth.sign_out()
        except AuthError as e:
            raise AuthenticationError(e.message) from e

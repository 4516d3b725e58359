# exceptions.py
from typing import Optional


class UpkeepError(Exception):
    """Base class for errors raised at the application's boundaries."""


class ValidationError(UpkeepError):
    def __init__(self, message: str, fields: Optional[list[str]] = None):
        super().__init__(message)
        self.fields = fields or []


class ExportError(UpkeepError):
    """PDF (or other document) generation failed; no file was produced."""


class AuthenticationError(UpkeepError):
    """Sign-in, sign-up or sign-out was rejected by the auth provider."""

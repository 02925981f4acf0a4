"""Exceptions raised by the migration application."""

from typing import Any, Optional


class UserException(Exception):
    """
    Error caused by the user's input or project state.

    Reported to the user without a traceback; the CLI exits with code 1.
    """

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class UnrecognizedCredentialsError(UserException):
    """Backup service returned credentials of an unknown storage backend."""

    def __init__(self, message: str = "Unrecognized restore credentials."):
        super().__init__(message)


class ClientError(Exception):
    """Error returned by one of the platform APIs."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional[Any] = None
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response = response

    @property
    def is_client_error(self) -> bool:
        """True for 4xx responses (bad token, missing resource, ...)."""
        return self.status_code is not None and 400 <= self.status_code < 500

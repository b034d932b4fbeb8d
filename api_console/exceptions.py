"""Error taxonomy for the console workflow.

Two domain failures exist and must stay distinguishable by callers:

 - AuthenticationError: the identity provider flow failed (retrying login may help).
 - ApiError: the protected API call failed (the API may be down or rejecting the token).

Alongside them sit InvalidArgumentError for caller bugs (empty token, missing collaborator) and
OperationCancelled for work abandoned through a CancellationToken. Each carries an ErrorKind tag
so the entry point can branch on `exc.kind` instead of walking an isinstance ladder.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    AUTHENTICATION = "authentication"
    API = "api"
    INVALID_ARGUMENT = "invalid_argument"
    CANCELLED = "cancelled"


class AuthenticationError(Exception):
    """Raised when acquiring an access token fails."""

    kind = ErrorKind.AUTHENTICATION

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class ApiError(Exception):
    """Raised when the authenticated API call fails."""

    kind = ErrorKind.API

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class InvalidArgumentError(ValueError):
    """Precondition violation: a required argument, collaborator or setting is missing/invalid."""

    kind = ErrorKind.INVALID_ARGUMENT

    def __init__(self, message: str, name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.name = name


class OperationCancelled(Exception):
    """Raised when a CancellationToken fires; never wrapped into AuthenticationError or ApiError."""

    kind = ErrorKind.CANCELLED

    def __init__(self, message: str = "The operation was cancelled"):
        super().__init__(message)
        self.message = message


def error_kind(exc: BaseException) -> Optional[ErrorKind]:
    """Return the ErrorKind tag of a domain exception, or None for anything else."""
    kind = getattr(exc, "kind", None)
    return kind if isinstance(kind, ErrorKind) else None


def require(value, name: str):
    """Return value, raising InvalidArgumentError when it is None."""
    if value is None:
        raise InvalidArgumentError(f"{name} is required", name=name)
    return value

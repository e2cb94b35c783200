from abc import ABC
from typing import ClassVar


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """

    kind: ClassVar[str] = "bad_request"


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    kind = "not_found"

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message)


class AuthenticationError(UserError):
    """Raised when authentication fails."""

    kind = "authentication_error"

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class ValidationError(UserError):
    """Raised when user input fails validation."""

    kind = "validation_error"


class InvalidOrExpiredCodeError(UserError):
    """Raised when a submitted one-time code matches no usable vault session."""

    kind = "invalid_or_expired_code"

    def __init__(self, message: str = "The code is incorrect or expired") -> None:
        super().__init__(message)


class VaultLockedError(UserError):
    """Raised when a vault operation is attempted without a valid verified session."""

    kind = "vault_locked"

    def __init__(self, message: str = "Vault is locked, verify a one-time code first") -> None:
        super().__init__(message)


class IssuanceFailedError(UserError):
    """Raised when a one-time code could not be stored or delivered."""

    kind = "issuance_failed"

    def __init__(self, message: str = "Failed to send verification code") -> None:
        super().__init__(message)


class RateLimitedError(UserError):
    """Raised when too many one-time codes are outstanding for an owner."""

    kind = "rate_limited"

    def __init__(self, message: str = "Too many pending verification codes, try again later") -> None:
        super().__init__(message)


class StorageError(UserError):
    """Raised when a vault document could not be persisted."""

    kind = "storage_error"

    def __init__(self, message: str = "Failed to store document") -> None:
        super().__init__(message)

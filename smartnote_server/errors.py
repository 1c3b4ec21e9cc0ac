# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Authentication and credential-lifecycle failures.

Every failure raised by the auth service is an AuthError with a fixed kind.
The HTTP layer maps kinds to status codes (see error_handling.py).
"""

import enum


class ErrorKind(str, enum.Enum):
    ALREADY_EXISTS = "already_exists"
    INVALID_CREDENTIALS = "invalid_credentials"
    USER_NOT_FOUND = "user_not_found"
    MISSING_TOKEN = "missing_token"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_INVALID = "token_invalid"
    TOKEN_REVOKED = "token_revoked"
    RESET_ALREADY_PENDING = "reset_already_pending"
    INVALID_OR_EXPIRED_OTP = "invalid_or_expired_otp"
    PASSWORD_UNCHANGED = "password_unchanged"
    EMAIL_DELIVERY_FAILED = "email_delivery_failed"


class AuthError(Exception):
    """Base class. Subclasses set kind and a default message."""

    kind: ErrorKind
    default_message: str = "Authentication error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class AlreadyExists(AuthError):
    kind = ErrorKind.ALREADY_EXISTS
    default_message = "User with this email already exists"


class InvalidCredentials(AuthError):
    kind = ErrorKind.INVALID_CREDENTIALS
    default_message = "Invalid email or password"


class UserNotFound(AuthError):
    kind = ErrorKind.USER_NOT_FOUND
    default_message = "User not found"


class MissingToken(AuthError):
    kind = ErrorKind.MISSING_TOKEN
    default_message = "Access token required"


class TokenExpired(AuthError):
    kind = ErrorKind.TOKEN_EXPIRED
    default_message = "Token expired"


class TokenInvalid(AuthError):
    kind = ErrorKind.TOKEN_INVALID
    default_message = "Invalid token"


class TokenRevoked(AuthError):
    kind = ErrorKind.TOKEN_REVOKED
    default_message = "Token has been revoked"


class ResetAlreadyPending(AuthError):
    """A reset code is still valid; carries how long until another may be requested."""

    kind = ErrorKind.RESET_ALREADY_PENDING

    def __init__(self, remaining_minutes: int) -> None:
        self.remaining_minutes = remaining_minutes
        super().__init__(
            f"Please wait {remaining_minutes} minutes before requesting another OTP"
        )


class InvalidOrExpiredOtp(AuthError):
    kind = ErrorKind.INVALID_OR_EXPIRED_OTP
    default_message = "Invalid or expired OTP"


class PasswordUnchanged(AuthError):
    kind = ErrorKind.PASSWORD_UNCHANGED
    default_message = "New password must be different from current password"


class EmailDeliveryFailed(AuthError):
    kind = ErrorKind.EMAIL_DELIVERY_FAILED
    default_message = "Failed to send OTP email. Please try again later."

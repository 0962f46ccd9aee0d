"""Authentication faults.

Each fault carries its own domain error code. Those codes have no canonical
message, so the wording below (or a caller-supplied message) reaches the
client unchanged.
"""

from __future__ import annotations

from studenthub_api.middleware.error_handler import HttpError
from studenthub_api.models.error_codes import ErrorCode


class InvalidCredentialsError(HttpError):
    status_code = 401
    code = ErrorCode.AUTH_INVALID_CREDENTIALS.value
    message = "Invalid email or password"


class EmailAlreadyExistsError(HttpError):
    status_code = 409
    code = ErrorCode.AUTH_EMAIL_ALREADY_EXISTS.value
    message = "User with this email already exists"

    def __init__(self, email: str | None = None) -> None:
        super().__init__(f"User with email {email} already exists" if email else None)
        self.email = email


class EmailNotVerifiedError(HttpError):
    status_code = 403
    code = ErrorCode.AUTH_EMAIL_NOT_VERIFIED.value
    message = "Email is not verified. Please verify your email first."


class InvalidVerificationCodeError(HttpError):
    status_code = 400
    code = ErrorCode.AUTH_INVALID_VERIFICATION_CODE.value
    message = "Invalid or expired verification code"


class TwoFactorRequiredError(HttpError):
    status_code = 401
    code = ErrorCode.AUTH_2FA_REQUIRED.value
    message = "Two-factor authentication is required"


class InvalidTwoFactorCodeError(HttpError):
    status_code = 400
    code = ErrorCode.AUTH_INVALID_2FA_CODE.value
    message = "Invalid two-factor authentication code"


class TokenExpiredError(HttpError):
    status_code = 401
    code = ErrorCode.AUTH_TOKEN_EXPIRED.value
    message = "Token has expired"


class TokenBlacklistedError(HttpError):
    status_code = 401
    code = ErrorCode.AUTH_TOKEN_REVOKED.value
    message = "Token has been revoked"


class InvalidTokenError(HttpError):
    status_code = 401
    code = ErrorCode.AUTH_TOKEN_INVALID.value
    message = "Invalid token"


class PasswordTooWeakError(HttpError):
    status_code = 400
    code = ErrorCode.AUTH_PASSWORD_TOO_WEAK.value
    message = "Password is too weak"


class SamePasswordError(HttpError):
    status_code = 400
    code = ErrorCode.AUTH_SAME_PASSWORD.value
    message = "New password must be different from the current password"


class AccountLockedError(HttpError):
    status_code = 403
    code = ErrorCode.AUTH_ACCOUNT_LOCKED.value
    message = "Account is locked due to multiple failed login attempts"

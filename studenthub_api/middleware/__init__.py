"""Middleware package: fault hierarchy, error translation, envelopes, request ID."""

from studenthub_api.middleware.auth_errors import (
    AccountLockedError,
    EmailAlreadyExistsError,
    EmailNotVerifiedError,
    InvalidCredentialsError,
    InvalidTokenError,
    InvalidTwoFactorCodeError,
    InvalidVerificationCodeError,
    PasswordTooWeakError,
    SamePasswordError,
    TokenBlacklistedError,
    TokenExpiredError,
    TwoFactorRequiredError,
)
from studenthub_api.middleware.envelope import EnvelopeRoute, enveloped
from studenthub_api.middleware.error_handler import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    HttpError,
    InternalServerError,
    NotFoundError,
    RateLimitExceededError,
    ServiceUnavailableError,
    UnauthorizedError,
    register_error_handlers,
    translate_exception,
)
from studenthub_api.middleware.request_id import RequestIdMiddleware, current_request_id

__all__ = [
    "AccountLockedError",
    "BadRequestError",
    "ConflictError",
    "EmailAlreadyExistsError",
    "EmailNotVerifiedError",
    "EnvelopeRoute",
    "ForbiddenError",
    "HttpError",
    "InternalServerError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "InvalidTwoFactorCodeError",
    "InvalidVerificationCodeError",
    "NotFoundError",
    "PasswordTooWeakError",
    "RateLimitExceededError",
    "RequestIdMiddleware",
    "SamePasswordError",
    "ServiceUnavailableError",
    "TokenBlacklistedError",
    "TokenExpiredError",
    "TwoFactorRequiredError",
    "UnauthorizedError",
    "current_request_id",
    "enveloped",
    "register_error_handlers",
    "translate_exception",
]

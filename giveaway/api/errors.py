from __future__ import annotations

import structlog
from fastapi import HTTPException, status

from giveaway.admin_users.errors import (
    AdminUserExistsError,
    AdminUserNotFoundError,
)
from giveaway.auth.errors import OtpDeliveryError, OtpRateLimitedError, PermissionDeniedError
from giveaway.campaigns.errors import (
    CampaignNotFoundError,
    CampaignSlugTakenError,
    DraftNotFoundError,
    GiftCodeNotFoundError,
    InviteCodeNotFoundError,
    InviteCodeTakenError,
    QuestionNotFoundError,
    VersionNotFoundError,
)
from giveaway.claims.errors import (
    AddressLimitReachedError,
    CampaignAtCapacityError,
    ClaimNotFoundError,
    ClaimRateLimitedError,
    ClaimTokenInvalidError,
    DuplicateClaimError,
    DuplicateEmailError,
)
from giveaway.core.errors import DomainError

logger = structlog.get_logger(__name__)

ERROR_STATUS: tuple[tuple[type[DomainError], int], ...] = (
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (OtpRateLimitedError, status.HTTP_429_TOO_MANY_REQUESTS),
    (ClaimRateLimitedError, status.HTTP_429_TOO_MANY_REQUESTS),
    (OtpDeliveryError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (CampaignNotFoundError, status.HTTP_404_NOT_FOUND),
    (DraftNotFoundError, status.HTTP_404_NOT_FOUND),
    (VersionNotFoundError, status.HTTP_404_NOT_FOUND),
    (InviteCodeNotFoundError, status.HTTP_404_NOT_FOUND),
    (GiftCodeNotFoundError, status.HTTP_404_NOT_FOUND),
    (QuestionNotFoundError, status.HTTP_404_NOT_FOUND),
    (ClaimNotFoundError, status.HTTP_404_NOT_FOUND),
    (ClaimTokenInvalidError, status.HTTP_404_NOT_FOUND),
    (AdminUserNotFoundError, status.HTTP_404_NOT_FOUND),
    (CampaignSlugTakenError, status.HTTP_409_CONFLICT),
    (InviteCodeTakenError, status.HTTP_409_CONFLICT),
    (CampaignAtCapacityError, status.HTTP_409_CONFLICT),
    (DuplicateClaimError, status.HTTP_409_CONFLICT),
    (AddressLimitReachedError, status.HTTP_409_CONFLICT),
    (DuplicateEmailError, status.HTTP_409_CONFLICT),
    (AdminUserExistsError, status.HTTP_409_CONFLICT),
)


def error_status(exc: DomainError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def error_detail(code: str, message: str) -> dict[str, str]:
    return {"code": code, "message": message}


def as_http_exception(exc: DomainError) -> HTTPException:
    status_code = error_status(exc)
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("domain_error_upstream_failure", code=exc.code, error=exc.message)
    return HTTPException(status_code=status_code, detail=error_detail(exc.code, exc.message))

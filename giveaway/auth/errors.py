from giveaway.core.errors import DomainError


class AuthError(DomainError):
    code = "E_AUTH"
    message = "Authentication failed"


class OtpRateLimitedError(AuthError):
    code = "E_OTP_RATE_LIMITED"
    message = "Too many OTP requests. Please try again later."


class OtpDeliveryError(AuthError):
    code = "E_OTP_DELIVERY_FAILED"
    message = "Failed to send OTP email"


class PermissionDeniedError(AuthError):
    code = "E_FORBIDDEN"
    message = "You do not have permission to perform this action"

from giveaway.core.errors import DomainError


class ClaimError(DomainError):
    code = "E_CLAIM"


class CampaignNotStartedError(ClaimError):
    code = "E_CAMPAIGN_NOT_STARTED"
    message = "Campaign has not started yet"


class CampaignEndedError(ClaimError):
    code = "E_CAMPAIGN_ENDED"
    message = "Campaign has ended"


class ClaimMissingFieldsError(ClaimError):
    code = "E_CLAIM_MISSING_FIELDS"
    message = "Missing required address fields"


class ClaimEmailRequiredError(ClaimError):
    code = "E_CLAIM_EMAIL_REQUIRED"
    message = "Email is required for this campaign"


class ClaimConsentRequiredError(ClaimError):
    code = "E_CLAIM_CONSENT_REQUIRED"
    message = "Consent is required to submit"


class ClaimAnswersInvalidError(ClaimError):
    code = "E_CLAIM_ANSWERS_INVALID"
    message = "Please answer all required questions"


class InviteCodeInvalidError(ClaimError):
    code = "E_INVITE_CODE_INVALID"
    message = "Invalid invite code"


class InviteCodeExhaustedError(ClaimError):
    code = "E_INVITE_CODE_EXHAUSTED"
    message = "Invite code has reached maximum uses"


class CampaignAtCapacityError(ClaimError):
    code = "E_CAMPAIGN_AT_CAPACITY"
    message = "Campaign is at capacity"


class ClaimRateLimitedError(ClaimError):
    code = "E_CLAIM_RATE_LIMITED"
    message = "Too many claims from this IP address"


class DuplicateClaimError(ClaimError):
    code = "E_CLAIM_DUPLICATE"
    message = "Good news - you're already registered! We have your information for this campaign."


class AddressLimitReachedError(ClaimError):
    code = "E_CLAIM_ADDRESS_LIMIT"
    message = "This address has reached the maximum number of people for this campaign"


class DuplicateEmailError(ClaimError):
    code = "E_CLAIM_DUPLICATE_EMAIL"
    message = "This email has already been used for this campaign"


class ClaimNotFoundError(ClaimError):
    code = "E_CLAIM_NOT_FOUND"
    message = "Claim not found"


class ClaimTokenInvalidError(ClaimError):
    code = "E_CLAIM_TOKEN_INVALID"
    message = "Invalid or expired claim token"


class ClaimAlreadySubmittedError(ClaimError):
    code = "E_CLAIM_ALREADY_SUBMITTED"
    message = "This claim has already been submitted"


class ClaimInvalidUpdateError(ClaimError):
    code = "E_CLAIM_INVALID_UPDATE"
    message = "Invalid claim update"


class ImportFileInvalidError(ClaimError):
    code = "E_IMPORT_INVALID"
    message = "Import file could not be read"


class VerificationInvalidError(ClaimError):
    code = "E_VERIFICATION_INVALID"
    message = "Invalid or already used verification link"


class VerificationExpiredError(ClaimError):
    code = "E_VERIFICATION_EXPIRED"
    message = "Verification link has expired"

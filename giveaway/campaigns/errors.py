from giveaway.core.errors import DomainError


class CampaignError(DomainError):
    code = "E_CAMPAIGN"


class CampaignNotFoundError(CampaignError):
    code = "E_CAMPAIGN_NOT_FOUND"
    message = "Campaign not found or inactive"


class CampaignSlugTakenError(CampaignError):
    code = "E_CAMPAIGN_SLUG_TAKEN"
    message = "A campaign with this slug already exists"


class CampaignInvalidError(CampaignError):
    code = "E_CAMPAIGN_INVALID"
    message = "Campaign data is invalid"


class CampaignHasClaimsError(CampaignError):
    code = "E_CAMPAIGN_HAS_CLAIMS"
    message = "Cannot delete a campaign that has claims"


class DraftNotFoundError(CampaignError):
    code = "E_DRAFT_NOT_FOUND"
    message = "No draft to publish"


class VersionNotFoundError(CampaignError):
    code = "E_VERSION_NOT_FOUND"
    message = "Version not found"


class InviteCodeNotFoundError(CampaignError):
    code = "E_INVITE_CODE_NOT_FOUND"
    message = "Invite code not found"


class InviteCodeTakenError(CampaignError):
    code = "E_INVITE_CODE_TAKEN"
    message = "This invite code already exists for the campaign"


class GiftCodeNotFoundError(CampaignError):
    code = "E_GIFT_CODE_NOT_FOUND"
    message = "Gift code not found"


class QuestionNotFoundError(CampaignError):
    code = "E_QUESTION_NOT_FOUND"
    message = "Question not found"

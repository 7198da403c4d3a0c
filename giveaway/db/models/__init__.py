from giveaway.db.models.admin_gift_codes import AdminGiftCode
from giveaway.db.models.admin_otp_requests import AdminOtpRequest
from giveaway.db.models.admin_sessions import AdminSession
from giveaway.db.models.admin_users import AdminUser
from giveaway.db.models.campaign_questions import CampaignQuestion
from giveaway.db.models.campaign_versions import CampaignVersion
from giveaway.db.models.campaigns import Campaign
from giveaway.db.models.claim_answers import ClaimAnswer
from giveaway.db.models.claims import Claim
from giveaway.db.models.email_verifications import EmailVerification
from giveaway.db.models.invite_codes import InviteCode

__all__ = [
    "AdminGiftCode",
    "AdminOtpRequest",
    "AdminSession",
    "AdminUser",
    "Campaign",
    "CampaignQuestion",
    "CampaignVersion",
    "Claim",
    "ClaimAnswer",
    "EmailVerification",
    "InviteCode",
]

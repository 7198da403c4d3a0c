from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from giveaway.claims.types import ClaimPayload

NULLABLE_CAMPAIGN_FIELDS = frozenset(
    {
        "title",
        "description",
        "capacity_total",
        "starts_at",
        "ends_at",
        "max_claims_per_address",
        "privacy_blurb",
        "contact_email",
        "notes",
    }
)


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class OkResponse(ApiModel):
    ok: bool = True


class CampaignFieldsBody(ApiModel):
    title: str | None = Field(default=None, max_length=500)
    description: str | None = None
    capacity_total: int | None = Field(default=None, ge=0)
    is_active: bool | None = None
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    require_email: bool | None = None
    require_email_verification: bool | None = None
    require_invite_code: bool | None = None
    show_scarcity: bool | None = None
    test_mode: bool | None = None
    kiosk_mode: bool | None = None
    show_banner: bool | None = None
    show_logo: bool | None = None
    enable_questions: bool | None = None
    collect_company: bool | None = None
    collect_phone: bool | None = None
    collect_title: bool | None = None
    max_claims_per_email: int | None = Field(default=None, ge=0)
    max_claims_per_ip_per_day: int | None = Field(default=None, ge=0)
    max_claims_per_address: int | None = Field(default=None, ge=0)
    privacy_blurb: str | None = None
    contact_email: str | None = None
    notes: str | None = None

    def campaign_fields(self) -> dict[str, Any]:
        values = self.model_dump(exclude_unset=True, exclude={"slug", "change_summary"})
        return {
            name: value
            for name, value in values.items()
            if value is not None or name in NULLABLE_CAMPAIGN_FIELDS
        }


class CampaignCreateBody(CampaignFieldsBody):
    slug: str = Field(min_length=1, max_length=128)
    title: str = Field(min_length=1, max_length=500)


class CampaignUpdateBody(CampaignFieldsBody):
    change_summary: str | None = Field(default=None, max_length=500)


class CampaignResponse(ApiModel):
    id: UUID
    slug: str
    title: str
    description: str | None
    capacity_total: int | None
    is_active: bool
    starts_at: datetime | None
    ends_at: datetime | None
    require_email: bool
    require_email_verification: bool
    require_invite_code: bool
    show_scarcity: bool
    test_mode: bool
    kiosk_mode: bool
    show_banner: bool
    show_logo: bool
    enable_questions: bool
    collect_company: bool
    collect_phone: bool
    collect_title: bool
    max_claims_per_email: int
    max_claims_per_ip_per_day: int
    max_claims_per_address: int | None
    privacy_blurb: str | None
    contact_email: str | None
    notes: str | None
    current_version: int
    has_draft: bool
    created_by: UUID | None
    updated_by: UUID | None
    created_at: datetime
    updated_at: datetime


class CampaignDetailResponse(CampaignResponse):
    confirmed_count: int = Field(ge=0)
    pending_count: int = Field(ge=0)
    shipped_count: int = Field(ge=0)


class PublicCampaignResponse(ApiModel):
    id: UUID
    slug: str
    title: str
    description: str | None
    capacity_total: int | None
    starts_at: datetime | None
    ends_at: datetime | None
    require_email: bool
    require_invite_code: bool
    show_scarcity: bool
    kiosk_mode: bool
    show_banner: bool
    show_logo: bool
    collect_company: bool
    collect_phone: bool
    collect_title: bool
    privacy_blurb: str | None
    contact_email: str | None


class ClaimBody(ApiModel):
    first_name: str = Field(default="", max_length=200)
    last_name: str = Field(default="", max_length=200)
    email: str | None = Field(default=None, max_length=320)
    company: str | None = Field(default=None, max_length=200)
    title: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=64)
    address1: str = Field(default="", max_length=300)
    address2: str | None = Field(default=None, max_length=300)
    city: str = Field(default="", max_length=200)
    region: str = Field(default="", max_length=200)
    postal_code: str = Field(default="", max_length=32)
    country: str = Field(default="", max_length=64)
    invite_code: str | None = Field(default=None, max_length=64)
    claim_token: str | None = Field(default=None, max_length=64)
    gift_code: str | None = Field(default=None, max_length=32)
    consent: bool = False
    answers: dict[UUID, str | list[str]] = Field(default_factory=dict)

    def to_payload(self) -> ClaimPayload:
        return ClaimPayload(
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            company=self.company,
            title=self.title,
            phone=self.phone,
            address1=self.address1,
            address2=self.address2,
            city=self.city,
            region=self.region,
            postal_code=self.postal_code,
            country=self.country,
            invite_code=self.invite_code,
            claim_token=self.claim_token,
            gift_code=self.gift_code,
            consent=self.consent,
            answers=dict(self.answers),
        )


class AdminClaimBody(ClaimBody):
    admin_notes: str | None = None


class ClaimSubmissionResponse(ApiModel):
    ok: bool = True
    requires_verification: bool
    claim_id: UUID


class ClaimResponse(ApiModel):
    id: UUID
    campaign_id: UUID
    status: str
    first_name: str
    last_name: str
    email: str | None
    company: str | None
    title: str | None
    phone: str | None
    address1: str
    address2: str | None
    city: str
    region: str
    postal_code: str
    country: str
    invite_code: str | None
    is_test_claim: bool
    claim_token: str | None
    pre_created_by: UUID | None
    admin_notes: str | None
    consent_given: bool
    created_at: datetime
    confirmed_at: datetime | None
    shipped_at: datetime | None


class PrefilledClaimResponse(ApiModel):
    id: UUID
    first_name: str
    last_name: str
    email: str | None
    company: str | None
    title: str | None
    phone: str | None


class PreCreatedClaimLookupResponse(ApiModel):
    campaign: PublicCampaignResponse
    claim: PrefilledClaimResponse


class GifterResponse(ApiModel):
    name: str | None
    email: str | None
    phone: str | None
    linkedin_url: str | None
    bio: str | None


class GiftLandingResponse(ApiModel):
    campaign: PublicCampaignResponse
    gifter: GifterResponse
    custom_message: str | None


class CampaignVersionResponse(ApiModel):
    id: UUID
    version_number: int
    status: str
    data: dict[str, Any]
    change_summary: str | None
    created_by: UUID | None
    created_at: datetime
    published_at: datetime | None
    published_by: UUID | None


class VersionHistoryResponse(ApiModel):
    versions: list[CampaignVersionResponse]
    current_version: int
    has_draft: bool


class RevertBody(ApiModel):
    version_number: int = Field(ge=1)


class RegisteredClaimResponse(ApiModel):
    claim: ClaimResponse
    confirmed_count: int
    capacity_total: int | None


class PreCreateClaimBody(ApiModel):
    first_name: str = Field(default="", max_length=200)
    last_name: str = Field(default="", max_length=200)
    email: str | None = Field(default=None, max_length=320)
    company: str | None = Field(default=None, max_length=200)
    title: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=64)
    admin_notes: str | None = None

    def to_payload(self) -> ClaimPayload:
        return ClaimPayload(
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            company=self.company,
            title=self.title,
            phone=self.phone,
        )


class PreCreatedClaimResponse(ApiModel):
    claim: ClaimResponse
    claim_url: str


class ClaimUpdateBody(ApiModel):
    admin_notes: str | None = None
    status: str | None = None
    shipped: bool | None = None
    first_name: str | None = Field(default=None, max_length=200)
    last_name: str | None = Field(default=None, max_length=200)
    email: str | None = Field(default=None, max_length=320)
    company: str | None = Field(default=None, max_length=200)
    title: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=64)


class ClaimIdsBody(ApiModel):
    claim_ids: list[UUID] = Field(max_length=1000)


class BulkShippedBody(ClaimIdsBody):
    shipped: bool = True


class BulkResultResponse(ApiModel):
    ok: bool = True
    count: int = Field(ge=0)


class InviteCodeBody(ApiModel):
    code: str = Field(min_length=1, max_length=64)
    max_uses: int | None = Field(default=None, ge=0)


class InviteCodeToggleBody(ApiModel):
    is_active: bool


class InviteCodeResponse(ApiModel):
    id: UUID
    campaign_id: UUID
    code: str
    uses: int
    max_uses: int | None
    is_active: bool
    created_at: datetime


class QuestionBody(ApiModel):
    question_text: str = Field(min_length=1, max_length=1000)
    question_type: str = "text"
    is_required: bool = False
    options: list[str] | None = None


class QuestionUpdateBody(ApiModel):
    question_text: str | None = Field(default=None, min_length=1, max_length=1000)
    is_required: bool | None = None
    display_order: int | None = Field(default=None, ge=0)
    options: list[str] | None = None


class QuestionResponse(ApiModel):
    id: UUID
    campaign_id: UUID
    question_text: str
    question_type: str
    is_required: bool
    display_order: int
    options: list[str] | None
    created_at: datetime


class ProfileResponse(ApiModel):
    id: UUID
    email: str
    name: str
    role: str
    display_name: str | None
    linkedin_url: str | None
    bio: str | None
    phone: str | None


class GiftCodeBody(ApiModel):
    label: str | None = Field(default=None, max_length=200)
    custom_message: str | None = None
    custom_display_name: str | None = Field(default=None, max_length=200)
    show_name: bool | None = None
    show_linkedin: bool | None = None
    show_bio: bool | None = None
    show_phone: bool | None = None
    show_email: bool | None = None

    def options(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class GiftCodeResponse(ApiModel):
    id: UUID
    campaign_id: UUID
    code: str
    label: str
    custom_message: str | None
    custom_display_name: str | None
    show_name: bool
    show_linkedin: bool
    show_bio: bool
    show_phone: bool
    show_email: bool
    created_at: datetime
    gift_url: str


class GiftCodeListResponse(ApiModel):
    codes: list[GiftCodeResponse]
    campaign: PublicCampaignResponse
    profile: ProfileResponse | None


class AdminUserCreateBody(ApiModel):
    email: str = Field(min_length=3, max_length=320)
    name: str = Field(min_length=1, max_length=200)
    role: str


class AdminUserUpdateBody(ApiModel):
    role: str | None = None
    is_active: bool | None = None
    name: str | None = Field(default=None, max_length=200)


class AdminUserResponse(ApiModel):
    id: UUID
    email: str
    name: str
    role: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ProfileBody(ApiModel):
    display_name: str | None = Field(default=None, max_length=200)
    linkedin_url: str | None = Field(default=None, max_length=500)
    bio: str | None = Field(default=None, max_length=2000)
    phone: str | None = Field(default=None, max_length=64)

    def profile_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ImportErrorResponse(ApiModel):
    row: int
    error: str


class ImportSummaryResponse(ApiModel):
    ok: bool = True
    imported: int = Field(ge=0)
    skipped: int = Field(ge=0)
    total: int = Field(ge=0)
    errors: list[ImportErrorResponse]

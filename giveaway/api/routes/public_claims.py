from __future__ import annotations

from fastapi import APIRouter, Depends

from giveaway.api.deps import ClientMeta, get_client_meta, get_mailer, get_session_factory
from giveaway.api.errors import as_http_exception
from giveaway.api.schemas import (
    ClaimBody,
    ClaimSubmissionResponse,
    GifterResponse,
    GiftLandingResponse,
    PreCreatedClaimLookupResponse,
    PrefilledClaimResponse,
    PublicCampaignResponse,
    QuestionResponse,
)
from giveaway.campaigns.errors import CampaignError
from giveaway.campaigns.gift_codes import GiftCodeService
from giveaway.campaigns.questions import QuestionService
from giveaway.claims.admin import AdminClaimService
from giveaway.claims.errors import ClaimError
from giveaway.claims.service import ClaimService
from giveaway.db.session import SessionFactory
from giveaway.services.mailer import Mailer

router = APIRouter(prefix="/campaigns", tags=["claims"])


@router.post("/{slug}/claim", response_model=ClaimSubmissionResponse)
async def submit_claim(
    slug: str,
    payload: ClaimBody,
    meta: ClientMeta = Depends(get_client_meta),
    session_factory: SessionFactory = Depends(get_session_factory),
    mailer: Mailer = Depends(get_mailer),
) -> ClaimSubmissionResponse:
    try:
        async with session_factory.begin() as session:
            result = await ClaimService.submit_claim(
                session,
                slug=slug,
                payload=payload.to_payload(),
                ip_hash=meta.ip_hash,
                user_agent=meta.user_agent,
                mailer=mailer,
            )
    except (CampaignError, ClaimError) as exc:
        raise as_http_exception(exc) from exc

    return ClaimSubmissionResponse(
        requires_verification=result.requires_verification,
        claim_id=result.claim_id,
    )


@router.get("/{slug}/claim/{token}", response_model=PreCreatedClaimLookupResponse)
async def get_pre_created_claim(
    slug: str,
    token: str,
    session_factory: SessionFactory = Depends(get_session_factory),
) -> PreCreatedClaimLookupResponse:
    try:
        async with session_factory() as session:
            lookup = await AdminClaimService.get_pre_created_claim(
                session,
                slug=slug,
                claim_token=token,
            )
    except (CampaignError, ClaimError) as exc:
        raise as_http_exception(exc) from exc

    return PreCreatedClaimLookupResponse(
        campaign=PublicCampaignResponse.model_validate(lookup.campaign),
        claim=PrefilledClaimResponse.model_validate(lookup.claim),
    )


@router.get("/{slug}/gift/{code}", response_model=GiftLandingResponse)
async def get_gift_landing(
    slug: str,
    code: str,
    session_factory: SessionFactory = Depends(get_session_factory),
) -> GiftLandingResponse:
    try:
        async with session_factory() as session:
            landing = await GiftCodeService.get_landing(session, slug=slug, code=code)
    except (CampaignError, ClaimError) as exc:
        raise as_http_exception(exc) from exc

    return GiftLandingResponse(
        campaign=PublicCampaignResponse.model_validate(landing.campaign),
        gifter=GifterResponse.model_validate(landing.gifter),
        custom_message=landing.custom_message,
    )


@router.get("/{slug}/questions", response_model=list[QuestionResponse])
async def list_campaign_questions(
    slug: str,
    session_factory: SessionFactory = Depends(get_session_factory),
) -> list[QuestionResponse]:
    try:
        async with session_factory() as session:
            questions = await QuestionService.list_public_questions(session, slug)
    except CampaignError as exc:
        raise as_http_exception(exc) from exc
    return [QuestionResponse.model_validate(question) for question in questions]

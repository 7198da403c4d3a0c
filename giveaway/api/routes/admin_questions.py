from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from giveaway.api.deps import get_session_factory, require_admin
from giveaway.api.errors import as_http_exception
from giveaway.api.schemas import OkResponse, QuestionBody, QuestionResponse, QuestionUpdateBody
from giveaway.auth.types import AdminPrincipal
from giveaway.campaigns.questions import QuestionService
from giveaway.core.errors import DomainError
from giveaway.db.session import SessionFactory

router = APIRouter(
    prefix="/admin/campaigns/{campaign_id}/questions",
    tags=["admin", "questions"],
)


@router.get("", response_model=list[QuestionResponse])
async def list_questions(
    campaign_id: UUID,
    principal: AdminPrincipal = Depends(require_admin),  # noqa: ARG001
    session_factory: SessionFactory = Depends(get_session_factory),
) -> list[QuestionResponse]:
    try:
        async with session_factory() as session:
            questions = await QuestionService.list_questions(session, campaign_id)
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return [QuestionResponse.model_validate(question) for question in questions]


@router.post("", response_model=QuestionResponse, status_code=status.HTTP_201_CREATED)
async def create_question(
    campaign_id: UUID,
    payload: QuestionBody,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> QuestionResponse:
    try:
        async with session_factory.begin() as session:
            question = await QuestionService.create_question(
                session,
                principal=principal,
                campaign_id=campaign_id,
                question_text=payload.question_text,
                question_type=payload.question_type,
                is_required=payload.is_required,
                options=payload.options,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return QuestionResponse.model_validate(question)


@router.patch("/{question_id}", response_model=QuestionResponse)
async def update_question(
    campaign_id: UUID,
    question_id: UUID,
    payload: QuestionUpdateBody,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> QuestionResponse:
    try:
        async with session_factory.begin() as session:
            question = await QuestionService.update_question(
                session,
                principal=principal,
                campaign_id=campaign_id,
                question_id=question_id,
                changes=payload.model_dump(exclude_unset=True),
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return QuestionResponse.model_validate(question)


@router.delete("/{question_id}", response_model=OkResponse)
async def delete_question(
    campaign_id: UUID,
    question_id: UUID,
    principal: AdminPrincipal = Depends(require_admin),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> OkResponse:
    try:
        async with session_factory.begin() as session:
            await QuestionService.delete_question(
                session,
                principal=principal,
                campaign_id=campaign_id,
                question_id=question_id,
            )
    except DomainError as exc:
        raise as_http_exception(exc) from exc
    return OkResponse()

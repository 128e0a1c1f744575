from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Request, status
from pydantic import BaseModel, Field

from sigma_arena.core.errors import SigmaArenaError
from sigma_arena.db.session import SessionLocal
from sigma_arena.feedback.service import submit_feedback

from .route_helpers import http_error, now_utc, resolve_request_identity

router = APIRouter(tags=["feedback"])


class FeedbackRequest(BaseModel):
    feedback_text: str = Field(max_length=20000)
    page_url: str | None = Field(default=None, max_length=2048)


class FeedbackResponse(BaseModel):
    id: UUID
    created_at: datetime


@router.post("/feedback", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
async def create_feedback(payload: FeedbackRequest, request: Request) -> FeedbackResponse:
    now = now_utc()
    try:
        async with SessionLocal.begin() as session:
            identity = await resolve_request_identity(session, request)
            feedback = await submit_feedback(
                session,
                user_id=identity.user.id if identity.user is not None else None,
                text=payload.feedback_text,
                user_agent=request.headers.get("User-Agent"),
                page_url=payload.page_url,
                now_utc=now,
            )
    except SigmaArenaError as exc:
        raise http_error(exc) from exc
    return FeedbackResponse(id=feedback.id, created_at=feedback.created_at)

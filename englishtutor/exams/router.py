"""
Practice API routes.

The caller is identified by the ``X-User-Id`` header; authentication is
handled in front of this service.
"""

from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Header, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from englishtutor.api import APIResponse
from .service import PracticeService


router = APIRouter()


class SubmitAnswerRequest(BaseModel):
    answer: Union[str, List[str]] = Field(..., description="Answer text, or one answer per sub-question")
    audio_ref: Optional[str] = Field(None, description="Recorded answer (gs:// URI or base64 audio)")
    time_spent: int = Field(0, ge=0, description="Seconds spent on the question")


def get_practice_service(request: Request) -> PracticeService:
    return request.app.state.practice_service


def get_current_user_id(x_user_id: str = Header(..., min_length=1)) -> str:
    return x_user_id


@router.get("/exam-types")
async def list_exam_types(service: PracticeService = Depends(get_practice_service)):
    exam_types = await service.list_exam_types()
    return APIResponse.success([exam_type.to_dict() for exam_type in exam_types])


@router.get("/exam-types/{exam_code}")
async def get_exam_type(exam_code: str, service: PracticeService = Depends(get_practice_service)):
    profile = service.registry.get(exam_code).profile
    exam_type = await service.store.get_exam_type(profile.code) or profile.to_exam_type()
    return APIResponse.success(exam_type.to_dict())


@router.get("/questions/{exam_code}/{skill_code}/next")
async def next_question(
    exam_code: str,
    skill_code: str,
    difficulty: Optional[str] = Query(None, description="easy, medium or hard; adaptive when omitted"),
    user_id: str = Depends(get_current_user_id),
    service: PracticeService = Depends(get_practice_service),
):
    question = await service.get_next_question(user_id, exam_code, skill_code, difficulty)
    if question is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=APIResponse.error("No more questions available", code="no_questions"),
        )
    return APIResponse.success(question.to_dict(include_answer=False))


@router.get("/questions/{question_id}")
async def get_question(question_id: str, service: PracticeService = Depends(get_practice_service)):
    question = await service.get_question(question_id)
    return APIResponse.success(question.to_dict(include_answer=False))


@router.post("/questions/{question_id}/answer")
async def submit_answer(
    question_id: str,
    payload: SubmitAnswerRequest,
    user_id: str = Depends(get_current_user_id),
    service: PracticeService = Depends(get_practice_service),
):
    result = await service.submit_answer(
        user_id,
        question_id,
        payload.answer,
        audio_ref=payload.audio_ref,
        time_spent=payload.time_spent,
    )
    return APIResponse.success(result.to_dict(), message="Answer evaluated")


@router.get("/progress/{exam_code}")
async def progress_report(
    exam_code: str,
    skill: Optional[str] = Query(None, description="Limit the report to one skill"),
    user_id: str = Depends(get_current_user_id),
    service: PracticeService = Depends(get_practice_service),
):
    report = await service.get_progress_report(user_id, exam_code, skill)
    return APIResponse.success(report)

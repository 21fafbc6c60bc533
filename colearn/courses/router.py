from fastapi import APIRouter, Depends
from typing import List

from colearn.ai.services import AIService
from colearn.courses import service
from colearn.courses.models import (
    AssignmentResult, AssignmentSubmission, CertificateData, Course,
    CourseGenerateRequest, LessonCompleteResult
)
from colearn.dependencies import get_ai_service, get_current_user_id, get_gamification, get_store
from colearn.gamification.service import GamificationService
from colearn.storage import DocumentStore

router = APIRouter(prefix="/courses", tags=["Courses"])

# ==================== COURSES ====================

@router.post("/generate", response_model=Course, status_code=201)
async def generate_course(
    data: CourseGenerateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    ai: AIService = Depends(get_ai_service)
):
    """
    Generate a course from a learning goal

    Errors: AI unavailable or malformed AI output (502)
    """
    return await service.generate_course(store, ai, user_id, data)


@router.get("", response_model=List[Course])
async def list_courses(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    return await service.list_courses(store, user_id)


@router.get("/{course_id}", response_model=Course)
async def get_course(
    course_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    return await service.get_course(store, user_id, course_id)


@router.delete("/{course_id}")
async def delete_course(
    course_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    await service.delete_course(store, user_id, course_id)
    return {"status": "success", "message": "Course deleted"}

# ==================== PROGRESS ====================

@router.post("/{course_id}/lessons/{lesson_id}/complete", response_model=LessonCompleteResult)
async def complete_lesson(
    course_id: str,
    lesson_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    gamification: GamificationService = Depends(get_gamification)
):
    """
    Mark a lesson completed

    Errors: previous lessons/modules not finished (403)
    """
    return await service.complete_lesson(store, gamification, user_id, course_id, lesson_id)


@router.post("/{course_id}/assignments/{assignment_id}/submit", response_model=AssignmentResult)
async def submit_assignment(
    course_id: str,
    assignment_id: str,
    submission: AssignmentSubmission,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    gamification: GamificationService = Depends(get_gamification)
):
    return await service.submit_assignment(
        store, gamification, user_id, course_id, assignment_id, submission.answers
    )


@router.get("/{course_id}/certificate", response_model=CertificateData)
async def get_certificate(
    course_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Certificate data for a completed course (403 until then)"""
    return await service.get_certificate(store, user_id, course_id)

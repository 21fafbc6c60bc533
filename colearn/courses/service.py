import logging
from typing import List

from colearn.ai.services import AIService
from colearn.auth.database import UserRepository
from colearn.courses import progress
from colearn.courses.database import CourseRepository
from colearn.courses.models import (
    AssignmentResult, CertificateData, Course, CourseGenerateRequest, LessonCompleteResult
)
from colearn.errors import LockedError, NotFoundError
from colearn.gamification.service import GamificationService
from colearn.storage import DocumentStore

logger = logging.getLogger(__name__)

# ==================== COURSES ====================

async def generate_course(
    store: DocumentStore, ai: AIService, user_id: str, data: CourseGenerateRequest
) -> Course:
    """Ask the AI for a course and save it; nothing is stored if generation fails"""
    course = await ai.generate_course(data.goal, data.duration)
    await CourseRepository(store).save_course(user_id, course)
    logger.info("User %s created course %s (%s)", user_id, course.id, course.title)
    return course


async def list_courses(store: DocumentStore, user_id: str) -> List[Course]:
    courses = await CourseRepository(store).list_courses(user_id)
    return sorted(courses, key=lambda c: c.created_at, reverse=True)


async def get_course(store: DocumentStore, user_id: str, course_id: str) -> Course:
    course = await CourseRepository(store).get_course(user_id, course_id)
    if not course:
        raise NotFoundError("Course not found")
    return course


async def delete_course(store: DocumentStore, user_id: str, course_id: str) -> None:
    if not await CourseRepository(store).delete_course(user_id, course_id):
        raise NotFoundError("Course not found")

# ==================== LESSONS ====================

async def complete_lesson(
    store: DocumentStore,
    gamification: GamificationService,
    user_id: str,
    course_id: str,
    lesson_id: str
) -> LessonCompleteResult:
    """
    Complete a lesson and award XP
    Lesson +25, module +200 when it finishes a module, course +500 when it
    finishes the course. Repeating a completed lesson awards nothing.
    """
    course = await get_course(store, user_id, course_id)
    completion = progress.complete_lesson(course, lesson_id)

    if not completion.newly_completed:
        return LessonCompleteResult(course=course, newly_completed=False)

    await CourseRepository(store).save_course(user_id, course)

    events = [await gamification.lesson_completed(user_id)]
    if completion.module_completed:
        events.append(await gamification.module_completed(user_id))
    if completion.course_completed:
        events.append(await gamification.course_completed(user_id))
        logger.info("User %s completed course %s", user_id, course_id)

    return LessonCompleteResult(course=course, newly_completed=True, xp_events=events)

# ==================== ASSIGNMENTS ====================

async def submit_assignment(
    store: DocumentStore,
    gamification: GamificationService,
    user_id: str,
    course_id: str,
    assignment_id: str,
    answers: List[str]
) -> AssignmentResult:
    """
    Grade and record an assignment
    XP is awarded on the first completion only; resubmissions update the score.
    """
    course = await get_course(store, user_id, course_id)
    assignment = progress.find_assignment(course, assignment_id)
    if not progress.is_assignment_unlocked(course, assignment):
        raise LockedError("Finish all lessons of this module first")

    first_completion = not assignment.completed
    score = progress.grade_assignment(assignment, answers)
    progress.complete_assignment(course, assignment_id, score)
    await CourseRepository(store).save_course(user_id, course)

    xp_event = None
    if first_completion:
        xp_event = await gamification.assignment_completed(user_id, score)

    return AssignmentResult(course=course, assignment=assignment, score=score, xp_event=xp_event)

# ==================== CERTIFICATE ====================

async def get_certificate(store: DocumentStore, user_id: str, course_id: str) -> CertificateData:
    course = await get_course(store, user_id, course_id)
    user = await UserRepository(store).get_user(user_id)
    return progress.course_certificate(course, user.name if user else "Learner")

"""
Progress / unlock engine.

Pure functions over a Course tree. Modules unlock strictly in order, lessons
unlock strictly in order inside their module, and a module's assignments open
once every lesson of that module is done. Lesson completion is monotonic, so
nothing here ever locks content again.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from colearn.courses.models import (
    Assignment, CertificateData, Course, CourseStatus, Lesson, Module
)
from colearn.errors import LockedError, NotFoundError
from colearn.utils import iso_now, round_half_up


@dataclass(frozen=True)
class LessonCompletion:
    """What a single lesson completion changed"""

    lesson: Lesson
    newly_completed: bool
    module_completed: bool
    course_completed: bool


# ==================== AGGREGATES ====================

def count_lessons(course: Course) -> Tuple[int, int]:
    """Return (completed, total) lesson counts"""
    total = sum(len(module.lessons) for module in course.modules)
    completed = sum(
        1 for module in course.modules for lesson in module.lessons if lesson.completed
    )
    return completed, total


def recalc_progress(course: Course) -> Course:
    """
    Recompute progress %, module completed flags and status.
    Status only ever moves to completed here; it is never reset.
    """
    completed, total = count_lessons(course)
    course.progress = round_half_up(100 * completed / total) if total else 0

    for module in course.modules:
        module.completed = all(lesson.completed for lesson in module.lessons)

    if course.progress == 100:
        course.status = CourseStatus.COMPLETED
    return course


# ==================== UNLOCKING ====================

def is_module_unlocked(course: Course, index: int) -> bool:
    if index < 0 or index >= len(course.modules):
        return False
    return all(module.completed for module in course.modules[:index])


def is_lesson_unlocked(module: Module, index: int) -> bool:
    if index < 0 or index >= len(module.lessons):
        return False
    return all(lesson.completed for lesson in module.lessons[:index])


def find_module(course: Course, module_id: str) -> Tuple[int, Module]:
    for idx, module in enumerate(course.modules):
        if module.id == module_id:
            return idx, module
    raise NotFoundError("Module not found")


def find_lesson(course: Course, lesson_id: str) -> Tuple[int, Module, int, Lesson]:
    """Return (module_index, module, lesson_index, lesson)"""
    for m_idx, module in enumerate(course.modules):
        for l_idx, lesson in enumerate(module.lessons):
            if lesson.id == lesson_id:
                return m_idx, module, l_idx, lesson
    raise NotFoundError("Lesson not found")


def find_assignment(course: Course, assignment_id: str) -> Assignment:
    for assignment in course.assignments:
        if assignment.id == assignment_id:
            return assignment
    raise NotFoundError("Assignment not found")


def is_assignment_unlocked(course: Course, assignment: Assignment) -> bool:
    try:
        m_idx, module = find_module(course, assignment.module_id)
    except NotFoundError:
        return False
    if not is_module_unlocked(course, m_idx):
        return False
    return all(lesson.completed for lesson in module.lessons)


# ==================== MUTATIONS ====================

def complete_lesson(course: Course, lesson_id: str, now: Optional[str] = None) -> LessonCompletion:
    """Mark a lesson completed (if it is unlocked) and recalculate the course"""
    m_idx, module, l_idx, lesson = find_lesson(course, lesson_id)

    if lesson.completed:
        return LessonCompletion(lesson, False, False, False)

    if not is_module_unlocked(course, m_idx):
        raise LockedError("Complete the previous modules first")
    if not is_lesson_unlocked(module, l_idx):
        raise LockedError("Complete the previous lessons first")

    was_module_completed = module.completed
    was_course_completed = course.status == CourseStatus.COMPLETED

    lesson.completed = True
    recalc_progress(course)

    course_completed = course.status == CourseStatus.COMPLETED and not was_course_completed
    if course_completed and course.completed_at is None:
        course.completed_at = now or iso_now()

    return LessonCompletion(
        lesson=lesson,
        newly_completed=True,
        module_completed=module.completed and not was_module_completed,
        course_completed=course_completed,
    )


def grade_assignment(assignment: Assignment, answers: List[str]) -> int:
    """Score 0-100 from exact answer matches; records the user's answers"""
    if not assignment.questions:
        return 0

    correct = 0
    for idx, question in enumerate(assignment.questions):
        answer = answers[idx] if idx < len(answers) else None
        question.user_answer = answer
        if answer is not None and question.correct_answer == answer:
            correct += 1
    return round_half_up(100 * correct / len(assignment.questions))


def complete_assignment(course: Course, assignment_id: str, score: int) -> Assignment:
    assignment = find_assignment(course, assignment_id)
    if not is_assignment_unlocked(course, assignment):
        raise LockedError("Finish all lessons of this module first")

    assignment.completed = True
    assignment.score = max(0, min(100, score))
    recalc_progress(course)
    return assignment


# ==================== CERTIFICATE ====================

def course_certificate(course: Course, user_name: str) -> CertificateData:
    if course.status != CourseStatus.COMPLETED:
        raise LockedError("Course is not completed yet")

    _, total = count_lessons(course)
    return CertificateData(
        user_name=user_name,
        course_title=course.title,
        modules_count=len(course.modules),
        lessons_count=total,
        completed_date=course.completed_at,
    )

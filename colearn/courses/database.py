from typing import List, Optional

from colearn.courses.models import Course
from colearn.storage import CollectionRepository


def courses_key(user_id: str) -> str:
    return f"user_courses_{user_id}"


class CourseRepository(CollectionRepository):
    """A user's courses, stored as one list per user"""

    async def list_courses(self, user_id: str) -> List[Course]:
        return await self._load_models(courses_key(user_id), Course)

    async def get_course(self, user_id: str, course_id: str) -> Optional[Course]:
        for course in await self.list_courses(user_id):
            if course.id == course_id:
                return course
        return None

    async def save_course(self, user_id: str, course: Course) -> None:
        """Insert or replace by id"""
        courses = await self.list_courses(user_id)
        for idx, existing in enumerate(courses):
            if existing.id == course.id:
                courses[idx] = course
                break
        else:
            courses.append(course)
        await self._save_models(courses_key(user_id), courses)

    async def delete_course(self, user_id: str, course_id: str) -> bool:
        courses = await self.list_courses(user_id)
        remaining = [c for c in courses if c.id != course_id]
        if len(remaining) == len(courses):
            return False
        await self._save_models(courses_key(user_id), remaining)
        return True

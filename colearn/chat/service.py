import logging
from typing import List, Optional

from colearn.ai.services import AIService
from colearn.chat.database import ChatRepository
from colearn.chat.models import ChatMessage, ChatReply, TutorAnswer
from colearn.courses import progress
from colearn.courses.service import get_course
from colearn.storage import DocumentStore
from colearn.utils import generate_id

logger = logging.getLogger(__name__)


async def send_message(
    store: DocumentStore, ai: AIService, user_id: str, message: str, course_id: Optional[str] = None
) -> ChatReply:
    """Ask the AI; the exchange is saved only once the AI has answered"""
    context = None
    if course_id:
        course = await get_course(store, user_id, course_id)
        context = f"Course: {course.title}. {course.description}"

    user_message = ChatMessage(id=generate_id("MSG"), role="user", content=message)
    answer = await ai.chat(message, context)
    reply = ChatMessage(id=generate_id("MSG"), role="assistant", content=answer)

    await ChatRepository(store).append_messages(user_id, user_message, reply)
    return ChatReply(user_message=user_message, reply=reply)


async def get_history(store: DocumentStore, user_id: str) -> List[ChatMessage]:
    return await ChatRepository(store).list_messages(user_id)


async def clear_history(store: DocumentStore, user_id: str) -> None:
    await ChatRepository(store).clear(user_id)


async def ask_tutor(
    store: DocumentStore, ai: AIService, user_id: str, course_id: str, lesson_id: str, question: str
) -> TutorAnswer:
    course = await get_course(store, user_id, course_id)
    _, _, _, lesson = progress.find_lesson(course, lesson_id)
    answer = await ai.ask_tutor(lesson.content, question)
    return TutorAnswer(lesson_id=lesson.id, answer=answer)

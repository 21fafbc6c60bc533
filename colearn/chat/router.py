from fastapi import APIRouter, Depends

from colearn.ai.services import AIService
from colearn.chat import service
from colearn.chat.models import ChatHistory, ChatReply, ChatRequest, TutorAnswer, TutorRequest
from colearn.dependencies import get_ai_service, get_current_user_id, get_store
from colearn.storage import DocumentStore

router = APIRouter(prefix="/chat", tags=["AI Chat"])


@router.post("", response_model=ChatReply)
async def send_message(
    data: ChatRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    ai: AIService = Depends(get_ai_service)
):
    """
    Chat with the AI assistant
    Nothing is saved when the AI call fails (502)
    """
    return await service.send_message(store, ai, user_id, data.message, data.course_id)


@router.get("", response_model=ChatHistory)
async def get_history(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    return ChatHistory(messages=await service.get_history(store, user_id))


@router.delete("")
async def clear_history(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    await service.clear_history(store, user_id)
    return {"status": "success", "message": "Chat history cleared"}


@router.post("/tutor", response_model=TutorAnswer)
async def ask_tutor(
    data: TutorRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    ai: AIService = Depends(get_ai_service)
):
    """Ask about the lesson being read"""
    return await service.ask_tutor(store, ai, user_id, data.course_id, data.lesson_id, data.question)

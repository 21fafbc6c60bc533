from typing import List

from colearn.chat.models import ChatMessage
from colearn.storage import CollectionRepository


def history_key(user_id: str) -> str:
    return f"chat_history_{user_id}"


class ChatRepository(CollectionRepository):
    """Per-user AI chat history"""

    async def list_messages(self, user_id: str) -> List[ChatMessage]:
        return await self._load_models(history_key(user_id), ChatMessage)

    async def append_messages(self, user_id: str, *messages: ChatMessage) -> None:
        history = await self.list_messages(user_id)
        history.extend(messages)
        await self._save_models(history_key(user_id), history)

    async def clear(self, user_id: str) -> None:
        await self.store.delete(history_key(user_id))

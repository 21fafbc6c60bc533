from typing import List, Optional

from colearn.classes.models import ClassChatMessage, ClassGroup, ClassInvite
from colearn.storage import CollectionRepository

CLASSES_KEY = "all_classes"
INVITES_KEY = "all_invites"


def messages_key(class_id: str) -> str:
    return f"class_messages_{class_id}"


class ClassRepository(CollectionRepository):
    """Classes, invites and per-class chat messages"""

    async def list_classes(self) -> List[ClassGroup]:
        return await self._load_models(CLASSES_KEY, ClassGroup)

    async def save_classes(self, classes: List[ClassGroup]) -> None:
        await self._save_models(CLASSES_KEY, classes)

    async def get_class(self, class_id: str) -> Optional[ClassGroup]:
        for group in await self.list_classes():
            if group.id == class_id:
                return group
        return None

    async def find_user_class(self, user_id: str) -> Optional[ClassGroup]:
        for group in await self.list_classes():
            if user_id in group.members:
                return group
        return None

    async def list_invites(self) -> List[ClassInvite]:
        return await self._load_models(INVITES_KEY, ClassInvite)

    async def save_invites(self, invites: List[ClassInvite]) -> None:
        await self._save_models(INVITES_KEY, invites)

    async def list_messages(self, class_id: str) -> List[ClassChatMessage]:
        return await self._load_models(messages_key(class_id), ClassChatMessage)

    async def append_message(self, message: ClassChatMessage) -> None:
        messages = await self.list_messages(message.class_id)
        messages.append(message)
        await self._save_models(messages_key(message.class_id), messages)

    async def delete_messages(self, class_id: str) -> None:
        await self.store.delete(messages_key(class_id))

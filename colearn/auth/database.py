from typing import List, Optional

from colearn.auth.models import User
from colearn.storage import CollectionRepository

USERS_KEY = "all_users"


def password_key(user_id: str) -> str:
    return f"password_{user_id}"


class UserRepository(CollectionRepository):
    """Registered users plus one password hash entry per user"""

    async def list_users(self) -> List[User]:
        return await self._load_models(USERS_KEY, User)

    async def get_user(self, user_id: str) -> Optional[User]:
        for user in await self.list_users():
            if user.id == user_id:
                return user
        return None

    async def find_by_email(self, email: str) -> Optional[User]:
        for user in await self.list_users():
            if user.email == email:
                return user
        return None

    async def save_user(self, user: User) -> None:
        users = await self.list_users()
        for idx, existing in enumerate(users):
            if existing.id == user.id:
                users[idx] = user
                break
        else:
            users.append(user)
        await self._save_models(USERS_KEY, users)

    async def get_password_hash(self, user_id: str) -> Optional[str]:
        value = await self.store.get(password_key(user_id))
        return value if isinstance(value, str) else None

    async def set_password_hash(self, user_id: str, password_hash: str) -> None:
        await self.store.put(password_key(user_id), password_hash)

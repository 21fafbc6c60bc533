import hashlib
import logging
from typing import List, Tuple

from colearn.auth.database import UserRepository
from colearn.auth.models import LoginRequest, ProfileUpdate, RegisterRequest, User
from colearn.auth.tokens import create_access_token
from colearn.errors import AuthError, NotFoundError, ValidationError
from colearn.storage import DocumentStore
from colearn.utils import generate_id

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash password for comparison"""
    return hashlib.sha256(password.encode()).hexdigest()


async def register(store: DocumentStore, data: RegisterRequest) -> Tuple[User, str]:
    repo = UserRepository(store)
    users = await repo.list_users()

    if any(u.email == data.email for u in users):
        raise ValidationError("A user with this email already exists")
    if any(u.username.lower() == data.username.lower() for u in users):
        raise ValidationError("A user with this username already exists")

    user = User(
        id=generate_id("USR"),
        email=data.email,
        name=data.name,
        username=data.username,
    )
    await repo.save_user(user)
    await repo.set_password_hash(user.id, hash_password(data.password))

    logger.info("Registered user %s (%s)", user.id, user.username)
    return user, create_access_token(user.id)


async def login(store: DocumentStore, data: LoginRequest) -> Tuple[User, str]:
    repo = UserRepository(store)
    user = await repo.find_by_email(data.email)
    if not user:
        raise AuthError("User not found")

    stored = await repo.get_password_hash(user.id)
    if stored != hash_password(data.password):
        raise AuthError("Wrong password")

    return user, create_access_token(user.id)


async def get_user(store: DocumentStore, user_id: str) -> User:
    user = await UserRepository(store).get_user(user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


async def update_profile(store: DocumentStore, user_id: str, updates: ProfileUpdate) -> User:
    repo = UserRepository(store)
    user = await get_user(store, user_id)

    if updates.name is not None:
        if not updates.name.strip():
            raise ValidationError("Name cannot be empty")
        user.name = updates.name.strip()
    if updates.avatar is not None:
        user.avatar = updates.avatar or None

    await repo.save_user(user)
    return user


async def list_users(store: DocumentStore) -> List[User]:
    return await UserRepository(store).list_users()

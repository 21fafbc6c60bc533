from fastapi import APIRouter, Depends

from colearn.auth import service
from colearn.auth.models import AuthResponse, LoginRequest, ProfileUpdate, RegisterRequest, User, UserList
from colearn.dependencies import get_current_user_id, get_store
from colearn.storage import DocumentStore

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(data: RegisterRequest, store: DocumentStore = Depends(get_store)):
    """
    Create an account and log in

    Errors: duplicate email, duplicate username (400)
    """
    user, token = await service.register(store, data)
    return AuthResponse(user=user, access_token=token)


@router.post("/login", response_model=AuthResponse)
async def login(data: LoginRequest, store: DocumentStore = Depends(get_store)):
    user, token = await service.login(store, data)
    return AuthResponse(user=user, access_token=token)


@router.get("/me", response_model=User)
async def get_me(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    return await service.get_user(store, user_id)


@router.patch("/me", response_model=User)
async def update_me(
    updates: ProfileUpdate,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """Change display name and/or avatar"""
    return await service.update_profile(store, user_id, updates)


@router.get("/users", response_model=UserList)
async def list_users(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    return UserList(users=await service.list_users(store))

import random

from fastapi import Depends, Header, HTTPException, Request

from colearn.ai.services import AIService
from colearn.auth.tokens import decode_access_token
from colearn.errors import AuthError
from colearn.gamification.service import GamificationService
from colearn.storage import DocumentStore


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_ai_service(request: Request) -> AIService:
    return request.app.state.ai


def get_rng(request: Request) -> random.Random:
    return request.app.state.rng


def get_gamification(store: DocumentStore = Depends(get_store)) -> GamificationService:
    return GamificationService(store)


def get_current_user_id(authorization: str = Header(None)) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Unauthorized")

    token = authorization.split(" ", 1)[1]
    try:
        return decode_access_token(token)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=e.message)


def verify_ws_token(token: str) -> str:
    """Websocket variant: token arrives as a query parameter"""
    if not token:
        raise AuthError("Unauthorized")
    return decode_access_token(token)

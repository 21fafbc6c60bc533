from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from typing import List, Optional

from colearn.auth.models import User
from colearn.classes import service
from colearn.classes.manager import manager
from colearn.classes.models import (
    ClassChatMessage, ClassGroup, ClassInvite, ClassMessageRequest, ClassNameRequest,
    IncomingInvite, InviteRequest,
)
from colearn.dependencies import get_current_user_id, get_gamification, get_store, verify_ws_token
from colearn.errors import CoLearnError
from colearn.gamification.models import LeaderboardEntry
from colearn.gamification.service import GamificationService
from colearn.storage import DocumentStore

router = APIRouter(prefix="/classes", tags=["Classes"])

# ==================== MY CLASS ====================

@router.post("", response_model=ClassGroup, status_code=201)
async def create_class(
    data: ClassNameRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    gamification: GamificationService = Depends(get_gamification)
):
    """Create a class; a user can be in one class at a time"""
    return await service.create_class(store, gamification, data.name, user_id)


@router.get("/me", response_model=Optional[ClassGroup])
async def get_my_class(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    return await service.get_user_class(store, user_id)


@router.post("/leave")
async def leave_class(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    await service.leave_class(store, user_id)
    return {"status": "success", "message": "Left class"}


@router.get("/users/search", response_model=List[User])
async def search_users(
    q: str = Query(..., min_length=1),
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    return await service.search_users(store, q, user_id)

# ==================== INVITES ====================

@router.get("/invites", response_model=List[IncomingInvite])
async def incoming_invites(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    return await service.incoming_invites(store, user_id)


@router.post("/invites/{invite_id}/accept", response_model=ClassGroup)
async def accept_invite(
    invite_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    gamification: GamificationService = Depends(get_gamification)
):
    return await service.accept_invite(store, gamification, invite_id, user_id)


@router.post("/invites/{invite_id}/reject")
async def reject_invite(
    invite_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    await service.reject_invite(store, invite_id, user_id)
    return {"status": "success", "message": "Invite rejected"}

# ==================== CLASS ====================

@router.patch("/{class_id}", response_model=ClassGroup)
async def rename_class(
    class_id: str,
    data: ClassNameRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    return await service.rename_class(store, class_id, user_id, data.name)


@router.get("/{class_id}/members", response_model=List[User])
async def get_members(
    class_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    return await service.get_class_members(store, class_id)


@router.post("/{class_id}/invites", response_model=ClassInvite, status_code=201)
async def invite_user(
    class_id: str,
    data: InviteRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    """
    Invite a user

    Errors: class full, user already in this or another class, invite pending (400)
    """
    return await service.invite_user(store, class_id, user_id, data.to_user_id)


@router.get("/{class_id}/leaderboard", response_model=List[LeaderboardEntry])
async def class_leaderboard(
    class_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    gamification: GamificationService = Depends(get_gamification)
):
    return await service.class_leaderboard(store, gamification, class_id, user_id)

# ==================== CHAT ====================

@router.get("/{class_id}/messages", response_model=List[ClassChatMessage])
async def get_messages(
    class_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    return await service.get_class_messages(store, class_id, user_id)


@router.post("/{class_id}/messages", response_model=ClassChatMessage, status_code=201)
async def send_message(
    class_id: str,
    data: ClassMessageRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store)
):
    message = await service.send_class_message(store, class_id, user_id, data.content)
    await manager.broadcast(class_id, message.model_dump())
    return message


@router.websocket("/{class_id}/ws")
async def class_chat_socket(websocket: WebSocket, class_id: str, token: str = Query(None)):
    """
    Live class chat
    Connect with ?token=<jwt>; send {"content": "..."}, receive saved messages
    """
    store = websocket.app.state.store
    try:
        user_id = verify_ws_token(token)
        await service.get_class_messages(store, class_id, user_id)
    except CoLearnError as e:
        await websocket.close(code=4401, reason=e.message)
        return

    await manager.connect(websocket, class_id)
    try:
        while True:
            data = await websocket.receive_json()
            content = str(data.get("content", "")).strip() if isinstance(data, dict) else ""
            if not content:
                continue
            try:
                message = await service.send_class_message(store, class_id, user_id, content)
            except CoLearnError as e:
                await websocket.send_json({"type": "error", "msg": e.message})
                continue
            await manager.broadcast(class_id, message.model_dump())
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(websocket, class_id)

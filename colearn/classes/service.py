"""
Class groups: one class per user, invites, class chat.
"""

import logging
from typing import List, Optional

from colearn import config
from colearn.auth.database import UserRepository
from colearn.auth.models import User
from colearn.classes.database import ClassRepository
from colearn.classes.models import (
    ClassChatMessage, ClassGroup, ClassInvite, IncomingInvite, InviteStatus
)
from colearn.errors import NotFoundError, ValidationError
from colearn.gamification.models import LeaderboardEntry
from colearn.gamification.service import GamificationService
from colearn.storage import DocumentStore
from colearn.utils import generate_id

logger = logging.getLogger(__name__)

# ==================== HELPERS ====================

async def _require_member(repo: ClassRepository, class_id: str, user_id: str) -> ClassGroup:
    group = await repo.get_class(class_id)
    if not group:
        raise NotFoundError("Class not found")
    if user_id not in group.members:
        raise ValidationError("You are not a member of this class")
    return group

# ==================== CLASSES ====================

async def create_class(
    store: DocumentStore, gamification: GamificationService, name: str, creator_id: str
) -> ClassGroup:
    repo = ClassRepository(store)
    classes = await repo.list_classes()
    if any(creator_id in c.members for c in classes):
        raise ValidationError("You are already in a class")

    group = ClassGroup(id=generate_id("CLS"), name=name, creator_id=creator_id, members=[creator_id])
    classes.append(group)
    await repo.save_classes(classes)
    await gamification.social_joined(creator_id)

    logger.info("Class %s created by %s", group.id, creator_id)
    return group


async def get_user_class(store: DocumentStore, user_id: str) -> Optional[ClassGroup]:
    return await ClassRepository(store).find_user_class(user_id)


async def rename_class(store: DocumentStore, class_id: str, user_id: str, name: str) -> ClassGroup:
    repo = ClassRepository(store)
    await _require_member(repo, class_id, user_id)

    classes = await repo.list_classes()
    group = next(c for c in classes if c.id == class_id)
    group.name = name
    await repo.save_classes(classes)
    return group


async def get_class_members(store: DocumentStore, class_id: str) -> List[User]:
    group = await ClassRepository(store).get_class(class_id)
    if not group:
        return []
    users = await UserRepository(store).list_users()
    return [u for u in users if u.id in group.members]


async def search_users(store: DocumentStore, query: str, exclude_user_id: str) -> List[User]:
    """Case-insensitive substring match on name, email and username"""
    q = query.strip().lower()
    users = await UserRepository(store).list_users()
    return [
        u for u in users
        if u.id != exclude_user_id
        and (q in u.name.lower() or q in u.email.lower() or q in (u.username or "").lower())
    ]


async def leave_class(store: DocumentStore, user_id: str) -> None:
    """Leave the user's class; a class left empty is deleted with its chat"""
    repo = ClassRepository(store)
    classes = await repo.list_classes()
    group = next((c for c in classes if user_id in c.members), None)
    if not group:
        return

    group.members = [m for m in group.members if m != user_id]
    if not group.members:
        classes = [c for c in classes if c.id != group.id]
        await repo.delete_messages(group.id)
        logger.info("Class %s deleted (no members left)", group.id)
    await repo.save_classes(classes)

# ==================== INVITES ====================

async def invite_user(
    store: DocumentStore, class_id: str, from_user_id: str, to_user_id: str
) -> ClassInvite:
    repo = ClassRepository(store)
    classes = await repo.list_classes()
    group = next((c for c in classes if c.id == class_id), None)

    if not group:
        raise NotFoundError("Class not found")
    if from_user_id not in group.members:
        raise ValidationError("You are not a member of this class")
    if len(group.members) >= config.CLASS_MAX_MEMBERS:
        raise ValidationError(f"Class already has {config.CLASS_MAX_MEMBERS} members")
    if to_user_id in group.members:
        raise ValidationError("User is already in this class")
    if any(to_user_id in c.members for c in classes):
        raise ValidationError("User is already in another class")
    if not await UserRepository(store).get_user(to_user_id):
        raise NotFoundError("User not found")

    invites = await repo.list_invites()
    if any(
        i.class_id == class_id and i.to_user_id == to_user_id and i.status == InviteStatus.PENDING
        for i in invites
    ):
        raise ValidationError("Invite already sent")

    invite = ClassInvite(
        id=generate_id("INV"),
        class_id=class_id,
        from_user_id=from_user_id,
        to_user_id=to_user_id,
    )
    invites.append(invite)
    await repo.save_invites(invites)
    return invite


async def incoming_invites(store: DocumentStore, user_id: str) -> List[IncomingInvite]:
    repo = ClassRepository(store)
    classes = {c.id: c for c in await repo.list_classes()}
    users = {u.id: u for u in await UserRepository(store).list_users()}

    result = []
    for invite in await repo.list_invites():
        if invite.to_user_id != user_id or invite.status != InviteStatus.PENDING:
            continue
        group = classes.get(invite.class_id)
        sender = users.get(invite.from_user_id)
        result.append(IncomingInvite(
            **invite.model_dump(),
            class_name=group.name if group else "Unknown class",
            from_user_name=sender.name if sender else "Unknown user",
        ))
    return result


async def accept_invite(
    store: DocumentStore, gamification: GamificationService, invite_id: str, user_id: str
) -> ClassGroup:
    repo = ClassRepository(store)
    invites = await repo.list_invites()
    invite = next((i for i in invites if i.id == invite_id and i.to_user_id == user_id), None)
    if not invite or invite.status != InviteStatus.PENDING:
        raise NotFoundError("Invite not found")

    classes = await repo.list_classes()
    group = next((c for c in classes if c.id == invite.class_id), None)
    if not group:
        await repo.save_invites([i for i in invites if i.id != invite_id])
        raise NotFoundError("Class no longer exists")
    if len(group.members) >= config.CLASS_MAX_MEMBERS:
        raise ValidationError(f"Class already has {config.CLASS_MAX_MEMBERS} members")
    if any(user_id in c.members for c in classes):
        raise ValidationError("You are already in a class")

    group.members.append(user_id)
    await repo.save_classes(classes)
    invite.status = InviteStatus.ACCEPTED
    await repo.save_invites(invites)
    await gamification.social_joined(user_id)

    logger.info("User %s joined class %s", user_id, group.id)
    return group


async def reject_invite(store: DocumentStore, invite_id: str, user_id: str) -> None:
    repo = ClassRepository(store)
    invites = await repo.list_invites()
    invite = next((i for i in invites if i.id == invite_id and i.to_user_id == user_id), None)
    if not invite:
        raise NotFoundError("Invite not found")
    invite.status = InviteStatus.REJECTED
    await repo.save_invites(invites)

# ==================== CHAT & LEADERBOARD ====================

async def get_class_messages(store: DocumentStore, class_id: str, user_id: str) -> List[ClassChatMessage]:
    repo = ClassRepository(store)
    await _require_member(repo, class_id, user_id)
    return await repo.list_messages(class_id)


async def send_class_message(
    store: DocumentStore, class_id: str, user_id: str, content: str
) -> ClassChatMessage:
    repo = ClassRepository(store)
    await _require_member(repo, class_id, user_id)
    user = await UserRepository(store).get_user(user_id)

    message = ClassChatMessage(
        id=generate_id("MSG"),
        class_id=class_id,
        user_id=user_id,
        user_name=(user.username or user.name) if user else "Unknown user",
        content=content,
    )
    await repo.append_message(message)
    return message


async def class_leaderboard(
    store: DocumentStore, gamification: GamificationService, class_id: str, user_id: str
) -> List[LeaderboardEntry]:
    group = await _require_member(ClassRepository(store), class_id, user_id)
    names = {u.id: u.name for u in await UserRepository(store).list_users()}
    entries = await gamification.leaderboard(group.members)
    for entry in entries:
        entry.name = names.get(entry.user_id)
    return entries

"""
Enforcement helpers and FastAPI dependencies for channel authorization.

Membership gates visibility: a user who is not a member of a channel gets
404 for anything inside it. The Ability gates actions: a member whose rules
do not allow the action gets 403.
"""
from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.channels.models import Channel, ChannelUser, ChannelMessage
from app.features.permissions.ability import Ability, Action, can
from app.features.permissions.definitions import AbilityUser, build_ability
from app.features.permissions.subjects import Subject, SubjectType, tag_subject
from app.features.users.dependencies import get_current_user
from app.features.users.models import User
from app.utils import get_logger


log = get_logger(__name__)


# ============================================================================
# Lookups
# ============================================================================

async def get_channel_by_id(
    channel_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
) -> Channel:
    """
    Get channel by ID or raise 404.

    Raises:
        HTTPException: 404 if channel not found
    """
    result = await db.execute(select(Channel).where(Channel.id == channel_id))
    channel = result.scalar_one_or_none()

    if channel is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Channel not found"
        )

    return channel


async def find_membership(
    db: AsyncSession,
    channel_id: str,
    user_id: str
) -> Optional[ChannelUser]:
    result = await db.execute(
        select(ChannelUser).where(
            and_(
                ChannelUser.channel_id == channel_id,
                ChannelUser.user_id == user_id
            )
        )
    )
    return result.scalar_one_or_none()


async def find_message(
    db: AsyncSession,
    channel_id: str,
    message_id: str
) -> Optional[ChannelMessage]:
    result = await db.execute(
        select(ChannelMessage).where(
            and_(
                ChannelMessage.channel_id == channel_id,
                ChannelMessage.id == message_id
            )
        )
    )
    return result.scalar_one_or_none()


# ============================================================================
# Ability construction and checks
# ============================================================================

def get_ability_user(membership: ChannelUser) -> AbilityUser:
    return AbilityUser(id=membership.user_id, role=membership.role)


def ability_for(membership: ChannelUser) -> Ability:
    """Build a fresh Ability for a membership. Never cached across requests."""
    return build_ability(get_ability_user(membership))


def authorize(ability: Ability, action: Action, subject: Subject) -> None:
    """
    Raise 403 unless ``ability`` allows ``action`` on ``subject``.

    Raises:
        HTTPException: 403 if the action is denied
    """
    if not can(ability, action, subject):
        log.info(
            "Forbidden: %s on %s %s",
            action.value, subject.type.value, subject.get("id")
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Permission denied: {action.value} on {subject.type.value}"
        )


# ============================================================================
# FastAPI Dependencies
# ============================================================================

@dataclass
class ChannelContext:
    """Everything an enforcement point needs about the requester and channel."""
    user: User
    channel: Channel
    membership: ChannelUser
    ability: Ability

    @property
    def channel_subject(self) -> Subject:
        return tag_subject(SubjectType.CHANNEL, self.channel)

    def authorize(self, action: Action, subject: Subject) -> None:
        authorize(self.ability, action, subject)


async def get_channel_context(
    channel_id: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> ChannelContext:
    """
    Resolve the channel and the requester's membership in it.

    Usage:
        @router.patch("/{channel_id}")
        async def update_channel(
            ctx: Annotated[ChannelContext, Depends(get_channel_context)]
        ):
            ctx.authorize(Action.UPDATE, ctx.channel_subject)

    Raises:
        HTTPException: 404 if the channel does not exist or the user is not a member
    """
    channel = await get_channel_by_id(channel_id, db)
    membership = await find_membership(db, channel.id, user.id)

    if membership is None:
        log.info("User %s is not a member of channel %s", user.id, channel.id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Channel not found"
        )

    return ChannelContext(
        user=user,
        channel=channel,
        membership=membership,
        ability=ability_for(membership),
    )

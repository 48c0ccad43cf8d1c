"""
Channel feature routes.

Every mutating route resolves the requester's membership first (404 when the
channel is not visible to them) and then checks their Ability against the
tagged target (403 when denied).
"""
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import config
from app.core.database.engine import get_db
from app.core.limiter import limiter
from app.core.pagination import (
    PageParams,
    PaginatedResource,
    Resource,
    get_page_params,
    paginate,
)
from app.features.channels.models import Channel, ChannelUser, ChannelMessage
from app.features.channels.schemas import (
    ChannelCreate,
    ChannelResponse,
    ChannelUpdate,
    ChannelUserResponse,
    MessageCreate,
    MessageResponse,
    MessageUpdate,
)
from app.features.permissions.ability import Action
from app.features.permissions.definitions import Role
from app.features.permissions.dependencies import (
    ChannelContext,
    find_membership,
    find_message,
    get_channel_by_id,
    get_channel_context,
)
from app.features.permissions.subjects import SubjectType, tag_subject
from app.features.users.dependencies import get_current_user
from app.features.users.models import User
from app.utils import get_logger


log = get_logger(__name__)
router = APIRouter(tags=["channels"])


# ============================================================================
# Channels
# ============================================================================

@router.post("", response_model=Resource[ChannelResponse], status_code=status.HTTP_201_CREATED)
async def create_channel(
    channel_data: ChannelCreate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Create a channel. The creator becomes its first member with the CREATOR role."""
    channel = Channel(**channel_data.model_dump(), creator_id=user.id)
    db.add(channel)
    await db.flush()

    db.add(ChannelUser(channel_id=channel.id, user_id=user.id, role=Role.CREATOR))
    await db.commit()
    await db.refresh(channel)

    log.info("User %s created channel %s", user.id, channel.id)
    return {"data": channel}


@router.get("", response_model=PaginatedResource[ChannelResponse])
async def list_channels(
    params: Annotated[PageParams, Depends(get_page_params)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """List channels, newest first."""
    return await paginate(db, select(Channel).order_by(Channel.id.desc()), params)


@router.get("/{channel_id}", response_model=Resource[ChannelResponse])
async def get_channel(
    channel: Annotated[Channel, Depends(get_channel_by_id)]
):
    """Get channel by ID."""
    return {"data": channel}


@router.patch("/{channel_id}", response_model=Resource[ChannelResponse])
async def update_channel(
    update_data: ChannelUpdate,
    ctx: Annotated[ChannelContext, Depends(get_channel_context)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update channel information (creator only)."""
    ctx.authorize(Action.UPDATE, ctx.channel_subject)

    channel = ctx.channel
    for key, value in update_data.model_dump(exclude_unset=True).items():
        if value is not None or key == "description":
            setattr(channel, key, value)

    await db.commit()
    await db.refresh(channel)
    return {"data": channel}


@router.delete("/{channel_id}")
async def delete_channel(
    ctx: Annotated[ChannelContext, Depends(get_channel_context)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Delete a channel with its memberships and messages (creator only)."""
    ctx.authorize(Action.DELETE, ctx.channel_subject)

    channel_id = ctx.channel.id
    await db.execute(delete(ChannelMessage).where(ChannelMessage.channel_id == channel_id))
    await db.execute(delete(ChannelUser).where(ChannelUser.channel_id == channel_id))
    await db.delete(ctx.channel)
    await db.commit()

    log.info("User %s deleted channel %s", ctx.user.id, channel_id)
    return {"message": "Channel deleted successfully"}


# ============================================================================
# Members
# ============================================================================

@router.get("/{channel_id}/members", response_model=PaginatedResource[ChannelUserResponse])
async def list_members(
    channel: Annotated[Channel, Depends(get_channel_by_id)],
    params: Annotated[PageParams, Depends(get_page_params)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """List the members of a channel in join order."""
    stmt = (
        select(ChannelUser)
        .where(ChannelUser.channel_id == channel.id)
        .order_by(ChannelUser.joined_at, ChannelUser.id)
    )
    return await paginate(db, stmt, params)


@router.get("/{channel_id}/members/{user_id}", response_model=Resource[ChannelUserResponse])
async def get_member(
    user_id: str,
    channel: Annotated[Channel, Depends(get_channel_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Get a user's membership in a channel."""
    membership = await find_membership(db, channel.id, user_id)
    if membership is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Member not found"
        )
    return {"data": membership}


@router.post("/{channel_id}/join", response_model=Resource[ChannelUserResponse])
async def join_channel(
    channel: Annotated[Channel, Depends(get_channel_by_id)],
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Join a channel as a MEMBER."""
    if await find_membership(db, channel.id, user.id) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Already a member of this channel"
        )

    membership = ChannelUser(channel_id=channel.id, user_id=user.id, role=Role.MEMBER)
    membership.user = user
    db.add(membership)
    await db.commit()

    log.info("User %s joined channel %s", user.id, channel.id)
    return {"data": membership}


@router.post("/{channel_id}/leave")
async def leave_channel(
    ctx: Annotated[ChannelContext, Depends(get_channel_context)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Leave a channel, removing the requester's own membership."""
    ctx.authorize(Action.REMOVE, tag_subject(SubjectType.CHANNEL_USER, ctx.membership))

    await db.delete(ctx.membership)
    await db.commit()

    log.info("User %s left channel %s", ctx.user.id, ctx.channel.id)
    return {"message": "Left channel successfully"}


@router.delete("/{channel_id}/members/{user_id}")
async def remove_member(
    user_id: str,
    ctx: Annotated[ChannelContext, Depends(get_channel_context)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Remove a member from a channel."""
    target = await find_membership(db, ctx.channel.id, user_id)
    if target is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Member not found"
        )

    ctx.authorize(Action.REMOVE, tag_subject(SubjectType.CHANNEL_USER, target))

    await db.delete(target)
    await db.commit()

    log.info("User %s removed %s from channel %s", ctx.user.id, user_id, ctx.channel.id)
    return {"message": "Member removed successfully"}


# ============================================================================
# Messages
# ============================================================================

@router.get("/{channel_id}/messages", response_model=PaginatedResource[MessageResponse])
async def list_messages(
    ctx: Annotated[ChannelContext, Depends(get_channel_context)],
    params: Annotated[PageParams, Depends(get_page_params)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """List a channel's messages, oldest first (members only)."""
    stmt = (
        select(ChannelMessage)
        .where(ChannelMessage.channel_id == ctx.channel.id)
        .order_by(ChannelMessage.id)
    )
    return await paginate(db, stmt, params)


@router.post(
    "/{channel_id}/messages",
    response_model=Resource[MessageResponse],
    status_code=status.HTTP_201_CREATED
)
@limiter.limit(config.MESSAGE_RATE_LIMIT)
async def post_message(
    request: Request,
    message_data: MessageCreate,
    ctx: Annotated[ChannelContext, Depends(get_channel_context)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Post a message to a channel."""
    subject = tag_subject(
        SubjectType.CHANNEL_MESSAGE,
        {"channel_id": ctx.channel.id, "sender_id": ctx.user.id},
    )
    ctx.authorize(Action.POST, subject)

    message = ChannelMessage(
        channel_id=ctx.channel.id,
        sender_id=ctx.user.id,
        content=message_data.content,
    )
    db.add(message)
    await db.commit()
    await db.refresh(message)
    return {"data": message}


async def _get_message_or_404(db: AsyncSession, channel_id: str, message_id: str) -> ChannelMessage:
    message = await find_message(db, channel_id, message_id)
    if message is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Message not found"
        )
    return message


@router.patch("/{channel_id}/messages/{message_id}", response_model=Resource[MessageResponse])
async def update_message(
    message_id: str,
    update_data: MessageUpdate,
    ctx: Annotated[ChannelContext, Depends(get_channel_context)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Edit a message."""
    message = await _get_message_or_404(db, ctx.channel.id, message_id)
    ctx.authorize(Action.UPDATE, tag_subject(SubjectType.CHANNEL_MESSAGE, message))

    message.content = update_data.content
    await db.commit()
    await db.refresh(message)
    return {"data": message}


@router.delete("/{channel_id}/messages/{message_id}")
async def delete_message(
    message_id: str,
    ctx: Annotated[ChannelContext, Depends(get_channel_context)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Delete a message."""
    message = await _get_message_or_404(db, ctx.channel.id, message_id)
    ctx.authorize(Action.DELETE, tag_subject(SubjectType.CHANNEL_MESSAGE, message))

    await db.delete(message)
    await db.commit()
    return {"message": "Message deleted successfully"}

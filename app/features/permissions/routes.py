"""
Permission introspection API routes.

Lets clients see the rules they hold in a channel and ask whether a given
action would be allowed, without attempting it.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.permissions.ability import can
from app.features.permissions.dependencies import (
    ChannelContext,
    find_membership,
    find_message,
    get_channel_context,
)
from app.features.permissions.schemas import (
    AbilityResponse,
    PermissionCheckRequest,
    PermissionCheckResponse,
    RuleResponse,
)
from app.features.permissions.subjects import Subject, SubjectType, tag_subject
from app.features.users.dependencies import get_current_user
from app.features.users.models import User


router = APIRouter()


@router.get("/channels/{channel_id}/rules", response_model=AbilityResponse)
async def get_channel_rules(
    ctx: Annotated[ChannelContext, Depends(get_channel_context)]
):
    """List the rules the current user holds in a channel."""
    return AbilityResponse(
        channel_id=ctx.channel.id,
        user_id=ctx.user.id,
        role=ctx.membership.role,
        rules=[
            RuleResponse(
                action=rule.action,
                subject_type=rule.subject_type,
                conditions=dict(rule.conditions) if rule.conditions else None,
            )
            for rule in ctx.ability.rules
        ],
    )


async def _load_subject(
    db: AsyncSession,
    ctx: ChannelContext,
    check_request: PermissionCheckRequest
) -> Subject:
    if check_request.subject_type == SubjectType.CHANNEL:
        return ctx.channel_subject

    if check_request.subject_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="subject_id is required for this subject type"
        )

    if check_request.subject_type == SubjectType.CHANNEL_MESSAGE:
        record = await find_message(db, ctx.channel.id, check_request.subject_id)
    else:
        record = await find_membership(db, ctx.channel.id, check_request.subject_id)

    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{check_request.subject_type.value} not found"
        )
    return tag_subject(check_request.subject_type, record)


@router.post("/check", response_model=PermissionCheckResponse)
async def check_permission(
    check_request: PermissionCheckRequest,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Check if the current user may perform an action on a subject in a channel."""
    ctx = await get_channel_context(check_request.channel_id, user, db)
    subject = await _load_subject(db, ctx, check_request)

    allowed = can(ctx.ability, check_request.action, subject)
    return PermissionCheckResponse(
        allowed=allowed,
        reason=None if allowed else "Permission denied"
    )

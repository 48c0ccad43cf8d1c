"""
Pydantic schemas for permission introspection.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from app.features.permissions.ability import Action
from app.features.permissions.definitions import Role
from app.features.permissions.subjects import SubjectType


class RuleResponse(BaseModel):
    """A single granted rule."""
    action: Action
    subject_type: SubjectType
    conditions: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(from_attributes=True)


class AbilityResponse(BaseModel):
    """The rules the current user holds in a channel."""
    channel_id: str
    user_id: str
    role: Role
    rules: List[RuleResponse] = []


class PermissionCheckRequest(BaseModel):
    """Schema for checking whether the current user may act on a subject."""
    channel_id: str = Field(..., description="Channel the subject belongs to")
    action: Action = Field(..., description="Action to check")
    subject_type: SubjectType = Field(..., description="Type of the subject")
    subject_id: Optional[str] = Field(
        None,
        description="Message ID or member user ID; ignored for Channel subjects"
    )


class PermissionCheckResponse(BaseModel):
    """Schema for permission check response."""
    allowed: bool
    reason: Optional[str] = None

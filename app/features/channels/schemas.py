"""
Pydantic schemas for channels, memberships and messages.
"""
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from app.features.permissions.definitions import Role
from app.features.users.schemas import UserPublic


class ChannelBase(BaseModel):
    """Base channel schema."""
    name: str = Field(..., min_length=1, max_length=100, description="Channel name")
    description: str | None = Field(None, max_length=1000, description="Channel description")


class ChannelCreate(ChannelBase):
    """Schema for creating a channel."""
    pass


class ChannelUpdate(BaseModel):
    """Schema for updating a channel."""
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=1000)


class ChannelResponse(ChannelBase):
    """Schema for channel response."""
    id: str
    creator_id: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ChannelUserResponse(BaseModel):
    """Schema for a channel membership."""
    id: str
    channel_id: str
    user_id: str
    role: Role
    joined_at: datetime
    user: UserPublic | None = None

    model_config = ConfigDict(from_attributes=True)


class MessageCreate(BaseModel):
    """Schema for posting a message."""
    content: str = Field(..., min_length=1, max_length=4000)


class MessageUpdate(BaseModel):
    """Schema for editing a message."""
    content: str = Field(..., min_length=1, max_length=4000)


class MessageResponse(BaseModel):
    """Schema for message response."""
    id: str
    channel_id: str
    sender_id: str
    content: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

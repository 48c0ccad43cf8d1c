"""
Channel, membership and message models.
"""
from datetime import datetime
from sqlalchemy import String, ForeignKey, Text, DateTime, Enum as SQLEnum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database.base import Base, TimestampMixin
from app.features.permissions.definitions import Role
from app.features.users.models import generate_ulid


class Channel(Base, TimestampMixin):
    """
    A study group channel.

    ``creator_id`` is the ownership field checked by the update and delete
    channel rules.
    """
    __tablename__ = "channels"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    creator_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    def __repr__(self) -> str:
        return f"<Channel(id={self.id}, name={self.name!r})>"


class ChannelUser(Base, TimestampMixin):
    """
    Membership of a user in a channel.

    The role is fixed when the membership is created: CREATOR for the user
    who created the channel, MEMBER for users who join.
    """
    __tablename__ = "channel_users"
    __table_args__ = (
        UniqueConstraint("channel_id", "user_id", name="uq_channel_users_channel_user"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    channel_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("channels.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    role: Mapped[Role] = mapped_column(SQLEnum(Role), default=Role.MEMBER, nullable=False)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.now)

    user: Mapped["User"] = relationship(  # type: ignore
        "User",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<ChannelUser(channel_id={self.channel_id}, user_id={self.user_id}, role={self.role})>"


class ChannelMessage(Base, TimestampMixin):
    """A message posted to a channel; ``sender_id`` is its ownership field."""
    __tablename__ = "channel_messages"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    channel_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("channels.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    sender_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<ChannelMessage(id={self.id}, channel_id={self.channel_id}, sender_id={self.sender_id})>"

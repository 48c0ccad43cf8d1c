"""
Seed script to populate demo users and a study channel.

Creates:
- Demo users
- One channel owned by the first user (CREATOR membership)
- A TUTOR membership and a few MEMBER memberships

Tutors can only be assigned here; the API never changes a membership's role.

Usage:
    python -m scripts.seed_channels [--reset]
"""
import asyncio
import sys
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db, init_db, reset_db
from app.features.channels.models import Channel, ChannelUser
from app.features.permissions.definitions import Role
from app.features.users.auth import create_access_token
from app.features.users.models import User
from app.utils import get_logger


log = get_logger(__name__)


DEMO_USERS = [
    # (email, name, role in the demo channel)
    ("ada@studybuddy.dev", "Ada Lovelace", Role.CREATOR),
    ("alan@studybuddy.dev", "Alan Turing", Role.TUTOR),
    ("grace@studybuddy.dev", "Grace Hopper", Role.MEMBER),
    ("edsger@studybuddy.dev", "Edsger Dijkstra", Role.MEMBER),
    ("barbara@studybuddy.dev", "Barbara Liskov", Role.MEMBER),
]

DEMO_CHANNEL = {
    "name": "Algorithms study group",
    "description": "Weekly problem sets and exam prep",
}


async def seed_users(db: AsyncSession) -> dict[str, User]:
    """
    Create demo users, skipping those that already exist.

    Returns:
        Dictionary mapping email to User
    """
    log.info("Creating demo users...")
    users = {}

    for email, name, _role in DEMO_USERS:
        result = await db.execute(select(User).where(User.email == email))
        existing = result.scalars().first()

        if existing:
            log.debug(f"User '{email}' already exists, skipping")
            users[email] = existing
            continue

        user = User(email=email, name=name)
        db.add(user)
        users[email] = user
        log.info(f"Created user: {email}")

    await db.commit()
    return users


async def seed_channel(db: AsyncSession, users: dict[str, User]) -> Channel:
    """Create the demo channel and its memberships."""
    creator_email = next(email for email, _, role in DEMO_USERS if role == Role.CREATOR)
    creator = users[creator_email]

    result = await db.execute(
        select(Channel).where(
            Channel.name == DEMO_CHANNEL["name"],
            Channel.creator_id == creator.id
        )
    )
    channel = result.scalars().first()
    if channel:
        log.debug(f"Channel '{channel.name}' already exists, skipping")
        return channel

    channel = Channel(**DEMO_CHANNEL, creator_id=creator.id)
    db.add(channel)
    await db.flush()

    for email, _name, role in DEMO_USERS:
        db.add(ChannelUser(channel_id=channel.id, user_id=users[email].id, role=role))
        log.info(f"Added {email} to '{channel.name}' as {role.value}")

    await db.commit()
    return channel


async def main():
    """Seed users and the demo channel, then print bearer tokens."""
    log.info("Starting channel seeding...")

    if "--reset" in sys.argv:
        log.warning("Dropping and recreating all tables...")
        await reset_db()
    else:
        await init_db()

    async for db in get_db():
        try:
            users = await seed_users(db)
            channel = await seed_channel(db, users)

            log.info("Channel seeding completed successfully!")
            log.info("")
            log.info(f"Channel {channel.id}: {channel.name}")
            for email, _name, role in DEMO_USERS:
                log.info(f"  - {role.value:<8} {email}: {create_access_token(users[email].id)}")

        except Exception as e:
            log.error(f"Error seeding channels: {e}", exc_info=True)
            await db.rollback()
            raise

        break  # Only use first session


if __name__ == "__main__":
    asyncio.run(main())

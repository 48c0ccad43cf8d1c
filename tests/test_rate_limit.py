import pytest

from app.core import config
from app.core.limiter import limiter
from app.features.permissions.definitions import Role


@pytest.fixture
def rate_limited(monkeypatch):
    monkeypatch.setattr(limiter, "enabled", True)
    limiter.reset()
    yield
    limiter.reset()


async def test_posting_past_the_limit_is_throttled(client, make_user, make_channel, rate_limited):
    creator = await make_user()
    channel_id = await make_channel(creator)
    allowed = int(config.MESSAGE_RATE_LIMIT.split("/")[0])

    for n in range(allowed):
        res = await client.post(
            f"/channels/{channel_id}/messages",
            json={"content": f"note {n}"},
            headers=creator.headers,
        )
        assert res.status_code == 201

    res = await client.post(
        f"/channels/{channel_id}/messages",
        json={"content": "one too many"},
        headers=creator.headers,
    )
    assert res.status_code == 429
    assert res.json() == {"error": "You are going too fast"}


async def test_budget_is_per_token(client, make_user, make_channel, add_member, rate_limited):
    creator = await make_user()
    tutor = await make_user()
    channel_id = await make_channel(creator)
    await add_member(channel_id, tutor, Role.TUTOR)
    allowed = int(config.MESSAGE_RATE_LIMIT.split("/")[0])

    for n in range(allowed + 1):
        await client.post(
            f"/channels/{channel_id}/messages",
            json={"content": f"note {n}"},
            headers=creator.headers,
        )

    res = await client.post(
        f"/channels/{channel_id}/messages",
        json={"content": "still fine"},
        headers=tutor.headers,
    )
    assert res.status_code == 201

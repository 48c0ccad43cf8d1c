from app.features.permissions.definitions import Role


async def test_join_adds_member(client, make_user, make_channel):
    creator = await make_user()
    channel_id = await make_channel(creator)
    members = [await make_user() for _ in range(3)]

    for member in members:
        res = await client.post(f"/channels/{channel_id}/join", headers=member.headers)
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["role"] == "MEMBER"
        assert data["user"]["id"] == member.id

    res = await client.get(f"/channels/{channel_id}/members")
    assert res.json()["meta"]["total"] == 4

    for member in members:
        res = await client.get(f"/channels/{channel_id}/members/{member.id}")
        assert res.status_code == 200
        assert res.json()["data"]["user_id"] == member.id


async def test_join_twice_conflicts(client, make_user, make_channel):
    creator = await make_user()
    channel_id = await make_channel(creator)

    res = await client.post(f"/channels/{channel_id}/join", headers=creator.headers)
    assert res.status_code == 409


async def test_join_unknown_channel(client, make_user):
    user = await make_user()
    res = await client.post("/channels/01HZX5NOPE0000000000000000/join", headers=user.headers)
    assert res.status_code == 404


async def test_unknown_member_not_found(client, make_user, make_channel):
    creator = await make_user()
    stranger = await make_user()
    channel_id = await make_channel(creator)

    res = await client.get(f"/channels/{channel_id}/members/{stranger.id}")
    assert res.status_code == 404


async def test_member_leaves(client, make_user, make_channel):
    creator = await make_user()
    member = await make_user()
    channel_id = await make_channel(creator)
    await client.post(f"/channels/{channel_id}/join", headers=member.headers)

    res = await client.post(f"/channels/{channel_id}/leave", headers=member.headers)
    assert res.status_code == 200

    res = await client.get(f"/channels/{channel_id}/members")
    assert res.json()["meta"]["total"] == 1


async def test_leave_without_membership_is_not_found(client, make_user, make_channel):
    creator = await make_user()
    outsider = await make_user()
    channel_id = await make_channel(creator)

    res = await client.post(f"/channels/{channel_id}/leave", headers=outsider.headers)
    assert res.status_code == 404


async def test_member_cannot_remove_another_member(client, make_user, make_channel):
    creator = await make_user()
    alice = await make_user()
    bob = await make_user()
    channel_id = await make_channel(creator)
    for user in (alice, bob):
        await client.post(f"/channels/{channel_id}/join", headers=user.headers)

    res = await client.delete(f"/channels/{channel_id}/members/{bob.id}", headers=alice.headers)
    assert res.status_code == 403

    res = await client.delete(f"/channels/{channel_id}/members/{alice.id}", headers=alice.headers)
    assert res.status_code == 200


async def test_creator_removes_members(client, make_user, make_channel):
    creator = await make_user()
    members = [await make_user() for _ in range(3)]
    channel_id = await make_channel(creator)
    for member in members:
        await client.post(f"/channels/{channel_id}/join", headers=member.headers)

    for member in members[:2]:
        res = await client.delete(f"/channels/{channel_id}/members/{member.id}", headers=creator.headers)
        assert res.status_code == 200

    res = await client.get(f"/channels/{channel_id}/members")
    assert res.json()["meta"]["total"] == 2


async def test_remove_unknown_member(client, make_user, make_channel):
    creator = await make_user()
    stranger = await make_user()
    channel_id = await make_channel(creator)

    res = await client.delete(f"/channels/{channel_id}/members/{stranger.id}", headers=creator.headers)
    assert res.status_code == 404


async def test_tutor_can_leave_but_not_remove_others(client, make_user, make_channel, add_member):
    creator = await make_user()
    tutor = await make_user()
    member = await make_user()
    channel_id = await make_channel(creator)
    await add_member(channel_id, tutor, Role.TUTOR)
    await client.post(f"/channels/{channel_id}/join", headers=member.headers)

    res = await client.delete(f"/channels/{channel_id}/members/{member.id}", headers=tutor.headers)
    assert res.status_code == 403

    res = await client.post(f"/channels/{channel_id}/leave", headers=tutor.headers)
    assert res.status_code == 200

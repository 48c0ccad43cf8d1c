import pytest

from app.features.permissions import (
    Ability,
    AbilityUser,
    Action,
    Role,
    Rule,
    SubjectType,
    build_ability,
    can,
    tag_subject,
)


ME = "01HZX5ME000000000000000000"
OTHER = "01HZX5OTHER000000000000000"


def message(sender_id):
    return tag_subject(SubjectType.CHANNEL_MESSAGE, {"id": "m1", "sender_id": sender_id})


def membership(user_id):
    return tag_subject(SubjectType.CHANNEL_USER, {"id": "cu1", "user_id": user_id})


def channel(creator_id):
    return tag_subject(SubjectType.CHANNEL, {"id": "c1", "creator_id": creator_id})


def ability(role):
    return build_ability(AbilityUser(id=ME, role=role))


@pytest.mark.parametrize("sender", [ME, OTHER])
def test_creator_posts_and_deletes_any_message(sender):
    creator = ability(Role.CREATOR)
    assert can(creator, Action.POST, message(sender))
    assert can(creator, Action.DELETE, message(sender))


def test_creator_cannot_edit_messages():
    assert not can(ability(Role.CREATOR), Action.UPDATE, message(ME))


@pytest.mark.parametrize("user_id", [ME, OTHER])
def test_creator_removes_any_member(user_id):
    assert can(ability(Role.CREATOR), Action.REMOVE, membership(user_id))


def test_member_updates_only_own_messages():
    member = ability(Role.MEMBER)
    assert can(member, Action.UPDATE, message(ME))
    assert not can(member, Action.UPDATE, message(OTHER))


def test_member_deletes_only_own_messages():
    member = ability(Role.MEMBER)
    assert can(member, Action.DELETE, message(ME))
    assert not can(member, Action.DELETE, message(OTHER))


def test_member_cannot_post():
    assert not can(ability(Role.MEMBER), Action.POST, message(ME))


def test_member_removes_only_self():
    member = ability(Role.MEMBER)
    assert can(member, Action.REMOVE, membership(ME))
    assert not can(member, Action.REMOVE, membership(OTHER))


def test_tutor_moderates_messages_but_not_members():
    tutor = ability(Role.TUTOR)
    assert can(tutor, Action.POST, message(OTHER))
    assert can(tutor, Action.DELETE, message(OTHER))
    assert not can(tutor, Action.UPDATE, message(ME))
    assert can(tutor, Action.REMOVE, membership(ME))
    assert not can(tutor, Action.REMOVE, membership(OTHER))


@pytest.mark.parametrize("role", list(Role))
@pytest.mark.parametrize("action", [Action.UPDATE, Action.DELETE])
def test_channel_changes_limited_to_creator_id(role, action):
    user_ability = ability(role)
    assert can(user_ability, action, channel(ME))
    assert not can(user_ability, action, channel(OTHER))


def test_unknown_role_gets_member_rules():
    stranger = ability("GUEST")
    assert stranger.rules == ability(Role.MEMBER).rules


def test_role_given_as_plain_string():
    assert ability("CREATOR").rules == ability(Role.CREATOR).rules


def test_building_twice_gives_the_same_decisions():
    first = build_ability(AbilityUser(id=ME, role=Role.MEMBER))
    second = build_ability(AbilityUser(id=ME, role=Role.MEMBER))
    assert first == second
    for subject in (message(ME), message(OTHER), membership(OTHER), channel(ME)):
        for action in Action:
            assert can(first, action, subject) == can(second, action, subject)


def test_missing_condition_field_denies():
    subject = tag_subject(SubjectType.CHANNEL_MESSAGE, {"id": "m1"})
    assert not can(ability(Role.MEMBER), Action.UPDATE, subject)


def test_condition_uses_equality_not_truthiness():
    subject = tag_subject(SubjectType.CHANNEL_MESSAGE, {"sender_id": None})
    assert not can(ability(Role.MEMBER), Action.DELETE, subject)


def test_unknown_action_denies():
    assert not can(ability(Role.CREATOR), "archive", message(ME))


def test_rules_are_a_union_regardless_of_order():
    rules = [
        Rule(Action.DELETE, SubjectType.CHANNEL_MESSAGE, {"sender_id": ME}),
        Rule(Action.DELETE, SubjectType.CHANNEL_MESSAGE),
    ]
    forward = Ability(rules=tuple(rules))
    backward = Ability(rules=tuple(reversed(rules)))
    assert can(forward, Action.DELETE, message(OTHER))
    assert can(backward, Action.DELETE, message(OTHER))


def test_empty_ability_denies_everything():
    empty = Ability()
    assert not can(empty, Action.POST, message(ME))
    assert empty.cannot(Action.UPDATE, channel(ME))


def test_rule_rejects_fields_outside_the_subject_type():
    with pytest.raises(ValueError):
        Rule(Action.UPDATE, SubjectType.CHANNEL, {"sender_id": ME})


def test_rule_conditions_are_frozen():
    conditions = {"creator_id": ME}
    rule = Rule(Action.UPDATE, SubjectType.CHANNEL, conditions)
    conditions["creator_id"] = OTHER
    assert rule.conditions["creator_id"] == ME
    with pytest.raises(TypeError):
        rule.conditions["creator_id"] = OTHER


def test_rules_for_filters_by_action_and_type():
    creator = ability(Role.CREATOR)
    assert len(creator.rules_for(Action.REMOVE, SubjectType.CHANNEL_USER)) == 1
    assert creator.rules_for(Action.UPDATE, SubjectType.CHANNEL_MESSAGE) == []

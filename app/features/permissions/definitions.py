"""
Ability definitions per channel role.
"""
from dataclasses import dataclass
from enum import Enum

from app.features.permissions.ability import Ability, Action, Rule
from app.features.permissions.subjects import SubjectType


class Role(str, Enum):
    CREATOR = "CREATOR"
    TUTOR = "TUTOR"
    MEMBER = "MEMBER"


@dataclass(frozen=True)
class AbilityUser:
    """The acting user as seen by the rules: their id and their channel role."""
    id: str
    role: Role | str


def build_ability(user) -> Ability:
    """
    Build the Ability for ``user`` (anything with ``id`` and ``role``).

    CREATOR and TUTOR moderate messages; everyone else may only edit and
    delete their own. Unknown roles get the member rules. Channel update and
    delete are always limited to the channel's creator.
    """
    rules: list[Rule] = []

    if user.role in (Role.CREATOR, Role.TUTOR):
        rules.append(Rule(Action.POST, SubjectType.CHANNEL_MESSAGE))
        rules.append(Rule(Action.DELETE, SubjectType.CHANNEL_MESSAGE))
        if user.role == Role.CREATOR:
            rules.append(Rule(Action.REMOVE, SubjectType.CHANNEL_USER))
        else:
            # tutors get only the self-scoped member rule: they can leave
            # but cannot remove anyone else
            rules.append(Rule(Action.REMOVE, SubjectType.CHANNEL_USER, {"user_id": user.id}))
    else:
        rules.append(Rule(Action.UPDATE, SubjectType.CHANNEL_MESSAGE, {"sender_id": user.id}))
        rules.append(Rule(Action.DELETE, SubjectType.CHANNEL_MESSAGE, {"sender_id": user.id}))
        rules.append(Rule(Action.REMOVE, SubjectType.CHANNEL_USER, {"user_id": user.id}))

    rules.append(Rule(Action.UPDATE, SubjectType.CHANNEL, {"creator_id": user.id}))
    rules.append(Rule(Action.DELETE, SubjectType.CHANNEL, {"creator_id": user.id}))

    return Ability(rules=tuple(rules))

"""
Channel authorization feature module.

Role based rules narrowed by ownership conditions: a user's role in a channel
decides which verbs they hold, and field conditions restrict broad verbs to
records the user owns.
"""
from app.features.permissions.ability import Ability, Action, Rule, can
from app.features.permissions.definitions import AbilityUser, Role, build_ability
from app.features.permissions.subjects import Subject, SubjectType, tag_subject

__all__ = [
    "Ability",
    "AbilityUser",
    "Action",
    "Role",
    "Rule",
    "Subject",
    "SubjectType",
    "build_ability",
    "can",
    "tag_subject",
]

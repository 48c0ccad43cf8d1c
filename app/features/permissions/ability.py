"""
Rules, abilities and the evaluator.

An Ability is the immutable set of rules granted to one user in one channel.
``can`` is a permissive union over the rules matching the queried action and
subject type: there are no deny rules, and a missing match is a denial.
"""
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional

from app.features.permissions.subjects import SUBJECT_FIELDS, Subject, SubjectType
from app.utils import get_logger


log = get_logger(__name__)


class Action(str, Enum):
    POST = "post"
    UPDATE = "update"
    DELETE = "delete"
    REMOVE = "remove"


@dataclass(frozen=True)
class Rule:
    """
    Grants ``action`` on subjects of ``subject_type``.

    ``conditions`` maps subject field names to the literal value each must
    equal. Field names are restricted to ``SUBJECT_FIELDS[subject_type]``.
    """
    action: Action
    subject_type: SubjectType
    conditions: Optional[Mapping[str, Any]] = None

    def __post_init__(self):
        object.__setattr__(self, "action", Action(self.action))
        object.__setattr__(self, "subject_type", SubjectType(self.subject_type))
        if self.conditions is None:
            return
        unknown = set(self.conditions) - SUBJECT_FIELDS[self.subject_type]
        if unknown:
            raise ValueError(
                f"Unknown condition field(s) {sorted(unknown)} for {self.subject_type.value}"
            )
        object.__setattr__(self, "conditions", MappingProxyType(dict(self.conditions)))

    def matches(self, subject: Subject) -> bool:
        """True if every condition field is present on ``subject`` and equal."""
        if not self.conditions:
            return True
        for name, expected in self.conditions.items():
            if name not in subject or subject.get(name) != expected:
                return False
        return True


@dataclass(frozen=True)
class Ability:
    rules: tuple[Rule, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "rules", tuple(self.rules))

    def rules_for(self, action: Action, subject_type: SubjectType) -> list[Rule]:
        return [
            rule for rule in self.rules
            if rule.action == action and rule.subject_type == subject_type
        ]

    def can(self, action: Action | str, subject: Subject) -> bool:
        return can(self, action, subject)

    def cannot(self, action: Action | str, subject: Subject) -> bool:
        return not can(self, action, subject)


def can(ability: Ability, action: Action | str, subject: Subject) -> bool:
    """
    Decide whether ``ability`` allows ``action`` on ``subject``.

    Unknown actions and subject types are not errors; no rule covers them,
    so they are denied.
    """
    try:
        action = Action(action)
        subject_type = SubjectType(subject.type)
    except ValueError:
        log.debug("No rule covers %s on %s", action, subject.type)
        return False

    for rule in ability.rules_for(action, subject_type):
        if rule.matches(subject):
            return True

    log.debug("Denied %s on %s %s", action.value, subject_type.value, subject.get("id"))
    return False

"""
Subjects: resource records tagged with their type.

Rules are matched by the tag, never by inspecting the record's Python type,
so plain dicts, ORM rows and pydantic models all work as subject data.
"""
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any

from sqlalchemy import inspect


class SubjectType(str, Enum):
    CHANNEL = "Channel"
    CHANNEL_MESSAGE = "ChannelMessage"
    CHANNEL_USER = "ChannelUser"


# Fields a rule condition may reference, per subject type.
SUBJECT_FIELDS: Mapping[SubjectType, frozenset[str]] = MappingProxyType({
    SubjectType.CHANNEL: frozenset({"creator_id"}),
    SubjectType.CHANNEL_MESSAGE: frozenset({"sender_id"}),
    SubjectType.CHANNEL_USER: frozenset({"user_id"}),
})


@dataclass(frozen=True)
class Subject:
    type: SubjectType
    data: Mapping[str, Any]

    def get(self, field: str, default: Any = None) -> Any:
        return self.data.get(field, default)

    def __contains__(self, field: str) -> bool:
        return field in self.data


def tag_subject(subject_type: SubjectType, data: Any) -> Subject:
    """
    Wrap ``data`` as a subject of ``subject_type``.

    Mappings are copied as-is. ORM rows contribute their loaded column
    values; expired or deferred columns are skipped rather than fetched.
    Other objects contribute their public instance attributes. Fields that
    are absent stay absent, so conditions on them never match.
    """
    subject_type = SubjectType(subject_type)
    if isinstance(data, Mapping):
        values = dict(data)
    else:
        state = inspect(data, raiseerr=False)
        if state is not None and hasattr(state, "mapper"):
            values = {
                attr.key: state.dict[attr.key]
                for attr in state.mapper.column_attrs
                if attr.key in state.dict
            }
        else:
            values = {
                key: value for key, value in vars(data).items()
                if not key.startswith("_")
            }
    return Subject(type=subject_type, data=MappingProxyType(values))

"""
Records stored in the JSON document (users and posts) and their wire format.

The on-disk layout is::

    {"users": {"<email>": {...}}, "posts": {"<id>": {...}}}

with camelCase field names and RFC 3339 timestamps in UTC.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_RFC3339 = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})[Tt ](?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?(?P<tz>[Zz]|[+-]\d{2}:\d{2})$"
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render a datetime as RFC 3339 with a ``Z`` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    if value == ZERO_TIME:
        return "0001-01-01T00:00:00Z"
    value = value.astimezone(timezone.utc)
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += ("." + f"{value.microsecond:06d}").rstrip("0")
    return text + "Z"


def parse_timestamp(raw) -> datetime:
    """
    Parse an RFC 3339 timestamp into an aware UTC datetime.

    Fractional seconds beyond microseconds are truncated. None and "" map to
    ZERO_TIME. Raises ValueError on anything else, non-strings included.
    """
    if raw is None or raw == "":
        return ZERO_TIME
    if not isinstance(raw, str):
        raise ValueError(f"timestamp must be a string, got {type(raw).__name__}")
    match = _RFC3339.match(raw.strip())
    if not match:
        raise ValueError(f"invalid timestamp: {raw!r}")
    frac = (match.group("frac") or "")[:6].ljust(6, "0")
    tz = match.group("tz")
    if tz in ("Z", "z"):
        tz = "+00:00"
    parsed = datetime.fromisoformat(f"{match.group('date')}T{match.group('time')}.{frac}{tz}")
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        # year 1 with a positive offset falls before datetime.min
        if parsed.year == 1:
            return ZERO_TIME
        raise ValueError(f"timestamp out of range: {raw!r}")


@dataclass
class User:
    created_at: datetime = ZERO_TIME
    email: str = ""
    password: str = ""
    name: str = ""
    age: int = 0

    def is_zero(self) -> bool:
        return self == User()

    def to_dict(self) -> dict:
        return {
            "createdAt": format_timestamp(self.created_at),
            "email": self.email,
            "password": self.password,
            "name": self.name,
            "age": self.age,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        return cls(
            created_at=parse_timestamp(data.get("createdAt")),
            email=_str_field(data, "email"),
            password=_str_field(data, "password"),
            name=_str_field(data, "name"),
            age=_int_field(data, "age"),
        )


@dataclass
class Post:
    id: str = ""
    created_at: datetime = ZERO_TIME
    user_email: str = ""
    text: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "createdAt": format_timestamp(self.created_at),
            "userEmail": self.user_email,
            "text": self.text,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Post":
        return cls(
            id=_str_field(data, "id"),
            created_at=parse_timestamp(data.get("createdAt")),
            user_email=_str_field(data, "userEmail"),
            text=_str_field(data, "text"),
        )


@dataclass
class Document:
    """Root of the JSON file: users keyed by email, posts keyed by id."""

    users: dict[str, User] = field(default_factory=dict)
    posts: dict[str, Post] = field(default_factory=dict)


def document_to_dict(doc: Document) -> dict:
    return {
        "users": {email: user.to_dict() for email, user in doc.users.items()},
        "posts": {pid: post.to_dict() for pid, post in doc.posts.items()},
    }


def document_from_dict(data: dict) -> Document:
    if not isinstance(data, dict):
        raise ValueError("document root must be a JSON object")
    users = data.get("users")
    posts = data.get("posts")
    users = {} if users is None else users
    posts = {} if posts is None else posts
    if not isinstance(users, dict) or not isinstance(posts, dict):
        raise ValueError("'users' and 'posts' must be JSON objects")
    return Document(
        users={email: User.from_dict(_record(raw)) for email, raw in users.items()},
        posts={pid: Post.from_dict(_record(raw)) for pid, raw in posts.items()},
    )


def _record(raw) -> dict:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"record must be a JSON object, got {type(raw).__name__}")
    return raw


def _str_field(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key!r} must be a string, got {type(value).__name__}")
    return value


def _int_field(data: dict, key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    # bool is an int subclass but never a valid age
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key!r} must be an integer, got {value!r}")
    return value

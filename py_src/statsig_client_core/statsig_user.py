import json
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
from typing_extensions import TypeAlias

JSONPrimitive: TypeAlias = Union[str, int, float, bool, None]
UserAttributeValue: TypeAlias = Union[JSONPrimitive, Sequence[str]]


class StatsigUser:
    """Represents a Statsig user with optional metadata."""

    user_id: Optional[Union[str, int]]
    email: Optional[str]
    ip: Optional[str]
    user_agent: Optional[str]
    country: Optional[str]
    locale: Optional[str]
    app_version: Optional[str]
    custom: Optional[Mapping[str, UserAttributeValue]]
    custom_ids: Optional[Mapping[str, str]]
    private_attributes: Optional[Mapping[str, UserAttributeValue]]
    statsig_environment: Optional[Dict[str, str]]

    def __init__(
        self,
        user_id: Optional[Union[str, int]] = None,
        email: Optional[str] = None,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
        country: Optional[str] = None,
        locale: Optional[str] = None,
        app_version: Optional[str] = None,
        custom: Optional[Mapping[str, UserAttributeValue]] = None,
        custom_ids: Optional[Mapping[str, str]] = None,
        private_attributes: Optional[Mapping[str, UserAttributeValue]] = None,
    ) -> None:
        self.user_id = user_id
        self.email = email
        self.ip = ip
        self.user_agent = user_agent
        self.country = country
        self.locale = locale
        self.app_version = app_version
        self.custom = custom
        self.custom_ids = custom_ids
        self.private_attributes = private_attributes
        self.statsig_environment = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StatsigUser":
        """Builds a user from either the wire (camelCase) or attribute (snake_case) form."""
        user = cls()
        for wire_key, attr in _WIRE_KEYS:
            if wire_key in data:
                setattr(user, attr, data[wire_key])
            elif attr in data:
                setattr(user, attr, data[attr])
        return user

    def to_dict(self, include_private: bool = True) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for wire_key, attr in _WIRE_KEYS:
            if attr == "private_attributes" and not include_private:
                continue
            value = getattr(self, attr)
            if value is None:
                continue
            if isinstance(value, Mapping):
                value = dict(value)
            result[wire_key] = value
        return result

    def copy(self) -> "StatsigUser":
        return StatsigUser.from_dict(self.to_dict())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StatsigUser):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"StatsigUser({self.to_dict(include_private=False)!r})"


_WIRE_KEYS: List[tuple] = [
    ("userID", "user_id"),
    ("email", "email"),
    ("ip", "ip"),
    ("userAgent", "user_agent"),
    ("country", "country"),
    ("locale", "locale"),
    ("appVersion", "app_version"),
    ("custom", "custom"),
    ("customIDs", "custom_ids"),
    ("privateAttributes", "private_attributes"),
    ("statsigEnvironment", "statsig_environment"),
]


MAX_VALUE_SIZE = 64
MAX_OBJ_SIZE = 1024
MAX_USER_SIZE = 2048


def trim_value(value: Any) -> Any:
    if isinstance(value, str) and len(value) > MAX_VALUE_SIZE:
        return value[:MAX_VALUE_SIZE]
    return value


def serialized_size(obj: Any) -> int:
    return len(json.dumps(obj, separators=(",", ":"), default=str))

import threading
import uuid
from typing import Any, Dict, Optional

from .data_store import STABLE_ID_KEY, DataStore
from .metadata import SDK_TYPE, __version__
from .output_logger_provider import OutputLogger
from .statsig_user import (
    MAX_OBJ_SIZE,
    MAX_USER_SIZE,
    StatsigUser,
    serialized_size,
    trim_value,
)

_STRING_FIELDS = ("email", "ip", "user_agent", "country", "locale", "app_version")


class Identity:
    """Owns the session's user plus the metadata attached to every request."""

    def __init__(
        self,
        logger: OutputLogger,
        data_store: DataStore,
        environment: Optional[str] = None,
        override_stable_id: Optional[str] = None,
    ):
        self._logger = logger
        self._environment = environment
        self._lock = threading.Lock()
        self._user = self._sanitize(None)
        self._statsig_metadata: Dict[str, Any] = {
            "sdkType": SDK_TYPE,
            "sdkVersion": __version__,
            "stableID": self._load_stable_id(data_store, override_stable_id),
            "sessionID": str(uuid.uuid4()),
        }

    def set_user(self, user: Optional[StatsigUser]) -> StatsigUser:
        sanitized = self._sanitize(user)
        with self._lock:
            self._user = sanitized
        return sanitized

    def get_user(self) -> StatsigUser:
        with self._lock:
            return self._user

    def get_user_for_logging(self) -> Dict[str, Any]:
        return self.get_user().to_dict(include_private=False)

    def get_statsig_metadata(self) -> Dict[str, Any]:
        return dict(self._statsig_metadata)

    def _sanitize(self, user: Optional[StatsigUser]) -> StatsigUser:
        result = user.copy() if user is not None else StatsigUser()

        if result.user_id is not None:
            result.user_id = trim_value(str(result.user_id))
        for field in _STRING_FIELDS:
            setattr(result, field, trim_value(getattr(result, field)))
        if result.custom_ids is not None:
            result.custom_ids = {
                key: trim_value(value) for key, value in result.custom_ids.items()
            }

        if result.custom is not None and serialized_size(result.custom) > MAX_OBJ_SIZE:
            self._logger.warn("Identity", "User object is too large, dropping custom")
            result.custom = {}
        if (
            result.private_attributes is not None
            and serialized_size(result.private_attributes) > MAX_OBJ_SIZE
        ):
            self._logger.warn("Identity", "User object is too large, dropping privateAttributes")
            result.private_attributes = {}

        if self._environment:
            result.statsig_environment = {"tier": self._environment}

        if serialized_size(result.to_dict()) > MAX_USER_SIZE:
            result.custom = {}
        if serialized_size(result.to_dict()) > MAX_USER_SIZE:
            result.private_attributes = {}

        return result

    def _load_stable_id(
        self, data_store: DataStore, override_stable_id: Optional[str]
    ) -> str:
        if override_stable_id:
            return override_stable_id

        stored = data_store.get(STABLE_ID_KEY)
        if stored is not None and stored.result:
            return stored.result

        stable_id = str(uuid.uuid4())
        data_store.set(STABLE_ID_KEY, stable_id)
        return stable_id

import time
from typing import Any, Dict, List, Mapping, Optional, Union

from .statsig_user import MAX_OBJ_SIZE, serialized_size, trim_value

GATE_EXPOSURE_EVENT = "statsig::gate_exposure"
CONFIG_EXPOSURE_EVENT = "statsig::config_exposure"
DIAGNOSTICS_EVENT = "statsig::diagnostics"

METADATA_TOO_LARGE = {"error": "not logged due to size too large"}


class LogEvent:
    """A single record in the event queue.

    Each field is bounded on its own: an oversized ``metadata`` blob is replaced
    by a placeholder without touching ``event_name`` or ``value``.
    """

    event_name: str
    value: Optional[Union[str, int, float]]
    metadata: Optional[Dict[str, Any]]
    user: Optional[Dict[str, Any]]
    time: int
    statsig_metadata: Dict[str, Any]
    secondary_exposures: List[Dict[str, str]]

    def __init__(self, event_name: str):
        self.event_name = trim_value(event_name)
        self.value = None
        self.metadata = None
        self.user = None
        self.time = int(time.time() * 1000)
        self.statsig_metadata = {}
        self.secondary_exposures = []

    def set_value(self, value: Optional[Union[str, int, float]]):
        self.value = trim_value(value)

    def set_metadata(self, metadata: Optional[Mapping[str, Any]]):
        if metadata is None:
            self.metadata = None
        elif serialized_size(metadata) > MAX_OBJ_SIZE:
            self.metadata = dict(METADATA_TOO_LARGE)
        else:
            self.metadata = dict(metadata)

    def set_user(self, user: Optional[Dict[str, Any]]):
        self.user = user

    def add_statsig_metadata(self, key: str, value: Any):
        self.statsig_metadata[key] = value

    def set_secondary_exposures(self, exposures: Optional[List[Dict[str, str]]]):
        self.secondary_exposures = list(exposures) if exposures else []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "eventName": self.event_name,
            "user": self.user,
            "value": self.value,
            "metadata": self.metadata,
            "time": self.time,
            "statsigMetadata": self.statsig_metadata,
            "secondaryExposures": self.secondary_exposures,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LogEvent):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"LogEvent({self.to_dict()!r})"

from typing import Optional, Dict
from dataclasses import dataclass

STABLE_ID_KEY = "statsig.stable_id"


@dataclass
class DataStoreResponse:
    result: Optional[str]
    time: Optional[int]


class DataStore:
    """Key/value persistence for values that should outlive a session, such as the stable ID.

    The base class stores nothing, so every session gets a fresh stable ID unless
    a subclass persists it.
    """

    def initialize(self):
        pass

    def shutdown(self):
        pass

    def get(self, key: str) -> Optional[DataStoreResponse]:
        pass

    def set(self, key: str, value: str, time: Optional[int] = None):
        pass


class InMemoryDataStore(DataStore):
    def __init__(self):
        self._values: Dict[str, DataStoreResponse] = {}

    def get(self, key: str) -> Optional[DataStoreResponse]:
        return self._values.get(key)

    def set(self, key: str, value: str, time: Optional[int] = None):
        self._values[key] = DataStoreResponse(result=value, time=time)

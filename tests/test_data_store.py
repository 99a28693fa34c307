import json
from typing import Optional
import pytest

from statsig_client_core import (
    DataStore,
    InMemoryDataStore,
    Statsig,
    DataStoreResponse,
)
from statsig_client_core.data_store import STABLE_ID_KEY
from pytest_httpserver import HTTPServer
from mock_scrapi import MockScrapi, INITIALIZE_ENDPOINT
from utils import get_test_data_resource


class MockDataStore(DataStore):
    init_called = False
    shutdown_called = False
    content_set = None
    get_called_count = 0

    def __init__(self, stored: Optional[str] = None):
        self.stored = stored

    def initialize(self):
        self.init_called = True

    def shutdown(self):
        self.shutdown_called = True

    def get(self, key: str) -> Optional[DataStoreResponse]:
        self.get_called_count += 1
        if self.stored is None:
            return None
        return DataStoreResponse(result=self.stored, time=1234567890)

    def set(self, key: str, value: str, time: Optional[int] = None):
        self.content_set = (key, value)
        self.stored = value


@pytest.fixture
def mock_scrapi(httpserver: HTTPServer):
    mock_scrapi = MockScrapi(httpserver)
    mock_scrapi.stub_all(get_test_data_resource("initialize_response.json"))
    return mock_scrapi


def initialize_metadata(mock_scrapi: MockScrapi, index: int = -1) -> dict:
    request = mock_scrapi.get_requests_for_endpoint(INITIALIZE_ENDPOINT)[index]
    return json.loads(request.get_data())["statsigMetadata"]


def test_data_store_lifecycle(mock_scrapi):
    data_store = MockDataStore()

    statsig = Statsig()
    statsig.initialize("client-key", None, mock_scrapi.options(data_store=data_store)).result(timeout=5)
    statsig.shutdown()

    assert data_store.init_called
    assert data_store.shutdown_called
    assert data_store.get_called_count == 1


def test_new_stable_id_is_saved(mock_scrapi):
    data_store = MockDataStore()

    statsig = Statsig()
    statsig.initialize("client-key", None, mock_scrapi.options(data_store=data_store)).result(timeout=5)
    statsig.shutdown()

    key, value = data_store.content_set
    assert key == STABLE_ID_KEY
    assert initialize_metadata(mock_scrapi)["stableID"] == value


def test_stored_stable_id_is_reused(mock_scrapi):
    data_store = MockDataStore(stored="persisted-stable-id")

    statsig = Statsig()
    statsig.initialize("client-key", None, mock_scrapi.options(data_store=data_store)).result(timeout=5)
    statsig.shutdown()

    assert data_store.content_set is None
    assert initialize_metadata(mock_scrapi)["stableID"] == "persisted-stable-id"


def test_stable_id_survives_sessions(mock_scrapi):
    data_store = InMemoryDataStore()

    for _ in range(2):
        statsig = Statsig()
        statsig.initialize("client-key", None, mock_scrapi.options(data_store=data_store)).result(timeout=5)
        statsig.shutdown()

    assert initialize_metadata(mock_scrapi, 0)["stableID"] == initialize_metadata(mock_scrapi, 1)["stableID"]


def test_override_stable_id_wins(mock_scrapi):
    data_store = MockDataStore(stored="persisted-stable-id")

    statsig = Statsig()
    statsig.initialize(
        "client-key",
        None,
        mock_scrapi.options(data_store=data_store, override_stable_id="override-id"),
    ).result(timeout=5)
    statsig.shutdown()

    assert data_store.get_called_count == 0
    assert initialize_metadata(mock_scrapi)["stableID"] == "override-id"


def test_in_memory_data_store():
    data_store = InMemoryDataStore()
    assert data_store.get("missing") is None

    data_store.set("key", "value", 123)
    assert data_store.get("key") == DataStoreResponse(result="value", time=123)

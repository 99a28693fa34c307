import pytest
from pytest_httpserver import HTTPServer


@pytest.fixture
def httpserver():
    # Per-test server so background report threads from one test cannot
    # reach the handlers registered by the next one.
    server = HTTPServer()
    server.start()
    yield server
    server.clear()
    if server.is_running():
        server.stop()

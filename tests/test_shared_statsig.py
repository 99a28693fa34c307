import pytest
from statsig_client_core import InitializationState, Statsig, StatsigUser
from mock_scrapi import MockScrapi
from utils import get_test_data_resource
from pytest_httpserver import HTTPServer


@pytest.fixture
def statsig_setup(httpserver: HTTPServer):
    mock_scrapi = MockScrapi(httpserver)
    mock_scrapi.stub_all(get_test_data_resource("initialize_response.json"))

    options = mock_scrapi.options()

    Statsig.remove_shared()

    yield options, mock_scrapi

    if Statsig.has_shared_instance():
        statsig = Statsig.shared()
        statsig.shutdown()
        Statsig.remove_shared()


def test_creating_shared_instance(statsig_setup):
    options, _ = statsig_setup

    statsig = Statsig.new_shared()
    statsig.initialize("client-key", StatsigUser("my_user"), options).result(timeout=5)
    assert statsig.check_gate("test_gate")


def test_getting_shared_instance(statsig_setup):
    options, _ = statsig_setup

    statsig = Statsig.new_shared()
    shared_statsig = Statsig.shared()

    assert shared_statsig is statsig

    shared_statsig.initialize("client-key", StatsigUser("my_user"), options).result(timeout=5)
    assert shared_statsig.check_gate("test_gate")


def test_removing_shared_instance(statsig_setup):
    options, _ = statsig_setup

    statsig = Statsig.new_shared()
    statsig.initialize("client-key", None, options).result(timeout=5)
    Statsig.remove_shared()

    shared_statsig = Statsig.shared()
    assert shared_statsig is not statsig
    assert shared_statsig.get_initialization_state() == InitializationState.UNINITIALIZED

    statsig.shutdown()


def test_new_shared_does_not_replace_existing(statsig_setup):
    first = Statsig.new_shared()
    second = Statsig.new_shared()

    assert second is not first
    assert Statsig.shared() is first


def test_checking_if_shared_instance_exists():
    Statsig.new_shared()
    assert Statsig.has_shared_instance()

    Statsig.remove_shared()
    assert not Statsig.has_shared_instance()

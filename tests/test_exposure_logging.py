import pytest
from pytest_httpserver import HTTPServer
from statsig_client_core import Statsig, StatsigUser
from statsig_client_core.log_event import LogEvent

from mock_scrapi import MockScrapi
from utils import TEST_GATE_SECONDARY_EXPOSURES, get_test_data_resource

STR_64 = "1234567890123456789012345678901234567890123456789012345678901234"
STR_1K = STR_64 * 16


@pytest.fixture
def mock_scrapi(httpserver: HTTPServer):
    mock_scrapi = MockScrapi(httpserver)
    mock_scrapi.stub_all(get_test_data_resource("initialize_response.json"))
    return mock_scrapi


@pytest.fixture
def logged(monkeypatch):
    """Collects every event handed to the session's event logger."""
    events = []

    def attach(statsig: Statsig):
        original = statsig._event_logger.log

        def spy(event):
            events.append(event)
            original(event)

        monkeypatch.setattr(statsig._event_logger, "log", spy)

    return events, attach


def without_time(event: LogEvent) -> dict:
    data = event.to_dict()
    del data["time"]
    return data


def test_gate_exposure(mock_scrapi, logged):
    events, attach = logged
    statsig = Statsig()
    statsig.initialize("client-key", None, mock_scrapi.options()).result(timeout=5)
    attach(statsig)

    expected = LogEvent("statsig::gate_exposure")
    expected.set_user({})
    expected.set_metadata({"gate": "test_gate", "gateValue": "true", "ruleID": "ruleID123"})
    expected.set_secondary_exposures(TEST_GATE_SECONDARY_EXPOSURES)

    assert statsig.check_gate("test_gate") is True
    assert len(events) == 1
    assert without_time(events[0]) == without_time(expected)

    statsig.shutdown()


def test_unknown_gate_exposure(mock_scrapi, logged):
    events, attach = logged
    statsig = Statsig()
    statsig.initialize("client-key", None, mock_scrapi.options()).result(timeout=5)
    attach(statsig)

    statsig.check_gate("gate_that_doesnt_exist")

    assert len(events) == 1
    assert events[0].metadata == {
        "gate": "gate_that_doesnt_exist",
        "gateValue": "false",
        "ruleID": "",
    }
    assert events[0].secondary_exposures == []

    statsig.shutdown()


@pytest.mark.parametrize("method", ["get_config", "get_experiment"])
def test_config_exposure(mock_scrapi, logged, method):
    events, attach = logged
    statsig = Statsig()
    statsig.initialize("client-key", None, mock_scrapi.options()).result(timeout=5)
    attach(statsig)

    expected = LogEvent("statsig::config_exposure")
    expected.set_user({})
    expected.set_metadata({"config": "test_config", "ruleID": "ruleID"})

    getattr(statsig, method)("test_config")

    assert len(events) == 1
    assert without_time(events[0]) == without_time(expected)
    assert events[0].secondary_exposures == []

    statsig.shutdown()


def test_big_user_and_log_event_are_trimmed(mock_scrapi, logged):
    events, attach = logged
    statsig = Statsig()
    statsig.initialize(
        "client-key",
        StatsigUser(
            user_id=STR_64 + "more",
            email="jest@statsig.com",
            custom={"extradata": STR_1K},
        ),
        mock_scrapi.options(environment="production"),
    ).result(timeout=5)
    attach(statsig)

    user = statsig.get_current_user()
    assert len(user.user_id) == 64
    assert user.user_id == STR_64
    assert user.email == "jest@statsig.com"
    assert user.custom == {}
    assert user.statsig_environment == {"tier": "production"}

    statsig.log_event(STR_64 + "extra", STR_64 + "extra", {"extradata": STR_1K})

    expected = LogEvent(STR_64)
    expected.set_value(STR_64)
    expected.set_metadata({"error": "not logged due to size too large"})
    expected.set_user(user.to_dict(include_private=False))

    assert len(events) == 1
    assert without_time(events[0]) == without_time(expected)

    statsig.shutdown()


def test_custom_event_with_number_and_metadata(mock_scrapi):
    statsig = Statsig()
    statsig.initialize("client-key", StatsigUser("my_user"), mock_scrapi.options()).result(timeout=5)

    statsig.log_event("my_custom_event_with_num", 1.23, {"some": "value"})
    statsig.flush_events().result(timeout=5)

    events = mock_scrapi.get_logged_events()
    event = events[0]

    assert len(events) == 1
    assert event["eventName"] == "my_custom_event_with_num"
    assert event["value"] == 1.23
    assert event["metadata"]["some"] == "value"
    assert event["user"] == {"userID": "my_user"}

    statsig.shutdown()


def test_log_event_with_bad_types_does_not_throw(mock_scrapi):
    statsig = Statsig()
    statsig.initialize("client-key", None, mock_scrapi.options()).result(timeout=5)

    statsig.log_event("event_with_object_value", {"not": "allowed"}, ["not", "a", "map"])
    statsig.flush_events().result(timeout=5)

    event = mock_scrapi.get_logged_events()[0]
    assert event["eventName"] == "event_with_object_value"
    assert event["value"] is None
    assert event["metadata"] is None

    statsig.shutdown()


def test_exposures_follow_the_updated_user(mock_scrapi):
    statsig = Statsig()
    statsig.initialize("client-key", StatsigUser("first"), mock_scrapi.options()).result(timeout=5)

    statsig.check_gate("test_gate")
    statsig.update_user(StatsigUser("second")).result(timeout=5)
    statsig.check_gate("test_gate")
    statsig.shutdown()

    users = [e["user"]["userID"] for e in mock_scrapi.get_logged_events()]
    assert users == ["first", "second"]

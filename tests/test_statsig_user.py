from typing import Mapping

import pytest
from statsig_client_core import StatsigUser


def test_create_user_with_custom_fields():
    user = StatsigUser(
        user_id="user_123",
        custom={"id": 30, "premium": True},
        custom_ids={"email": "whd@statsig.com", "google": "whd@gmail"},
        private_attributes={"ip": "1.2.3.4"},
    )

    assert user.custom == {"id": 30, "premium": True}
    assert user.custom_ids == {"email": "whd@statsig.com", "google": "whd@gmail"}
    assert user.private_attributes == {"ip": "1.2.3.4"}


def test_create_user_with_mapping():
    """Test creating a user where `custom` and `private_attributes` are `Mapping` instead of `Dict`."""
    custom_mapping: Mapping[str, int] = {"id": 30, "premium": 1}
    private_mapping: Mapping[str, str] = {"ip": "1.2.3.4"}

    user = StatsigUser(
        user_id="user_123", custom=custom_mapping, private_attributes=private_mapping
    )

    assert user.to_dict() == {
        "userID": "user_123",
        "custom": {"id": 30, "premium": 1},
        "privateAttributes": {"ip": "1.2.3.4"},
    }


def test_to_dict_uses_wire_names_and_skips_unset_fields():
    user = StatsigUser(
        user_id=123,
        user_agent="Mozilla/5.0",
        app_version="1.0.0",
        custom_ids={"companyID": "12345"},
    )

    assert user.to_dict() == {
        "userID": 123,
        "userAgent": "Mozilla/5.0",
        "appVersion": "1.0.0",
        "customIDs": {"companyID": "12345"},
    }


def test_to_dict_can_exclude_private_attributes():
    user = StatsigUser("a-user", private_attributes={"secret": "value"})

    assert "privateAttributes" in user.to_dict()
    assert user.to_dict(include_private=False) == {"userID": "a-user"}


@pytest.mark.parametrize(
    "data",
    [
        {"userID": "123", "appVersion": "2.0", "privateAttributes": {"a": 1}},
        {"user_id": "123", "app_version": "2.0", "private_attributes": {"a": 1}},
    ],
)
def test_from_dict_accepts_wire_and_attribute_names(data):
    user = StatsigUser.from_dict(data)

    assert user.user_id == "123"
    assert user.app_version == "2.0"
    assert user.private_attributes == {"a": 1}


def test_copy_is_independent():
    user = StatsigUser("a-user", custom={"key": "value"})
    clone = user.copy()

    clone.custom["key"] = "changed"
    clone.email = "someone@statsig.com"

    assert clone == StatsigUser(
        "a-user", email="someone@statsig.com", custom={"key": "changed"}
    )
    assert user.custom == {"key": "value"}
    assert user.email is None


def test_repr_hides_private_attributes():
    user = StatsigUser("a-user", private_attributes={"secret": "value"})

    assert "secret" not in repr(user)
    assert "a-user" in repr(user)


def test_equality_compares_wire_form():
    assert StatsigUser("a", country="US") == StatsigUser.from_dict({"userID": "a", "country": "US"})
    assert StatsigUser("a") != StatsigUser("b")

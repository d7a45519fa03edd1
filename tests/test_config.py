# pyright: reportUnknownMemberType=false
import dataclasses

import pytest

from switchyard.networking.chain import Timeouts
from switchyard.networking.config import (
    HeaderMapConfiguration,
    LoggingConfiguration,
    LoggingLevel,
    NetworkConfiguration,
    RetryConfiguration,
)

BASE_URL = "https://api.example.com/"


def test_config_defaults_are_stable():
    config = NetworkConfiguration(BASE_URL)

    assert config.interceptors == ()
    assert config.connect_timeout_seconds is None
    assert config.read_timeout_seconds is None
    assert config.write_timeout_seconds is None
    assert config.refresh_token_timeout_seconds == 30
    assert config.retry is None
    assert config.logging == LoggingConfiguration(
        level=LoggingLevel.BASIC, debug_private_data=False
    )
    assert dict(config.header_map.headers) == {}
    assert config.header_map.pattern is None
    assert config.verify_tls is True
    assert config.host == "api.example.com"


def test_config_is_frozen():
    config = NetworkConfiguration(BASE_URL)

    with pytest.raises(dataclasses.FrozenInstanceError):
        config.base_url = "https://other.example.com/"  # type: ignore[misc]


def test_header_map_is_immutable():
    header_map = HeaderMapConfiguration(headers={"X-Test": "1"})

    with pytest.raises(TypeError):
        header_map.headers["X-Test"] = "2"  # type: ignore[index]


def test_header_map_copies_external_input():
    headers = {"X-Test": "1"}
    header_map = HeaderMapConfiguration(headers=headers)
    headers["X-Test"] = "2"

    assert header_map.headers["X-Test"] == "1"


def test_default_header_maps_are_independent():
    first = NetworkConfiguration(BASE_URL)
    second = NetworkConfiguration(BASE_URL)

    assert first.header_map.headers is not second.header_map.headers
    assert first == second


def test_interceptors_are_frozen_to_a_tuple():
    extra = object()
    interceptors = [extra]
    config = NetworkConfiguration(BASE_URL, interceptors=interceptors)
    interceptors.append(object())

    assert config.interceptors == (extra,)


@pytest.mark.parametrize(
    "base_url", ["", "api.example.com", "ftp://api.example.com/", "https://"]
)
def test_config_rejects_invalid_base_url(base_url):
    with pytest.raises(ValueError):
        NetworkConfiguration(base_url)


@pytest.mark.parametrize(
    "field",
    ["connect_timeout_seconds", "read_timeout_seconds", "write_timeout_seconds"],
)
def test_config_rejects_non_positive_timeouts(field):
    with pytest.raises(ValueError):
        NetworkConfiguration(BASE_URL, **{field: 0})
    with pytest.raises(ValueError):
        NetworkConfiguration(BASE_URL, **{field: -1})


def test_config_rejects_non_positive_refresh_timeout():
    with pytest.raises(ValueError):
        NetworkConfiguration(BASE_URL, refresh_token_timeout_seconds=0)


def test_retry_rejects_negative_values():
    with pytest.raises(ValueError):
        RetryConfiguration(max_retries=-1, initial_delay_seconds=0.1)
    with pytest.raises(ValueError):
        RetryConfiguration(max_retries=1, initial_delay_seconds=-0.1)


def test_retry_final_statuses_default_to_unauthorized():
    policy = RetryConfiguration(max_retries=3, initial_delay_seconds=0.1)

    assert policy.final_statuses == frozenset({401})


def test_timeouts_from_configuration():
    config = NetworkConfiguration(
        BASE_URL,
        connect_timeout_seconds=1,
        read_timeout_seconds=2,
        write_timeout_seconds=3,
    )

    assert Timeouts.from_configuration(config) == Timeouts(1, 2, 3)

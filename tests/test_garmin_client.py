"""Tests for the Garmin Connect API client."""

import asyncio
from datetime import date

import httpx
import pytest

from fitlog.services.errors import (
    MissingCredentialsError,
    UpstreamFetchError,
    UpstreamProtocolError,
)
from fitlog.services.garmin import GarminClient, _day_bounds, map_activity_type

from .helpers import parse_authorization, signature_is_valid


def test_request_token(garmin_client, garmin, garmin_config):
    request_token = asyncio.run(garmin_client.get_request_token())

    assert request_token.token == "T1"
    assert request_token.secret == "TS1"
    assert request_token.authorize_url == (
        "https://connectapi.garmin.com/oauth-service/oauth/authorize?oauth_token=T1"
    )

    (sent,) = garmin.calls("request_token")
    assert sent.method == "POST"
    oauth = parse_authorization(sent.headers["Authorization"])
    assert oauth["oauth_consumer_key"] == "K1"
    assert oauth["oauth_callback"] == garmin_config.callback_url
    assert "oauth_token" not in oauth
    assert signature_is_valid(sent, "S1")


@pytest.mark.parametrize(
    "status_code,text",
    [
        (401, "oauth_problem=signature_invalid"),
        (200, "oauth_token=T1"),
        (200, ""),
    ],
)
def test_request_token_rejected(garmin_client, garmin, status_code, text):
    garmin.respond("request_token", status_code, text=text)

    with pytest.raises(UpstreamProtocolError) as excinfo:
        asyncio.run(garmin_client.get_request_token())
    assert excinfo.value.status_code == status_code


def test_request_token_without_consumer_credentials(garmin_config, garmin):
    config = garmin_config.__class__(
        consumer_key="",
        consumer_secret="",
        callback_url=garmin_config.callback_url,
        settings_url=garmin_config.settings_url,
        signin_url=garmin_config.signin_url,
    )
    client = GarminClient(config, transport=garmin.transport)

    with pytest.raises(MissingCredentialsError):
        asyncio.run(client.get_request_token())
    assert garmin.requests == []


def test_transport_failure_is_a_protocol_error(garmin_config):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = GarminClient(garmin_config, transport=httpx.MockTransport(refuse))
    with pytest.raises(UpstreamProtocolError):
        asyncio.run(client.get_request_token())


def test_exchange_access_token(garmin_client, garmin):
    access = asyncio.run(garmin_client.exchange_access_token("T1", "TS1", "V1"))

    assert (access.token, access.secret) == ("A1", "AS1")
    (sent,) = garmin.calls("access_token")
    oauth = parse_authorization(sent.headers["Authorization"])
    assert oauth["oauth_token"] == "T1"
    assert oauth["oauth_verifier"] == "V1"
    assert "oauth_callback" not in oauth
    assert signature_is_valid(sent, "S1", "TS1")


def test_exchange_rejected(garmin_client, garmin):
    garmin.respond("access_token", 401, text="oauth_problem=token_rejected")

    with pytest.raises(UpstreamProtocolError):
        asyncio.run(garmin_client.exchange_access_token("T1", "TS1", "V1"))


def test_fetch_activities_signed_with_access_pair(garmin_client, garmin):
    garmin.respond("activities", 200, json=[{"activityId": 1}])

    activities = asyncio.run(
        garmin_client.fetch_activities("A1", "AS1", date(2024, 1, 1), date(2024, 1, 31))
    )

    assert activities == [{"activityId": 1}]
    (sent,) = garmin.calls("activities")
    assert sent.method == "GET"
    assert sent.url.path == "/wellness-api/rest/activities"
    assert sent.url.params["uploadStartTimeInSeconds"] == "1704067200"
    assert sent.url.params["uploadEndTimeInSeconds"] == "1706745599"
    oauth = parse_authorization(sent.headers["Authorization"])
    assert oauth["oauth_token"] == "A1"
    assert "uploadStartTimeInSeconds" not in oauth
    assert signature_is_valid(sent, "S1", "AS1")


def test_fetch_activities_wrapped_list(garmin_client, garmin):
    garmin.respond("activities", 200, json={"activityList": [{"activityId": 7}]})

    activities = asyncio.run(
        garmin_client.fetch_activities("A1", "AS1", date(2024, 1, 1), date(2024, 1, 2))
    )
    assert activities == [{"activityId": 7}]


def test_fetch_activities_wrapper_without_list(garmin_client, garmin):
    garmin.respond("activities", 200, json={})

    activities = asyncio.run(
        garmin_client.fetch_activities("A1", "AS1", date(2024, 1, 1), date(2024, 1, 2))
    )
    assert activities == []


@pytest.mark.parametrize(
    "status_code,content",
    [
        (500, {"text": "boom"}),
        (401, {"json": {"error": "invalid token"}}),
        (200, {"text": "not json"}),
        (200, {"json": "a string"}),
    ],
)
def test_fetch_activities_failures(garmin_client, garmin, status_code, content):
    garmin.respond("activities", status_code, **content)

    with pytest.raises(UpstreamFetchError):
        asyncio.run(
            garmin_client.fetch_activities("A1", "AS1", date(2024, 1, 1), date(2024, 1, 2))
        )


def test_day_bounds_cover_whole_days_in_utc():
    assert _day_bounds(date(2024, 1, 1), date(2024, 1, 31)) == (1704067200, 1706745599)
    start, end = _day_bounds(date(2024, 3, 5), date(2024, 3, 5))
    assert end - start == 86399


@pytest.mark.parametrize(
    "garmin_type,expected",
    [
        ("RUNNING", "run"),
        ("running", "run"),
        ("CYCLING", "cycle"),
        ("SWIMMING", "swim"),
        ("STRENGTH_TRAINING", "strength"),
        ("WALKING", "walk"),
        ("HIKING", "hike"),
        ("YOGA", "yoga"),
        ("CARDIO", "cardio"),
        ("PARKOUR", "other"),
        ("", "other"),
        (None, "other"),
    ],
)
def test_map_activity_type(garmin_type, expected):
    assert map_activity_type(garmin_type) == expected


def test_authorization_url_percent_encodes_token(garmin_client):
    assert garmin_client.authorization_url("a b+c/d") == (
        "https://connectapi.garmin.com/oauth-service/oauth/authorize?oauth_token=a%20b%2Bc%2Fd"
    )

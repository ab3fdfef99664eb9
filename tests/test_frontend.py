import json

import pytest

from unipager.config import Config
from unipager.frontend import Request, RequestType, Response
from unipager.telemetry import VERSION
from unipager.timeslots import TimeSlot

MESSAGE = {
    "id": "1",
    "priority": 2,
    "origin": "test",
    "protocol": "pocsag",
    "message": {"type": "numeric", "speed": 1200, "ric": 8, "func": 0, "data": "123"},
}


@pytest.mark.parametrize("kind", [k for k in RequestType if k.value not in
                                  ("SetConfig", "SendMessage", "Authenticate")])
def test_unit_requests_parse_from_name(kind):
    assert Request.from_json(json.dumps(kind.value)) == Request(kind)


def test_unit_request_accepts_null_value():
    assert Request.from_json('{"GetConfig": null}') == Request(RequestType.GET_CONFIG)


def test_authenticate_request():
    request = Request.from_json('{"Authenticate": "password"}')
    assert request.kind is RequestType.AUTHENTICATE
    assert request.payload == "password"


def test_send_message_request():
    request = Request.from_json(json.dumps({"SendMessage": MESSAGE}))
    assert request.kind is RequestType.SEND_MESSAGE
    assert request.payload.priority == MESSAGE["priority"]
    assert request.payload.id == MESSAGE["id"]


def test_set_config_round_trip():
    data = Config().to_dict()
    request = Request.from_json(json.dumps({"SetConfig": data}))
    assert request.kind is RequestType.SET_CONFIG
    assert request.payload.to_dict() == data


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        '"Unknown"',
        '{"Authenticate": 5}',
        '{"SendMessage": []}',
        '"Authenticate"',
        '{"GetVersion": 1}',
        "[]",
    ],
)
def test_malformed_requests_raise(text):
    with pytest.raises(ValueError):
        Request.from_json(text)


def test_version_response_json():
    assert json.loads(Response("Version", VERSION).to_json()) == {"Version": VERSION}


def test_authenticated_response_json():
    assert json.loads(Response("Authenticated", True).to_json()) == {"Authenticated": True}


def test_timeslot_response_json():
    assert json.loads(Response("Timeslot", TimeSlot(7)).to_json()) == {"Timeslot": 7}


def test_log_response_json():
    assert json.loads(Response("Log", (3, "hello")).to_json()) == {"Log": [3, "hello"]}


def test_config_response_json():
    assert json.loads(Response("Config", Config()).to_json()) == {
        "Config": json.loads(json.dumps(Config().to_dict()))
    }


def test_telemetry_update_passes_value_through():
    value = {"onair": True}
    assert json.loads(Response("TelemetryUpdate", value).to_json()) == {
        "TelemetryUpdate": value
    }


def test_unknown_response_kind_raises():
    with pytest.raises(ValueError):
        Response("Bogus")
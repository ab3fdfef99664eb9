import json
import threading
import urllib.error
import urllib.request

import pytest

from unipager.events import EventHandler, EventType
from unipager.httpserver import make_server

MESSAGE = {
    "id": "1",
    "priority": 2,
    "origin": "test",
    "protocol": "pocsag",
    "message": {"type": "alphanum", "speed": 1200, "ric": 8, "func": 3, "data": "hi"},
}


@pytest.fixture
def served():
    published = []
    server = make_server(EventHandler(published.append), "127.0.0.1", 0)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    base = f"http://127.0.0.1:{server.server_address[1]}"
    try:
        yield base, published
    finally:
        server.shutdown()
        server.server_close()


def post(url, data):
    request = urllib.request.Request(url, data=data, method="POST")
    with urllib.request.urlopen(request, timeout=5) as response:
        return response.status, json.loads(response.read())


def test_telemetry_is_json(served):
    base, _ = served
    with urllib.request.urlopen(base + "/telemetry", timeout=5) as response:
        assert response.headers["Content-type"] == "application/json"
        data = json.loads(response.read())
    assert data["onair"] in (True, False)
    assert set(data) >= {"onair", "timeslots", "node", "messages"}


def test_post_message_publishes_event(served):
    base, published = served
    status, body = post(base + "/message", json.dumps(MESSAGE).encode())
    assert status == 200
    assert body == {"ok": True}
    assert len(published) == 1
    assert published[0].kind is EventType.MESSAGE_RECEIVED
    assert published[0].payload.id == MESSAGE["id"]


def test_post_invalid_message_is_rejected(served):
    base, published = served
    status, body = post(base + "/message", b"not json")
    assert body == {"ok": False}
    assert published == []


def test_unknown_path_is_not_found(served):
    base, _ = served
    with pytest.raises(urllib.error.HTTPError) as info:
        urllib.request.urlopen(base + "/nothing-here", timeout=5)
    assert info.value.code == 404
    assert info.value.read() == b"Not found"


def test_get_message_is_not_found(served):
    base, _ = served
    with pytest.raises(urllib.error.HTTPError) as info:
        urllib.request.urlopen(base + "/message", timeout=5)
    assert info.value.code == 404
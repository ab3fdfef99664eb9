import pytest

from unipager.pocsag import MessageType, PocsagMessage


def test_defaults():
    message = PocsagMessage()
    assert message.mtype is MessageType.ALPHANUM
    assert (message.speed, message.ric, message.func, message.data) == (1200, 0, 3, "")


def test_from_dict_partial():
    message = PocsagMessage.from_dict({"type": "numeric", "ric": 1234, "data": "55"})
    assert message.mtype is MessageType.NUMERIC
    assert message.ric == 1234
    assert message.func == 3
    assert message.data == "55"


def test_round_trip():
    message = PocsagMessage(MessageType.NUMERIC, 512, 99, 1, "12 34")
    assert PocsagMessage.from_dict(message.to_dict()) == message


def test_to_dict_uses_type_key():
    assert PocsagMessage().to_dict()["type"] == "alphanum"


def test_size_counts_bytes():
    assert PocsagMessage(data="hello").size() == len("hello")
    assert PocsagMessage(data="ä").size() == len("ä".encode("utf-8"))


@pytest.mark.parametrize(
    "data",
    [{"type": "binary"}, {"ric": -1}, {"func": 256}, {"data": 5}, {"speed": "fast"}, "text"],
)
def test_invalid_raises(data):
    with pytest.raises(ValueError):
        PocsagMessage.from_dict(data)
import pytest

from unipager.generator import (
    IDLE_WORD,
    PREAMBLE_LENGTH,
    PREAMBLE_WORD,
    SYNC_WORD,
    Generator,
    TestGenerator,
    crc,
    parity,
)
from unipager.message import Message, MessageProvider
from unipager.pocsag import MessageType, PocsagMessage

NUMERIC_CHARS = "0123456789*U -)("


class ListProvider(MessageProvider):
    def __init__(self, messages=()):
        self.messages = list(messages)
        self.counts = []

    def next_message(self, count):
        self.counts.append(count)
        return self.messages.pop(0) if self.messages else None


def wrap(pocsag):
    return Message(id="1", priority=1, origin="test", message=pocsag)


def generate(pocsag, following=()):
    provider = ListProvider([wrap(m) for m in following])
    return list(Generator(provider, pocsag)), provider


def is_address(word):
    return word not in (IDLE_WORD, SYNC_WORD, PREAMBLE_WORD) and not word & 0x80000000


def message_words(words, start):
    result = []
    for word in words[start:]:
        if word == SYNC_WORD:
            continue
        if not word & 0x80000000:
            break
        result.append(word)
    return result


def decode(words, bits):
    stream = [(w >> (11 + i)) & 1 for w in words for i in range(19, -1, -1)]
    chunks = [stream[k:k + bits] for k in range(0, len(stream) - bits + 1, bits)]
    return [sum(b << n for n, b in enumerate(chunk)) for chunk in chunks]


def test_preamble_and_sync():
    words, _ = generate(PocsagMessage(ric=8, data="hi"))
    assert words[:PREAMBLE_LENGTH] == [PREAMBLE_WORD] * PREAMBLE_LENGTH
    assert words[PREAMBLE_LENGTH] == SYNC_WORD


def test_length_is_whole_batches():
    words, _ = generate(PocsagMessage(ric=8, data="a longer message that spans batches"))
    assert (len(words) - PREAMBLE_LENGTH) % 17 == 0
    for start in range(PREAMBLE_LENGTH, len(words), 17):
        assert words[start] == SYNC_WORD


def test_address_in_subric_frame():
    ric = 0x1234B
    words, _ = generate(PocsagMessage(ric=ric, func=2, data="x"))
    first = PREAMBLE_LENGTH + 1
    position = first + ((ric & 7) << 1)
    assert words[first:position] == [IDLE_WORD] * (position - first)
    address = words[position]
    assert is_address(address)
    assert (address >> 13) & 0x3FFFF == ric >> 3
    assert (address >> 11) & 0b11 == 2


def test_alphanumeric_payload_round_trip():
    text = "Hello, World! 73"
    words, _ = generate(PocsagMessage(ric=16, data=text))
    start = PREAMBLE_LENGTH + 2
    payload = decode(message_words(words, start), 7)
    assert "".join(chr(c) for c in payload[: len(text)]) == text


def test_numeric_payload_round_trip():
    text = "0123 -U*()"
    words, _ = generate(PocsagMessage(mtype=MessageType.NUMERIC, ric=16, data=text))
    payload = decode(message_words(words, PREAMBLE_LENGTH + 2), 4)
    assert "".join(NUMERIC_CHARS[c] for c in payload[: len(text)]) == text


def test_provider_receives_count_of_earlier_words():
    words, provider = generate(PocsagMessage(ric=8, data="abc"))
    start = PREAMBLE_LENGTH + 2
    last = start + len(message_words(words, start)) - 1
    assert provider.counts == [last]


def test_empty_message_sends_only_address():
    words, provider = generate(PocsagMessage(ric=8, data=""))
    assert is_address(words[PREAMBLE_LENGTH + 1])
    assert not any(w & 0x80000000 for w in words if w != PREAMBLE_WORD)
    assert provider.counts == [PREAMBLE_LENGTH + 1]


def test_following_messages_are_sent():
    words, provider = generate(
        PocsagMessage(ric=8, data="one"), [PocsagMessage(ric=0x4000, data="two")]
    )
    addresses = [w for w in words if is_address(w)]
    assert [(w >> 13) & 0x3FFFF for w in addresses] == [8 >> 3, 0x4000 >> 3]
    assert len(provider.counts) == 2


def test_words_fit_in_32_bits():
    words, _ = generate(PocsagMessage(ric=0x1FFFFF, func=3, data="\xff" * 10))
    assert all(0 <= w <= 0xFFFFFFFF for w in words)


@pytest.mark.parametrize("value", [0, 0x80000000, 0x12345800, 0xFFFFF800])
def test_crc_keeps_data_bits(value):
    assert crc(value) & 0xFFFFF800 == value


@pytest.mark.parametrize("value", [0, 2, 0x80000000, 0x12345678 & ~1, 0xFFFFFFFE])
def test_parity_makes_even_bit_count(value):
    result = parity(value)
    assert result & ~1 == value
    assert bin(result).count("1") % 2 == 0


def test_test_generator():
    assert list(TestGenerator(3)) == [PREAMBLE_WORD] * 3
    assert list(TestGenerator(0)) == []
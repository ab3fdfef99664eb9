import pytest

from unipager.encoding import ALPHANUM, NUMERIC, encode_alphanum, encode_numeric


@pytest.mark.parametrize(
    "char, code",
    [("0", 0x0), ("9", 0x9), ("*", 0xA), ("U", 0xB), (" ", 0xC), ("-", 0xD), (")", 0xE), ("(", 0xF)],
)
def test_numeric_symbols(char, code):
    assert encode_numeric(ord(char)) == code


def test_numeric_unknown_is_space():
    assert encode_numeric(ord("x")) == encode_numeric(ord(" "))


def test_numeric_digits_map_to_value():
    assert [encode_numeric(ord(c)) for c in "0123456789"] == list(range(10))


def test_alphanum_passes_ascii():
    assert [encode_alphanum(b) for b in range(128)] == list(range(128))


@pytest.mark.parametrize("byte", [128, 200, 255])
def test_alphanum_replaces_high_bytes(byte):
    assert encode_alphanum(byte) == ord("?")


def test_encoding_parameters():
    assert (ALPHANUM.bits, ALPHANUM.trailing) == (7, 0x0)
    assert (NUMERIC.bits, NUMERIC.trailing) == (4, 0xC)
    assert NUMERIC.encode(ord("5")) == 5
    assert ALPHANUM.encode(ord("A")) == ord("A")
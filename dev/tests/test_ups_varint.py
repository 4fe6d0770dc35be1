import pytest

from upspatch.exceptions import MalformedVarIntError
from upspatch.patching.varint import decode_varint, encode_varint


@pytest.mark.parametrize(
    "value, encoded",
    [
        (0, b"\x80"),
        (1, b"\x81"),
        (127, b"\xff"),
        (128, b"\x00\x80"),
        (255, b"\x7f\x80"),
        (16511, b"\x7f\xff"),
        (16512, b"\x00\x00\x80"),
    ],
)
def test_encode_known_values(value, encoded):
    assert encode_varint(value) == encoded
    assert decode_varint(encoded) == (value, len(encoded))


def test_only_last_group_has_top_bit():
    encoded = encode_varint(2**64 - 1)
    assert encoded[-1] & 0x80
    assert all(not byte & 0x80 for byte in encoded[:-1])
    assert decode_varint(encoded) == (2**64 - 1, len(encoded))


def test_encoding_is_canonical_for_small_values():
    seen = {encode_varint(n) for n in range(20000)}
    assert len(seen) == 20000


def test_decode_at_offset_reports_consumed_bytes():
    data = b"junk" + encode_varint(300) + b"\xff"
    value, consumed = decode_varint(data, 4)
    assert value == 300
    assert consumed == 2


def test_unterminated_varint_reports_offset():
    with pytest.raises(MalformedVarIntError) as exc:
        decode_varint(b"\x01\x02\x03", 1)
    assert exc.value.offset == 1
    assert exc.value.error_code == "MALFORMED_VARINT"


def test_end_bound_is_respected():
    data = b"\x00\x80"
    with pytest.raises(MalformedVarIntError):
        decode_varint(data, 0, end=1)


def test_negative_values_are_rejected():
    with pytest.raises(ValueError):
        encode_varint(-1)

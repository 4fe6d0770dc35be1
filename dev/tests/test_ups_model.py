import pytest

from upspatch.exceptions import (
    BadSignatureError,
    MalformedBlockError,
    MalformedVarIntError,
    PatchChecksumError,
    TruncatedPatchError,
)
from upspatch.patching.builder import build
from upspatch.patching.checksum import crc32, pack_crc32
from upspatch.patching.model import DiffBlock, UpsPatch, parse_patch, read_patch_header

FOOTER = b"\x11" * 12


def _with_crc(body: bytes) -> bytes:
    return body + pack_crc32(crc32(body))


def test_concrete_patch_bytes():
    patch = build(b"ABCD", b"ABXD")
    expected_body = (
        b"UPS1"
        + b"\x84\x84"
        + b"\x82\x1b\x00"
        + pack_crc32(crc32(b"ABCD"))
        + pack_crc32(crc32(b"ABXD"))
    )
    assert patch == _with_crc(expected_body)


def test_parse_concrete_patch():
    patch = parse_patch(build(b"ABCD", b"ABXD"))
    assert patch.input_size == 4
    assert patch.output_size == 4
    assert patch.blocks == (DiffBlock(2, b"\x1b"),)
    assert patch.input_crc == crc32(b"ABCD")
    assert patch.output_crc == crc32(b"ABXD")


def test_serialize_parse_preserves_model():
    patch = UpsPatch.create(
        input_size=300,
        output_size=310,
        blocks=[DiffBlock(5, b"\x01\x02"), DiffBlock(200, b"\xff")],
        input_crc=0x12345678,
        output_crc=0x9ABCDEF0,
    )
    assert UpsPatch.from_bytes(patch.to_bytes()) == patch
    assert patch.patch_crc == crc32(patch.to_bytes()[:-4])


def test_bad_signature():
    with pytest.raises(BadSignatureError) as exc:
        parse_patch(b"BPS1" + b"\x80" * 14)
    assert exc.value.error_code == "BAD_SIGNATURE"


@pytest.mark.parametrize("data", [b"", b"UP", b"UPS1", b"UPS1\x80\x80" + b"\x00" * 11])
def test_truncated_patch(data):
    with pytest.raises(TruncatedPatchError):
        parse_patch(data)


def test_size_running_into_footer_is_truncated():
    with pytest.raises(TruncatedPatchError) as exc:
        parse_patch(b"UPS1\x04\x04" + FOOTER, verify_checksum=False)
    assert exc.value.offset == 4


def test_unterminated_xor_run():
    with pytest.raises(MalformedBlockError) as exc:
        parse_patch(b"UPS1\x84\x84\x82\x1b" + FOOTER, verify_checksum=False)
    assert exc.value.offset == 7


def test_empty_xor_run():
    with pytest.raises(MalformedBlockError) as exc:
        parse_patch(b"UPS1\x84\x84\x82\x00" + FOOTER, verify_checksum=False)
    assert exc.value.offset == 6


def test_unterminated_gap():
    with pytest.raises(MalformedVarIntError) as exc:
        parse_patch(b"UPS1\x84\x84\x02" + FOOTER, verify_checksum=False)
    assert exc.value.offset == 6


def test_patch_checksum_is_verified():
    data = bytearray(build(b"ABCD", b"ABXD"))
    data[-1] ^= 0x01
    with pytest.raises(PatchChecksumError) as exc:
        parse_patch(bytes(data))
    assert exc.value.error_code == "PATCH_CHECKSUM"

    patch = parse_patch(bytes(data), verify_checksum=False)
    assert patch.blocks == (DiffBlock(2, b"\x1b"),)


@pytest.mark.parametrize(
    "gap, xor_data",
    [(-1, b"\x01"), (0, b""), (0, b"\x01\x00\x02")],
)
def test_diff_block_invariants(gap, xor_data):
    with pytest.raises(ValueError):
        DiffBlock(gap, xor_data)


def test_summary():
    patch = parse_patch(build(b"ABCD", b"ABXDEF"))
    summary = patch.summary()
    assert summary["format"] == "UPS"
    assert summary["input_size"] == 4
    assert summary["output_size"] == 6
    assert summary["blocks"] == 2
    assert summary["changed_bytes"] == 3
    assert summary["input_crc"] == "%08X" % crc32(b"ABCD")


def test_read_patch_header(tmp_path):
    patch_file = tmp_path / "hack.ups"
    patch_file.write_bytes(build(b"A" * 1000, b"B" * 2000))

    header = read_patch_header(patch_file)
    assert header.path == patch_file
    assert header.input_size == 1000
    assert header.output_size == 2000
    assert header.input_crc == crc32(b"A" * 1000)
    assert header.output_crc == crc32(b"B" * 2000)


def test_read_patch_header_rejects_other_formats(tmp_path):
    patch_file = tmp_path / "hack.ips"
    patch_file.write_bytes(b"PATCH" + b"\x00" * 20 + b"EOF")
    with pytest.raises(BadSignatureError):
        read_patch_header(patch_file)

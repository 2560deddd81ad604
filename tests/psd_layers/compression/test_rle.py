import pytest

import psd_layers.compression.rle as rle
from psd_layers.errors import RunOverflowError, TruncatedStreamError

from .test_compression import RAW_IMAGE_3x3_8bit


def test_identical():
    size = len(RAW_IMAGE_3x3_8bit)
    encoded = rle.encode(RAW_IMAGE_3x3_8bit)
    decoded = rle.decode(encoded, size)
    assert decoded == RAW_IMAGE_3x3_8bit


@pytest.mark.parametrize(
    "data, size, expected",
    [
        (b"\x02\x01\x02\x03", 3, b"\x01\x02\x03"),
        (b"\xfd\x07", 4, b"\x07" * 4),
        (b"\x00\x01\xff\x02", 3, b"\x01\x02\x02"),
        (b"\x80\x05", 129, b"\x05" * 129),
        (b"\x00\x09", 4, b"\x09\x00\x00\x00"),
        (b"", 2, b"\x00\x00"),
    ],
)
def test_decode(data, size, expected):
    assert rle.decode(data, size) == expected


@pytest.mark.parametrize(
    "data, size",
    [
        # b'\x01\x01\x01\x01'
        (b"\xfd\x01", 3),
        # b'\x01\x02\x03'
        (b"\x02\x01\x02\x03", 2),
        (b"\x00\x01\xfe\x02", 3),
    ],
)
def test_run_overflow(data, size):
    with pytest.raises(RunOverflowError):
        rle.decode(data, size)


def test_run_overflow_is_value_error():
    with pytest.raises(ValueError):
        rle.decode(b"\xfd\x01", 3)


@pytest.mark.parametrize(
    "data, size",
    [
        (b"\xfd", 5),
        (b"\x02\x01\x02", 4),
    ],
)
def test_truncated(data, size):
    with pytest.raises(TruncatedStreamError):
        rle.decode(data, size)


def test_overflow_offset():
    with pytest.raises(RunOverflowError) as excinfo:
        rle.decode(b"\x00\x01\xfd\x02", 3, offset=100)
    assert excinfo.value.offset == 102


@pytest.mark.parametrize(
    "row",
    [
        bytes(range(16)),
        b"\xaa" * 16,
        b"\x01\x02\x02\x02\x02\x03\x04\x04\x05\x05\x05",
        b"\x00" * 300 + b"\x01\x02" * 80,
    ],
)
def test_encode_decode(row):
    for width in range(len(row) + 1):
        part = row[:width]
        assert rle.decode(rle.encode(part), width) == part

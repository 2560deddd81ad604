"""
Binary processing utilities.

All multi-byte values in a PSD file are big-endian; every format string here
is implicitly prefixed with ``>``.
"""

import struct
from typing import Any, BinaryIO


def pack(fmt: str, *args: Any) -> bytes:
    fmt = str(">" + fmt)
    return struct.pack(fmt, *args)


def unpack(fmt: str, data: bytes) -> tuple:
    fmt = str(">" + fmt)
    return struct.unpack(fmt, data)


def calcsize(fmt: str) -> int:
    return struct.calcsize(str(">" + fmt))


def write_fmt(fp: BinaryIO, fmt: str, *args: Any) -> int:
    """
    Writes data to ``fp`` according to ``fmt``.
    """
    fmt = str(">" + fmt)
    fmt_size = struct.calcsize(fmt)
    written = fp.write(struct.pack(fmt, *args))
    assert written == fmt_size, "written=%d, expected=%d" % (written, fmt_size)
    return written


def write_bytes(fp: BinaryIO, data: bytes) -> int:
    """
    Write bytes to the file object and returns bytes written.

    :return: written byte size
    """
    pos = fp.tell()
    fp.write(data)
    written = fp.tell() - pos
    assert written == len(data), "written=%d, expected=%d" % (written, len(data))
    return written


def padding_size(size: int, divisor: int) -> int:
    """Number of bytes that align ``size`` to a multiple of ``divisor``."""
    return (divisor - size % divisor) % divisor


def trimmed_repr(data: bytes, length: int = 16) -> str:
    if len(data) > length:
        return repr(data[:length] + b" ... =" + str(len(data)).encode("ascii"))
    return repr(data)

"""
Image compression utilities for PSD channel data.

Supported compression methods:

- **RAW** (``Compression.RAW``): Uncompressed raw pixel data
- **RLE** (``Compression.RLE``): Apple PackBits run-length encoding, one
  compressed row per scanline, preceded by a table of 16-bit row byte counts

``Compression.ZIP`` and ``Compression.ZIP_WITH_PREDICTION`` are recognized
wire values but raise
:py:class:`~psd_layers.errors.UnsupportedCompressionError`, as does any
unknown tag.

Key functions:

- :py:func:`compress`: Compress raw pixel data using specified method
- :py:func:`decompress`: Decompress pixel data back to raw bytes
- :py:func:`encode_rle`: RLE encoding for a single channel
- :py:func:`decode_rle`: RLE decoding for a single channel

Example usage::

    from psd_layers.compression import compress, decompress
    from psd_layers.constants import Compression

    compressed = compress(raw_pixels, Compression.RLE, width=100, height=100)
    raw_pixels = decompress(compressed, Compression.RLE, width=100, height=100)

Only 8-bit channels are handled: one byte per pixel.
"""

import logging

from psd_layers.compression import rle as rle_impl
from psd_layers.constants import Compression
from psd_layers.errors import TruncatedStreamError, UnsupportedCompressionError
from psd_layers.psd.bin_utils import pack, unpack

logger = logging.getLogger(__name__)

#: Byte size of one entry of the RLE row length table.
ROW_COUNT_SIZE = 2


def compress(data: bytes, compression: int, width: int, height: int) -> bytes:
    """Compress raw data.

    :param data: raw data bytes to write.
    :param compression: compression type, see :py:class:`.Compression`.
    :param width: width.
    :param height: height.
    :return: compressed data bytes.
    """
    compression = _check_compression(compression)
    if compression == Compression.RAW:
        return bytes(data)
    return encode_rle(data, width, height)


def decompress(
    data: bytes, compression: int, width: int, height: int, offset: int = 0
) -> bytes:
    """Decompress raw data.

    :param data: compressed data bytes.
    :param compression: compression type,
            see :py:class:`~psd_layers.constants.Compression`.
    :param width: width.
    :param height: height.
    :param offset: document offset of ``data``, used in error reports.
    :return: decompressed data bytes, ``width * height`` long for RLE; raw
        data is truncated to that size but may be shorter.
    """
    compression = _check_compression(compression, offset)
    length = width * height

    if compression == Compression.RAW:
        return bytes(data[:length])

    result = decode_rle(data, width, height, offset)
    assert len(result) == length, "len=%d, expected=%d" % (len(result), length)
    return result


def encode_rle(data: bytes, width: int, height: int) -> bytes:
    rows = [rle_impl.encode(data[y * width : (y + 1) * width]) for y in range(height)]
    bytes_counts = pack("%dH" % height, *map(len, rows))
    return bytes_counts + b"".join(rows)


def decode_rle(data: bytes, width: int, height: int, offset: int = 0) -> bytes:
    """
    Decode a RLE compressed channel.

    :raise TruncatedStreamError: the stream is shorter than the row length
        table or than a row's declared byte count.
    :raise RunOverflowError: a run writes past ``width``.
    """
    table_size = ROW_COUNT_SIZE * height
    if len(data) < table_size:
        raise TruncatedStreamError(
            "RLE row length table needs %d bytes but only %d available"
            % (table_size, len(data)),
            offset=offset,
            requested=table_size,
            available=len(data),
        )
    bytes_counts = unpack("%dH" % height, data[:table_size])

    pos = table_size
    rows = []
    for y, count in enumerate(bytes_counts):
        row = data[pos : pos + count]
        if len(row) != count:
            raise TruncatedStreamError(
                "RLE row %d declares %d bytes but only %d available"
                % (y, count, len(row)),
                offset=offset + pos,
                requested=count,
                available=len(row),
                row=y,
            )
        rows.append(rle_impl.decode(row, width, offset + pos))
        pos += count

    if pos != len(data):
        logger.debug("RLE stream has %d trailing bytes" % (len(data) - pos))
    return b"".join(rows)


def _check_compression(compression: int, offset: int = 0) -> Compression:
    try:
        compression = Compression(compression)
    except ValueError:
        raise UnsupportedCompressionError(
            "Unknown compression %d" % compression,
            offset=offset,
            compression=compression,
        ) from None
    if compression not in (Compression.RAW, Compression.RLE):
        raise UnsupportedCompressionError(
            "%s compression is not supported" % compression.name,
            offset=offset,
            compression=compression,
        )
    return compression

"""
Pure Python RLE (Run-Length Encoding) codec implementation.

This module provides the Apple PackBits row codec used for channel data in
PSD files. A compressed row is a sequence of runs, each introduced by a
signed control byte ``c``:

- ``0 <= c <= 127``: copy the next ``c + 1`` literal bytes
- ``-128 <= c <= -1``: repeat the next byte ``1 - c`` times

Encoding example::

    Input:  [A, A, A, B, C, C, C, C]
    Output: [-2, A, 0, B, -3, C]
            (repeat A 3x, copy B 1x, repeat C 4x)

Decoding is strict. Every row decodes into a buffer of exactly ``size``
bytes: a run that would write past it raises
:py:class:`~psd_layers.errors.RunOverflowError`, and a run that needs more
input than the row provides raises
:py:class:`~psd_layers.errors.TruncatedStreamError`. Bytes a short row never
writes stay zero.

Functions:

- :py:func:`decode`: Decompress one RLE-encoded row
- :py:func:`encode`: Compress one row using RLE encoding

Example usage::

    from psd_layers.compression.rle import encode, decode

    raw_data = b'\\x00' * 100 + b'\\xff' * 50
    compressed = encode(raw_data)
    assert decode(compressed, len(raw_data)) == raw_data
"""

from psd_layers.errors import RunOverflowError, TruncatedStreamError


def decode(data: bytes, size: int, offset: int = 0) -> bytes:
    """decode(data, size) -> bytes

    Apple PackBits RLE decoder for a single row of ``size`` bytes.

    :param data: compressed bytes of the row, exactly its declared count.
    :param size: row width in bytes.
    :param offset: document offset of ``data``, used in error reports.
    """

    i, j = 0, 0
    length = len(data)
    result = bytearray(size)

    while i < length:
        control = data[i]
        if control > 127:
            control -= 256
        i += 1
        if control < 0:
            count = 1 - control
            if j + count > size:
                raise RunOverflowError(
                    "Repeat run of %d bytes at column %d exceeds row width %d"
                    % (count, j, size),
                    offset=offset + i - 1,
                )
            if i >= length:
                raise TruncatedStreamError(
                    "Repeat run is missing its data byte",
                    offset=offset + i,
                    requested=1,
                    available=0,
                )
            result[j : j + count] = data[i : i + 1] * count
            i += 1
        else:
            count = control + 1
            if j + count > size:
                raise RunOverflowError(
                    "Literal run of %d bytes at column %d exceeds row width %d"
                    % (count, j, size),
                    offset=offset + i - 1,
                )
            if i + count > length:
                raise TruncatedStreamError(
                    "Literal run needs %d bytes but only %d remain in the row"
                    % (count, length - i),
                    offset=offset + i,
                    requested=count,
                    available=length - i,
                )
            result[j : j + count] = data[i : i + count]
            i += count
        j += count

    return bytes(result)


def encode(data: bytes) -> bytes:
    """encode(data) -> bytes

    Apple PackBits RLE encoder.
    """

    MAX_LEN = 0xFF >> 1
    length = len(data)
    i = 0
    j = 0
    result = bytearray()

    if length == 0:
        return bytes(data)
    if length == 1:
        result.extend((0, data[0]))
        return bytes(result)

    while i < length:
        if j + 1 < length and data[j] == data[j + 1]:
            while j < length:
                if j - i >= MAX_LEN:
                    break
                if j + 1 >= length or data[j] != data[j + 1]:
                    break
                j += 1
            result.extend((256 - (j - i), data[i]))
            i = j = j + 1
        else:
            while j < length:
                if j - i >= MAX_LEN:
                    break
                # NOTE: There's no space saved from encoding length 2 repetitions.
                #: For example:
                #  A  B  C  D  D  E  F  G  G  G  G  G  G  H  I  J  J  K
                #: could be encoded as either of the following:
                # +2  A  B  C -1  D +1  E  F -5  G +1  H  I -1  J +0  K
                # +6  A  B  C  D  D  E  F -5  G +3  H  I  J  J  K
                elif (
                    ((j + 2 == length) or (MAX_LEN - (j - i) <= 2))
                    and not (j + 1 == length)
                    and (data[j] == data[j + 1])
                ):
                    break
                elif j + 2 < length and (data[j] == data[j + 1] == data[j + 2]):
                    break
                j += 1
            result.append(j - i - 1)
            result.extend(data[i:j])
            i = j
    return bytes(result)

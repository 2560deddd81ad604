"""
Position-tracked reader over a binary file object.

Every structure in :py:mod:`psd_layers.psd` reads through a
:py:class:`Cursor`. A read either consumes exactly the requested number of
bytes or raises :py:class:`~psd_layers.errors.EndOfStreamError`; errors from
the underlying file object (:py:class:`OSError`) propagate unchanged.

Example::

    import io
    from psd_layers.psd.cursor import Cursor

    cursor = Cursor(io.BytesIO(b'\\x00\\x01\\x00\\x00\\x00\\x02'))
    cursor.read_u16()  # 1
    cursor.read_u32()  # 2
    cursor.tell()      # 6
"""

import io
import logging
from typing import BinaryIO, Optional

from psd_layers.errors import EndOfStreamError
from psd_layers.psd.bin_utils import calcsize, unpack

logger = logging.getLogger(__name__)

_SKIP_CHUNK_SIZE = 1 << 16


class Cursor:
    """
    Sequential reader with an explicit position.

    The position is counted from where the file object was when the cursor
    was created, so offsets are document offsets even when the document is
    embedded in a larger stream.

    :param fp: binary file-like object.
    """

    def __init__(self, fp: BinaryIO):
        self._fp = fp
        self._position = 0
        self._size: Optional[int] = None
        if _is_seekable(fp):
            origin = fp.tell()
            end = fp.seek(0, io.SEEK_END)
            fp.seek(origin, io.SEEK_SET)
            self._size = end - origin

    @classmethod
    def frombytes(cls, data: bytes) -> "Cursor":
        return cls(io.BytesIO(data))

    def tell(self) -> int:
        """Current position."""
        return self._position

    @property
    def size(self) -> Optional[int]:
        """Total size of the source, or `None` for forward-only sources."""
        return self._size

    def remaining(self) -> Optional[int]:
        """Bytes left in the source, or `None` for forward-only sources."""
        if self._size is None:
            return None
        return self._size - self._position

    def read(self, size: int) -> bytes:
        """
        Read exactly ``size`` bytes.

        :raise EndOfStreamError: fewer bytes are available.
        """
        if size < 0:
            raise ValueError("Negative read size %d" % size)
        data = self._fp.read(size)
        if len(data) != size:
            self._position += len(data)
            raise EndOfStreamError(
                "Expected %d bytes but only %d available" % (size, len(data)),
                offset=self._position - len(data),
                requested=size,
                available=len(data),
            )
        self._position += size
        return data

    def read_fmt(self, fmt: str) -> tuple:
        """
        Reads data according to the big-endian struct format ``fmt``.
        """
        return unpack(fmt, self.read(calcsize(fmt)))

    def read_u8(self) -> int:
        return self.read_fmt("B")[0]

    def read_u16(self) -> int:
        return self.read_fmt("H")[0]

    def read_i16(self) -> int:
        return self.read_fmt("h")[0]

    def read_u32(self) -> int:
        return self.read_fmt("I")[0]

    def skip(self, size: int) -> int:
        """
        Advance ``size`` bytes without materializing them.

        :raise EndOfStreamError: fewer bytes are available.
        :return: skipped byte size
        """
        if size < 0:
            raise ValueError("Negative skip size %d" % size)
        if self._size is not None:
            available = self._size - self._position
            if available < size:
                raise EndOfStreamError(
                    "Cannot skip %d bytes, only %d available" % (size, available),
                    offset=self._position,
                    requested=size,
                    available=available,
                )
            self._fp.seek(size, io.SEEK_CUR)
            self._position += size
            return size

        remaining = size
        while remaining:
            chunk = self._fp.read(min(remaining, _SKIP_CHUNK_SIZE))
            if not chunk:
                raise EndOfStreamError(
                    "Cannot skip %d bytes, only %d available"
                    % (size, size - remaining),
                    offset=self._position,
                    requested=size,
                    available=size - remaining,
                )
            remaining -= len(chunk)
            self._position += len(chunk)
        return size

    def __repr__(self) -> str:
        return "Cursor(position=%d, size=%r)" % (self._position, self._size)


def _is_seekable(fp: BinaryIO) -> bool:
    seekable = getattr(fp, "seekable", None)
    return bool(seekable and seekable())

"""
Base data structures intended for inheritance.

All the data objects in this subpackage inherit from the base classes here.
That means, all the data structures in the :py:mod:`psd_layers.psd`
subpackage implement the methods of :py:class:`~psd_layers.psd.base.BaseElement`
for decoding and, for building fixtures, serialization.

Objects that inherit from the :py:class:`~psd_layers.psd.base.BaseElement`
typically get attrs_ decoration to have data fields.

.. _attrs: https://www.attrs.org/en/stable/index.html
"""

import io
import logging
from typing import Any, BinaryIO, Optional, TypeVar

from attrs import define, field, validate

from psd_layers.diagnostics import EventKind, Sink, emit
from psd_layers.psd.bin_utils import write_bytes, write_fmt
from psd_layers.psd.cursor import Cursor

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="BaseElement")
T_LengthBlock = TypeVar("T_LengthBlock", bound="LengthBlock")


class BaseElement:
    """
    Base element of various PSD file structs. All the data objects in
    :py:mod:`psd_layers.psd` subpackage inherit from this class.

    .. py:classmethod:: read(cls, cursor, **kwargs)

        Read the element from a :py:class:`~psd_layers.psd.cursor.Cursor`.

    .. py:method:: write(self, fp, **kwargs)

        Write the element to a file-like object.

    .. py:classmethod:: frombytes(self, data, *args, **kwargs)

        Read the element from bytes.

    .. py:method:: tobytes(self, *args, **kwargs)

        Write the element to bytes.

    .. py:method:: validate(self)

        Validate the attribute.
    """

    @classmethod
    def read(cls: type[T], cursor: Cursor, **kwargs: Any) -> T:
        raise NotImplementedError()

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        raise NotImplementedError()

    @classmethod
    def frombytes(cls: type[T], data: bytes, *args: Any, **kwargs: Any) -> T:
        with io.BytesIO(data) as f:
            return cls.read(Cursor(f), *args, **kwargs)

    def tobytes(self, *args: Any, **kwargs: Any) -> bytes:
        with io.BytesIO() as f:
            self.write(f, *args, **kwargs)
            return f.getvalue()

    def validate(self) -> None:
        return validate(self)  # type: ignore[arg-type]


@define(repr=False)
class ListElement(BaseElement):
    """
    List-like element that has `items` list.
    """

    _items: list = field(factory=list, converter=list)

    def append(self, x: Any) -> None:
        return self._items.append(x)

    def index(self, x: Any) -> int:
        return self._items.index(x)

    def __len__(self) -> int:
        return self._items.__len__()

    def __iter__(self) -> Any:
        return self._items.__iter__()

    def __getitem__(self, key: Any) -> Any:
        return self._items.__getitem__(key)

    def __repr__(self) -> str:
        return "%s(%r)" % (self.__class__.__name__, self._items)

    def write(self, fp: BinaryIO, *args: Any, **kwargs: Any) -> int:
        written = 0
        for item in self:
            if hasattr(item, "write"):
                written += item.write(fp, *args, **kwargs)
            elif isinstance(item, bytes):
                written += write_bytes(fp, item)
        return written


@define(repr=True)
class LengthBlock(BaseElement):
    """
    Section that is a 4-byte length followed by that many opaque bytes.

    Only the length is kept; the content is skipped without being read into
    memory.

    .. py:attribute:: length

        Declared length of the content, excluding the length field itself.
    """

    _NAME = "length block"

    length: int = 0

    @classmethod
    def read(
        cls: type[T_LengthBlock],
        cursor: Cursor,
        sink: Optional[Sink] = None,
        **kwargs: Any,
    ) -> T_LengthBlock:
        start_pos = cursor.tell()
        length = cursor.read_u32()
        cursor.skip(length)
        emit(sink, EventKind.SECTION, cls._NAME, start_pos, length=length)
        return cls(length)

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        written = write_fmt(fp, "I", self.length)
        written += write_bytes(fp, b"\x00" * self.length)
        return written

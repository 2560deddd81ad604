"""
Additional layer information blocks.

The tail of the layer and mask information section is a sequence of tagged
blocks::

    signature (4 bytes, '8BIM' or '8B64')
    key       (4 bytes)
    length    (4 bytes)
    payload   (length bytes)
    padding   (to a multiple of 4)

Payloads are producer-specific extensions (unicode layer names, group
markers, effects, ...) and are skipped here; only the framing is decoded so
the walker stays synchronized.

The published format description rounds block lengths to an even size, but
offsets only reconcile with real producer output when payloads are aligned
to 4 bytes, which is what :py:class:`TaggedBlocks` does.
"""

import logging
from typing import Any, BinaryIO, Optional, TypeVar, Union

from attrs import define, field

from psd_layers.constants import TAGGED_BLOCK_SIGNATURES, Tag
from psd_layers.diagnostics import EventKind, Sink, emit
from psd_layers.errors import (
    CorruptBlockError,
    OverrunRegionError,
    TruncatedRegionError,
)
from psd_layers.psd.base import BaseElement, ListElement
from psd_layers.psd.bin_utils import padding_size, write_bytes, write_fmt
from psd_layers.psd.cursor import Cursor
from psd_layers.validators import enum_or_value, in_

logger = logging.getLogger(__name__)

T_TaggedBlocks = TypeVar("T_TaggedBlocks", bound="TaggedBlocks")
T_TaggedBlock = TypeVar("T_TaggedBlock", bound="TaggedBlock")

#: Byte size of signature, key and length fields.
TAGGED_BLOCK_HEADER_SIZE = 12

#: Alignment of tagged block payloads.
TAGGED_BLOCK_ALIGNMENT = 4


@define(frozen=True)
class TaggedBlock(BaseElement):
    """
    Framing of a single additional layer info block.

    .. py:attribute:: signature

        Signature, ``b'8BIM'`` or ``b'8B64'``.

    .. py:attribute:: key

        4-byte key. See :py:class:`~psd_layers.constants.Tag`; unknown keys
        are kept as bytes.

    .. py:attribute:: length

        Declared payload length.

    .. py:attribute:: offset

        Offset of the signature in the document.
    """

    signature: bytes = field(default=b"8BIM", validator=in_(TAGGED_BLOCK_SIGNATURES))
    key: Union[Tag, bytes] = field(
        default=Tag.LAYER_ID, converter=enum_or_value(Tag)
    )
    length: int = 0
    offset: int = field(default=0, eq=False)

    @property
    def padding(self) -> int:
        """Bytes that follow the payload to keep 4-byte alignment."""
        return padding_size(self.length, TAGGED_BLOCK_ALIGNMENT)

    @property
    def size(self) -> int:
        """Total bytes the block occupies, including header and padding."""
        return TAGGED_BLOCK_HEADER_SIZE + self.length + self.padding

    @property
    def key_bytes(self) -> bytes:
        return self.key.value if isinstance(self.key, Tag) else self.key

    @classmethod
    def read(
        cls: type[T_TaggedBlock],
        cursor: Cursor,
        remaining: Optional[int] = None,
        sink: Optional[Sink] = None,
        **kwargs: Any,
    ) -> T_TaggedBlock:
        """
        Read one block.

        :param remaining: bytes left in the enclosing region; the block must
            fit in it.
        """
        start_pos = cursor.tell()
        if remaining is not None and remaining < TAGGED_BLOCK_HEADER_SIZE:
            raise TruncatedRegionError(
                "Additional layer info needs %d bytes but only %d remain"
                % (TAGGED_BLOCK_HEADER_SIZE, remaining),
                offset=start_pos,
                requested=TAGGED_BLOCK_HEADER_SIZE,
                available=remaining,
            )
        signature = cursor.read(4)
        if signature not in TAGGED_BLOCK_SIGNATURES:
            raise CorruptBlockError(
                "Invalid additional layer info signature %r" % signature,
                offset=start_pos,
            )
        key, length = cursor.read_fmt("4sI")
        self = cls(signature=signature, key=key, length=length, offset=start_pos)
        if remaining is not None and self.size > remaining:
            raise OverrunRegionError(
                "Additional layer info %r needs %d bytes but only %d remain"
                % (key, self.size, remaining),
                offset=start_pos,
                requested=self.size,
                available=remaining,
            )
        cursor.skip(length + self.padding)
        emit(
            sink,
            EventKind.BLOCK,
            "additional layer info",
            start_pos,
            key=key,
            length=length,
            padding=self.padding,
        )
        return self

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        written = write_fmt(fp, "4s4sI", self.signature, self.key_bytes, self.length)
        written += write_bytes(fp, b"\x00" * (self.length + self.padding))
        return written


@define(repr=False)
class TaggedBlocks(ListElement):
    """
    List of :py:class:`TaggedBlock` read from a byte budget.

    Example::

        from psd_layers.constants import Tag

        for block in tagged_blocks:
            print(block.key, block.length)

        Tag.UNICODE_LAYER_NAME in tagged_blocks.keys()

    .. py:attribute:: budget

        Bytes the scanner was given.

    .. py:attribute:: remaining

        Bytes left when the scanner stopped; 0 for a well-formed sequence.
    """

    budget: int = field(default=0, eq=False)
    remaining: int = field(default=0, eq=False)

    @classmethod
    def read(  # type: ignore[override]
        cls: type[T_TaggedBlocks],
        cursor: Cursor,
        budget: int,
        sink: Optional[Sink] = None,
        **kwargs: Any,
    ) -> T_TaggedBlocks:
        """
        Scan blocks until ``budget`` bytes are consumed.

        :raise TruncatedRegionError: fewer than 12 bytes remain for a block.
        :raise CorruptBlockError: a block has an unknown signature.
        :raise OverrunRegionError: a block is larger than the remaining
            budget.
        """
        start_pos = cursor.tell()
        emit(sink, EventKind.SECTION, "additional layer info", start_pos, length=budget)
        items = []
        remaining = budget
        while remaining > 0:
            block = TaggedBlock.read(cursor, remaining, sink=sink)
            remaining -= block.size
            items.append(block)
        return cls(items, budget=budget, remaining=remaining)  # type: ignore[call-arg]

    def keys(self) -> list:
        return [block.key for block in self]

    def __repr__(self) -> str:
        return "TaggedBlocks(%r)" % self.keys()

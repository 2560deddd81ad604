"""
Layer and mask data structures.

This module implements the low-level binary structures of the "Layer and
Mask Information" section, the part of a PSD file that describes layers.

Key classes:

- :py:class:`LayerAndMaskInformation`: Top-level container for all layer data
- :py:class:`LayerInfo`: Contains layer records and channel image data
- :py:class:`LayerRecords`: List of individual layer records
- :py:class:`LayerRecord`: Single layer metadata (bounds, channels, blending)
- :py:class:`ChannelInfo`: Channel metadata within a layer record
- :py:class:`ChannelImageData`: Compressed pixel data for all layers
- :py:class:`ChannelData`: Single channel's compressed pixel data
- :py:class:`GlobalLayerMaskInfo`: Document-wide mask settings
- :py:class:`~psd_layers.psd.tagged_blocks.TaggedBlocks`: Additional layer
  information framing

The section is a tree of length-prefixed regions::

    LayerAndMaskInformation  length (4)
      LayerInfo              length (4), layer count (2)
        LayerRecord * n      34 bytes + 6 per channel + extra data
        ChannelImageData     sum of declared channel lengths
        padding
      GlobalLayerMaskInfo    length (4) + 13 bytes + filler, or length 0
      TaggedBlocks           until the envelope length is exhausted

Nothing here relies on absolute offsets. Each reader consumes what it
declares and accounts for the bytes it consumed; declared lengths that do not
reconcile are reported to the diagnostics sink as
:py:attr:`~psd_layers.diagnostics.EventKind.LENGTH_MISMATCH` events rather
than raised, because producers round padding differently.

Example of reading layer metadata::

    from psd_layers.psd import PSD

    with open('file.psd', 'rb') as f:
        psd = PSD.read(f)

    layer_info = psd.layer_and_mask_information.layer_info
    for record in layer_info.layer_records:
        print(f"Bounds: {record.top}, {record.left}, {record.bottom}, {record.right}")
        print(f"  Blend mode: {record.blend_mode}")
        print(f"  Channels: {len(record.channel_info)}")
"""

import logging
from typing import Any, BinaryIO, Optional, TypeVar, Union

from attrs import define, field

from psd_layers.compression import decompress
from psd_layers.constants import (
    BLEND_SIGNATURE,
    BlendMode,
    ChannelID,
    Clipping,
    Compression,
    GlobalLayerMaskKind,
)
from psd_layers.diagnostics import EventKind, Sink, emit, report_mismatch
from psd_layers.errors import CorruptLayerRecordError, TruncatedRegionError
from psd_layers.psd.base import BaseElement, ListElement
from psd_layers.psd.bin_utils import pack, padding_size, write_bytes, write_fmt
from psd_layers.psd.cursor import Cursor
from psd_layers.psd.tagged_blocks import TaggedBlocks
from psd_layers.validators import enum_or_value, range_

logger = logging.getLogger(__name__)

T_LayerAndMaskInformation = TypeVar(
    "T_LayerAndMaskInformation", bound="LayerAndMaskInformation"
)
T_LayerInfo = TypeVar("T_LayerInfo", bound="LayerInfo")
T_ChannelInfo = TypeVar("T_ChannelInfo", bound="ChannelInfo")
T_LayerFlags = TypeVar("T_LayerFlags", bound="LayerFlags")
T_LayerRecords = TypeVar("T_LayerRecords", bound="LayerRecords")
T_LayerRecord = TypeVar("T_LayerRecord", bound="LayerRecord")
T_ChannelImageData = TypeVar("T_ChannelImageData", bound="ChannelImageData")
T_ChannelDataList = TypeVar("T_ChannelDataList", bound="ChannelDataList")
T_ChannelData = TypeVar("T_ChannelData", bound="ChannelData")
T_GlobalLayerMaskInfo = TypeVar("T_GlobalLayerMaskInfo", bound="GlobalLayerMaskInfo")

#: Fixed part of a layer record: bounds, channel count, signature, blend
#: mode, opacity, clipping, flags, filler and extra data length.
LAYER_RECORD_FIXED_SIZE = 34

#: One (channel id, data length) pair.
CHANNEL_INFO_SIZE = 6

#: Layer count field of the layer info.
LAYER_COUNT_SIZE = 2

#: Compression tag at the head of every channel's data.
COMPRESSION_TAG_SIZE = 2

#: Global layer mask fields that follow the length.
GLOBAL_LAYER_MASK_FIXED_SIZE = 13

#: Length fields of the envelope, the layer info and the global mask.
LENGTH_FIELD_SIZE = 4


@define(repr=True)
class LayerAndMaskInformation(BaseElement):
    """
    Layer and mask information section.

    .. py:attribute:: length

        Declared length of the section, excluding its length field.

    .. py:attribute:: layer_info

        See :py:class:`.LayerInfo`. `None` if the section is empty.

    .. py:attribute:: global_layer_mask_info

        See :py:class:`.GlobalLayerMaskInfo`. `None` if the section ends
        before it.

    .. py:attribute:: tagged_blocks

        See :py:class:`~psd_layers.psd.tagged_blocks.TaggedBlocks`.
    """

    length: int = field(default=0, eq=False)
    layer_info: Optional["LayerInfo"] = None
    global_layer_mask_info: Optional["GlobalLayerMaskInfo"] = None
    tagged_blocks: Optional[TaggedBlocks] = None

    @classmethod
    def read(
        cls: type[T_LayerAndMaskInformation],
        cursor: Cursor,
        sink: Optional[Sink] = None,
        **kwargs: Any,
    ) -> T_LayerAndMaskInformation:
        start_pos = cursor.tell()
        length = cursor.read_u32()
        end_pos = cursor.tell() + length
        emit(
            sink, EventKind.SECTION, "layer and mask information", start_pos, length=length
        )
        if length == 0:
            return cls()

        layer_info = LayerInfo.read(cursor, sink=sink)

        global_layer_mask_info = None
        if end_pos - cursor.tell() >= LENGTH_FIELD_SIZE:
            global_layer_mask_info = GlobalLayerMaskInfo.read(cursor, sink=sink)

        remaining = end_pos - cursor.tell()
        if remaining < 0:
            report_mismatch(
                sink,
                "layer and mask information",
                start_pos,
                declared=length,
                consumed=cursor.tell() - start_pos - LENGTH_FIELD_SIZE,
            )
            remaining = 0
        tagged_blocks = TaggedBlocks.read(cursor, remaining, sink=sink)
        return cls(length, layer_info, global_layer_mask_info, tagged_blocks)

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        body = b""
        if (
            self.layer_info is not None
            or self.global_layer_mask_info is not None
            or self.tagged_blocks is not None
        ):
            body += (self.layer_info or LayerInfo()).tobytes()
            body += (self.global_layer_mask_info or GlobalLayerMaskInfo()).tobytes()
        if self.tagged_blocks is not None:
            body += self.tagged_blocks.tobytes()
        written = write_fmt(fp, "I", len(body))
        written += write_bytes(fp, body)
        return written


@define(repr=True)
class LayerInfo(BaseElement):
    """
    High-level organization of the layer information.

    .. py:attribute:: length

        Declared length, excluding the length field.

    .. py:attribute:: layer_count

        Number of layer records.

    .. py:attribute:: transparent_composite

        The stored layer count was negative: the first alpha channel contains
        the transparency data for the merged result.

    .. py:attribute:: layer_records

        Information about each layer. See :py:class:`.LayerRecords`.

    .. py:attribute:: channel_image_data

        Channel image data. See :py:class:`.ChannelImageData`.

    .. py:attribute:: consumed

        Bytes consumed by the layer count, the records and the channel data.

    .. py:attribute:: padding

        Alignment bytes consumed after the channel data.
    """

    length: int = field(default=0, eq=False)
    layer_count: int = 0
    transparent_composite: bool = False
    layer_records: "LayerRecords" = field(factory=lambda: LayerRecords())
    channel_image_data: "ChannelImageData" = field(factory=lambda: ChannelImageData())
    consumed: int = field(default=0, eq=False)
    padding: int = field(default=0, eq=False)

    @classmethod
    def read(
        cls: type[T_LayerInfo],
        cursor: Cursor,
        sink: Optional[Sink] = None,
        **kwargs: Any,
    ) -> T_LayerInfo:
        start_pos = cursor.tell()
        length = cursor.read_u32()
        emit(sink, EventKind.SECTION, "layer info", start_pos, length=length)
        if length == 0:
            return cls()

        raw_count = cursor.read_i16()
        layer_count = abs(raw_count)
        consumed = LAYER_COUNT_SIZE
        layer_records = LayerRecords.read(cursor, layer_count, sink=sink)
        consumed += sum(record.size for record in layer_records)
        channel_image_data = ChannelImageData.read(cursor, layer_records, sink=sink)
        consumed += channel_image_data.size

        remaining = length - consumed
        padding = 0
        if remaining > 0 and remaining in (
            padding_size(consumed, 2),
            padding_size(consumed, 4),
        ):
            padding = cursor.skip(remaining)
            remaining = 0
        if remaining != 0:
            report_mismatch(
                sink, "layer info", start_pos, declared=length, consumed=consumed
            )
            if remaining > 0:
                cursor.skip(remaining)

        return cls(
            length=length,
            layer_count=layer_count,
            transparent_composite=raw_count < 0,
            layer_records=layer_records,
            channel_image_data=channel_image_data,
            consumed=consumed,
            padding=padding,
        )

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        if not self.layer_records:
            return write_fmt(fp, "I", 0)
        count = len(self.layer_records)
        if self.transparent_composite:
            count = -count
        body = pack("h", count)
        body += self.layer_records.tobytes()
        body += self.channel_image_data.tobytes()
        body += b"\x00" * padding_size(len(body), 2)
        written = write_fmt(fp, "I", len(body))
        written += write_bytes(fp, body)
        return written


@define(frozen=True)
class ChannelInfo(BaseElement):
    """
    Channel information.

    .. py:attribute:: id

        Channel ID: 0 = red, 1 = green, etc.; -1 = transparency mask; -2 =
        user supplied layer mask, -3 real user supplied layer mask. See
        :py:class:`~psd_layers.constants.ChannelID`.

    .. py:attribute:: length

        Length of the corresponding channel data, including its 2-byte
        compression tag.
    """

    id: Union[ChannelID, int] = field(
        default=ChannelID.CHANNEL_0, converter=enum_or_value(ChannelID)
    )
    length: int = 0

    @classmethod
    def read(cls: type[T_ChannelInfo], cursor: Cursor, **kwargs: Any) -> T_ChannelInfo:
        channel_id, length = cursor.read_fmt("hI")
        return cls(id=channel_id, length=length)

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        return write_fmt(fp, "hI", self.id, self.length)


@define(frozen=True)
class LayerFlags(BaseElement):
    """
    Layer flags.

    Note there are undocumented flags. Maybe photoshop version.

    .. py:attribute:: transparency_protected
    .. py:attribute:: visible
    .. py:attribute:: pixel_data_irrelevant
    .. py:attribute:: value

        The raw flag byte.
    """

    value: int = 8

    @property
    def transparency_protected(self) -> bool:
        return bool(self.value & 1)

    @property
    def visible(self) -> bool:
        return not bool(self.value & 2)

    @property
    def obsolete(self) -> bool:
        return bool(self.value & 4)

    @property
    def photoshop_v5_later(self) -> bool:
        return bool(self.value & 8)

    @property
    def pixel_data_irrelevant(self) -> bool:
        return bool(self.value & 16)

    @classmethod
    def read(cls: type[T_LayerFlags], cursor: Cursor, **kwargs: Any) -> T_LayerFlags:
        return cls(cursor.read_u8())

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        return write_fmt(fp, "B", self.value)


class LayerRecords(ListElement):
    """
    List of layer records. See :py:class:`.LayerRecord`.
    """

    @classmethod
    def read(  # type: ignore[override]
        cls: type[T_LayerRecords],
        cursor: Cursor,
        layer_count: int,
        sink: Optional[Sink] = None,
        **kwargs: Any,
    ) -> T_LayerRecords:
        items = []
        for index in range(layer_count):
            items.append(LayerRecord.read(cursor, index=index, sink=sink))
        return cls(items)  # type: ignore[arg-type]


@define(frozen=True)
class LayerRecord(BaseElement):
    """
    Layer record.

    .. py:attribute:: top

        Top position.

    .. py:attribute:: left

        Left position.

    .. py:attribute:: bottom

        Bottom position.

    .. py:attribute:: right

        Right position.

    .. py:attribute:: channel_info

        Tuple of :py:class:`.ChannelInfo`.

    .. py:attribute:: signature

        Blend mode signature ``b'8BIM'``.

    .. py:attribute:: blend_mode

        Blend mode key. See :py:class:`~psd_layers.constants.BlendMode`;
        unknown keys are kept as bytes.

    .. py:attribute:: opacity

        Opacity, 0 = transparent, 255 = opaque.

    .. py:attribute:: clipping

        Clipping, 0 = base, 1 = non-base. See
        :py:class:`~psd_layers.constants.Clipping`.

    .. py:attribute:: flags

        See :py:class:`.LayerFlags`.

    .. py:attribute:: extra_length

        Length of the extra data (mask, blending ranges, name and tagged
        blocks), which is skipped.
    """

    top: int = 0
    left: int = 0
    bottom: int = 0
    right: int = 0
    channel_info: tuple = field(factory=tuple, converter=tuple)
    signature: bytes = field(default=BLEND_SIGNATURE, repr=False)
    blend_mode: Union[BlendMode, bytes] = field(
        default=BlendMode.NORMAL, converter=enum_or_value(BlendMode)
    )
    opacity: int = field(default=255, validator=range_(0, 255))
    clipping: Union[Clipping, int] = field(
        default=Clipping.BASE, converter=enum_or_value(Clipping)
    )
    flags: LayerFlags = field(factory=LayerFlags)
    extra_length: int = 0

    @classmethod
    def read(
        cls: type[T_LayerRecord],
        cursor: Cursor,
        index: int = 0,
        sink: Optional[Sink] = None,
        **kwargs: Any,
    ) -> T_LayerRecord:
        """
        Read a layer record and skip its extra data.

        :raise CorruptLayerRecordError: the blend mode signature is not
            ``b'8BIM'``; the fields after it are not parsed.
        """
        start_pos = cursor.tell()
        top, left, bottom, right, num_channels = cursor.read_fmt("4iH")
        channel_info = [ChannelInfo.read(cursor) for _ in range(num_channels)]

        signature_pos = cursor.tell()
        signature = cursor.read(4)
        if signature != BLEND_SIGNATURE:
            raise CorruptLayerRecordError(
                "Invalid signature %r in layer record %d" % (signature, index),
                offset=signature_pos,
                index=index,
            )
        blend_mode, opacity, clipping = cursor.read_fmt("4sBB")
        flags = LayerFlags.read(cursor)
        extra_length = cursor.read_fmt("xI")[0]
        cursor.skip(extra_length)

        self = cls(
            top=top,
            left=left,
            bottom=bottom,
            right=right,
            channel_info=channel_info,
            signature=signature,
            blend_mode=blend_mode,
            opacity=opacity,
            clipping=clipping,
            flags=flags,
            extra_length=extra_length,
        )
        emit(
            sink,
            EventKind.RECORD,
            "layer record",
            start_pos,
            index=index,
            bbox=self.bbox,
            channels=[int(c.id) for c in self.channel_info],
            length=self.size,
        )
        return self

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        written = write_fmt(
            fp,
            "4iH",
            self.top,
            self.left,
            self.bottom,
            self.right,
            len(self.channel_info),
        )
        written += sum(c.write(fp) for c in self.channel_info)
        blend_mode = (
            self.blend_mode.value
            if isinstance(self.blend_mode, BlendMode)
            else self.blend_mode
        )
        written += write_fmt(
            fp, "4s4sBB", self.signature, blend_mode, self.opacity, self.clipping
        )
        written += self.flags.write(fp)
        written += write_fmt(fp, "xI", self.extra_length)
        written += write_bytes(fp, b"\x00" * self.extra_length)
        return written

    @property
    def width(self) -> int:
        """Width of the layer."""
        return max(self.right - self.left, 0)

    @property
    def height(self) -> int:
        """Height of the layer."""
        return max(self.bottom - self.top, 0)

    @property
    def bbox(self) -> tuple[int, int, int, int]:
        """(left, top, right, bottom) tuple."""
        return self.left, self.top, self.right, self.bottom

    @property
    def size(self) -> int:
        """Bytes the record occupies, including its extra data."""
        return (
            LAYER_RECORD_FIXED_SIZE
            + CHANNEL_INFO_SIZE * len(self.channel_info)
            + self.extra_length
        )


class ChannelImageData(ListElement):
    """
    List of channel data list.

    This size of this list corresponds to the size of
    :py:class:`LayerRecords`. Each item corresponds to the channels of each
    layer.

    See :py:class:`.ChannelDataList`.
    """

    @classmethod
    def read(  # type: ignore[override]
        cls: type[T_ChannelImageData],
        cursor: Cursor,
        layer_records: Optional["LayerRecords"] = None,
        sink: Optional[Sink] = None,
        **kwargs: Any,
    ) -> T_ChannelImageData:
        start_pos = cursor.tell()
        items = []
        if layer_records:
            for layer in layer_records:
                items.append(ChannelDataList.read(cursor, layer.channel_info))
        emit(
            sink,
            EventKind.SECTION,
            "channel image data",
            start_pos,
            length=cursor.tell() - start_pos,
        )
        return cls(items)  # type: ignore[arg-type]

    @property
    def size(self) -> int:
        """Total bytes of channel data, compression tags included."""
        return sum(item.size for item in self)


class ChannelDataList(ListElement):
    """
    List of channel image data, corresponding to each color or alpha.

    See :py:class:`.ChannelData`.
    """

    @classmethod
    def read(  # type: ignore[override]
        cls: type[T_ChannelDataList],
        cursor: Cursor,
        channel_info: tuple,
        **kwargs: Any,
    ) -> T_ChannelDataList:
        items = []
        for c in channel_info:
            items.append(ChannelData.read(cursor, c.length))
        return cls(items)  # type: ignore[arg-type]

    @property
    def size(self) -> int:
        return sum(item.size for item in self)


@define(repr=False)
class ChannelData(BaseElement):
    """
    Channel data.

    .. py:attribute:: compression

        Compression type. See :py:class:`~psd_layers.constants.Compression`;
        unknown tags are kept as integers and fail when decoded.

    .. py:attribute:: data

        Data, still compressed.

    .. py:attribute:: offset

        Document offset of ``data``.
    """

    compression: Union[Compression, int] = field(
        default=Compression.RAW, converter=enum_or_value(Compression)
    )
    data: bytes = b""
    offset: int = field(default=0, eq=False)

    @classmethod
    def read(
        cls: type[T_ChannelData], cursor: Cursor, length: int = 0, **kwargs: Any
    ) -> T_ChannelData:
        """
        Read a compression tag and extract ``length - 2`` data bytes.

        :raise TruncatedRegionError: ``length`` cannot hold the tag.
        """
        if length < COMPRESSION_TAG_SIZE:
            raise TruncatedRegionError(
                "Channel data length %d cannot hold a compression tag" % length,
                offset=cursor.tell(),
                requested=COMPRESSION_TAG_SIZE,
                available=length,
            )
        compression = cursor.read_u16()
        offset = cursor.tell()
        data = cursor.read(length - COMPRESSION_TAG_SIZE)
        return cls(compression=compression, data=data, offset=offset)

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        written = write_fmt(fp, "H", self.compression)
        written += write_bytes(fp, self.data)
        return written

    def get_data(self, width: int, height: int) -> bytes:
        """Get decompressed channel data.

        :param width: width.
        :param height: height.
        :rtype: bytes
        """
        return decompress(self.data, self.compression, width, height, self.offset)

    @property
    def size(self) -> int:
        """Length of channel data block."""
        return COMPRESSION_TAG_SIZE + len(self.data)

    def __repr__(self) -> str:
        return "ChannelData(compression=%r, size=%d)" % (self.compression, self.size)


@define(repr=True)
class GlobalLayerMaskInfo(BaseElement):
    """
    Global mask information.

    A zero length is a valid encoding meaning the block is absent; recent
    producers write it that way.

    .. py:attribute:: length

        Declared length, excluding the length field.

    .. py:attribute:: overlay_color_space

        Overlay color space (undocumented).

    .. py:attribute:: color_components

        4 color components.

    .. py:attribute:: opacity

        Opacity. 0 = transparent, 100 = opaque.

    .. py:attribute:: kind

        Kind.
        0 = Color selected--i.e. inverted;
        1 = Color protected;
        128 = use value stored per layer. This value is preferred. The others
        are for backward compatibility with beta versions.
    """

    length: int = 0
    overlay_color_space: Optional[int] = None
    color_components: Optional[tuple] = None
    opacity: int = 0
    kind: Union[GlobalLayerMaskKind, int] = field(
        default=GlobalLayerMaskKind.PER_LAYER,
        converter=enum_or_value(GlobalLayerMaskKind),
    )

    @classmethod
    def read(
        cls: type[T_GlobalLayerMaskInfo],
        cursor: Cursor,
        sink: Optional[Sink] = None,
        **kwargs: Any,
    ) -> T_GlobalLayerMaskInfo:
        """
        :raise TruncatedRegionError: non-zero length shorter than 13 bytes.
        """
        start_pos = cursor.tell()
        length = cursor.read_u32()
        emit(sink, EventKind.SECTION, "global layer mask info", start_pos, length=length)
        if length == 0:
            return cls()
        if length < GLOBAL_LAYER_MASK_FIXED_SIZE:
            raise TruncatedRegionError(
                "Global layer mask info needs %d bytes but declares %d"
                % (GLOBAL_LAYER_MASK_FIXED_SIZE, length),
                offset=start_pos,
                requested=GLOBAL_LAYER_MASK_FIXED_SIZE,
                available=length,
            )
        overlay_color_space, *components, opacity, kind = cursor.read_fmt("5HHB")
        cursor.skip(length - GLOBAL_LAYER_MASK_FIXED_SIZE)
        return cls(
            length=length,
            overlay_color_space=overlay_color_space,
            color_components=tuple(components),
            opacity=opacity,
            kind=kind,
        )

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        if self.color_components is None:
            return write_fmt(fp, "I", 0)
        written = write_fmt(fp, "I", self.length)
        written += write_fmt(
            fp,
            "5HHB",
            self.overlay_color_space or 0,
            *self.color_components,
            self.opacity,
            self.kind,
        )
        written += write_bytes(fp, b"\x00" * (self.length - GLOBAL_LAYER_MASK_FIXED_SIZE))
        return written

    @property
    def filler_length(self) -> int:
        """Trailing bytes after the fixed fields."""
        return max(self.length - GLOBAL_LAYER_MASK_FIXED_SIZE, 0)

    @property
    def is_present(self) -> bool:
        return self.length > 0

"""Channel compositing for a single layer."""

import logging
from typing import Any, Optional, Union

import numpy as np
from attrs import define, field
from PIL import Image

from psd_layers.constants import ChannelID
from psd_layers.diagnostics import EventKind, Sink, emit
from psd_layers.errors import (
    ChannelUnderrunError,
    PSDDecodeError,
    UnknownChannelRoleError,
)

logger = logging.getLogger(__name__)

#: Initial value of every pixel: opaque black.
DEFAULT_FILL = (0, 0, 0, 255)

#: Channel id to the index in the interleaved R, G, B, A buffer.
CHANNEL_INDEX = {
    ChannelID.CHANNEL_0: 0,
    ChannelID.CHANNEL_1: 1,
    ChannelID.CHANNEL_2: 2,
    ChannelID.TRANSPARENCY_MASK: 3,
}


def new_pixel_buffer(
    width: int, height: int, fill: tuple[int, int, int, int] = DEFAULT_FILL
) -> np.ndarray:
    """
    Create an interleaved RGBA buffer of shape ``(height, width, 4)``.

    :param fill: initial (R, G, B, A) value of every pixel.
    """
    buffer = np.empty((max(height, 0), max(width, 0), 4), dtype=np.uint8)
    buffer[:, :] = np.asarray(fill, dtype=np.uint8)
    return buffer


def check_plane(
    plane: Union[bytes, np.ndarray],
    channel_id: int,
    width: int,
    height: int,
    offset: Optional[int] = None,
) -> int:
    """
    Validate that ``plane`` can be placed into a ``width`` by ``height``
    buffer.

    :return: index of the channel in the R, G, B, A buffer.
    :raise UnknownChannelRoleError: the channel id has no color role.
    :raise ChannelUnderrunError: the plane is shorter than ``width * height``.
    """
    index = CHANNEL_INDEX.get(channel_id)
    if index is None:
        raise UnknownChannelRoleError(
            "Channel id %d has no place in an RGBA buffer" % channel_id,
            offset=offset,
            channel_id=int(channel_id),
        )
    size = width * height
    if len(plane) < size:
        raise ChannelUnderrunError(
            "Channel %d plane has %d bytes, %dx%d needs %d"
            % (channel_id, len(plane), width, height, size),
            offset=offset,
            requested=size,
            available=len(plane),
        )
    return index


def composite_channel(
    buffer: np.ndarray,
    plane: Union[bytes, np.ndarray],
    channel_id: int,
    offset: Optional[int] = None,
) -> np.ndarray:
    """
    Write a decoded channel plane into ``buffer`` in place.

    :param buffer: array from :py:func:`new_pixel_buffer`.
    :param plane: ``width * height`` bytes, row-major.
    :param channel_id: -1 for alpha, 0, 1, 2 for red, green, blue.
    :param offset: document offset of the channel data, for error reports.
    :raise UnknownChannelRoleError: any other channel id.
    :raise ChannelUnderrunError: the plane is shorter than the buffer; the
        buffer is left untouched.
    """
    height, width = buffer.shape[:2]
    index = check_plane(plane, channel_id, width, height, offset)
    size = width * height
    values = np.frombuffer(bytes(plane[:size]), dtype=np.uint8)
    buffer[:, :, index] = values.reshape((height, width))
    return buffer


@define(repr=False)
class DecodedLayer:
    """
    Pixels of one layer.

    .. py:attribute:: index

        Position of the layer record in the document.

    .. py:attribute:: bbox

        (left, top, right, bottom) tuple.

    .. py:attribute:: pixels

        ``uint8`` array of shape ``(height, width, 4)`` in R, G, B, A order.
    """

    index: int
    bbox: tuple[int, int, int, int]
    pixels: np.ndarray = field(eq=False)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) tuple."""
        return self.width, self.height

    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def numpy(self) -> np.ndarray:
        return self.pixels

    def topil(self) -> Optional[Image.Image]:
        """
        Get PIL Image.

        :return: RGBA :py:class:`PIL.Image`, or `None` if the layer is empty.
        """
        if self.is_empty():
            return None
        return Image.fromarray(self.pixels)

    def __repr__(self) -> str:
        return "%s(index=%d, bbox=%r, size=%dx%d)" % (
            self.__class__.__name__,
            self.index,
            self.bbox,
            self.width,
            self.height,
        )


def decode_layer(
    record: Any,
    channels: Any,
    index: int = 0,
    fill: tuple[int, int, int, int] = DEFAULT_FILL,
    sink: Optional[Sink] = None,
) -> DecodedLayer:
    """
    Decompress and composite every channel of a layer.

    Channels are decoded and checked in record order and the first failure
    aborts the layer: the error is reported to ``sink`` and raised, no partial
    layer is returned. The pixel buffer is allocated only once every plane
    has passed.

    :param record: :py:class:`~psd_layers.psd.layer_and_mask.LayerRecord`.
    :param channels: the layer's
        :py:class:`~psd_layers.psd.layer_and_mask.ChannelDataList`.
    :param index: layer index, used in reports.
    :param fill: initial pixel value.
    :param sink: diagnostics sink.
    """
    width, height = record.width, record.height
    planes = []
    for info, data in zip(record.channel_info, channels):
        try:
            plane = data.get_data(width, height)
            check_plane(plane, info.id, width, height, offset=data.offset)
        except PSDDecodeError as e:
            emit(
                sink,
                EventKind.CHANNEL_DECODED,
                "channel",
                data.offset,
                layer=index,
                channel_id=int(info.id),
                ok=False,
                error=str(e),
            )
            emit(
                sink,
                EventKind.LAYER_DECODED,
                "layer",
                None,
                layer=index,
                ok=False,
                error=str(e),
            )
            raise
        emit(
            sink,
            EventKind.CHANNEL_DECODED,
            "channel",
            data.offset,
            layer=index,
            channel_id=int(info.id),
            compression=data.compression,
            ok=True,
        )
        planes.append((info.id, plane, data.offset))

    buffer = new_pixel_buffer(width, height, fill)
    for channel_id, plane, offset in planes:
        composite_channel(buffer, plane, channel_id, offset=offset)

    emit(
        sink,
        EventKind.LAYER_DECODED,
        "layer",
        None,
        layer=index,
        bbox=record.bbox,
        ok=True,
    )
    return DecodedLayer(index, record.bbox, buffer)

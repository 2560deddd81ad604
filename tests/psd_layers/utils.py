import logging
import tempfile
from typing import Any, Optional, Sequence, Type, TypeVar

from psd_layers.constants import ColorMode
from psd_layers.psd.base import BaseElement
from psd_layers.psd.bin_utils import trimmed_repr
from psd_layers.psd.cursor import Cursor
from psd_layers.psd.document import PSD
from psd_layers.psd.header import FileHeader
from psd_layers.psd.layer_and_mask import (
    ChannelData,
    ChannelDataList,
    ChannelImageData,
    ChannelInfo,
    GlobalLayerMaskInfo,
    LayerAndMaskInformation,
    LayerInfo,
    LayerRecord,
    LayerRecords,
)
from psd_layers.psd.tagged_blocks import TaggedBlock, TaggedBlocks

T = TypeVar("T", bound=BaseElement)

logging.basicConfig(level=logging.DEBUG)


def check_write_read(element: T, *args: Any, **kwargs: Any) -> None:
    with tempfile.TemporaryFile() as f:
        element.write(f)
        f.flush()
        f.seek(0)
        new_element = element.read(Cursor(f), *args, **kwargs)
    assert element == new_element, "%s vs %s" % (element, new_element)


def check_read_write(cls: Type[T], data: bytes, *args: Any, **kwargs: Any) -> None:
    element = cls.frombytes(data, *args, **kwargs)
    new_data = element.tobytes()
    assert data == new_data, "%s vs %s" % (trimmed_repr(data), trimmed_repr(new_data))


def make_layer(
    bbox: tuple[int, int, int, int],
    channels: Sequence[tuple[int, int, bytes]],
    extra_length: int = 0,
    **kwargs: Any,
) -> tuple[LayerRecord, ChannelDataList]:
    """
    Build a layer record and its channel data.

    :param bbox: (top, left, bottom, right).
    :param channels: (channel id, compression, compressed data) triples.
    """
    top, left, bottom, right = bbox
    record = LayerRecord(
        top=top,
        left=left,
        bottom=bottom,
        right=right,
        channel_info=[
            ChannelInfo(id=channel_id, length=2 + len(data))
            for channel_id, _, data in channels
        ],
        extra_length=extra_length,
        **kwargs,
    )
    channel_data = ChannelDataList(
        [ChannelData(compression, data) for _, compression, data in channels]
    )
    return record, channel_data


def make_psd(
    layers: Sequence[tuple[LayerRecord, ChannelDataList]] = (),
    width: int = 2,
    height: int = 2,
    tagged_blocks: Optional[Sequence[TaggedBlock]] = None,
    global_layer_mask_info: Optional[GlobalLayerMaskInfo] = None,
    transparent_composite: bool = False,
) -> PSD:
    header = FileHeader(
        channels=4, height=height, width=width, depth=8, color_mode=ColorMode.RGB
    )
    layer_info = LayerInfo(
        layer_count=len(layers),
        transparent_composite=transparent_composite,
        layer_records=LayerRecords([record for record, _ in layers]),
        channel_image_data=ChannelImageData([channels for _, channels in layers]),
    )
    return PSD(
        header=header,
        layer_and_mask_information=LayerAndMaskInformation(
            layer_info=layer_info,
            global_layer_mask_info=global_layer_mask_info or GlobalLayerMaskInfo(),
            tagged_blocks=TaggedBlocks(tagged_blocks or []),
        ),
    )


def make_document(*args: Any, **kwargs: Any) -> bytes:
    """Serialized :py:func:`make_psd`."""
    return make_psd(*args, **kwargs).tobytes()

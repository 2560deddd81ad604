"""
PSD document structure module.

This module contains the main PSD class that represents the low-level
binary structure of a PSD file, up to the end of the layer and mask
information section. The merged image data that follows is not read.
"""

import logging
from typing import Any, BinaryIO, Generator, Optional, TypeVar, Union

from attrs import define, field

from psd_layers.diagnostics import Sink
from psd_layers.psd.base import BaseElement
from psd_layers.psd.color_mode_data import ColorModeData
from psd_layers.psd.cursor import Cursor
from psd_layers.psd.header import FileHeader
from psd_layers.psd.image_resources import ImageResources
from psd_layers.psd.layer_and_mask import LayerAndMaskInformation, LayerInfo

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="PSD")


@define(repr=False)
class PSD(BaseElement):
    """
    Low-level PSD file structure.

    Example::

        from psd_layers.psd import PSD

        with open(input_file, 'rb') as f:
            psd = PSD.read(f)

        for record, channels in psd.iter_layers():
            print(record.bbox, len(channels))

    .. py:attribute:: header

        See :py:class:`.FileHeader`.

    .. py:attribute:: color_mode_data

        See :py:class:`.ColorModeData`.

    .. py:attribute:: image_resources

        See :py:class:`.ImageResources`.

    .. py:attribute:: layer_and_mask_information

        See :py:class:`.LayerAndMaskInformation`.
    """

    header: FileHeader = field(factory=FileHeader)
    color_mode_data: ColorModeData = field(factory=ColorModeData)
    image_resources: ImageResources = field(factory=ImageResources)
    layer_and_mask_information: LayerAndMaskInformation = field(
        factory=LayerAndMaskInformation
    )

    @classmethod
    def read(
        cls: type[T],
        fp: Union[BinaryIO, Cursor],
        sink: Optional[Sink] = None,
        **kwargs: Any,
    ) -> T:
        """
        Walk the document from its first byte.

        :param fp: binary file object, or a :py:class:`.Cursor` over one.
        :param sink: diagnostics sink, see :py:mod:`psd_layers.diagnostics`.
        """
        cursor = fp if isinstance(fp, Cursor) else Cursor(fp)
        header = FileHeader.read(cursor, sink=sink)
        logger.debug("read %s" % header)
        return cls(
            header,
            ColorModeData.read(cursor, sink=sink),
            ImageResources.read(cursor, sink=sink),
            LayerAndMaskInformation.read(cursor, sink=sink),
        )

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        logger.debug("writing %s" % self.header)
        written = self.header.write(fp)
        written += self.color_mode_data.write(fp)
        written += self.image_resources.write(fp)
        written += self.layer_and_mask_information.write(fp)
        return written

    @property
    def layer_info(self) -> Optional[LayerInfo]:
        return self.layer_and_mask_information.layer_info

    def iter_layers(self) -> Generator[tuple[Any, Any], None, None]:
        """
        Iterate over (layer_record, channel_data) pairs.
        """
        layer_info = self.layer_info
        if layer_info is not None:
            records = layer_info.layer_records
            channel_data = layer_info.channel_image_data
            for record, channels in zip(records, channel_data):
                yield record, channels

    def __repr__(self) -> str:
        return "PSD(header=%r, layers=%d)" % (
            self.header,
            len(self.layer_info.layer_records) if self.layer_info else 0,
        )

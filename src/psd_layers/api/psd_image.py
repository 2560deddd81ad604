"""
PSD Image module.

This module provides the main :py:class:`PSDImage` class, the primary entry
point of psd-layers. It wraps the low-level :py:class:`~psd_layers.psd.PSD`
structure and decodes the pixels of its layers on demand.

Example usage::

    from psd_layers import PSDImage

    psd = PSDImage.open('document.psd')
    print(f"Size: {psd.width}x{psd.height}")

    for layer in psd.decode_layers():
        layer.topil().save('layer%d.png' % layer.index)
"""

import logging
import os
from typing import Any, BinaryIO, Iterator, Optional, Union

from psd_layers.composite import DEFAULT_FILL, DecodedLayer, decode_layer
from psd_layers.constants import ColorMode
from psd_layers.diagnostics import Sink
from psd_layers.errors import PSDDecodeError
from psd_layers.psd.document import PSD
from psd_layers.psd.layer_and_mask import LayerRecord

logger = logging.getLogger(__name__)


class PSDImage:
    """
    Photoshop PSD document.

    The low-level data structure is accessible at :py:attr:`PSDImage._record`.

    Example::

        from psd_layers import PSDImage

        psdimage = PSDImage.open('example.psd')
        for layer in psdimage.decode_layers(skip_errors=True):
            image = layer.topil()
    """

    def __init__(self, data: PSD, sink: Optional[Sink] = None):
        if not isinstance(data, PSD):
            raise TypeError(f"Expected PSD instance, got {type(data).__name__}")
        self._record = data
        self._sink = sink

    @classmethod
    def open(
        cls,
        fp: Union[BinaryIO, str, bytes, os.PathLike],
        sink: Optional[Sink] = None,
        **kwargs: Any,
    ) -> "PSDImage":
        """
        Open a PSD document.

        :param fp: filename or file-like object.
        :param sink: diagnostics sink used while reading and decoding, see
            :py:mod:`psd_layers.diagnostics`.
        :return: A :py:class:`~psd_layers.api.psd_image.PSDImage` object.
        """
        if isinstance(fp, (str, bytes, os.PathLike)):
            with open(fp, "rb") as f:
                self = cls(PSD.read(f, sink=sink, **kwargs), sink=sink)
        else:
            self = cls(PSD.read(fp, sink=sink, **kwargs), sink=sink)
        return self

    @property
    def width(self) -> int:
        """
        Document width.

        :return: `int`
        """
        return self._record.header.width

    @property
    def height(self) -> int:
        """
        Document height.

        :return: `int`
        """
        return self._record.header.height

    @property
    def size(self) -> tuple[int, int]:
        """
        (width, height) tuple.

        :return: `tuple`
        """
        return self.width, self.height

    @property
    def color_mode(self) -> Union[ColorMode, int]:
        """
        Document color mode, such as 'RGB' or 'GRAYSCALE'. See
        :py:class:`~psd_layers.constants.ColorMode`.
        """
        return self._record.header.color_mode

    @property
    def channels(self) -> int:
        """
        Number of color channels.

        :return: `int`
        """
        return self._record.header.channels

    @property
    def depth(self) -> int:
        """
        Pixel depth bits.

        :return: `int`
        """
        return self._record.header.depth

    @property
    def version(self) -> int:
        return self._record.header.version

    @property
    def layer_records(self) -> list[LayerRecord]:
        """Layer records in document order."""
        return [record for record, _ in self._record.iter_layers()]

    @property
    def transparent_composite(self) -> bool:
        """The first alpha channel holds the merged result's transparency."""
        layer_info = self._record.layer_info
        return bool(layer_info and layer_info.transparent_composite)

    def decode_layer(
        self, index: int, fill: tuple[int, int, int, int] = DEFAULT_FILL
    ) -> DecodedLayer:
        """
        Decode the pixels of the layer at ``index``.

        :raise IndexError: no such layer.
        :raise PSDDecodeError: a channel fails to decode.
        """
        pairs = list(self._record.iter_layers())
        record, channels = pairs[index]
        return decode_layer(
            record, channels, index=index % len(pairs), fill=fill, sink=self._sink
        )

    def decode_layers(
        self,
        fill: tuple[int, int, int, int] = DEFAULT_FILL,
        skip_errors: bool = False,
    ) -> Iterator[DecodedLayer]:
        """
        Decode every layer in document order.

        :param fill: initial pixel value.
        :param skip_errors: when `True`, a layer that fails to decode is
            reported to the sink and skipped instead of raising.
        """
        for index, (record, channels) in enumerate(self._record.iter_layers()):
            try:
                yield decode_layer(
                    record, channels, index=index, fill=fill, sink=self._sink
                )
            except PSDDecodeError as e:
                if not skip_errors:
                    raise
                logger.debug("Skipping layer %d: %s" % (index, e))

    def __iter__(self) -> Iterator[DecodedLayer]:
        return self.decode_layers()

    def __len__(self) -> int:
        return len(self.layer_records)

    def __repr__(self) -> str:
        return ("%s(mode=%s size=%dx%d depth=%d channels=%d layers=%d)") % (
            self.__class__.__name__,
            self.color_mode,
            self.width,
            self.height,
            self.depth,
            self.channels,
            len(self),
        )

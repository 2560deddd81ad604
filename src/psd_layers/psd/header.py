"""
File header structure.
"""

import logging
from typing import Any, BinaryIO, Optional, TypeVar, Union

from attrs import astuple, define, field

from psd_layers.constants import PSD_SIGNATURE, SUPPORTED_VERSION, ColorMode
from psd_layers.diagnostics import EventKind, Sink, emit
from psd_layers.errors import UnsupportedFormatError, UnsupportedVersionError
from psd_layers.psd.base import BaseElement
from psd_layers.psd.bin_utils import calcsize, write_fmt
from psd_layers.psd.cursor import Cursor
from psd_layers.validators import enum_or_value

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="FileHeader")


@define(frozen=True)
class FileHeader(BaseElement):
    """
    Header section of the PSD file.

    Example::

        from psd_layers.psd.header import FileHeader
        from psd_layers.constants import ColorMode

        header = FileHeader(channels=2, height=359, width=400, depth=8,
                            color_mode=ColorMode.GRAYSCALE)

    .. py:attribute:: signature

        Signature: always equal to ``b'8BPS'``.

    .. py:attribute:: version

        Version number. Only 1 is supported.

    .. py:attribute:: channels

        The number of channels in the image, including any user-defined alpha
        channel.

    .. py:attribute:: height

        The height of the image in pixels.

    .. py:attribute:: width

        The width of the image in pixels.

    .. py:attribute:: depth

        The number of bits per channel.

    .. py:attribute:: color_mode

        The color mode of the file. See
        :py:class:`~psd_layers.constants.ColorMode`. Unknown codes are kept as
        plain integers.
    """

    _FORMAT = "4sH6xHIIHH"

    signature: bytes = field(default=PSD_SIGNATURE, repr=False)
    version: int = field(default=SUPPORTED_VERSION)
    channels: int = 4
    height: int = 64
    width: int = 64
    depth: int = 8
    color_mode: Union[ColorMode, int] = field(
        default=ColorMode.RGB, converter=enum_or_value(ColorMode)
    )

    @signature.validator
    def _validate_signature(self, attribute: Any, value: bytes) -> None:
        if value != PSD_SIGNATURE:
            raise UnsupportedFormatError("This is not a PSD file: %r" % value)

    @version.validator
    def _validate_version(self, attribute: Any, value: int) -> None:
        if value != SUPPORTED_VERSION:
            raise UnsupportedVersionError("Unsupported PSD version %d" % value)

    @classmethod
    def read(
        cls: type[T], cursor: Cursor, sink: Optional[Sink] = None, **kwargs: Any
    ) -> T:
        start_pos = cursor.tell()
        signature = cursor.read(4)
        if signature != PSD_SIGNATURE:
            raise UnsupportedFormatError(
                "This is not a PSD file: %r" % signature, offset=start_pos
            )
        version_pos = cursor.tell()
        version = cursor.read_u16()
        if version != SUPPORTED_VERSION:
            raise UnsupportedVersionError(
                "Unsupported PSD version %d" % version, offset=version_pos
            )
        channels, height, width, depth, color_mode = cursor.read_fmt("6xHIIHH")
        self = cls(signature, version, channels, height, width, depth, color_mode)
        emit(
            sink,
            EventKind.SECTION,
            "file header",
            start_pos,
            length=calcsize(cls._FORMAT),
            channels=channels,
            width=width,
            height=height,
            depth=depth,
            color_mode=self.color_mode,
        )
        return self

    def write(self, fp: BinaryIO, **kwargs: Any) -> int:
        return write_fmt(fp, self._FORMAT, *astuple(self))

"""
Color mode data structure.
"""

import logging

from attrs import define

from psd_layers.psd.base import LengthBlock

logger = logging.getLogger(__name__)


@define(repr=True)
class ColorModeData(LengthBlock):
    """
    Color mode data section of the PSD file.

    For indexed color images the data is the color table for the image in a
    non-interleaved order. The content is skipped; only the length is kept.
    """

    _NAME = "color mode data"

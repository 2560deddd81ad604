"""
Image resources section structure.

Image resources carry document metadata (resolution, ICC profile, thumbnails,
...). Their content is not interpreted; the section is skipped by its length.
"""

import logging

from attrs import define

from psd_layers.psd.base import LengthBlock

logger = logging.getLogger(__name__)


@define(repr=True)
class ImageResources(LengthBlock):
    """
    Image resources section of the PSD file.

    .. py:attribute:: length

        Length of the resource blocks, in bytes.
    """

    _NAME = "image resources"

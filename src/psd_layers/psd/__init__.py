"""
Low-level API that translates binary data to Python structure.

All the data structure in this subpackage inherits from one of the object
defined in :py:mod:`psd_layers.psd.base` module.
"""

# Main PSD document class
from .document import PSD as PSD

# Reader
from .cursor import Cursor as Cursor

# Header
from .header import FileHeader as FileHeader

# Layer and mask structures
from .layer_and_mask import (
    ChannelData as ChannelData,
    ChannelImageData as ChannelImageData,
    ChannelInfo as ChannelInfo,
    GlobalLayerMaskInfo as GlobalLayerMaskInfo,
    LayerAndMaskInformation as LayerAndMaskInformation,
    LayerInfo as LayerInfo,
    LayerRecord as LayerRecord,
    LayerRecords as LayerRecords,
)
from .tagged_blocks import TaggedBlock as TaggedBlock, TaggedBlocks as TaggedBlocks

__all__ = [
    "PSD",
    "Cursor",
    "FileHeader",
    "LayerAndMaskInformation",
    "LayerInfo",
    "LayerRecords",
    "LayerRecord",
    "ChannelInfo",
    "ChannelImageData",
    "ChannelData",
    "GlobalLayerMaskInfo",
    "TaggedBlocks",
    "TaggedBlock",
]

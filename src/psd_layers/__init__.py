"""
psd-layers: Python package for decoding the layers of Adobe Photoshop PSD files.

The package walks the nested, length-prefixed sections of a PSD document,
extracts every layer's channel data, reverses PackBits compression and
recombines the channel planes into R, G, B, A pixel buffers.

Basic usage::

    from psd_layers import PSDImage

    psd = PSDImage.open('example.psd')

    for layer in psd.decode_layers():
        print(layer.index, layer.bbox)
        image = layer.topil()

Architecture:

- :py:mod:`psd_layers.psd`: Low-level binary structure parsing
- :py:mod:`psd_layers.api`: High-level user-facing API
- :py:mod:`psd_layers.composite`: Channel compositing
- :py:mod:`psd_layers.compression`: Image compression codecs (RLE)
- :py:mod:`psd_layers.diagnostics`: Diagnostic events and sinks
- :py:mod:`psd_layers.errors`: Decoding errors
"""

from psd_layers.api.psd_image import PSDImage
from psd_layers.version import __version__

__all__ = ["PSDImage", "__version__"]

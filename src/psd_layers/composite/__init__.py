"""
Composite module for layer decoding.

This subpackage turns the compressed channel data of one layer record into an
interleaved R, G, B, A pixel buffer.

Key functions:

- :py:func:`~psd_layers.composite.composite.new_pixel_buffer`: Allocate a
  filled buffer
- :py:func:`~psd_layers.composite.composite.composite_channel`: Place one
  channel plane into a buffer
- :py:func:`~psd_layers.composite.composite.decode_layer`: Decompress and
  composite every channel of a layer

Example usage::

    from psd_layers.composite import decode_layer
    from psd_layers.psd import PSD

    with open('document.psd', 'rb') as f:
        psd = PSD.read(f)

    for index, (record, channels) in enumerate(psd.iter_layers()):
        layer = decode_layer(record, channels, index=index)
        image = layer.topil()

Channels without a color role (user masks, a fourth color channel) are not
placed; they raise
:py:class:`~psd_layers.errors.UnknownChannelRoleError`.
"""

from psd_layers.composite.composite import (
    DEFAULT_FILL,
    DecodedLayer,
    check_plane,
    composite_channel,
    decode_layer,
    new_pixel_buffer,
)

__all__ = [
    "DEFAULT_FILL",
    "DecodedLayer",
    "check_plane",
    "composite_channel",
    "decode_layer",
    "new_pixel_buffer",
]

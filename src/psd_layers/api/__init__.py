"""
High-level API.

See :py:class:`~psd_layers.api.psd_image.PSDImage`.
"""

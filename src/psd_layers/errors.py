"""
Decoding errors.

Every error raised while walking a document derives from
:py:class:`PSDDecodeError`, which is a :py:class:`ValueError` and carries the
byte ``offset`` at which the problem was detected.

The hierarchy::

    PSDDecodeError
     +-- FormatMismatchError
     |    +-- UnsupportedFormatError
     |    +-- UnsupportedVersionError
     +-- EndOfStreamError
     |    +-- TruncatedStreamError
     |    +-- TruncatedRegionError
     +-- OverrunRegionError
     +-- CorruptLayerRecordError
     +-- CorruptBlockError
     +-- RunOverflowError
     +-- ChannelUnderrunError
     +-- UnknownChannelRoleError
     +-- UnsupportedCompressionError
"""

from typing import Any, Optional


class PSDDecodeError(ValueError):
    """Base class of decoding errors.

    :param message: human readable description.
    :param offset: byte offset where the error was detected, or `None`.
    :param details: extra attributes stored on the instance.
    """

    def __init__(self, message: str, offset: Optional[int] = None, **details: Any):
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.details = details
        for key, value in details.items():
            setattr(self, key, value)

    def __str__(self) -> str:
        if self.offset is None:
            return self.message
        return "%s (offset=%d)" % (self.message, self.offset)


class FormatMismatchError(PSDDecodeError):
    """The byte source is not a document this package can decode."""


class UnsupportedFormatError(FormatMismatchError):
    """The file signature is not ``8BPS``."""


class UnsupportedVersionError(FormatMismatchError):
    """The file version is not 1."""


class EndOfStreamError(PSDDecodeError):
    """Fewer bytes are available than a field requires.

    .. py:attribute:: requested
    .. py:attribute:: available
    """


class TruncatedStreamError(EndOfStreamError):
    """A compressed stream ends before its declared lengths are satisfied."""


class TruncatedRegionError(EndOfStreamError):
    """A region is too short to hold the structure it must contain."""


class OverrunRegionError(PSDDecodeError):
    """A declared length would consume more than the enclosing region."""


class CorruptLayerRecordError(PSDDecodeError):
    """A layer record lost synchronization.

    .. py:attribute:: index

        Index of the offending record.
    """


class CorruptBlockError(PSDDecodeError):
    """An additional layer info block has an unknown signature."""


class RunOverflowError(PSDDecodeError):
    """A run-length code writes past the end of its row."""


class ChannelUnderrunError(PSDDecodeError):
    """A channel plane is shorter than the layer geometry requires."""


class UnknownChannelRoleError(PSDDecodeError):
    """A channel id that cannot be placed into an R, G, B, A buffer."""


class UnsupportedCompressionError(PSDDecodeError):
    """A recognized but unimplemented, or unknown, compression tag.

    .. py:attribute:: compression
    """

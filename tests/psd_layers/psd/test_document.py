import io

import pytest

from psd_layers.constants import ColorMode
from psd_layers.diagnostics import CollectingSink, EventKind
from psd_layers.errors import (
    CorruptBlockError,
    FormatMismatchError,
    TruncatedRegionError,
)
from psd_layers.psd.bin_utils import pack
from psd_layers.psd.cursor import Cursor
from psd_layers.psd.document import PSD
from psd_layers.psd.layer_and_mask import GlobalLayerMaskInfo
from psd_layers.psd.tagged_blocks import TaggedBlock

from ..utils import check_write_read, make_document, make_layer, make_psd


@pytest.fixture
def two_by_two() -> bytes:
    return make_document(
        [
            make_layer(
                (0, 0, 2, 2),
                [(0, 0, b"\xff\x00\x00\x00"), (-1, 0, b"\xff\xff\xff\xff")],
            )
        ]
    )


def test_psd_read(two_by_two: bytes) -> None:
    psd = PSD.read(io.BytesIO(two_by_two))
    assert psd.header.width == 2
    assert psd.header.height == 2
    assert psd.header.color_mode == ColorMode.RGB
    assert psd.color_mode_data.length == 0
    assert psd.image_resources.length == 0
    layers = list(psd.iter_layers())
    assert len(layers) == 1
    record, channels = layers[0]
    assert record.bbox == (0, 0, 2, 2)
    assert [c.length for c in record.channel_info] == [6, 6]
    assert [c.data for c in channels] == [b"\xff\x00\x00\x00", b"\xff\xff\xff\xff"]


def test_psd_consumes_whole_document(two_by_two: bytes) -> None:
    cursor = Cursor.frombytes(two_by_two)
    PSD.read(cursor)
    assert cursor.tell() == len(two_by_two)


def test_psd_write_read() -> None:
    check_write_read(
        make_psd(
            [make_layer((0, 0, 1, 1), [(0, 0, b"\x01")])],
            tagged_blocks=[TaggedBlock(key=b"lyid", length=4)],
        )
    )


def test_psd_channel_offsets(two_by_two: bytes) -> None:
    psd = PSD.read(io.BytesIO(two_by_two))
    (_, channels), = psd.iter_layers()
    first, second = channels
    assert two_by_two[first.offset:first.offset + 4] == first.data
    assert second.offset == first.offset + 6


def test_psd_bad_signature(two_by_two: bytes) -> None:
    with pytest.raises(FormatMismatchError):
        PSD.read(io.BytesIO(b"8BPX" + two_by_two[4:]))


def test_psd_skips_opaque_sections() -> None:
    data = make_document()
    header, rest = data[:26], data[26 + 8:]
    data = (
        header
        + pack("I", 3) + b"abc"
        + pack("I", 5) + b"12345"
        + rest
    )
    sink = CollectingSink()
    psd = PSD.read(io.BytesIO(data), sink=sink)
    assert psd.color_mode_data.length == 3
    assert psd.image_resources.length == 5
    sections = [event.name for event in sink.of_kind(EventKind.SECTION)]
    assert sections[:3] == ["file header", "color mode data", "image resources"]


def test_psd_no_layers() -> None:
    data = make_document()
    psd = PSD.read(io.BytesIO(data))
    assert list(psd.iter_layers()) == []


def test_psd_empty_layer_and_mask_information() -> None:
    data = make_document()[:34] + pack("I", 0)
    psd = PSD.read(io.BytesIO(data))
    assert psd.layer_info is None
    assert list(psd.iter_layers()) == []


def test_psd_global_layer_mask() -> None:
    data = make_document(
        global_layer_mask_info=GlobalLayerMaskInfo(
            length=16,
            overlay_color_space=0,
            color_components=(1, 2, 3, 4),
            opacity=100,
            kind=128,
        )
    )
    psd = PSD.read(io.BytesIO(data))
    info = psd.layer_and_mask_information.global_layer_mask_info
    assert info.color_components == (1, 2, 3, 4)
    assert info.filler_length == 3


def test_psd_tagged_blocks_budget() -> None:
    data = make_document(
        tagged_blocks=[
            TaggedBlock(key=b"luni", length=10),
            TaggedBlock(signature=b"8B64", key=b"lyid", length=4),
        ]
    )
    psd = PSD.read(io.BytesIO(data))
    blocks = psd.layer_and_mask_information.tagged_blocks
    assert len(blocks) == 2
    assert blocks.remaining == 0


def test_psd_tagged_block_truncated() -> None:
    data = make_document()
    # Grow the envelope by 8 bytes that cannot hold a block header.
    envelope_pos = 34
    length = int.from_bytes(data[envelope_pos:envelope_pos + 4], "big")
    data = (
        data[:envelope_pos]
        + pack("I", length + 8)
        + data[envelope_pos + 4:]
        + b"8BIMlyid"
    )
    with pytest.raises(TruncatedRegionError):
        PSD.read(io.BytesIO(data))


def test_psd_tagged_block_bad_signature() -> None:
    data = make_document()
    envelope_pos = 34
    length = int.from_bytes(data[envelope_pos:envelope_pos + 4], "big")
    data = (
        data[:envelope_pos]
        + pack("I", length + 12)
        + data[envelope_pos + 4:]
        + b"XXXXlyid" + pack("I", 0)
    )
    with pytest.raises(CorruptBlockError) as excinfo:
        PSD.read(io.BytesIO(data))
    assert excinfo.value.offset == len(data) - 12


def test_psd_mismatch_is_not_fatal() -> None:
    psd = make_psd([make_layer((0, 0, 1, 1), [(0, 0, b"\x01")])])
    data = bytearray(psd.tobytes())
    # The declared layer info length swallows the empty global mask.
    layer_info_pos = 38
    length = int.from_bytes(data[layer_info_pos:layer_info_pos + 4], "big")
    data[layer_info_pos:layer_info_pos + 4] = pack("I", length + 4)
    sink = CollectingSink()
    psd = PSD.read(io.BytesIO(bytes(data)), sink=sink)
    assert len(list(psd.iter_layers())) == 1
    assert sink.of_kind(EventKind.LENGTH_MISMATCH)

import numpy as np
import pytest

from psd_layers.composite import (
    DEFAULT_FILL,
    DecodedLayer,
    check_plane,
    composite_channel,
    decode_layer,
    new_pixel_buffer,
)
from psd_layers.compression import encode_rle
from psd_layers.constants import Compression
from psd_layers.diagnostics import CollectingSink, EventKind
from psd_layers.errors import (
    ChannelUnderrunError,
    RunOverflowError,
    UnknownChannelRoleError,
    UnsupportedCompressionError,
)

from .utils import make_layer


def test_new_pixel_buffer():
    buffer = new_pixel_buffer(3, 2)
    assert buffer.shape == (2, 3, 4)
    assert buffer.dtype == np.uint8
    assert (buffer == np.array(DEFAULT_FILL, dtype=np.uint8)).all()


def test_new_pixel_buffer_fill():
    buffer = new_pixel_buffer(1, 1, fill=(1, 2, 3, 4))
    assert buffer[0, 0].tolist() == [1, 2, 3, 4]


@pytest.mark.parametrize("channel_id, index", [(0, 0), (1, 1), (2, 2), (-1, 3)])
def test_composite_channel(channel_id, index):
    buffer = new_pixel_buffer(2, 2)
    composite_channel(buffer, b"\x01\x02\x03\x04", channel_id)
    assert buffer[:, :, index].tolist() == [[1, 2], [3, 4]]
    for other in set(range(4)) - {index}:
        assert (buffer[:, :, other] == DEFAULT_FILL[other]).all()


@pytest.mark.parametrize("channel_id", [-3, -2, 3, 4])
def test_composite_channel_unknown_role(channel_id):
    buffer = new_pixel_buffer(2, 2)
    with pytest.raises(UnknownChannelRoleError):
        composite_channel(buffer, b"\x00" * 4, channel_id)


def test_composite_channel_underrun():
    buffer = new_pixel_buffer(2, 2)
    before = buffer.copy()
    with pytest.raises(ChannelUnderrunError) as excinfo:
        composite_channel(buffer, b"\x01\x02\x03", 0, offset=12)
    assert excinfo.value.offset == 12
    assert excinfo.value.requested == 4
    assert excinfo.value.available == 3
    assert (buffer == before).all()


def test_decode_layer_raw():
    record, channels = make_layer(
        (0, 0, 2, 2),
        [(0, 0, b"\xff\x00\x00\x00"), (-1, 0, b"\xff\xff\xff\xff")],
    )
    sink = CollectingSink()
    layer = decode_layer(record, channels, index=0, sink=sink)
    assert isinstance(layer, DecodedLayer)
    assert layer.size == (2, 2)
    assert layer.pixels[0, 0].tolist() == [0xFF, 0, 0, 0xFF]
    assert layer.pixels[0, 1].tolist() == [0, 0, 0, 0xFF]
    assert len(sink.of_kind(EventKind.CHANNEL_DECODED)) == 2
    (event,) = sink.of_kind(EventKind.LAYER_DECODED)
    assert event.details["ok"] is True


def test_decode_layer_rle():
    red = b"\x10\x20\x30\x40\x50\x60"
    record, channels = make_layer(
        (0, 0, 2, 3),
        [(0, Compression.RLE, encode_rle(red, 3, 2))],
    )
    layer = decode_layer(record, channels)
    assert layer.pixels[:, :, 0].tolist() == [[0x10, 0x20, 0x30], [0x40, 0x50, 0x60]]


def test_decode_layer_stops_at_first_failure():
    record, channels = make_layer(
        (0, 0, 1, 2),
        [(0, 0, b"\x01\x02"), (1, Compression.ZIP, b"\x00"), (2, 0, b"\x03\x04")],
    )
    sink = CollectingSink()
    with pytest.raises(UnsupportedCompressionError):
        decode_layer(record, channels, index=5, sink=sink)
    events = sink.of_kind(EventKind.CHANNEL_DECODED)
    assert [event.details["ok"] for event in events] == [True, False]
    (event,) = sink.of_kind(EventKind.LAYER_DECODED)
    assert event.details["ok"] is False
    assert event.details["layer"] == 5


def test_decode_layer_rle_overflow():
    record, channels = make_layer(
        (0, 0, 1, 2),
        [(0, Compression.RLE, b"\x00\x02" + b"\xfd\x01")],
    )
    with pytest.raises(RunOverflowError):
        decode_layer(record, channels, sink=CollectingSink())


def test_decode_layer_raw_underrun():
    record, channels = make_layer((0, 0, 2, 2), [(0, 0, b"\x01\x02")])
    with pytest.raises(ChannelUnderrunError):
        decode_layer(record, channels, sink=CollectingSink())


def test_decode_layer_empty():
    record, channels = make_layer((0, 0, 0, 0), [(0, 0, b""), (-1, 0, b"")])
    layer = decode_layer(record, channels, sink=CollectingSink())
    assert layer.is_empty()
    assert layer.topil() is None


def test_decoded_layer_topil():
    record, channels = make_layer(
        (0, 0, 1, 2), [(0, 0, b"\x01\x02"), (-1, 0, b"\x80\x80")]
    )
    image = decode_layer(record, channels, sink=CollectingSink()).topil()
    assert image.mode == "RGBA"
    assert image.size == (2, 1)
    assert image.getpixel((1, 0)) == (2, 0, 0, 0x80)


def test_decode_layer_underrun_before_allocation():
    record, channels = make_layer((0, 0, 200000, 200000), [(0, 0, b"\x01\x02")])
    with pytest.raises(ChannelUnderrunError) as excinfo:
        decode_layer(record, channels, sink=CollectingSink())
    assert excinfo.value.requested == 200000 * 200000
    assert excinfo.value.available == 2


def test_check_plane():
    assert check_plane(b"\x00" * 6, -1, 3, 2) == 3
    with pytest.raises(ChannelUnderrunError):
        check_plane(b"\x00" * 5, 0, 3, 2, offset=4)
    with pytest.raises(UnknownChannelRoleError):
        check_plane(b"\x00" * 6, -2, 3, 2)

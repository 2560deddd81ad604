import logging
import os

import pytest
from PIL import Image

from psd_layers.__main__ import main
from psd_layers.constants import Compression

from .utils import make_document, make_layer

logger = logging.getLogger(__name__)


@pytest.fixture
def psd_file(tmpdir) -> str:
    path = tmpdir.join("input.psd").strpath
    with open(path, "wb") as f:
        f.write(
            make_document(
                [
                    make_layer((0, 0, 2, 2), [(0, 0, b"\xff\x00\x00\x00")]),
                    make_layer((0, 0, 0, 0), [(0, 0, b"")]),
                    make_layer((0, 0, 1, 3), [(-1, 0, b"\x10\x20\x30")]),
                ]
            )
        )
    return path


@pytest.fixture
def broken_file(tmpdir) -> str:
    path = tmpdir.join("broken.psd").strpath
    with open(path, "wb") as f:
        f.write(
            make_document(
                [
                    make_layer((0, 0, 1, 1), [(0, Compression.ZIP, b"\x00")]),
                    make_layer((0, 0, 1, 1), [(0, 0, b"\x01")]),
                ]
            )
        )
    return path


def test_export(psd_file, tmpdir):
    output = tmpdir.join("out").strpath
    assert main(["export", psd_file, output]) is None
    assert sorted(os.listdir(output)) == ["layer0.png", "layer2.png"]
    with Image.open(os.path.join(output, "layer2.png")) as image:
        assert image.size == (3, 1)
        assert image.getpixel((1, 0)) == (0, 0, 0, 0x20)


def test_export_prefix(psd_file, tmpdir):
    output = tmpdir.join("out").strpath
    main(["export", psd_file, output, "--prefix", "frame_"])
    assert sorted(os.listdir(output)) == ["frame_0.png", "frame_2.png"]


def test_export_single_layer(psd_file, tmpdir):
    output = tmpdir.join("output.png").strpath
    main(["-v", "export", psd_file + "[0]", output])
    with Image.open(output) as image:
        assert image.size == (2, 2)


def test_export_skip_errors(broken_file, tmpdir):
    output = tmpdir.join("out").strpath
    assert main(["export", broken_file, output]) == 1
    main(["export", broken_file, output, "--skip-errors"])
    assert os.listdir(output) == ["layer1.png"]


def test_not_a_psd(tmpdir):
    path = tmpdir.join("text.psd").strpath
    with open(path, "wb") as f:
        f.write(b"not a psd at all, clearly")
    assert main(["show", path]) == 1


def test_show(psd_file, capsys):
    assert main(["show", psd_file]) is None
    out = capsys.readouterr().out
    assert "PSDImage(" in out
    assert "[2] bbox=(0, 0, 3, 1)" in out


def test_debug(psd_file, capsys):
    assert main(["debug", psd_file]) is None
    out = capsys.readouterr().out
    assert "section file header offset=0" in out
    assert "FileHeader(" in out
    assert "LayerInfo(" in out
    assert "LayerRecord(" in out


@pytest.mark.parametrize("suffix", ["[x]", "[]", "[7]"])
def test_export_bad_index(psd_file, suffix, tmpdir):
    output = tmpdir.join("output.png").strpath
    assert main(["export", psd_file + suffix, output]) == 1
    assert not os.path.exists(output)


@pytest.mark.parametrize("argv", [["-h"], ["--version"]])
def test_exit(argv):
    with pytest.raises(SystemExit):
        main(argv)

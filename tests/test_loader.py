from __future__ import annotations

import gzip
from pathlib import Path

import pytest

from conftest import svg_text
from svg2vector.loader import SvgDocumentLoader


def test_load_reports_layers_in_document_order(svg_factory) -> None:
    path = svg_factory("drawing.svg", layers=["background", "text", "overlay"])
    loader = SvgDocumentLoader()

    assert loader.load(str(path)) is None
    assert loader.has_layers()
    assert loader.get_layers() == {"background": 1, "text": 2, "overlay": 3}
    assert list(loader.get_layers()) == ["background", "text", "overlay"]


def test_load_document_without_layers(svg_factory) -> None:
    path = svg_factory("plain.svg")
    loader = SvgDocumentLoader()

    assert loader.load(str(path)) is None
    assert not loader.has_layers()
    assert loader.get_layers() == {}


def test_load_gzip_compressed_document(tmp_path: Path) -> None:
    path = tmp_path / "drawing.svgz"
    path.write_bytes(gzip.compress(svg_text(["one", "two"]).encode("utf-8")))
    loader = SvgDocumentLoader()

    assert loader.load(str(path)) is None
    assert loader.get_layers() == {"one": 1, "two": 2}


def test_load_returns_error_for_invalid_xml(tmp_path: Path) -> None:
    path = tmp_path / "broken.svg"
    path.write_text("<svg><g></svg>")

    error = SvgDocumentLoader().load(str(path))

    assert error is not None
    assert "broken.svg" in error


def test_load_returns_error_for_missing_file(tmp_path: Path) -> None:
    error = SvgDocumentLoader().load(str(tmp_path / "missing.svg"))
    assert error is not None


def test_load_returns_error_for_truncated_svgz(tmp_path: Path) -> None:
    path = tmp_path / "drawing.svgz"
    path.write_bytes(gzip.compress(svg_text(["one", "two"]).encode("utf-8"))[:20])

    error = SvgDocumentLoader().load(str(path))

    assert error is not None
    assert "not a valid SVGZ document" in error


def test_load_returns_error_for_corrupt_svgz(tmp_path: Path) -> None:
    path = tmp_path / "drawing.svgz"
    path.write_bytes(b"\x1f\x8b\x08\x00\x00\x00\x00\x00\x00\x03" + b"\xff" * 32)

    assert SvgDocumentLoader().load(str(path)) is not None


def test_duplicate_labels_fall_back_to_element_id(tmp_path: Path) -> None:
    path = tmp_path / "dupes.svg"
    path.write_text(svg_text(["same", "same"]))
    loader = SvgDocumentLoader()
    loader.load(str(path))

    assert loader.get_layers() == {"same": 1, "layer2": 2}


def test_switching_layers_changes_serialized_display(svg_factory) -> None:
    path = svg_factory("drawing.svg", layers=["background", "text"])
    loader = SvgDocumentLoader()
    loader.load(str(path))

    loader.switch_off_all_layers()
    loader.switch_on_layer("text")
    text = "".join(loader.serialize())

    assert text.count("display:none") == 1
    assert text.count("display:inline") == 1
    assert 'inkscape:label="text"' in text

    loader.switch_on_all_layers()
    assert "".join(loader.serialize()).count("display:inline") == 2


def test_switch_on_unknown_layer(svg_factory) -> None:
    path = svg_factory("drawing.svg", layers=["background"])
    loader = SvgDocumentLoader()
    loader.load(str(path))

    with pytest.raises(KeyError):
        loader.switch_on_layer("missing")


def test_serialize_without_document() -> None:
    with pytest.raises(RuntimeError):
        SvgDocumentLoader().serialize()

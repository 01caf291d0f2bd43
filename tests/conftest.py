from __future__ import annotations

import os
import stat
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from svg2vector.options import ResolvedOptions  # noqa: E402
from svg2vector.targets import SvgTarget  # noqa: E402

SVG_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<svg xmlns="http://www.w3.org/2000/svg" '
    'xmlns:inkscape="http://www.inkscape.org/namespaces/inkscape" '
    'width="100" height="100">\n'
)


def svg_text(layers: Sequence[str] = ()) -> str:
    body = []
    for number, label in enumerate(layers, start=1):
        body.append(
            f'  <g inkscape:groupmode="layer" id="layer{number}" inkscape:label="{label}" '
            f'style="display:none">\n'
            f'    <rect x="{number}" y="{number}" width="10" height="10"/>\n'
            f'  </g>\n'
        )
    if not layers:
        body.append('  <rect x="0" y="0" width="10" height="10"/>\n')
    return SVG_HEADER + "".join(body) + "</svg>\n"


class FakeLoader:
    """In-memory document loader recording every layer toggle."""

    def __init__(self, layers: Optional[Dict[str, int]] = None, error: Optional[str] = None) -> None:
        self.layers = dict(layers or {})
        self.error = error
        self.calls: List[tuple] = []
        self.visible: set = set()

    def load(self, path: str) -> Optional[str]:
        self.calls.append(("load", path))
        return self.error

    def has_layers(self) -> bool:
        return bool(self.layers)

    def get_layers(self) -> Dict[str, int]:
        return dict(sorted(self.layers.items(), key=lambda item: item[1]))

    def switch_on_layer(self, layer_id: str) -> None:
        if layer_id not in self.layers:
            raise KeyError(layer_id)
        self.calls.append(("on", layer_id))
        self.visible.add(layer_id)

    def switch_off_all_layers(self) -> None:
        self.calls.append(("off-all",))
        self.visible.clear()

    def switch_on_all_layers(self) -> None:
        self.calls.append(("on-all",))
        self.visible.update(self.layers)

    def serialize(self) -> List[str]:
        return [f"<svg><!-- {sorted(self.visible)} --></svg>\n"]


class RecordingRunner:
    """Tool runner recording command lines; optionally writes outputs or fails."""

    def __init__(self, fail_at: Optional[int] = None, status: int = 1,
                 raise_error: Optional[BaseException] = None, write_outputs: bool = True) -> None:
        self.commands: List[tuple] = []
        self.fail_at = fail_at
        self.status = status
        self.raise_error = raise_error
        self.write_outputs = write_outputs

    def run(self, command: Sequence[str]) -> int:
        self.commands.append(tuple(command))
        if self.fail_at is not None and len(self.commands) - 1 == self.fail_at:
            if self.raise_error is not None:
                raise self.raise_error
            return self.status
        if self.write_outputs:
            for argument in command:
                if argument.startswith("--export-") and "=" in argument and not argument.startswith("--export-id"):
                    option, _, value = argument.partition("=")
                    if option in ("--export-dpi", "--export-pdf-version", "--export-ps-level"):
                        continue
                    Path(value).write_text("output", encoding="utf-8")
        return 0


@pytest.fixture()
def svg_factory(tmp_path: Path) -> Callable[..., Path]:
    def _create(filename: str = "drawing.svg", layers: Sequence[str] = ()) -> Path:
        path = tmp_path / filename
        path.write_text(svg_text(layers), encoding="utf-8")
        return path

    return _create


@pytest.fixture()
def fake_executable(tmp_path: Path) -> Path:
    path = tmp_path / "bin" / "inkscape"
    path.parent.mkdir()
    path.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture()
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture()
def make_options(fake_executable: Path) -> Callable[..., ResolvedOptions]:
    def _make(input_file, target: str = "png", **overrides) -> ResolvedOptions:
        overrides.setdefault("tool_executable", str(fake_executable))
        return ResolvedOptions(target=SvgTarget.from_name(target), input_file=str(input_file), **overrides)

    return _make


@pytest.fixture()
def recording_runner() -> RecordingRunner:
    return RecordingRunner()


def snapshot(root: Path) -> set:
    """All paths below *root*, used to assert a dry run left the tree untouched."""
    return {os.path.relpath(path, root) for path in root.rglob("*")}


@pytest.fixture()
def temp_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    import tempfile

    root = tmp_path / "tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Restore the package logger to its pristine state after each test.

    ``configure_logging`` makes the logger non-propagating, and pytest attaches
    its capture handlers to non-propagating loggers; without this reset later
    tests would re-point pytest's handlers (or a stale handler bound to a
    closed captured stderr) at the current stream.
    """
    import logging

    yield
    logger = logging.getLogger("svg2vector")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)

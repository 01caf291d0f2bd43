from __future__ import annotations

import gzip
import stat
from pathlib import Path

import pytest

from conftest import svg_text
from svg2vector import __version__
from svg2vector.cli import main
from svg2vector.exceptions import ExitCode


@pytest.fixture()
def failing_executable(tmp_path: Path) -> Path:
    path = tmp_path / "bin" / "broken-inkscape"
    path.parent.mkdir(exist_ok=True)
    path.write_text("#!/bin/sh\nexit 3\n", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def test_help_exits_with_usage_code(capsys) -> None:
    assert main(["--help"]) == ExitCode.USAGE
    assert "--input-file" in capsys.readouterr().out


def test_version_exits_with_usage_code(capsys) -> None:
    assert main(["--version"]) == ExitCode.USAGE
    assert __version__ in capsys.readouterr().out


def test_missing_required_option(capsys) -> None:
    assert main(["-t", "pdf"]) == ExitCode.USAGE
    assert "input-file" in capsys.readouterr().err


def test_unknown_target(workdir: Path, svg_factory) -> None:
    svg_factory("drawing.svg")
    assert main(["-f", "drawing.svg", "-t", "tiff"]) == ExitCode.USAGE


def test_simulate_single_file(workdir: Path, svg_factory, fake_executable, capsys) -> None:
    svg_factory("drawing.svg")

    code = main(["-f", "drawing.svg", "-t", "pdf", "-x", str(fake_executable), "--simulate"])

    assert code == ExitCode.SUCCESS
    out = capsys.readouterr().out
    assert "--export-pdf=drawing.pdf" in out
    assert not (workdir / "drawing.pdf").exists()


def test_simulate_layers(workdir: Path, svg_factory, fake_executable, capsys) -> None:
    svg_factory("drawing.svg", layers=["background", "text"])

    code = main([
        "-f", "drawing.svg", "-t", "png", "-x", str(fake_executable),
        "-l", "-i", "-d", "out", "--create-directories", "--simulate",
    ])

    assert code == ExitCode.SUCCESS
    out = capsys.readouterr().out
    assert "--export-id=layer1" in out
    assert "out/drawing-02.png" in out
    assert not (workdir / "out").exists()


def test_executable_from_environment(workdir: Path, svg_factory, fake_executable, monkeypatch, capsys) -> None:
    svg_factory("drawing.svg")
    monkeypatch.setenv("S2V_INKSCAPE", str(fake_executable))

    assert main(["-f", "drawing.svg", "-t", "eps", "--simulate"]) == ExitCode.SUCCESS
    assert str(fake_executable) in capsys.readouterr().out


def test_real_run_with_fake_tool(workdir: Path, svg_factory, fake_executable) -> None:
    svg_factory("drawing.svg")
    assert main(["-f", "drawing.svg", "-t", "pdf", "-x", str(fake_executable), "-q"]) == ExitCode.SUCCESS


def test_warnings_are_printed(workdir: Path, svg_factory, fake_executable, capsys) -> None:
    svg_factory("drawing.svg")

    code = main([
        "-f", "drawing.svg", "-t", "pdf", "-x", str(fake_executable), "--simulate", "--export-dpi", "300",
    ])

    assert code == ExitCode.SUCCESS
    assert "CLI option <export-dpi> used, will be ignored" in capsys.readouterr().err


def test_quiet_suppresses_output(workdir: Path, svg_factory, fake_executable, capsys) -> None:
    svg_factory("drawing.svg")

    code = main(["-f", "drawing.svg", "-t", "pdf", "-x", str(fake_executable), "--simulate", "-q"])

    assert code == ExitCode.SUCCESS
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""


def test_missing_input_exit_code(workdir: Path, fake_executable, capsys) -> None:
    assert main(["-f", "missing.svg", "-t", "pdf", "-x", str(fake_executable)]) == ExitCode.INPUT
    assert "missing.svg" in capsys.readouterr().err


def test_output_directory_exit_code(workdir: Path, svg_factory, fake_executable) -> None:
    svg_factory("drawing.svg")
    (workdir / "out").write_text("file")

    code = main(["-f", "drawing.svg", "-t", "pdf", "-x", str(fake_executable), "-d", "out"])

    assert code == ExitCode.OUTPUT_DIRECTORY


def test_output_file_exists_exit_code(workdir: Path, svg_factory, fake_executable, capsys) -> None:
    svg_factory("drawing.svg")
    (workdir / "drawing.pdf").write_text("old")

    code = main(["-f", "drawing.svg", "-t", "pdf", "-x", str(fake_executable)])

    assert code == ExitCode.OUTPUT_FILE
    assert "overwrite-existing" in capsys.readouterr().err


def test_ambiguous_pattern_exit_code(workdir: Path, svg_factory, fake_executable) -> None:
    svg_factory("drawing.svg", layers=["a", "b"])

    code = main(["-f", "drawing.svg", "-t", "png", "-x", str(fake_executable), "-l"])

    assert code == ExitCode.PATTERN


def test_invalid_executable_exit_code(workdir: Path, svg_factory, tmp_path: Path) -> None:
    svg_factory("drawing.svg")

    code = main(["-f", "drawing.svg", "-t", "pdf", "-x", str(tmp_path / "nope" / "inkscape")])

    assert code == ExitCode.TOOL_INVALID


def test_failing_tool_exit_code(workdir: Path, svg_factory, failing_executable) -> None:
    svg_factory("drawing.svg")

    code = main(["-f", "drawing.svg", "-t", "pdf", "-x", str(failing_executable), "-q"])

    assert code == ExitCode.TOOL_FAILED


def test_truncated_svgz_exit_code(workdir: Path, fake_executable, capsys) -> None:
    (workdir / "drawing.svgz").write_bytes(gzip.compress(svg_text(["a", "b"]).encode("utf-8"))[:20])

    code = main(["-f", "drawing.svgz", "-t", "pdf", "-x", str(fake_executable)])

    assert code == ExitCode.INPUT
    assert "SVGZ" in capsys.readouterr().err


def test_layer_output_same_as_input_exit_code(workdir: Path, svg_factory, fake_executable) -> None:
    svg_factory("drawing.svg", layers=["only"])

    code = main(["-f", "drawing.svg", "-t", "svg", "-x", str(fake_executable), "-l", "--create-directories"])

    assert code == ExitCode.OUTPUT_FILE
    assert "only" in (workdir / "drawing.svg").read_text()

from __future__ import annotations

import os
import stat
import subprocess
from pathlib import Path

import pytest

from svg2vector.command import InkscapeCommand
from svg2vector.exceptions import ExitCode, ExternalToolError, ExternalToolErrorKind
from svg2vector.options import ExportSettings
from svg2vector.runner import SubprocessRunner, check_executable
from svg2vector.targets import SvgTarget


def test_command_for_png_with_dpi(make_options) -> None:
    options = make_options("in.svg", "png", export=ExportSettings(dpi=300, pdf_version="1.4"))

    command = InkscapeCommand.for_target("inkscape", SvgTarget.PNG, options)

    assert command.substitute("in.svg", "out.png") == (
        "inkscape", "--without-gui", "--export-dpi=300", "--export-png=out.png", "in.svg",
    )


def test_command_with_text_as_shape_and_selected_node(make_options) -> None:
    options = make_options("in.svg", "pdf", text_as_shape=True)

    command = InkscapeCommand.for_target("inkscape", SvgTarget.PDF, options).with_selected_node("layer2")

    assert command.substitute(Path("in.svg"), Path("out/in-02.pdf")) == (
        "inkscape",
        "--without-gui",
        "--export-text-to-path",
        "--export-id=layer2",
        "--export-id-only",
        "--export-pdf=out/in-02.pdf",
        "in.svg",
    )


def test_intermediate_command_skips_export_settings(make_options) -> None:
    options = make_options("in.svg", "ps", export=ExportSettings(ps_level=2))

    command = InkscapeCommand.for_target("inkscape", SvgTarget.SVG, options, export_settings=False)

    assert command.substitute("in.svg", "tmp.svg") == (
        "inkscape", "--without-gui", "--export-plain-svg=tmp.svg", "in.svg",
    )


def test_command_string_uses_placeholders(make_options) -> None:
    command = InkscapeCommand.for_target("inkscape", SvgTarget.EPS, make_options("in.svg", "eps"))
    assert str(command) == "inkscape --without-gui '--export-eps={output}' '{input}'"


def test_check_executable_accepts_executable_file(fake_executable: Path) -> None:
    assert check_executable(str(fake_executable)) == str(fake_executable)


@pytest.mark.parametrize("value", [None, "", "   "])
def test_check_executable_blank(value) -> None:
    with pytest.raises(ExternalToolError) as excinfo:
        check_executable(value)
    assert excinfo.value.kind is ExternalToolErrorKind.BLANK
    assert excinfo.value.exit_code == ExitCode.TOOL_INVALID


def test_check_executable_missing(tmp_path: Path) -> None:
    with pytest.raises(ExternalToolError) as excinfo:
        check_executable(str(tmp_path / "nope" / "inkscape"))
    assert excinfo.value.kind is ExternalToolErrorKind.MISSING
    assert excinfo.value.flag == "inkscape-exec"


def test_check_executable_not_a_file(tmp_path: Path) -> None:
    with pytest.raises(ExternalToolError) as excinfo:
        check_executable(str(tmp_path))
    assert excinfo.value.kind is ExternalToolErrorKind.NOT_A_FILE


def test_check_executable_not_executable(tmp_path: Path, monkeypatch) -> None:
    path = tmp_path / "inkscape"
    path.write_text("")
    path.chmod(stat.S_IRUSR | stat.S_IWUSR)
    monkeypatch.setattr("svg2vector.runner.os.access", lambda p, mode: mode != os.X_OK)

    with pytest.raises(ExternalToolError) as excinfo:
        check_executable(str(path))
    assert excinfo.value.kind is ExternalToolErrorKind.NOT_EXECUTABLE


def test_check_executable_looks_up_path(monkeypatch) -> None:
    monkeypatch.setattr("svg2vector.runner.which", lambda names: "/opt/bin/" + names[0])
    assert check_executable("inkscape") == "/opt/bin/inkscape"


def test_tool_failure_kinds_map_to_subprocess_exit_code() -> None:
    error = ExternalToolError("boom", kind=ExternalToolErrorKind.NON_ZERO_EXIT)
    assert error.exit_code == ExitCode.TOOL_FAILED


def test_subprocess_runner_returns_status(monkeypatch) -> None:
    calls = []

    def fake_run(command, **kwargs):
        calls.append((command, kwargs))
        return subprocess.CompletedProcess(command, 3, stdout="", stderr="bad input")

    monkeypatch.setattr("svg2vector.utils.subprocess.run", fake_run)

    status = SubprocessRunner(timeout=5).run(["inkscape", "--version"])

    assert status == 3
    assert calls[0][0] == ["inkscape", "--version"]
    assert calls[0][1]["timeout"] == 5
    assert calls[0][1]["check"] is False
    assert calls[0][1]["errors"] == "replace"

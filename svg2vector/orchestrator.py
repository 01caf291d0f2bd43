"""Conversion orchestration built around an explicit run state machine.

A run moves through ``INIT -> INPUT_VALIDATED -> OUTPUT_RESOLVED ->
[TEMP_PREPARED] -> CONVERTING -> CLEANED_UP -> DONE``; any fatal error moves
it to ``FAILED``. Every filesystem mutation and every tool launch checks the
simulate flag and is replaced by a trace message in a dry run, while all path
and command computation is the same as in a real run.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from .command import InkscapeCommand
from .exceptions import (
    DirectoryMissingError,
    ExternalToolError,
    ExternalToolErrorKind,
    InputError,
    InputErrorKind,
    Svg2VectorError,
    TempArtifactError,
)
from .loader import DocumentLoader, SvgDocumentLoader
from .options import ResolvedOptions
from .resolver import resolve_for_document
from .runner import SubprocessRunner, ToolRunner, check_executable
from .targets import SvgTarget
from .types import (
    ConversionReport,
    ConversionStep,
    LayerEntry,
    OutputPlan,
    RunState,
    TempArtifact,
)

_LOGGER = logging.getLogger("svg2vector.orchestrator")

# Prefix used when creating temporary files or directories.
TMP_PREFIX = "s2vis-"

_TRANSITIONS: Dict[RunState, FrozenSet[RunState]] = {
    RunState.INIT: frozenset({RunState.INPUT_VALIDATED}),
    RunState.INPUT_VALIDATED: frozenset({RunState.OUTPUT_RESOLVED}),
    RunState.OUTPUT_RESOLVED: frozenset({RunState.TEMP_PREPARED, RunState.CONVERTING}),
    RunState.TEMP_PREPARED: frozenset({RunState.CONVERTING}),
    RunState.CONVERTING: frozenset({RunState.CLEANED_UP}),
    RunState.CLEANED_UP: frozenset({RunState.DONE}),
    RunState.DONE: frozenset(),
    RunState.FAILED: frozenset(),
}


def simulated_temp_path(*parts: str) -> Path:
    """Placeholder temporary path used for commands and logs in a dry run."""
    return Path(tempfile.gettempdir(), f"{TMP_PREFIX}simulated", *parts)


class ConversionOrchestrator:
    """Sequence temporary artifacts, tool invocations and cleanup for one run."""

    def __init__(
        self,
        options: ResolvedOptions,
        *,
        loader: Optional[DocumentLoader] = None,
        runner: Optional[ToolRunner] = None,
    ) -> None:
        self.options = options
        self.loader: DocumentLoader = loader or SvgDocumentLoader()
        self.runner: ToolRunner = runner or SubprocessRunner(timeout=options.tool_timeout)

        self.state = RunState.INIT
        self.states: List[RunState] = [RunState.INIT]
        self.plan: Optional[OutputPlan] = None
        self.warnings: List[str] = []
        self.steps: List[ConversionStep] = []
        self.outputs: List[Path] = []
        self.temp_file: Optional[TempArtifact] = None
        self.temp_dir: Optional[TempArtifact] = None

        self._executable: Optional[str] = None
        self._intermediates: List[Tuple[LayerEntry, Path]] = []
        self._created_dirs: set = set()

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------
    @property
    def simulate(self) -> bool:
        return self.options.simulate

    @property
    def needs_temp_artifacts(self) -> bool:
        return self.options.svg_first

    @property
    def does_layers(self) -> bool:
        return self.plan is not None and self.plan.does_layers

    @property
    def uses_manual_layers(self) -> bool:
        return self.options.svg_first and self.options.manual_layers and self.does_layers

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------
    def run(self) -> ConversionReport:
        """Execute the whole pipeline and return its report.

        Raises:
            Svg2VectorError: the first fatal error; the run ends in ``FAILED``
                and temporary artifacts are removed before re-raising. Any other
                exception is re-raised after the same cleanup
        """
        try:
            self.validate_input()
            self.resolve_output()
            if self.needs_temp_artifacts:
                self.prepare_temp_artifacts()
            self.convert()
        except Svg2VectorError as exc:
            _LOGGER.debug("run failed with exit code %s: %s", int(exc.exit_code), exc.message)
            self._remove_temp_artifacts()
            self._transition(RunState.FAILED)
            raise
        except BaseException as exc:
            _LOGGER.debug("run aborted by %s: %s", type(exc).__name__, exc)
            self._remove_temp_artifacts()
            self._transition(RunState.FAILED)
            raise
        self.clean_up()
        self._transition(RunState.DONE)
        _LOGGER.info("finished successfully")
        return self.report()

    def report(self) -> ConversionReport:
        artifacts = [artifact for artifact in (self.temp_dir, self.temp_file) if artifact is not None]
        return ConversionReport(
            state=self.state,
            states=list(self.states),
            plan=self.plan,
            warnings=list(self.warnings),
            steps=list(self.steps),
            outputs=list(self.outputs),
            temp_artifacts=artifacts,
            simulated=self.simulate,
        )

    def _transition(self, state: RunState) -> None:
        if self.state is RunState.FAILED:
            return
        if state is not RunState.FAILED and state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Invalid run transition {self.state.value} -> {state.value}")
        _LOGGER.debug("state %s -> %s", self.state.value, state.value)
        self.state = state
        self.states.append(state)

    def _warn(self, message: str) -> None:
        _LOGGER.debug("warning recorded: %s", message)
        self.warnings.append(message)

    # ------------------------------------------------------------------
    # INIT -> INPUT_VALIDATED
    # ------------------------------------------------------------------
    def validate_input(self) -> None:
        options = self.options
        raw = options.input_file
        if raw is None or not str(raw).strip():
            raise InputError("no input file given", kind=InputErrorKind.MISSING, flag="input-file")

        path = Path(raw)
        if not path.exists():
            raise InputError(
                f"input file <{raw}> does not exist, please check path and filename",
                kind=InputErrorKind.MISSING,
                path=path,
                flag="input-file",
            )
        if not path.is_file():
            raise InputError(
                f"input file <{raw}> is not a file, please check path and filename",
                kind=InputErrorKind.NOT_A_FILE,
                path=path,
                flag="input-file",
            )
        if not os.access(path, os.R_OK):
            raise InputError(
                f"cannot read input file <{raw}>, please check file permissions",
                kind=InputErrorKind.NOT_READABLE,
                path=path,
                flag="input-file",
            )

        error = self.loader.load(str(raw))
        if error:
            raise InputError(error, kind=InputErrorKind.UNREADABLE, path=path, flag="input-file")

        self._executable = check_executable(options.tool_executable)
        _LOGGER.debug("Inkscape exec:    %s", self._executable)

        for parameter in options.incompatible_export_parameters():
            self._warn(
                f"target is not <{parameter.target.value}> but CLI option <{parameter.cli_flag}> used, "
                "will be ignored"
            )
        if options.manual_layers and not options.svg_first:
            self._warn("found CLI option <manual-layers> but not <svg-first>, option will be ignored")

        self._transition(RunState.INPUT_VALIDATED)

    # ------------------------------------------------------------------
    # INPUT_VALIDATED -> OUTPUT_RESOLVED
    # ------------------------------------------------------------------
    def resolve_output(self) -> OutputPlan:
        options = self.options
        plan = resolve_for_document(options.target, options.input_file, options, self.loader)
        self.plan = plan
        for message in plan.warnings:
            self._warn(message)

        if not plan.does_layers:
            if options.switch_on_layers:
                self.loader.switch_on_all_layers()
            if options.manual_layers:
                self._warn("no layers processed but CLI option <manual-layers> used, will be ignored")

        if options.svg_first:
            _LOGGER.info("converting to temporary SVG first")
            _LOGGER.debug("Inkscape cmd tmp: %s", self._intermediate_command())
        else:
            _LOGGER.info("converting directly to target")
            _LOGGER.debug("Inkscape cmd:     %s", self._target_command())

        self._transition(RunState.OUTPUT_RESOLVED)
        return plan

    # ------------------------------------------------------------------
    # OUTPUT_RESOLVED -> TEMP_PREPARED
    # ------------------------------------------------------------------
    def prepare_temp_artifacts(self) -> None:
        plan = self._require_plan()
        source = Path(self.options.input_file)

        if plan.does_layers:
            _LOGGER.info("creating temporary directory")
            self.temp_dir = self._create_temp_directory()
            if self.uses_manual_layers:
                _LOGGER.info("creating temporary SVG files, using manual layer handling")
            else:
                _LOGGER.info("creating temporary SVG files, using the tool for layer handling")

            for entry in self.layers():
                destination = self.temp_dir.path / f"{plan.name_for(entry)}.svg"
                if self.uses_manual_layers:
                    self.loader.switch_off_all_layers()
                    self.loader.switch_on_layer(entry.id)
                    self._write_lines(destination, self.loader.serialize())
                else:
                    command = self._intermediate_command().with_selected_node(entry.node_id)
                    self._execute(command, source, destination, layer=entry, intermediate=True)
                self._intermediates.append((entry, destination))
        else:
            _LOGGER.info("creating temporary file")
            self.temp_file = self._create_temp_file()
            self._execute(
                self._intermediate_command(), source, self.temp_file.path, intermediate=True
            )

        self._transition(RunState.TEMP_PREPARED)

    def _create_temp_directory(self) -> TempArtifact:
        if self.simulate:
            path = simulated_temp_path()
            _LOGGER.info("[simulate] would create temporary directory %s", path)
            return TempArtifact(path=path, is_directory=True, simulated=True)
        try:
            path = Path(tempfile.mkdtemp(prefix=TMP_PREFIX))
        except OSError as exc:
            raise TempArtifactError(
                f"problem creating temporary directory with error: {exc}"
            ) from exc
        _LOGGER.debug("temp directory:   %s", path)
        return TempArtifact(path=path, is_directory=True)

    def _create_temp_file(self) -> TempArtifact:
        if self.simulate:
            path = simulated_temp_path("intermediate.svg")
            _LOGGER.info("[simulate] would create temporary file %s", path)
            return TempArtifact(path=path, is_directory=False, simulated=True)
        try:
            handle, name = tempfile.mkstemp(prefix=TMP_PREFIX, suffix=".svg")
            os.close(handle)
        except OSError as exc:
            raise TempArtifactError(f"problem creating temporary file with error: {exc}") from exc
        _LOGGER.debug("temp file:        %s", name)
        return TempArtifact(path=Path(name), is_directory=False)

    def _write_lines(self, destination: Path, lines: Sequence[str]) -> None:
        if self.simulate:
            _LOGGER.info("[simulate] would write temporary file %s", destination)
            return
        try:
            with destination.open("w", encoding="utf-8") as handle:
                handle.writelines(lines)
        except OSError as exc:
            raise TempArtifactError(
                f"IO error writing to file <{destination}>: {exc}", path=destination
            ) from exc
        _LOGGER.debug("temporary file: %s", destination)

    # ------------------------------------------------------------------
    # -> CONVERTING
    # ------------------------------------------------------------------
    def convert(self) -> List[Path]:
        """Run one conversion step per output unit, in layer index order."""
        plan = self._require_plan()
        self._transition(RunState.CONVERTING)
        command = self._target_command()
        source = Path(self.options.input_file)

        if self._intermediates:
            _LOGGER.info("converting multiple temporary SVG files")
            for entry, intermediate in self._intermediates:
                self._execute(command, intermediate, plan.output_for(entry), layer=entry)
        elif self.temp_file is not None:
            _LOGGER.info("converting single temporary SVG file")
            self._execute(command, self.temp_file.path, plan.output_file())
        elif plan.does_layers:
            for entry in self.layers():
                self._execute(
                    command.with_selected_node(entry.node_id),
                    source,
                    plan.output_for(entry),
                    layer=entry,
                )
        else:
            self._execute(command, source, plan.output_file())
        return list(self.outputs)

    def _execute(
        self,
        command: InkscapeCommand,
        input_path: Path,
        output_path: Path,
        *,
        layer: Optional[LayerEntry] = None,
        intermediate: bool = False,
    ) -> ConversionStep:
        if not intermediate:
            self._ensure_output_directory(output_path.parent)

        step = ConversionStep(
            input_path=input_path,
            output_path=output_path,
            command=command.substitute(input_path, output_path),
            layer=layer,
            intermediate=intermediate,
        )
        self.steps.append(step)
        _LOGGER.debug("running tool for input <%s> creating output <%s>", input_path, output_path)
        _LOGGER.debug("running tool with cli <%s>", step.command_line)

        if self.simulate:
            _LOGGER.info("[simulate] would run: %s", step.command_line)
        else:
            try:
                status = self.runner.run(step.command)
            except (OSError, subprocess.SubprocessError) as exc:
                raise ExternalToolError(
                    f"IO exception while executing the tool with error: {exc}",
                    kind=ExternalToolErrorKind.LAUNCH_FAILED,
                    path=output_path,
                ) from exc
            if status != 0:
                raise ExternalToolError(
                    f"tool exited with status {status} creating <{output_path}>",
                    kind=ExternalToolErrorKind.NON_ZERO_EXIT,
                    path=output_path,
                )

        if not intermediate:
            self.outputs.append(output_path)
        return step

    def _ensure_output_directory(self, directory: Path) -> None:
        if directory == Path(".") or directory in self._created_dirs or directory.is_dir():
            return
        if not self.options.create_directories:
            raise DirectoryMissingError(
                f"output directory <{directory}> does not exist and CLI option <create-directories> not used",
                path=directory,
            )
        if self.simulate:
            _LOGGER.info("[simulate] would create directory %s", directory)
        else:
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise TempArtifactError(
                    f"problem creating output directory <{directory}> with error: {exc}",
                    path=directory,
                ) from exc
            _LOGGER.debug("created directory %s", directory)
        self._created_dirs.add(directory)

    # ------------------------------------------------------------------
    # CONVERTING -> CLEANED_UP
    # ------------------------------------------------------------------
    def clean_up(self) -> None:
        self._transition(RunState.CLEANED_UP)
        self._remove_temp_artifacts()

    def _remove_temp_artifacts(self) -> None:
        artifacts = [artifact for artifact in (self.temp_file, self.temp_dir) if artifact is not None]
        if not artifacts:
            return
        if self.options.keep_temp_artifacts:
            _LOGGER.info("keeping temporary artifacts")
            return

        _LOGGER.info("removing temporary artifacts")
        for artifact in artifacts:
            if artifact.simulated:
                _LOGGER.info("[simulate] would remove %s", artifact.path)
                continue
            try:
                if artifact.is_directory:
                    shutil.rmtree(artifact.path)
                else:
                    artifact.path.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                self._warn(f"could not remove temporary artifact <{artifact.path}>: {exc}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def layers(self) -> List[LayerEntry]:
        """Layers of the loaded document in index order."""
        entries = [LayerEntry(layer_id, index) for layer_id, index in self.loader.get_layers().items()]
        return sorted(entries, key=lambda entry: entry.index)

    def _require_plan(self) -> OutputPlan:
        if self.plan is None:
            raise RuntimeError("Output plan has not been resolved")
        return self.plan

    def _require_executable(self) -> str:
        if self._executable is None:
            raise RuntimeError("Tool executable has not been validated")
        return self._executable

    def _target_command(self) -> InkscapeCommand:
        return InkscapeCommand.for_target(
            self._require_executable(), self.options.target, self.options
        )

    def _intermediate_command(self) -> InkscapeCommand:
        return InkscapeCommand.for_target(
            self._require_executable(), SvgTarget.SVG, self.options, export_settings=False
        )


def convert(
    options: ResolvedOptions,
    *,
    loader: Optional[DocumentLoader] = None,
    runner: Optional[ToolRunner] = None,
) -> ConversionReport:
    """Run a complete conversion for *options* and return its report."""
    return ConversionOrchestrator(options, loader=loader, runner=runner).run()


__all__ = ["TMP_PREFIX", "ConversionOrchestrator", "convert", "simulated_temp_path"]

"""
Type definitions and dataclasses for svg2vector.

This module defines the data structures shared by the resolver, the
orchestrator and the command line.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from .pattern import NamingPattern


@dataclass(frozen=True, slots=True)
class LayerEntry:
    """A named layer of the source document and its stable position."""

    id: str
    index: int

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"Layer index must be >= 0, got {self.index}")

    @property
    def node_id(self) -> str:
        """Identifier of the layer node as understood by the conversion tool."""
        return f"layer{self.index}"


@dataclass
class OutputPlan:
    """
    Resolved output decision for a single run.

    Exactly one of ``file`` (single-file mode) and ``pattern`` (layer mode)
    is set; ``directory`` is always set.

    Attributes:
        directory: Directory receiving the output file(s)
        file_extension: Extension of the target format, without dot
        file: Output file name without directory and extension
        pattern: Naming pattern producing one file name per layer
        warnings: Options used but meaningless in the resolved mode
    """

    directory: Path
    file_extension: str
    file: Optional[str] = None
    pattern: Optional[NamingPattern] = None
    warnings: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if (self.file is None) == (self.pattern is None):
            raise ValueError("An output plan needs exactly one of a file or a naming pattern")

    @property
    def does_layers(self) -> bool:
        return self.pattern is not None

    def output_file(self) -> Path:
        if self.file is None:
            raise ValueError("Output plan is in layer mode and has no single output file")
        return self.directory / f"{self.file}.{self.file_extension}"

    def name_for(self, entry: LayerEntry) -> str:
        if self.pattern is None:
            raise ValueError("Output plan is in single-file mode and has no naming pattern")
        return self.pattern.render(entry)

    def output_for(self, entry: LayerEntry) -> Path:
        return self.directory / f"{self.name_for(entry)}.{self.file_extension}"


@dataclass(frozen=True)
class TempArtifact:
    """A temporary file or directory owned by one conversion run."""

    path: Path
    is_directory: bool
    simulated: bool = False


@dataclass(frozen=True)
class ConversionStep:
    """One invocation of the conversion tool."""

    input_path: Path
    output_path: Path
    command: Tuple[str, ...]
    layer: Optional[LayerEntry] = None
    intermediate: bool = False

    @property
    def command_line(self) -> str:
        return shlex.join(self.command)


class RunState(str, Enum):
    INIT = "init"
    INPUT_VALIDATED = "input-validated"
    OUTPUT_RESOLVED = "output-resolved"
    TEMP_PREPARED = "temp-prepared"
    CONVERTING = "converting"
    CLEANED_UP = "cleaned-up"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ConversionReport:
    """
    Result of a conversion run.

    Attributes:
        state: Final state of the run
        states: Every state the run passed through, in order
        plan: Resolved output plan, None if resolution did not complete
        warnings: Non-fatal conditions collected during the run
        steps: Tool invocations executed, or only constructed when simulating
        outputs: Target files written, or that would be written when simulating
        temp_artifacts: Temporary artifacts created for the run
        simulated: Whether the run was a dry run
    """

    state: RunState
    states: List[RunState]
    plan: Optional[OutputPlan]
    warnings: List[str]
    steps: List[ConversionStep]
    outputs: List[Path]
    temp_artifacts: List[TempArtifact]
    simulated: bool = False

    @property
    def success(self) -> bool:
        return self.state is RunState.DONE

    @property
    def command_lines(self) -> List[str]:
        return [step.command_line for step in self.steps]

    def __str__(self) -> str:
        return (
            f"ConversionReport(state={self.state.value}, steps={len(self.steps)}, "
            f"outputs={len(self.outputs)}, warnings={len(self.warnings)})"
        )


__all__ = [
    "LayerEntry",
    "OutputPlan",
    "TempArtifact",
    "ConversionStep",
    "RunState",
    "ConversionReport",
]

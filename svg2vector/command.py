"""Inkscape command line construction."""

from __future__ import annotations

import shlex
from dataclasses import dataclass, replace
from os import PathLike
from typing import List, Optional, Tuple, Union

from .options import ResolvedOptions
from .targets import EXPORT_PARAMETERS, SvgTarget

INPUT_PLACEHOLDER = "{input}"
OUTPUT_PLACEHOLDER = "{output}"


@dataclass(frozen=True)
class InkscapeCommand:
    """Command template for one target, completed per step with input and output paths."""

    executable: str
    target: SvgTarget
    arguments: Tuple[str, ...] = ()
    selected_node: Optional[str] = None

    @classmethod
    def for_target(
        cls,
        executable: str,
        target: SvgTarget,
        options: ResolvedOptions,
        *,
        export_settings: bool = True,
    ) -> "InkscapeCommand":
        """Build the template for *target*.

        Export parameters the target does not accept are left out; the
        orchestrator reports them as warnings.
        """
        arguments: List[str] = []
        if options.text_as_shape:
            arguments.append("--export-text-to-path")
        if export_settings:
            for name, value in options.export.supplied().items():
                parameter = EXPORT_PARAMETERS[name]
                if parameter.target is target:
                    arguments.append(f"{parameter.tool_option}={value}")
        return cls(executable=executable, target=target, arguments=tuple(arguments))

    def with_selected_node(self, node_id: str) -> "InkscapeCommand":
        """Return a copy exporting only the node *node_id*."""
        return replace(self, selected_node=node_id)

    def substitute(
        self,
        input_path: Union[str, PathLike],
        output_path: Union[str, PathLike],
    ) -> Tuple[str, ...]:
        command = [self.executable, "--without-gui"]
        command.extend(self.arguments)
        if self.selected_node is not None:
            command.append(f"--export-id={self.selected_node}")
            command.append("--export-id-only")
        command.append(f"{self.target.export_option}={output_path}")
        command.append(str(input_path))
        return tuple(command)

    def __str__(self) -> str:
        return shlex.join(self.substitute(INPUT_PLACEHOLDER, OUTPUT_PLACEHOLDER))


__all__ = ["InkscapeCommand"]

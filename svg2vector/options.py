"""Immutable run configuration assembled once from the command line."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from typing import Dict, Optional, Union

from .targets import EXPORT_PARAMETERS, SvgTarget

DEFAULT_TOOL_EXECUTABLE = "inkscape"

# Environment variable consulted for the tool executable.
TOOL_ENV_VAR = "S2V_INKSCAPE"


@dataclass(frozen=True)
class ExportSettings:
    """Target-specific export parameters, ``None`` when not supplied."""

    dpi: Optional[int] = None
    pdf_version: Optional[str] = None
    ps_level: Optional[int] = None

    def supplied(self) -> Dict[str, Union[int, str]]:
        return {
            item.name: getattr(self, item.name)
            for item in fields(self)
            if getattr(self, item.name) is not None
        }


@dataclass(frozen=True)
class ResolvedOptions:
    """
    Every flag a conversion run depends on.

    Built once by the command line (or a library caller) and passed
    explicitly to the resolver and the orchestrator; nothing mutates it.
    """

    target: SvgTarget
    input_file: str
    output_file: Optional[str] = None
    output_directory: Optional[str] = None
    create_directories: bool = False
    overwrite_existing: bool = False
    keep_temp_artifacts: bool = False
    simulate: bool = False
    switch_on_layers: bool = False
    layers: bool = False
    layers_if_exist: bool = False
    layer_index: bool = False
    layer_id: bool = False
    no_basename: bool = False
    use_basename: Optional[str] = None
    text_as_shape: bool = False
    svg_first: bool = False
    manual_layers: bool = False
    tool_executable: str = DEFAULT_TOOL_EXECUTABLE
    tool_timeout: Optional[float] = None
    export: ExportSettings = field(default_factory=ExportSettings)

    def __post_init__(self) -> None:
        if not isinstance(self.target, SvgTarget):
            object.__setattr__(self, "target", SvgTarget.from_name(str(self.target)))

    @property
    def wants_layers(self) -> bool:
        return self.layers or self.layers_if_exist

    def layer_directory(self) -> str:
        """Output directory for layer mode, the working directory by default."""
        return self.output_directory if self.output_directory is not None else os.getcwd()

    def incompatible_export_parameters(self):
        """Supplied export parameters the target does not accept."""
        return [
            EXPORT_PARAMETERS[name]
            for name in self.export.supplied()
            if not self.target.accepts(name)
        ]


__all__ = ["DEFAULT_TOOL_EXECUTABLE", "TOOL_ENV_VAR", "ExportSettings", "ResolvedOptions"]

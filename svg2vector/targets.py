"""Catalog of supported conversion targets and their export parameters."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Tuple

# Extensions removed from an input file name to derive the output name.
SOURCE_EXTENSIONS: Tuple[str, ...] = (".svg", ".svgz")


class SvgTarget(str, Enum):
    """Enumeration of output formats the conversion tool can produce."""

    SVG = "svg"
    PNG = "png"
    PDF = "pdf"
    PS = "ps"
    EPS = "eps"
    EMF = "emf"
    WMF = "wmf"

    @classmethod
    def from_name(cls, name: str) -> "SvgTarget":
        try:
            return cls(name.strip().lower())
        except ValueError as exc:
            supported = ", ".join(target.value for target in cls)
            raise ValueError(f"Unknown target '{name}', expected one of: {supported}") from exc

    @property
    def extension(self) -> str:
        return self.value

    @property
    def export_option(self) -> str:
        """Inkscape switch that writes this target, e.g. ``--export-png``."""
        return _EXPORT_OPTIONS[self]

    @property
    def export_parameters(self) -> FrozenSet[str]:
        return frozenset(
            name for name, parameter in EXPORT_PARAMETERS.items() if parameter.target is self
        )

    def accepts(self, parameter: str) -> bool:
        return parameter in self.export_parameters


@dataclass(frozen=True)
class ExportParameter:
    """A target-specific export setting understood by the conversion tool."""

    name: str
    cli_flag: str
    tool_option: str
    target: SvgTarget


_EXPORT_OPTIONS: Dict[SvgTarget, str] = {
    SvgTarget.SVG: "--export-plain-svg",
    SvgTarget.PNG: "--export-png",
    SvgTarget.PDF: "--export-pdf",
    SvgTarget.PS: "--export-ps",
    SvgTarget.EPS: "--export-eps",
    SvgTarget.EMF: "--export-emf",
    SvgTarget.WMF: "--export-wmf",
}

EXPORT_PARAMETERS: Dict[str, ExportParameter] = {
    "dpi": ExportParameter("dpi", "export-dpi", "--export-dpi", SvgTarget.PNG),
    "pdf_version": ExportParameter(
        "pdf_version", "export-pdf-version", "--export-pdf-version", SvgTarget.PDF
    ),
    "ps_level": ExportParameter("ps_level", "export-ps-level", "--export-ps-level", SvgTarget.PS),
}


__all__ = ["SOURCE_EXTENSIONS", "SvgTarget", "ExportParameter", "EXPORT_PARAMETERS"]

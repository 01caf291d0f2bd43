"""
svg2vector - Convert SVG files to other vector and raster formats with Inkscape.

This library decides which output files a conversion run writes, checks that
they are safe to write, and drives the Inkscape command line to produce them,
either as one file or as one file per layer of the source document.

Quick Start:
    >>> from svg2vector import ResolvedOptions, SvgTarget, convert
    >>> options = ResolvedOptions(target=SvgTarget.PDF, input_file='drawing.svg')
    >>> report = convert(options)
    >>> report.outputs
    [PosixPath('drawing.pdf')]

Main Classes:
    - ConversionOrchestrator: Runs one conversion as an explicit state machine
    - SvgDocumentLoader: Reads SVG/SVGZ documents and toggles their layers
    - SubprocessRunner: Runs the conversion tool

Data Classes:
    - ResolvedOptions: Immutable run configuration
    - OutputPlan: Resolved output file or per-layer naming pattern
    - ConversionReport: Result of a conversion run

Exceptions:
    - Svg2VectorError: Base exception, carries the CLI exit code
    - InputError, OutputDirectoryError, OutputFileError, PatternError,
      ExternalToolError, TempArtifactError: Error categories

For CLI usage, use the 's2v-is' command after installation.
"""

__version__ = "1.0.0"
__author__ = "svg2vector Contributors"
__license__ = "MIT"

# Core classes
from svg2vector.orchestrator import ConversionOrchestrator, convert
from svg2vector.loader import DocumentLoader, SvgDocumentLoader
from svg2vector.runner import SubprocessRunner, ToolRunner

# Configuration and data types
from svg2vector.options import ExportSettings, ResolvedOptions
from svg2vector.targets import SvgTarget
from svg2vector.pattern import NamingPattern, build_pattern
from svg2vector.resolver import resolve, resolve_for_document
from svg2vector.types import ConversionReport, ConversionStep, LayerEntry, OutputPlan, RunState

# Exceptions
from svg2vector.exceptions import (
    ExitCode,
    Svg2VectorError,
    InputError,
    OutputDirectoryError,
    DirectoryMissingError,
    OutputFileError,
    SameAsInputError,
    OutputFileExistsError,
    FileNotWritableError,
    TargetIsDirectoryError,
    PatternError,
    AmbiguousPatternError,
    InvalidPatternError,
    ExternalToolError,
    TempArtifactError,
)

__all__ = [
    # Main classes
    "ConversionOrchestrator",
    "convert",
    "DocumentLoader",
    "SvgDocumentLoader",
    "ToolRunner",
    "SubprocessRunner",
    # Configuration and data types
    "ExportSettings",
    "ResolvedOptions",
    "SvgTarget",
    "NamingPattern",
    "build_pattern",
    "resolve",
    "resolve_for_document",
    "ConversionReport",
    "ConversionStep",
    "LayerEntry",
    "OutputPlan",
    "RunState",
    # Exceptions
    "ExitCode",
    "Svg2VectorError",
    "InputError",
    "OutputDirectoryError",
    "DirectoryMissingError",
    "OutputFileError",
    "SameAsInputError",
    "OutputFileExistsError",
    "FileNotWritableError",
    "TargetIsDirectoryError",
    "PatternError",
    "AmbiguousPatternError",
    "InvalidPatternError",
    "ExternalToolError",
    "TempArtifactError",
    # Version info
    "__version__",
]

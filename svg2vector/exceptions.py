"""
Custom exceptions for svg2vector.

This module defines the error taxonomy used throughout the library. Every
error is fatal to a conversion run and carries the process exit code the
command line reports for its category, plus the offending path and the CLI
flag that would resolve it, where known.
"""

from __future__ import annotations

import os
from enum import Enum, IntEnum
from typing import Optional, Union

PathLike = Union[str, os.PathLike]


class ExitCode(IntEnum):
    """Process exit codes, one per fatal error category."""

    SUCCESS = 0
    USAGE = 1
    INPUT = -3
    OUTPUT_DIRECTORY = -4
    OUTPUT_FILE = -5
    PATTERN = -6
    TOOL_INVALID = -20
    TEMP_ARTIFACT = -90
    UNEXPECTED = -99
    TOOL_FAILED = -110


class InputErrorKind(str, Enum):
    MISSING = "missing"
    NOT_A_FILE = "not-a-file"
    NOT_READABLE = "not-readable"
    UNREADABLE = "unreadable"


class OutputDirectoryErrorKind(str, Enum):
    NOT_A_DIRECTORY = "not-a-directory"
    NOT_WRITABLE = "not-writable"
    DOES_NOT_EXIST_NO_CREATE = "does-not-exist-no-create"
    WOULD_OVERWRITE_TARGETS = "would-overwrite-targets"


class OutputFileErrorKind(str, Enum):
    BLANK = "blank"
    SAME_AS_INPUT = "same-as-input"
    EXISTS_NO_OVERWRITE = "exists-no-overwrite"
    EXISTS_NOT_WRITABLE = "exists-not-writable"
    IS_A_DIRECTORY = "is-a-directory"


class ExternalToolErrorKind(str, Enum):
    BLANK = "blank"
    MISSING = "missing"
    NOT_A_FILE = "not-a-file"
    NOT_EXECUTABLE = "not-executable"
    NON_ZERO_EXIT = "non-zero-exit"
    LAUNCH_FAILED = "launch-failed"


class Svg2VectorError(Exception):
    """Base exception for all svg2vector errors."""

    exit_code: ExitCode = ExitCode.UNEXPECTED

    def __init__(
        self,
        message: str = "",
        *,
        kind: Optional[Enum] = None,
        path: Optional[PathLike] = None,
        flag: Optional[str] = None,
    ) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.kind = kind
        self.path = os.fspath(path) if path is not None else None
        self.flag = flag

    @property
    def default_message(self) -> str:
        return "An unknown svg2vector error occurred."


class InputError(Svg2VectorError):
    """Raised when the source document is missing or cannot be read."""

    exit_code = ExitCode.INPUT

    @property
    def default_message(self) -> str:
        return "Input file is missing or unreadable."


class OutputDirectoryError(Svg2VectorError):
    """Raised when the output directory cannot be used for writing."""

    exit_code = ExitCode.OUTPUT_DIRECTORY

    @property
    def default_message(self) -> str:
        return "Output directory cannot be used."


class DirectoryMissingError(OutputDirectoryError):
    """Raised when an output directory is missing and may not be created."""

    def __init__(self, message: str = "", **kwargs) -> None:
        kwargs.setdefault("kind", OutputDirectoryErrorKind.DOES_NOT_EXIST_NO_CREATE)
        kwargs.setdefault("flag", "create-directories")
        super().__init__(message, **kwargs)

    @property
    def default_message(self) -> str:
        return "Output directory does not exist and may not be created."


class OutputFileError(Svg2VectorError):
    """Raised when the single output file cannot be written safely."""

    exit_code = ExitCode.OUTPUT_FILE

    @property
    def default_message(self) -> str:
        return "Output file cannot be used."


class SameAsInputError(OutputFileError):
    """Raised when the output file would overwrite the input file."""

    def __init__(self, message: str = "", **kwargs) -> None:
        kwargs.setdefault("kind", OutputFileErrorKind.SAME_AS_INPUT)
        kwargs.setdefault("flag", "output-file")
        super().__init__(message, **kwargs)

    @property
    def default_message(self) -> str:
        return "Output file is the same as the input file."


class OutputFileExistsError(OutputFileError):
    """Raised when the output file exists and overwriting was not requested."""

    def __init__(self, message: str = "", **kwargs) -> None:
        kwargs.setdefault("kind", OutputFileErrorKind.EXISTS_NO_OVERWRITE)
        kwargs.setdefault("flag", "overwrite-existing")
        super().__init__(message, **kwargs)

    @property
    def default_message(self) -> str:
        return "Output file exists and overwriting was not requested."


class FileNotWritableError(OutputFileError):
    """Raised when an existing output file cannot be overwritten."""

    def __init__(self, message: str = "", **kwargs) -> None:
        kwargs.setdefault("kind", OutputFileErrorKind.EXISTS_NOT_WRITABLE)
        super().__init__(message, **kwargs)

    @property
    def default_message(self) -> str:
        return "Output file exists but cannot be written."


class TargetIsDirectoryError(OutputFileError):
    """Raised when the output file path points to an existing directory."""

    def __init__(self, message: str = "", **kwargs) -> None:
        kwargs.setdefault("kind", OutputFileErrorKind.IS_A_DIRECTORY)
        kwargs.setdefault("flag", "output-file")
        super().__init__(message, **kwargs)

    @property
    def default_message(self) -> str:
        return "Output file exists but is a directory."


class PatternError(Svg2VectorError):
    """Raised when the naming pattern for layer output files is unusable."""

    exit_code = ExitCode.PATTERN

    @property
    def default_message(self) -> str:
        return "Invalid output file name pattern."


class AmbiguousPatternError(PatternError):
    """Raised when several layers would be written to the same file name."""

    @property
    def default_message(self) -> str:
        return "Output file name pattern is ambiguous for multiple layers."


class InvalidPatternError(PatternError):
    """Raised when an edited pattern is empty, lost its layer placeholders, or renders a path."""


class ExternalToolError(Svg2VectorError):
    """Raised when the conversion tool is unusable or an invocation fails."""

    def __init__(self, message: str = "", **kwargs) -> None:
        super().__init__(message, **kwargs)
        if self.kind in (ExternalToolErrorKind.NON_ZERO_EXIT, ExternalToolErrorKind.LAUNCH_FAILED):
            self.exit_code = ExitCode.TOOL_FAILED
        else:
            self.exit_code = ExitCode.TOOL_INVALID

    @property
    def default_message(self) -> str:
        return "External conversion tool failed."


class TempArtifactError(Svg2VectorError):
    """Raised when a temporary file or directory cannot be created or written."""

    exit_code = ExitCode.TEMP_ARTIFACT

    @property
    def default_message(self) -> str:
        return "Temporary artifact could not be created."


__all__ = [
    "ExitCode",
    "InputErrorKind",
    "OutputDirectoryErrorKind",
    "OutputFileErrorKind",
    "ExternalToolErrorKind",
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
]

"""Output resolution: decide what files a run writes and check they are safe to write.

Resolution is pure validation. Nothing here creates, writes or deletes on
the filesystem; directory creation is only checked for permission and left
to the orchestrator.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional

from .exceptions import (
    DirectoryMissingError,
    OutputDirectoryError,
    OutputDirectoryErrorKind,
    OutputFileError,
    OutputFileErrorKind,
    OutputFileExistsError,
    FileNotWritableError,
    InvalidPatternError,
    SameAsInputError,
    TargetIsDirectoryError,
)
from .options import ResolvedOptions
from .pattern import build_pattern
from .targets import SOURCE_EXTENSIONS, SvgTarget
from .types import LayerEntry, OutputPlan

_LOGGER = logging.getLogger("svg2vector.resolver")

NO_LAYERS_FALLBACK_WARNING = "layers activated but input file has no layers, continue for single output file"


def _layers_warning(flag: str) -> str:
    return f"layers processed but CLI option <{flag}> used, will be ignored"


def _no_layers_warning(flag: str) -> str:
    return f"no layers processed but CLI option <{flag}> used, will be ignored"


def check_directory(directory: Path, options: ResolvedOptions, *, flag: str = "output-directory") -> None:
    """Check *directory* exists and is writable, or may be created."""

    if directory.exists():
        if not directory.is_dir():
            raise OutputDirectoryError(
                f"output directory <{directory}> exists but is not a directory",
                kind=OutputDirectoryErrorKind.NOT_A_DIRECTORY,
                path=directory,
                flag=flag,
            )
        if not os.access(directory, os.W_OK):
            raise OutputDirectoryError(
                f"output directory <{directory}> exists but cannot write into it, check permissions",
                kind=OutputDirectoryErrorKind.NOT_WRITABLE,
                path=directory,
                flag=flag,
            )
    elif not options.create_directories:
        raise DirectoryMissingError(
            f"output directory <{directory}> does not exist and CLI option <create-directories> not used",
            path=directory,
        )


def check_directory_content(directory: Path, target: SvgTarget, options: ResolvedOptions) -> None:
    """Refuse a layer output directory already holding files of the target type."""

    if not directory.is_dir() or options.create_directories or options.overwrite_existing:
        return
    marker = "." + target.extension
    for child in sorted(directory.iterdir()):
        if child.is_file() and marker in child.name:
            raise OutputDirectoryError(
                f"output directory <{directory}> contains <{target.extension}> files "
                "and CLI option <overwrite-existing> not used",
                kind=OutputDirectoryErrorKind.WOULD_OVERWRITE_TARGETS,
                path=directory,
                flag="overwrite-existing",
            )


def check_output_file(input_path: str, output_path: Path, options: ResolvedOptions) -> None:
    """Run the safety checks for a single output file (extension included)."""

    if str(Path(input_path)) == str(output_path):
        raise SameAsInputError(
            f"output file <{output_path}> is the same as input file <{input_path}>, "
            "will not overwrite the input",
            path=output_path,
        )

    parent = output_path.parent
    if parent != Path("."):
        check_directory(parent, options, flag="output-file")

    if output_path.is_dir():
        raise TargetIsDirectoryError(
            f"output file <{output_path}> exists but is a directory", path=output_path
        )
    if output_path.exists():
        if not options.overwrite_existing:
            raise OutputFileExistsError(
                f"output file <{output_path}> exists and CLI option <overwrite-existing> not used",
                path=output_path,
            )
        if not os.access(output_path, os.W_OK):
            raise FileNotWritableError(
                f"output file <{output_path}> exists but cannot write to it", path=output_path
            )


def check_layer_outputs(plan: OutputPlan, input_path: str, entries: Iterable[LayerEntry]) -> None:
    """Check every per-layer output path once the layers are known.

    A rendered name must be a plain file name inside the plan directory, and
    no output may be the input file itself.
    """
    source = Path(input_path).resolve()
    for entry in entries:
        name = plan.name_for(entry)
        if name in ("", ".", "..") or "/" in name or os.sep in name or (os.altsep and os.altsep in name):
            raise InvalidPatternError(
                f"layer <{entry.id}> renders output file name <{name}>, "
                "which is not a plain file name inside the output directory",
                path=plan.directory,
                flag="layer-id",
            )
        output_path = plan.output_for(entry)
        if output_path.resolve() == source:
            raise SameAsInputError(
                f"output file <{output_path}> for layer <{entry.id}> is the same as input file "
                f"<{input_path}>, will not overwrite the input",
                path=output_path,
                flag="output-directory",
            )


def _strip_source_extension(path: str) -> str:
    for extension in SOURCE_EXTENSIONS:
        if path.endswith(extension):
            return path[: -len(extension)]
    return path


def _resolve_layers(
    target: SvgTarget,
    input_path: str,
    options: ResolvedOptions,
    layer_count: Optional[int],
) -> OutputPlan:
    warnings: List[str] = []
    if options.output_file is not None:
        warnings.append(_layers_warning("output-file"))
    if options.switch_on_layers:
        warnings.append(_layers_warning("all-layers"))

    directory = Path(options.layer_directory())
    check_directory(directory, options)
    check_directory_content(directory, target, options)

    pattern = build_pattern(
        input_path,
        use_index=options.layer_index,
        use_id=options.layer_id,
        no_basename=options.no_basename,
        basename=options.use_basename,
        layer_count=layer_count,
    )
    _LOGGER.debug("Layer output pattern <%s> in directory <%s>", pattern.template, directory)
    return OutputPlan(
        directory=directory,
        file_extension=target.extension,
        pattern=pattern,
        warnings=warnings,
    )


def _resolve_single(target: SvgTarget, input_path: str, options: ResolvedOptions) -> OutputPlan:
    warnings: List[str] = []
    for used, flag in (
        (options.layer_index, "layer-index"),
        (options.layer_id, "layer-id"),
        (options.no_basename, "no-basename"),
        (options.use_basename is not None, "use-basename"),
    ):
        if used:
            warnings.append(_no_layers_warning(flag))

    suffix = "." + target.extension
    if options.output_file is not None:
        name = options.output_file
        if name.strip() and Path(name) == Path(input_path):
            raise SameAsInputError(
                f"output file <{name}> is the same as input file <{input_path}>, "
                "will not overwrite the input",
                path=name,
            )
        if name.endswith(suffix):
            name = name[: -len(suffix)]
        if not name.strip():
            raise OutputFileError(
                "output filename is blank", kind=OutputFileErrorKind.BLANK, flag="output-file"
            )
    else:
        name = _strip_source_extension(input_path)

    candidate = Path(name)
    if options.output_directory is not None:
        directory = Path(options.output_directory)
        check_directory(directory, options)
        candidate = directory / candidate.name

    output_path = candidate.parent / (candidate.name + suffix)
    check_output_file(input_path, output_path, options)

    _LOGGER.debug("Single output file <%s>", output_path)
    return OutputPlan(
        directory=candidate.parent,
        file_extension=target.extension,
        file=candidate.name,
        warnings=warnings,
    )


def resolve(
    do_layers: bool,
    target: SvgTarget,
    input_path: str,
    options: ResolvedOptions,
    *,
    layer_count: Optional[int] = None,
) -> OutputPlan:
    """
    Compute and validate the output plan for one run.

    Args:
        do_layers: Resolve for one output file per layer
        target: Output format
        input_path: Path of the source document, must not be blank
        options: Run configuration supplying the output overrides
        layer_count: Number of layers that will be written, if known

    Returns:
        An :class:`OutputPlan` with ``pattern`` set in layer mode and
        ``file`` set otherwise

    Raises:
        OutputDirectoryError: the output directory is unusable
        OutputFileError: the single output file is unusable
        PatternError: the layer naming pattern is ambiguous
    """
    if not isinstance(target, SvgTarget):
        raise ValueError(f"Target must be an SvgTarget, got {target!r}")
    if input_path is None or not str(input_path).strip():
        raise ValueError("Input path must not be blank")

    if do_layers:
        return _resolve_layers(target, input_path, options, layer_count)
    return _resolve_single(target, input_path, options)


def resolve_for_document(
    target: SvgTarget,
    input_path: str,
    options: ResolvedOptions,
    loader,
) -> OutputPlan:
    """Choose the mode from the options and the loaded document, then :func:`resolve`.

    Requesting layers for a document without layers degrades to single-file
    mode with a warning instead of failing.
    """
    has_layers = loader.has_layers()
    warnings: List[str] = []
    if options.layers and not has_layers:
        warnings.append(NO_LAYERS_FALLBACK_WARNING)

    do_layers = options.wants_layers and has_layers
    layers = loader.get_layers() if do_layers else {}
    plan = resolve(do_layers, target, input_path, options, layer_count=len(layers) if do_layers else None)
    if do_layers:
        check_layer_outputs(
            plan, input_path, [LayerEntry(layer_id, index) for layer_id, index in layers.items()]
        )
    plan.warnings[:0] = warnings
    return plan


__all__ = [
    "NO_LAYERS_FALLBACK_WARNING",
    "check_directory",
    "check_directory_content",
    "check_output_file",
    "check_layer_outputs",
    "resolve",
    "resolve_for_document",
]

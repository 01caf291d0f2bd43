"""
Command-line interface for svg2vector.
"""

import os
import sys

import click
from rich.console import Console
from rich.table import Table

from svg2vector import __version__
from svg2vector.exceptions import ExitCode, Svg2VectorError
from svg2vector.options import DEFAULT_TOOL_EXECUTABLE, TOOL_ENV_VAR, ExportSettings, ResolvedOptions
from svg2vector.orchestrator import ConversionOrchestrator
from svg2vector.targets import SvgTarget
from svg2vector.utils import configure_logging

console = Console()
err_console = Console(stderr=True)


def _print_warnings(warnings):
    for message in warnings:
        err_console.print(f"[bold yellow]! Warning:[/bold yellow] {message}", soft_wrap=True)


def _print_error(exc):
    err_console.print(f"[bold red]✗ Error:[/bold red] {exc.message}", soft_wrap=True)
    details = []
    if exc.path:
        details.append(f"path: {exc.path}")
    if exc.flag:
        details.append(f"see CLI option <{exc.flag}>")
    if details:
        err_console.print(f"[dim]{', '.join(details)}[/dim]", soft_wrap=True)


def _print_report(report):
    if report.simulated:
        console.print("\n[bold cyan]Simulated tool invocations:[/bold cyan]")
        for line in report.command_lines:
            console.print(f"  {line}", markup=False, highlight=False, soft_wrap=True)

    table = Table(title="Output files", show_header=False)
    table.add_column("Layer", style="cyan")
    table.add_column("File", style="green")
    steps = [step for step in report.steps if not step.intermediate]
    for step in steps:
        table.add_row(step.layer.id if step.layer else "-", str(step.output_path))
    console.print(table)

    verb = "Would write" if report.simulated else "Wrote"
    console.print(f"[bold green]✓ {verb} {len(report.outputs)} file(s)[/bold green]")
    for artifact in report.temp_artifacts:
        if not artifact.simulated and os.path.exists(artifact.path):
            console.print(f"[dim]Temporary artifact kept: {artifact.path}[/dim]")


@click.command(name="s2v-is", context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="s2v-is")
@click.option('--input-file', '-f', required=True, type=str,
              help='Input SVG or SVGZ file')
@click.option('--target', '-t', required=True,
              type=click.Choice([target.value for target in SvgTarget], case_sensitive=False),
              help='Conversion target format')
@click.option('--output-file', '-o', default=None, type=str,
              help='Output file name, extension is added from the target (single-file mode)')
@click.option('--output-directory', '-d', default=None, type=str,
              help='Output directory, current directory for layers by default')
@click.option('--create-directories', is_flag=True,
              help='Create missing output directories')
@click.option('--overwrite-existing', is_flag=True,
              help='Overwrite existing output files')
@click.option('--keep-tmp-artifacts', is_flag=True,
              help='Do not remove temporary files and directories')
@click.option('--simulate', is_flag=True,
              help='Show what would happen without writing anything or running the tool')
@click.option('--all-layers', 'switch_on_layers', is_flag=True,
              help='Switch on all layers before converting to a single file')
@click.option('--layers', '-l', is_flag=True,
              help='Write one output file per layer')
@click.option('--layers-if-exist', '-L', is_flag=True,
              help='Write one output file per layer if the input has layers')
@click.option('--layer-index', '-i', is_flag=True,
              help='Add the layer index to layer output file names')
@click.option('--layer-id', '-I', is_flag=True,
              help='Add the layer id to layer output file names')
@click.option('--no-basename', '-n', is_flag=True,
              help='Do not start layer output file names with a base name')
@click.option('--use-basename', '-B', default=None, type=str, metavar='NAME',
              help='Base name for layer output file names instead of the input file name')
@click.option('--text-as-shape', is_flag=True,
              help='Convert text to paths')
@click.option('--inkscape-exec', '-x', envvar=TOOL_ENV_VAR, default=DEFAULT_TOOL_EXECUTABLE,
              show_default=True, type=str,
              help=f'Inkscape executable, also read from ${TOOL_ENV_VAR}')
@click.option('--export-dpi', default=None, type=click.IntRange(min=1),
              help='Resolution for PNG export')
@click.option('--export-pdf-version', default=None, type=str,
              help='PDF version for PDF export, e.g. 1.4')
@click.option('--export-ps-level', default=None, type=click.IntRange(2, 3),
              help='PostScript level for PS export')
@click.option('--svg-first', '-g', is_flag=True,
              help='Convert to temporary SVG files first, then to the target')
@click.option('--manual-layers', '-m', is_flag=True,
              help='Split layers without the tool when converting to SVG first')
@click.option('--tool-timeout', default=None, type=click.FloatRange(min=0, min_open=True),
              help='Seconds to wait for each tool invocation')
@click.option('--verbose', '-v', is_flag=True, help='Show progress and detail messages')
@click.option('--quiet', '-q', is_flag=True, help='Suppress all console output')
def cli(input_file, target, output_file, output_directory, create_directories,
        overwrite_existing, keep_tmp_artifacts, simulate, switch_on_layers, layers,
        layers_if_exist, layer_index, layer_id, no_basename, use_basename, text_as_shape,
        inkscape_exec, export_dpi, export_pdf_version, export_ps_level, svg_first,
        manual_layers, tool_timeout, verbose, quiet):
    """
    s2v-is - Convert SVG files to vector or raster formats using Inkscape.

    Examples:

        s2v-is -f drawing.svg -t pdf

        s2v-is -f drawing.svg -t png -l -i -d out --create-directories

        s2v-is -f drawing.svg -t eps -l -I -g -m --simulate
    """
    console.quiet = quiet
    err_console.quiet = quiet
    configure_logging(verbose=verbose, quiet=quiet)

    options = ResolvedOptions(
        target=SvgTarget.from_name(target),
        input_file=input_file,
        output_file=output_file,
        output_directory=output_directory,
        create_directories=create_directories,
        overwrite_existing=overwrite_existing,
        keep_temp_artifacts=keep_tmp_artifacts,
        simulate=simulate,
        switch_on_layers=switch_on_layers,
        layers=layers,
        layers_if_exist=layers_if_exist,
        layer_index=layer_index,
        layer_id=layer_id,
        no_basename=no_basename,
        use_basename=use_basename,
        text_as_shape=text_as_shape,
        svg_first=svg_first,
        manual_layers=manual_layers,
        tool_executable=inkscape_exec,
        tool_timeout=tool_timeout,
        export=ExportSettings(dpi=export_dpi, pdf_version=export_pdf_version, ps_level=export_ps_level),
    )

    orchestrator = ConversionOrchestrator(options)
    try:
        report = orchestrator.run()
    finally:
        _print_warnings(orchestrator.warnings)
    _print_report(report)
    return report


def main(argv=None):
    """Run the command line with *argv* and return the process exit code."""
    try:
        result = cli.main(args=argv, prog_name="s2v-is", standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return int(ExitCode.USAGE)
    except click.exceptions.Abort:
        err_console.print("[bold red]✗ Aborted[/bold red]")
        return int(ExitCode.USAGE)
    except Svg2VectorError as exc:
        _print_error(exc)
        return int(exc.exit_code)
    except Exception as exc:
        err_console.print(f"[bold red]✗ Unexpected error:[/bold red] {exc}")
        return int(ExitCode.UNEXPECTED)

    # --help and --version end the run without a report.
    if isinstance(result, int):
        return int(ExitCode.USAGE)
    return int(ExitCode.SUCCESS)


def run():
    """Console script entry point."""
    sys.exit(main())


if __name__ == '__main__':
    run()

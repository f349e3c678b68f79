"""
m6asm - M6800 Assembler Command-Line Interface
==============================================

This module implements the command-line interface for the M6800 assembler.
It assembles a source file and prints, for every source line, the line
number, the source text and the generated output.

Usage Examples
--------------
Basic assembly:
    $ m6asm program.asm

With object text output:
    $ m6asm program.asm -o program.obj

Generate all output files:
    $ m6asm program.asm -o program.obj -l program.lst -s program.sym

Assemble at a given origin (until the source's first ORG):
    $ m6asm --origin $C000 program.asm

Verbose mode:
    $ m6asm -v program.asm
"""

import sys
from pathlib import Path
from typing import Optional

import click

from m6800_sdk import __version__
from m6800_sdk.assembler import Assembler
from m6800_sdk.cli.errors import ExitCode, handle_cli_exception, parse_address, setup_logging


def format_line_table(asm: Assembler) -> str:
    """Render the per-line result table: line number, source, output."""
    rows = []
    for line in asm.get_assembled_lines():
        source = line.source.text.rstrip()
        rows.append(f"{line.source.line_number:4d}  {source:<32s}  {line.text}".rstrip())
    return "\n".join(rows)


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the object text (one output line per source line)",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "--origin",
    callback=parse_address,
    default=None,
    help="Origin used until the source sets one with ORG ($C000, 0xC000 or 49152)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="m6asm")
def main(
    input_file: Path,
    output: Optional[Path],
    listing: Optional[Path],
    symbols: Optional[Path],
    origin: Optional[int],
    verbose: bool,
) -> None:
    """
    Assemble M6800 source code.

    INPUT_FILE is the assembly source file (.asm) to assemble.

    Every source line produces one output line: hex bytes, nothing, or an
    ERROR line. Assembly continues past failing lines; the exit status is 1
    if any line failed.

    \b
    Examples:
        m6asm prog.asm                   # Print the line table
        m6asm prog.asm -o prog.obj       # Write object text for m6sim
        m6asm prog.asm -l prog.lst       # Write a listing
    """
    setup_logging(verbose)

    asm = Assembler(verbose=verbose, origin=origin if origin is not None else 0)

    try:
        asm.assemble_file(input_file)

        click.echo(format_line_table(asm))

        if output:
            asm.write_object(output)
            if verbose:
                click.echo(f"Wrote object text to {output}")

        if listing:
            asm.write_listing(listing)
            if verbose:
                click.echo(f"Wrote listing to {listing}")

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        # Check for errors
        if asm.has_errors():
            click.echo(asm.get_error_report(), err=True)
            sys.exit(ExitCode.BUILD_ERROR)

        # Print summary
        if verbose:
            origin = asm.get_origin()
            code = asm.get_code()
            sym_count = len(asm.get_symbols())
            click.echo(f"Assembly complete: {len(code)} bytes, origin ${origin:04X}")
            click.echo(f"Defined {sym_count} symbols")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()

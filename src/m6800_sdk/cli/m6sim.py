"""
m6sim - M6800 Emulator Command-Line Interface
=============================================

Assembles a source file, loads the result into the emulator and runs it
until the program completes or the step ceiling is reached.
The source is assembled with the load address as its origin, so labels
in a program without ORG match the addresses it runs at.

The report has three parts:
- The step trace, one entry per step
- The final register values
- Every non-zero memory cell

Usage Examples
--------------
Run a program:
    $ m6sim program.asm

Allow more steps for a long loop:
    $ m6sim --max-steps 10000 program.asm

Load at a different address:
    $ m6sim --load-address $4000 program.asm

Environment
-----------
M6800_LOAD_ADDRESS and M6800_MAX_STEPS supply defaults; command-line
options take precedence.
"""

import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

import click

from m6800_sdk import __version__
from m6800_sdk.assembler import Assembler
from m6800_sdk.emulator import Emulator, EmulatorConfig, EmulatorStatus
from m6800_sdk.cli.errors import ExitCode, handle_cli_exception, parse_address, setup_logging


logger = logging.getLogger(__name__)


# =============================================================================
# Report Formatting
# =============================================================================

def format_registers(emu: Emulator) -> str:
    """Format the register file on one line."""
    return (
        f"A=${emu.a:02X} ({emu.a})  B=${emu.b:02X} ({emu.b})  "
        f"X=${emu.x:04X}  PC=${emu.pc:04X}  C={1 if emu.carry else 0}"
    )


def format_memory(emu: Emulator) -> str:
    """Format non-zero memory cells, one per line in address order."""
    cells = [
        f"  ${address:04X}: ${value:02X} ({value})"
        for address, value in sorted(emu.nonzero_memory().items())
    ]
    return "\n".join(cells) if cells else "  (all zero)"


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--load-address",
    callback=parse_address,
    default=None,
    help="Address of the first program line (default $C000)",
)
@click.option(
    "--max-steps",
    type=click.IntRange(min=0),
    default=None,
    help="Step ceiling before execution is halted (default 100)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="m6sim")
def main(
    input_file: Path,
    load_address: Optional[int],
    max_steps: Optional[int],
    verbose: bool,
) -> None:
    """
    Assemble and run an M6800 program.

    INPUT_FILE is the assembly source file (.asm) to run.

    The program is assembled first; if any line fails to assemble the
    error report is printed and nothing is run.

    \b
    Examples:
        m6sim prog.asm                     # Run with defaults
        m6sim --max-steps 5000 prog.asm    # Raise the step ceiling
    """
    setup_logging(verbose)

    try:
        config = EmulatorConfig.from_env()
        if load_address is not None:
            config = replace(config, load_address=load_address)
        if max_steps is not None:
            config = replace(config, max_steps=max_steps)

        # Program image addresses start at the load address
        asm = Assembler(verbose=verbose, origin=config.load_address)
        asm.assemble_file(input_file)
        if asm.has_errors():
            click.echo(asm.get_error_report(), err=True)
            sys.exit(ExitCode.BUILD_ERROR)

        if asm.get_origin() != config.load_address:
            logger.warning(
                f"Program origin ${asm.get_origin():04X} differs from load address "
                f"${config.load_address:04X}; absolute jumps may miss"
            )

        emu = Emulator(config)
        emu.load(asm.get_object_text())
        emu.run()

        click.echo("Trace:")
        for entry in emu.trace:
            click.echo(f"  {entry.step:4d}  {entry}")

        click.echo("")
        click.echo("Registers:")
        click.echo(f"  {format_registers(emu)}")

        click.echo("")
        click.echo("Memory:")
        click.echo(format_memory(emu))

        click.echo("")
        if emu.status == EmulatorStatus.HALTED:
            click.echo(f"Halted after {emu.step_count} steps")
        else:
            click.echo(f"Completed in {emu.step_count} steps")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Emulation")


if __name__ == "__main__":
    main()

"""
smprun - Simpletron Runner Command-Line Interface
=================================================

Loads a Simpletron program and executes it.

PROGRAM is either a compiled ``.sml`` file (one word per line) or a
``.smp`` source file, which is compiled in memory first.

Usage Examples
--------------
Run a compiled program:
    $ smprun add.sml

Compile and run in one go:
    $ smprun add.smp

Supply READ values up front instead of prompting:
    $ smprun -i 4 -i 7 sum.sml

Single-step, dumping registers after every instruction:
    $ smprun --step add.sml

Stop at instruction 3 and print memory when done:
    $ smprun -b 3 --dump add.sml
"""

from pathlib import Path
from typing import Optional

import click

from simpletron import __version__
from simpletron.compiler import SOURCE_SUFFIX
from simpletron.emulator import BreakReason, Simpletron, SimpletronConfig, input_from
from simpletron.cli.errors import handle_cli_exception, setup_logging


PAUSE_PROMPT = "Press any key to continue..."


def _prompt_input(address: int) -> str:
    try:
        return click.prompt("Enter value", type=str)
    except click.Abort:
        raise EOFError("no input") from None


def _echo_output(address: int, value: str) -> None:
    click.echo(f"\nData from Memory Address ({address}) : {value}\n")


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "program",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-m", "--memory-size",
    type=click.IntRange(min=1),
    default=None,
    help="Number of memory cells (default: $SIMPLETRON_MEMORY_SIZE or 100)",
)
@click.option(
    "-i", "--input", "inputs",
    multiple=True,
    help="Value for the next READ (can be repeated); prompts when omitted",
)
@click.option(
    "-b", "--break", "breakpoints",
    multiple=True,
    type=click.IntRange(min=0),
    help="Pause before executing the instruction at ADDRESS (can be repeated)",
)
@click.option(
    "--step",
    is_flag=True,
    help="Execute one instruction at a time, dumping registers after each",
)
@click.option(
    "--dump",
    is_flag=True,
    help="Print memory and registers when the program ends",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="smprun")
def main(
    program: Path,
    memory_size: Optional[int],
    inputs: tuple[str, ...],
    breakpoints: tuple[int, ...],
    step: bool,
    dump: bool,
    verbose: bool,
) -> None:
    """
    Run a Simpletron program.

    PROGRAM is a compiled program (.sml) or source file (.smp).

    \b
    Examples:
        smprun add.sml               # Run, prompting for READ values
        smprun -i 5 -i 3 add.sml     # Answer READs from the command line
        smprun --step add.sml        # Single-step
        smprun -b 4 --dump add.smp   # Compile, break at 04, dump at end
    """
    if verbose:
        setup_logging(verbose)

    try:
        if memory_size is not None:
            config = SimpletronConfig(memory_size=memory_size)
        else:
            config = SimpletronConfig.from_env()

        machine = Simpletron(
            config,
            input_source=input_from(inputs) if inputs else _prompt_input,
            output_sink=_echo_output,
        )

        if program.suffix == SOURCE_SUFFIX:
            count = machine.load_source(program.read_text(encoding="utf-8"), str(program))
        else:
            count = machine.load_file(program)
        if verbose:
            click.echo(f"Loaded {count} words from {program}")

        for address in breakpoints:
            machine.add_breakpoint(address)

        if step:
            event = _run_stepping(machine)
        else:
            event = _run_to_completion(machine)

        if event.reason is BreakReason.HALT:
            click.echo("Program terminated.")
        else:
            click.echo(f"{event}.")

        if dump:
            click.echo(machine.dump())

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Runtime")


def _run_stepping(machine: Simpletron):
    """Step until the program finishes, pausing after every instruction."""
    while True:
        event = machine.step()
        click.echo(machine.registers.format_registers())
        if event.halted:
            return event
        click.pause(PAUSE_PROMPT)


def _run_to_completion(machine: Simpletron):
    """Run, pausing with a full dump at every breakpoint."""
    while True:
        event = machine.run()
        if event.halted:
            return event
        click.echo(str(event))
        click.echo(machine.dump())
        click.pause(PAUSE_PROMPT)


if __name__ == "__main__":
    main()

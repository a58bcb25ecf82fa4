"""
smpc - Simpletron Compiler Command-Line Interface
=================================================

Compiles Simpletron source (``.smp``) into a machine-word program
(``.sml``) that smprun can execute.

Usage Examples
--------------
Basic compilation:
    $ smpc add.smp

With output file:
    $ smpc add.smp -o add.sml

Keep every expression, even unused ones:
    $ smpc --no-optimize add.smp

Verbose mode (statistics block and compiler trace):
    $ smpc -v add.smp
"""

from pathlib import Path
from typing import Optional

import click

from simpletron import __version__
from simpletron.compiler import (
    CompilerOptions,
    SimpletronCompiler,
    default_output_path,
    format_stats,
    write_output,
)
from simpletron.cli.errors import handle_cli_exception, setup_logging


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
    help="Output program file (default: input.sml)",
)
@click.option(
    "-O", "--optimize/--no-optimize",
    default=True,
    show_default=True,
    help="Drop expression declarations that nothing reads",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="smpc")
def main(
    input_file: Path,
    output: Optional[Path],
    optimize: bool,
    verbose: bool,
) -> None:
    """
    Compile Simpletron source code.

    INPUT_FILE is the source file (.smp) to compile.

    \b
    Examples:
        smpc add.smp                 # Outputs add.sml
        smpc add.smp -o out.sml      # Specify output file
        smpc -v add.smp              # Print statistics

    \b
    Source forms:
        > comment
        name=42                      # variable
        name=a+b-c                   # expression
        @label                       # branch target
        READ|WRITE|LOAD|STORE|ADD|SUBTRACT name
        BRANCH|BRANCHNEG|BRANCHZERO @label
        HALT
    """
    if verbose:
        setup_logging(verbose)

    if output is None:
        output = default_output_path(input_file)

    try:
        if verbose:
            click.echo(f"Compiling {input_file}...")

        compiler = SimpletronCompiler(CompilerOptions(optimize=optimize))
        result = compiler.compile_file(input_file)
        write_output(result, output)

        if verbose:
            click.echo(format_stats(result, output))
            if result.eliminated:
                click.echo(f"Eliminated: {', '.join(result.eliminated)}")

        click.echo(f"Compiled {input_file} -> {output}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Compilation")


if __name__ == "__main__":
    main()

"""
hackasm - Hack Assembler Command-Line Interface
===============================================

This module implements the command-line interface for the Hack assembler.

Usage Examples
--------------
Basic assembly:
    $ hackasm Prog.asm              # writes Prog.hack

With output and symbol files:
    $ hackasm Prog.asm -o prog.hack -s prog.sym

Full pipeline:
    $ hackvm Prog/ && hackasm Prog/Prog.asm
"""

import logging
from pathlib import Path
from typing import Optional

import click

from hackvm import __version__
from hackvm.cli.errors import handle_cli_exception
from hackvm.hack import HackAssembler


@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output .hack file (default: input.hack)",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the resolved symbol table",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="hackasm")
def main(
    input_file: Path,
    output: Optional[Path],
    symbols: Optional[Path],
    verbose: bool,
) -> None:
    """
    Assemble Hack assembly into Hack machine code.

    INPUT_FILE is the assembly source file (.asm). The output contains one
    16-character binary word per line.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    output_file = output if output is not None else input_file.with_suffix(".hack")

    try:
        if verbose:
            click.echo(f"Assembling {input_file}...")

        asm = HackAssembler()
        words = asm.assemble_file(input_file)
        asm.write_hack(output_file)

        if symbols:
            table = sorted(asm.get_symbols().items(), key=lambda item: (item[1], item[0]))
            lines = "".join(f"{value:5d}  {name}\n" for name, value in table)
            symbols.write_text(lines, encoding="utf-8")
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        if verbose:
            click.echo(f"Assembly complete: {len(words)} words")

        click.echo(f"Assembled {input_file} -> {output_file}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()

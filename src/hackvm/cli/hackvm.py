"""
hackvm - VM Translator Command-Line Interface
=============================================

This module implements the command-line interface for the VM translator.

Usage Examples
--------------
Translate a directory (one program, bootstrap on by default):
    $ hackvm FibonacciElement/

Translate a single file (no bootstrap by default):
    $ hackvm SimpleAdd.vm

Choose the output file and annotate the assembly with VM commands:
    $ hackvm Prog/ -o prog.asm --annotate

Force the bootstrap and pick a different entry function:
    $ hackvm Main.vm --bootstrap --entry Main.main
"""

import logging
from pathlib import Path
from typing import Optional

import click

from hackvm import __version__
from hackvm.cli.errors import handle_cli_exception
from hackvm.translator import TranslatorOptions, VMTranslator


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_path",
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output assembly file (default: X.asm for X.vm, D/D.asm for directory D)",
)
@click.option(
    "--bootstrap/--no-bootstrap",
    default=None,
    help="Emit SP=256 and a call to the entry function. "
         "Default: on for directories, off for single files.",
)
@click.option(
    "-e", "--entry",
    default=None,
    help="Entry function called by the bootstrap (default: Sys.init)",
)
@click.option(
    "-a", "--annotate",
    is_flag=True,
    help="Emit each VM command as a comment in the assembly",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="hackvm")
def main(
    input_path: Path,
    output: Optional[Path],
    bootstrap: Optional[bool],
    entry: Optional[str],
    annotate: bool,
    verbose: bool,
) -> None:
    """
    Translate VM code into Hack assembly.

    INPUT_PATH is a .vm file or a directory of .vm files. All modules of
    a directory are translated into a single assembly program.

    \b
    Examples:
        hackvm Prog/                 # Outputs Prog/Prog.asm
        hackvm Main.vm               # Outputs Main.asm
        hackvm Prog/ -o out.asm      # Specify output file
        hackvm Main.vm --bootstrap   # Force the bootstrap

    Environment variables HACKVM_BOOTSTRAP, HACKVM_ENTRY and
    HACKVM_ANNOTATE supply defaults; command-line flags take precedence.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        if input_path.is_file() and input_path.suffix != ".vm":
            raise click.BadParameter(
                f"Expected a .vm file or a directory, got '{input_path.name}'",
                param_hint="INPUT_PATH",
            )

        options = TranslatorOptions.from_env()
        if bootstrap is not None:
            options.bootstrap = bootstrap
        if entry is not None:
            options.entry_function = entry
        if annotate:
            options.annotate = True

        if verbose:
            click.echo(f"Translating {input_path}...")

        translator = VMTranslator(options)
        result = translator.translate_path(input_path)
        written = result.write(output)

        if verbose:
            click.echo(f"Modules: {', '.join(result.modules)}")
            click.echo(f"Wrote {len(result.assembly)} bytes to {written}")

        click.echo(f"Translated {input_path} -> {written}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Translation")


if __name__ == "__main__":
    main()

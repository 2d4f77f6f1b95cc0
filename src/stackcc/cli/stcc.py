"""
stcc - MiniC Compiler Command-Line Interface
============================================

This module implements the command-line interface for the MiniC compiler.
The source program is given as the single positional argument (or read
from a file with -f) and the assembly is written to stdout.

Usage Examples
--------------
Basic compilation:
    $ stcc 'main() { return 42; }' > ret.s
    $ cc -o ret ret.s

From a file, to a file:
    $ stcc -f fib.c -o fib.s

Inspect the parsed tree:
    $ stcc --ast 'main() { x = 1; return x; }'

Verbose mode (debug logging on stderr):
    $ stcc -v -f fib.c
"""

import logging
from pathlib import Path
from typing import Optional

import click

from stackcc import __version__
from stackcc.minic import Compiler, CompilerOptions
from stackcc.cli.errors import handle_cli_exception

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
        force=True,
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument("source", required=False)
@click.option(
    "-f", "--file", "source_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read the program from a file instead of the SOURCE argument",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output assembly file (default: stdout)",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print AST and exit (for debugging)",
)
@click.option(
    "--comments",
    is_flag=True,
    help="Annotate the generated assembly with comments",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="stcc")
def main(
    source: Optional[str],
    source_file: Optional[Path],
    output: Optional[Path],
    ast: bool,
    comments: bool,
    verbose: bool,
) -> None:
    """
    Compile a MiniC program to x86-64 assembly.

    SOURCE is the program text. The assembly (GNU as, Intel syntax) is
    written to stdout and can be assembled with the system C compiler.

    \b
    Examples:
        stcc 'main() { return 42; }'        # Assembly on stdout
        stcc -f prog.c -o prog.s            # File in, file out
        stcc --ast 'main() { return 1; }'   # Dump the parsed tree

    \b
    Language:
        - 64-bit integers, variables declared by first use
        - + - * / == != < <= > >= =
        - if/else, while, for, return, blocks
        - Functions with up to six parameters
    """
    if source is None and source_file is None:
        raise click.UsageError("missing SOURCE argument (or use -f FILE)")
    if source is not None and source_file is not None:
        raise click.UsageError("give either SOURCE or -f FILE, not both")

    setup_logging(verbose)

    options = CompilerOptions(emit_comments=comments)
    compiler = Compiler(options)

    try:
        if source_file is not None:
            logger.debug("compiling %s", source_file)
            result = compiler.compile_file(str(source_file))
        else:
            result = compiler.compile_source(source, "<input>")

        if ast:
            from stackcc.minic.ast import ASTPrinter
            printer = ASTPrinter()
            click.echo(printer.print(result.ast))
            return

        if output is not None:
            output.write_text(result.assembly)
            logger.debug("wrote %d bytes to %s", len(result.assembly), output)
        else:
            click.echo(result.assembly, nl=False)

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()

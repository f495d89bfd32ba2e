"""
Command-line entry point for exsub.

Reads one tree per input file (or NEWICK from standard input), runs the
exhaustive subdivision and prints the delimited species as a NEWICK string.
"""

import logging
import re
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from exsub import __version__
from exsub._delimitation import Delimitation
from exsub._io import read_trees


app = typer.Typer(
    name="exsub",
    help=(
        "Exhaustive subdivision analysis of GCPSR sensu Brankovics et al. 2017. "
        "Reads tree files produced by the concordance and non-discordance "
        "analysis, where the support value of each clade is the number of "
        "single-locus trees supporting it, and prints the delimited "
        "phylogenetic species as a NEWICK tree."
    ),
    add_completion=False,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

console = Console(stderr=True)

_LEGACY_COUNT_RE = re.compile(r"^-count=(\d+)$")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"exsub version {__version__}")
        raise typer.Exit


def _configure_logging(verbose: bool, quiet: bool) -> None:
    if verbose:
        level = logging.INFO
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")
    logging.getLogger("exsub").setLevel(level)


@app.command()
def run(
    trees: List[str] = typer.Argument(
        ...,
        help=(
            "Tree files in NEWICK (.nwk) or NEXUS (.nex.<run>.tre) format, "
            "or '-' to read a NEWICK tree from standard input."
        ),
        show_default=False,
    ),
    count: int = typer.Option(
        1,
        "--count",
        "-c",
        min=0,
        help=(
            "Clades supported by fewer than this many majority-rule consensus "
            "trees (the support value in the tree file) are not considered "
            "phylogenetic species."
        ),
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        dir_okay=False,
        help="Write the tree to this file instead of standard output.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", help="Log progress to standard error."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only report errors."
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    Delimit phylogenetic species by exhaustive subdivision.

    Every taxon is assigned to the smallest clade that contains it and has
    at least COUNT support; clades nested inside a chosen clade are merged
    into it.
    """
    _configure_logging(verbose, quiet)

    try:
        delimitation = Delimitation(read_trees(trees), min_support=count)
        newick = delimitation.newick()
        if output is not None:
            output.write_text(newick + "\n")
    except (OSError, ValueError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from None

    if output is None:
        typer.echo(newick)
    elif verbose:
        console.print(f"Wrote {escape(str(output))}")


def normalize_legacy_args(args: List[str]) -> List[str]:
    """
    Rewrite the original single-dash spellings into current options.

    ``-count=3`` becomes ``--count=3`` and ``-help`` becomes ``--help``.
    """
    normalized = []
    for arg in args:
        match = _LEGACY_COUNT_RE.match(arg)
        if match:
            normalized.append(f"--count={match.group(1)}")
        elif arg == "-help":
            normalized.append("--help")
        else:
            normalized.append(arg)
    return normalized


def main(argv: Optional[List[str]] = None) -> None:
    """Console-script entry point."""
    args = sys.argv[1:] if argv is None else argv
    app(args=normalize_legacy_args(list(args)), prog_name="exsub")


if __name__ == "__main__":
    main()

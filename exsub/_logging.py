"""
_logging.py
===========
Logging functions for exsub.

All functions in this module have NO side effects except logging. They take
computed data as parameters and format/emit log messages.

This separation ensures:
- Logging can be easily disabled/mocked in tests
- Computation is separate from presentation
- Clear boundaries between analysis and reporting
"""

import logging
from typing import List, Tuple


logger = logging.getLogger(__name__)

# Longest taxon list written out in full before it is abbreviated.
_MAX_LISTED = 10


def _format_taxa(taxa: List[str]) -> str:
    if len(taxa) <= _MAX_LISTED:
        return ", ".join(taxa)
    return ", ".join(taxa[:_MAX_LISTED]) + f", ... ({len(taxa)} total)"


# ============================================================================ #
# Input Logging (called while trees are read)
# ============================================================================ #


def log_tree_read(source: str, fmt: str, n_leaves: int, n_internal: int) -> None:
    """
    Log one tree read from an input source at INFO level.

    Parameters
    ----------
    source : str
        File name, or '-' for standard input.
    fmt : str
        'newick' or 'nexus'.
    n_leaves, n_internal : int
        Leaf and internal node counts of the parsed tree.
    """
    label = "<stdin>" if source == "-" else source
    logger.info(
        "Read %s tree from %s: %d taxa, %d internal nodes",
        fmt,
        label,
        n_leaves,
        n_internal,
    )


def log_extra_trees_ignored(source: str, n_extra: int) -> None:
    """Warn that only the first tree statement of *source* is used."""
    logger.warning(
        "%s holds %d more tree(s) after the first; only the first tree is used.",
        source,
        n_extra,
    )


# ============================================================================ #
# Collection Logging (called once per collected tree)
# ============================================================================ #


def log_tree_collected(
    tree_index: int, n_candidates: int, n_new: int, n_clades: int
) -> None:
    """
    Log the clades contributed by one tree.

    Parameters
    ----------
    tree_index : int
        Zero-based position of the tree in the input forest.
    n_candidates : int
        Internal nodes whose leaf-set was recorded (size >= 2).
    n_new : int
        How many of those were first observations.
    n_clades : int
        Distinct clades in the table after this tree.
    """
    logger.info(
        "Tree %d: %d candidate clades (%d new, %d already seen); "
        "%d distinct clades so far",
        tree_index,
        n_candidates,
        n_new,
        n_candidates - n_new,
        n_clades,
    )


def log_collection_statistics(
    n_trees: int, n_taxa: int, n_clades: int, total_support: int
) -> None:
    """
    Log collection statistics once all trees have been consumed.

    Parameters
    ----------
    n_trees : int
        Number of trees collected.
    n_taxa : int
        Size of the taxon universe.
    n_clades : int
        Number of distinct clades.
    total_support : int
        Sum of support over all clades.
    """
    logger.info(
        "Collection built: %d trees, %d taxa, %d distinct clades",
        n_trees,
        n_taxa,
        n_clades,
    )
    if n_clades > 0:
        logger.info(
            "Support: %d total, %.1f per clade (avg)",
            total_support,
            total_support / n_clades,
        )


def log_empty_universe() -> None:
    logger.warning("No taxa were collected from the input trees; output is empty.")


# ============================================================================ #
# Subdivision Logging
# ============================================================================ #


def log_subdivision_summary(
    n_candidates: int,
    n_retained: int,
    n_rejected: int,
    unassigned: List[str],
    min_support: int,
) -> None:
    """
    Log the outcome of one exhaustive subdivision run.

    Parameters
    ----------
    n_candidates : int
        Clades in the working set before subdivision.
    n_retained : int
        Clades left in the working set afterwards.
    n_rejected : int
        Selections discarded for support below *min_support*.
    unassigned : List[str]
        Taxa that no candidate clade contained when their turn came.
    min_support : int
        Threshold used.
    """
    logger.info(
        "Subdivision (min support %d): %d of %d clades retained, "
        "%d under-supported selections discarded",
        min_support,
        n_retained,
        n_candidates,
        n_rejected,
    )
    if unassigned:
        logger.info(
            "%d taxa belong to no retained clade: %s",
            len(unassigned),
            _format_taxa(unassigned),
        )


def log_overlapping_clades(overlaps: List[Tuple[tuple, tuple]]) -> None:
    """
    Warn about retained clades that share taxa without being nested.

    Such clades come from incompatible input trees; the rendered tree lists
    the shared taxa under both groupings.
    """
    if not overlaps:
        return
    logger.warning(
        "%d pair(s) of retained clades overlap without nesting; "
        "shared taxa will appear more than once in the output.",
        len(overlaps),
    )
    for first, second in overlaps:
        logger.warning("  (%s) <-> (%s)", _format_taxa(list(first)), _format_taxa(list(second)))


def log_species_count(n_species: int, n_loose: int) -> None:
    logger.info(
        "Delimited %d top-level species groups and %d ungrouped taxa",
        n_species,
        n_loose,
    )

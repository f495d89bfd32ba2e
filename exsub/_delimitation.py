"""
_delimitation.py
================
Driver that threads one clade table through collection, subdivision and
rendering.

Public API
----------
  Delimitation(trees=(), min_support=1)
      Constructor.  Accepts Tree objects or NEWICK strings and collects each
      one, in order, into a fresh CladeTable.

  .add_tree(tree)
  .species_ids           retained clade ids (computed on first access)
  .species()             member tuples of the top-level species groups
  .loose_taxa()          taxa outside every retained clade
  .newick()              the rendered output tree, '(...);'

Logging
-------
Uses the package loggers:

  logging.getLogger('exsub._logging')
      INFO level:    per-tree clade counts, collection statistics,
                     subdivision summary, species count.
      WARNING level: empty input, overlapping retained clades.

  logging.getLogger('exsub._subdivision')
      DEBUG level:   every per-taxon selection and rejection.

  logging.getLogger('exsub._delimitation')
      DEBUG level:   a tree added after the result was computed.
"""

import logging
from typing import Iterable, List, Union

from exsub._tree import Tree
from exsub._clades import CladeTable
from exsub._subdivision import subdivide, overlapping_clades
from exsub._render import group_clades, to_newick
from exsub._logging import (
    log_collection_statistics,
    log_empty_universe,
    log_overlapping_clades,
    log_species_count,
)


logger = logging.getLogger(__name__)


class Delimitation:
    """
    Exhaustive subdivision of the taxa of an input forest.

    Parameters
    ----------
    trees : iterable of Tree or str
        Input trees in order.  Strings are parsed as NEWICK.
    min_support : int, default 1
        Minimum support for a clade to be kept as a phylogenetic species.

    Attributes
    ----------
    table       : CladeTable   clades, support and universe
    min_support : int

    Examples
    --------
    >>> d = Delimitation(['((A,B)2,(C,D)1)3;'], min_support=2)
    >>> d.newick()
    '((A,B,C,D)3);'
    >>> d.species()
    [('A', 'B', 'C', 'D')]
    """

    def __init__(
        self, trees: Iterable[Union[Tree, str]] = (), min_support: int = 1
    ) -> None:
        if isinstance(trees, (str, Tree)):
            raise TypeError(
                "trees must be an iterable of Tree objects or NEWICK strings, "
                f"got a single {type(trees).__name__}"
            )
        if min_support < 0:
            raise ValueError(
                f"min_support must be non-negative, got {min_support}."
            )
        self.min_support = min_support
        self.table = CladeTable()
        self._species_ids = None

        for tree in trees:
            self.add_tree(tree)

    @property
    def n_trees(self) -> int:
        return self.table.n_trees

    @property
    def universe(self) -> set:
        return self.table.universe

    def add_tree(self, tree: Union[Tree, str]) -> None:
        """Collect one more tree; any earlier result is discarded."""
        if isinstance(tree, str):
            tree = Tree(tree)
        elif not isinstance(tree, Tree):
            raise TypeError(
                f"Expected a Tree or NEWICK string, got {type(tree).__name__}"
            )
        self.table.collect(tree)
        if self._species_ids is not None:
            logger.debug(
                "Tree %d added after subdivision; discarding the previous result",
                self.n_trees - 1,
            )
            self._species_ids = None

    @property
    def species_ids(self) -> List[int]:
        """Sorted ids of the clades kept by exhaustive subdivision."""
        if self._species_ids is None:
            self._species_ids = self._run()
        return sorted(self._species_ids)

    def species(self) -> List[tuple]:
        """
        Member tuples of the top-level species groups, largest first.

        Clades nested inside a larger retained clade are not listed
        separately; they appear as subgroups in ``newick()``.
        """
        return [
            self.table.members[super_id]
            for super_id, _ in group_clades(self.species_ids, self.table)
        ]

    def loose_taxa(self) -> List[str]:
        """Sorted taxa that belong to no retained clade."""
        grouped = set()
        for clade_id in self.species_ids:
            grouped.update(self.table.members[clade_id])
        return sorted(self.universe - grouped)

    def newick(self) -> str:
        """Render the delimited species as ``(<items>);``."""
        return to_newick(self.universe, self.species_ids, self.table)

    def __repr__(self) -> str:
        return (
            f"Delimitation(n_trees={self.n_trees}, n_taxa={len(self.universe)}, "
            f"n_clades={len(self.table)}, min_support={self.min_support})"
        )

    # ================================================================== #
    # Private methods                                                      #
    # ================================================================== #

    def _run(self) -> set:
        log_collection_statistics(
            self.n_trees,
            len(self.universe),
            len(self.table),
            self.table.total_support(),
        )
        if not self.universe:
            log_empty_universe()

        retained = subdivide(
            self.universe, self.table.clade_ids(), self.table, self.min_support
        )

        log_overlapping_clades(overlapping_clades(retained, self.table))
        n_groups = len(group_clades(retained, self.table))
        grouped = set()
        for clade_id in retained:
            grouped.update(self.table.members[clade_id])
        log_species_count(n_groups, len(self.universe - grouped))
        return retained

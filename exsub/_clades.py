"""
_clades.py
==========
The clade table: every distinct leaf-set observed across the input trees,
with the support it has accumulated.

Public API
----------
  CladeTable()
      Empty table.

  .collect(tree)            fold one Tree into the table
  .add(members, support)    insert-or-accumulate a single clade
  .find(members)            id of an identical clade, or None
  .clade_ids()              all ids, ascending

Clade ids
---------
Ids are integers handed out in order of first observation, starting at 1.
Collecting the same forest in the same order therefore always produces the
same ids, which the subdivision engine and the renderer use to break ties.

Support
-------
``support[cid]`` is the sum of the labels of every internal node, across
every collected tree, whose descendant leaf-set equals ``members[cid]``.
Collection is deliberately not idempotent: collecting a tree twice counts
its votes twice.
"""

import logging
from typing import Iterable, List, Optional

import numpy as np

from exsub._tree import Tree
from exsub._utils import clean_taxon_id, same_members
from exsub._logging import log_tree_collected


logger = logging.getLogger(__name__)


class CladeTable:
    """
    Append-only table of clades and their support, plus the taxon universe.

    Attributes
    ----------
    members  : dict[int, tuple[str, ...]]   sorted member taxa per clade id
    support  : dict[int, int]               accumulated support per clade id
    universe : set[str]                     every taxon seen so far
    n_trees  : int                          trees collected so far
    """

    def __init__(self) -> None:
        self.members = {}
        self.support = {}
        self.universe = set()
        self.n_trees = 0
        self._next_id = 1
        # Clade ids bucketed by member count; identical clades share a size.
        self._by_size = {}

    def __len__(self) -> int:
        return len(self.members)

    def __contains__(self, clade_id) -> bool:
        return clade_id in self.members

    def __repr__(self) -> str:
        return (
            f"CladeTable(n_clades={len(self)}, n_taxa={len(self.universe)}, "
            f"n_trees={self.n_trees})"
        )

    def clade_ids(self) -> List[int]:
        return sorted(self.members)

    def total_support(self) -> int:
        return sum(self.support.values())

    def find(self, members: Iterable[str]) -> Optional[int]:
        """
        Return the id of the clade whose members are exactly *members*, or
        None if no such clade has been recorded.
        """
        wanted = frozenset(members)
        for clade_id in self._by_size.get(len(wanted), ()):
            if same_members(wanted, frozenset(self.members[clade_id])):
                return clade_id
        return None

    def add(self, members: Iterable[str], support: int) -> int:
        """
        Insert a clade or add *support* to the identical clade already held.

        Parameters
        ----------
        members : iterable of str
            Taxa of the clade; at least two distinct names.
        support : int
            Non-negative vote count contributed by this observation.

        Returns
        -------
        int
            The clade id (new or existing).

        Raises
        ------
        ValueError
            If *members* has fewer than two distinct taxa, or *support* is
            negative or not an integer.
        """
        if isinstance(support, (bool, np.bool_)) or not isinstance(
            support, (int, np.integer)
        ):
            raise ValueError(f"Support must be an integer, got {support!r}.")
        support = int(support)
        if support < 0:
            raise ValueError(f"Support must be non-negative, got {support}.")

        taxa = tuple(sorted({clean_taxon_id(name) for name in members}))
        if len(taxa) < 2:
            raise ValueError(
                f"A clade needs at least two taxa, got {len(taxa)}."
            )

        clade_id = self.find(taxa)
        if clade_id is not None:
            self.support[clade_id] += support
            return clade_id

        clade_id = self._next_id
        self._next_id += 1
        self.members[clade_id] = taxa
        self.support[clade_id] = support
        self._by_size.setdefault(len(taxa), []).append(clade_id)
        self.universe.update(taxa)
        return clade_id

    def collect(self, tree: Tree) -> List[int]:
        """
        Fold every internal node of *tree* into the table.

        Leaf names join the universe.  Each internal node whose leaf-set
        has at least two taxa adds its support label to the matching clade,
        creating the clade on first sight.  An unlabelled root carries no
        vote and is skipped.

        Returns
        -------
        list[int]
            Clade ids touched, in post-order of the tree's nodes.
        """
        self.universe.update(clean_taxon_id(name) for name in tree.taxa)

        n_before = len(self)
        touched = []
        for node, taxa in tree.leaf_sets().items():
            if len(taxa) < 2:
                continue
            label = int(tree.support[node])
            if label < 0:
                logger.debug(
                    "Skipping unlabelled node %d over %d taxa", node, len(taxa)
                )
                continue
            touched.append(self.add(taxa, label))

        log_tree_collected(self.n_trees, len(touched), len(self) - n_before, len(self))
        self.n_trees += 1
        return touched

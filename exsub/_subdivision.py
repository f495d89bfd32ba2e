"""
_subdivision.py
===============
Exhaustive subdivision: classify every taxon into the smallest sufficiently
supported clade that contains it, discarding the clades nested inside each
selection.

Ordering
--------
Taxa are visited in lexicographic order.  Among the clades containing a
taxon the one with the fewest members is selected; equal sizes go to the
lower clade id (first observed).  Both orders are fixed so that a run is
reproducible for a given input forest.
"""

import logging
from itertools import combinations
from typing import Iterable, List, Set, Tuple

from exsub._clades import CladeTable
from exsub._utils import is_subset
from exsub._logging import log_subdivision_summary


logger = logging.getLogger(__name__)


def subdivide(
    universe: Iterable[str],
    candidate_ids: Iterable[int],
    table: CladeTable,
    min_support: int = 1,
) -> Set[int]:
    """
    Return the clade ids that delimit the final species.

    For each taxon, in sorted order:

    1. Restrict the working set to clades containing the taxon; if there
       are none the taxon stays ungrouped.
    2. Select the smallest of them.
    3. Drop every other clade nested inside the selection, whatever its
       support.
    4. If the selection has support below *min_support* and the working
       set holds more than one clade, drop the selection too and go back
       to step 1 for the same taxon.  A last remaining clade is kept
       regardless of support.

    Parameters
    ----------
    universe : iterable of str
        Every taxon to classify.
    candidate_ids : iterable of int
        Clade ids to start from; not modified.
    table : CladeTable
        Source of members and support; not modified.
    min_support : int, default 1
        Clades with support strictly below this are walked past.

    Returns
    -------
    set[int]
        The working set once every taxon has been processed.

    Raises
    ------
    ValueError
        If *min_support* is negative.
    KeyError
        If a candidate id is not in *table*.

    Examples
    --------
    >>> table = CladeTable()
    >>> ab = table.add(['A', 'B'], 2)
    >>> abc = table.add(['A', 'B', 'C'], 1)
    >>> sorted(subdivide(['A', 'B', 'C', 'D'], table.clade_ids(), table, 2))
    [2]
    """
    if min_support < 0:
        raise ValueError(f"min_support must be non-negative, got {min_support}.")

    ids = set(candidate_ids)
    members = {clade_id: frozenset(table.members[clade_id]) for clade_id in ids}
    n_candidates = len(ids)
    n_rejected = 0
    unassigned = []

    for taxon in sorted(universe):
        while True:
            containing = [cid for cid in ids if taxon in members[cid]]
            if not containing:
                unassigned.append(taxon)
                break

            now = min(containing, key=lambda cid: (len(members[cid]), cid))

            nested = [
                cid for cid in ids
                if cid != now and is_subset(members[cid], members[now])
            ]
            ids.difference_update(nested)

            if table.support[now] < min_support and len(ids) > 1:
                logger.debug(
                    "%s: clade %d (%d taxa) has support %d < %d; widening",
                    taxon,
                    now,
                    len(members[now]),
                    table.support[now],
                    min_support,
                )
                ids.discard(now)
                n_rejected += 1
                continue

            logger.debug(
                "%s: clade %d (%d taxa, support %d) selected, %d nested dropped",
                taxon,
                now,
                len(members[now]),
                table.support[now],
                len(nested),
            )
            break

    log_subdivision_summary(n_candidates, len(ids), n_rejected, unassigned, min_support)
    return ids


def overlapping_clades(
    clade_ids: Iterable[int], table: CladeTable
) -> List[Tuple[tuple, tuple]]:
    """
    Return member tuples of clade pairs that share taxa but are not nested.

    Pairs are listed in ascending id order.
    """
    overlaps = []
    for a, b in combinations(sorted(clade_ids), 2):
        first = frozenset(table.members[a])
        second = frozenset(table.members[b])
        if first & second and not (
            is_subset(first, second) or is_subset(second, first)
        ):
            overlaps.append((table.members[a], table.members[b]))
    return overlaps

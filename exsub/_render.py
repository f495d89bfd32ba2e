"""
_render.py
==========
Rebuild a nested NEWICK-style string from the clades kept by subdivision.

Output grammar
--------------
  tree  := '(' items ');'
  items := item (',' item)*
  item  := TAXON | '(' items ')' SUPPORT

Groups are written largest first (ties: lower clade id first), followed by
the loose taxa of that level in sorted order.  The string is a derived
summary, not a round-trip of any input tree.
"""

from typing import Iterable, List, Set, Tuple

from exsub._clades import CladeTable
from exsub._utils import is_subset


def render(
    loose_taxa: Iterable[str], retained_ids: Iterable[int], table: CladeTable
) -> str:
    """
    Render *retained_ids* and *loose_taxa* as a comma-separated item list.

    With no retained ids the sorted loose taxa are joined directly.
    Otherwise the clades are grouped under their largest enclosing clade
    (see ``group_clades``); each top group is rendered recursively over its
    own members and children, wrapped in brackets and followed by its
    support, and the taxa not covered by any top group are appended.

    Neither *loose_taxa* nor *retained_ids* is modified.

    Examples
    --------
    >>> table = CladeTable()
    >>> abc = table.add(['A', 'B', 'C'], 1)
    >>> render(['A', 'B', 'C', 'D'], {abc}, table)
    '(A,B,C)1,D'
    """
    loose = set(loose_taxa)
    ids = set(retained_ids)
    if not ids:
        return ",".join(sorted(loose))

    groups = group_clades(ids, table)
    for super_id, _ in groups:
        loose.difference_update(table.members[super_id])

    items = []
    for super_id, child_ids in groups:
        inner = render(table.members[super_id], child_ids, table)
        items.append(f"({inner}){table.support[super_id]}")
    items.extend(sorted(loose))
    return ",".join(items)


def group_clades(
    clade_ids: Iterable[int], table: CladeTable
) -> List[Tuple[int, Set[int]]]:
    """
    Partition *clade_ids* into top-level groups with their nested clades.

    Repeatedly takes the largest remaining clade as a group and claims
    every remaining clade that is a subset of it.  Only one level is
    resolved here; a group's children are grouped again when the group is
    rendered.

    Returns
    -------
    list of (group id, set of child ids), largest group first.
    """
    ids = set(clade_ids)
    groups = []
    while ids:
        now = min(ids, key=lambda cid: (-len(table.members[cid]), cid))
        ids.discard(now)
        children = {
            cid for cid in ids
            if is_subset(table.members[cid], table.members[now])
        }
        ids.difference_update(children)
        groups.append((now, children))
    return groups


def to_newick(
    universe: Iterable[str], retained_ids: Iterable[int], table: CladeTable
) -> str:
    """
    Render the complete output tree, ``(<items>);``.

    >>> to_newick([], set(), CladeTable())
    '();'
    """
    return f"({render(universe, retained_ids, table)});"

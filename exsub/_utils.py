"""
_utils.py
=========
General-purpose utility functions for exsub.

These are standalone functions that don't depend on the main classes
and are shared by the collector, the subdivision engine and the renderer.
"""

from typing import AbstractSet, Iterable, TypeVar


T = TypeVar('T')


def is_subset(set_a: Iterable[T], set_b: Iterable[T]) -> bool:
    """
    Return True if every element of *set_a* is also an element of *set_b*.

    Equal sets satisfy the relation in both directions, so two collections
    are identical as sets exactly when they have the same number of distinct
    elements and ``is_subset`` holds one way.

    Parameters
    ----------
    set_a, set_b : iterable of hashable
        Taxon collections to compare. Sets, frozensets, tuples and lists are
        all accepted; only membership matters, not order.

    Returns
    -------
    bool

    Raises
    ------
    TypeError
        If either argument is None.

    Examples
    --------
    >>> is_subset({'A', 'B'}, {'A', 'B', 'C'})
    True

    >>> is_subset(('A', 'B'), ('B', 'A'))
    True

    >>> is_subset({'A', 'D'}, {'A', 'B', 'C'})
    False

    >>> is_subset(set(), {'A'})
    True
    """
    if set_a is None or set_b is None:
        raise TypeError("is_subset() requires two collections, got None.")
    if not isinstance(set_b, (set, frozenset)):
        set_b = set(set_b)
    for item in set_a:
        if item not in set_b:
            return False
    return True


def same_members(set_a: AbstractSet[T], set_b: AbstractSet[T]) -> bool:
    """
    Return True if *set_a* and *set_b* hold exactly the same elements.

    Tested as equal cardinality plus containment, which for collections of
    distinct elements is full set equality.
    """
    return len(set_a) == len(set_b) and is_subset(set_a, set_b)


def clean_taxon_id(name: str) -> str:
    """
    Normalise a leaf identifier at the ingestion boundary.

    Trailing whitespace is insignificant; ``'X'`` and ``'X '`` name the
    same taxon.

    >>> clean_taxon_id('strain_7 \\t')
    'strain_7'
    """
    return name.rstrip()


def format_newick(newick: str) -> str:
    """
    Format a NEWICK string for consistent representation.

    Ensures the NEWICK string:
    - Ends with a semicolon
    - Has no leading/trailing whitespace

    Parameters
    ----------
    newick : str
        NEWICK string to format.

    Returns
    -------
    str
        Formatted NEWICK string.

    Examples
    --------
    >>> format_newick('((A,B)2,C)')
    '((A,B)2,C);'

    >>> format_newick('  ((A,B)2);  ')
    '((A,B)2);'
    """
    newick = newick.strip()
    if not newick.endswith(';'):
        newick += ';'
    return newick

"""
exsub
=====

Exhaustive subdivision of phylogenetic species (GCPSR sensu Brankovics
et al. 2017).

Given rooted trees whose internal nodes carry the number of single-locus
trees supporting each clade, *exsub* collects every distinct clade with its
summed support, assigns each taxon to the smallest sufficiently supported
clade that contains it, and renders the surviving clades as a nested tree.

Main Classes
------------
Delimitation : Collect trees and run the full analysis
CladeTable : Distinct clades, their support and the taxon universe
Tree : Single rooted tree with NEWICK parsing and leaf-set queries

Core Functions
--------------
subdivide : Exhaustive subdivision over a clade table
render : Nested item list for a set of retained clades
to_newick : Complete output tree, '(...);'

Input
-----
read_trees : First tree of each NEWICK / NEXUS file (or '-' for stdin)
read_newick, read_nexus : Parse a single open handle
detect_format : Tree format from a file name

Context Managers
----------------
quiet : Suppress exsub logging
suppress_logger : Suppress a specific logger

Utilities
---------
is_subset : Subset test over taxon collections
clean_taxon_id : Strip insignificant trailing whitespace from a taxon name
format_newick : Format NEWICK strings consistently

Examples
--------
Basic usage:

>>> from exsub import Delimitation
>>> trees = ['((A,B)2,(C,D)2);', '((A,B)1,C,D);']
>>> d = Delimitation(trees, min_support=2)
>>> d.newick()
'((A,B)3,(C,D)2);'

Step by step:

>>> from exsub import CladeTable, Tree, subdivide, to_newick
>>> table = CladeTable()
>>> table.collect(Tree('(((A,B)2,C)1,D);'))
[1, 2]
>>> retained = subdivide(table.universe, table.clade_ids(), table, min_support=2)
>>> to_newick(table.universe, retained, table)
'((A,B,C)1,D);'
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Main classes
from ._tree import Tree, MalformedTreeError
from ._clades import CladeTable
from ._delimitation import Delimitation

# Core algorithms
from ._subdivision import subdivide, overlapping_clades
from ._render import render, group_clades, to_newick

# Input
from ._io import read_trees, read_tree, read_newick, read_nexus, detect_format

# Context managers
from ._context import suppress_logger, quiet

# Utilities
from ._utils import is_subset, clean_taxon_id, format_newick

# Public API
__all__ = [
    # Main classes
    "Delimitation",
    "CladeTable",
    "Tree",
    "MalformedTreeError",
    # Core algorithms
    "subdivide",
    "overlapping_clades",
    "render",
    "group_clades",
    "to_newick",
    # Input
    "read_trees",
    "read_tree",
    "read_newick",
    "read_nexus",
    "detect_format",
    # Context managers
    "suppress_logger",
    "quiet",
    # Utilities
    "is_subset",
    "clean_taxon_id",
    "format_newick",
    # Version info
    "__version__",
]

"""
_tree.py
========
A single rooted phylogenetic tree represented as a set of parallel numpy
arrays, parsed from NEWICK with integer support labels on internal nodes.

Public API
----------
  Tree(newick_string)
      Constructor.  Parses the NEWICK string and builds all data structures.

  .is_leaf(node)
  .child_nodes(node)
  .internal_nodes()
  .leaf_set(node)
  .leaf_sets()
  .relabel(mapping)

Support values
--------------
Internal node labels are read as concordance counts: the number of
single-locus trees that agree on the grouping below the node.  They must be
non-negative integers (``3`` or ``3.0``).  Every non-root internal node must
carry one; the root may be unlabelled, in which case ``support[root]`` holds
the ``-1`` sentinel and the root is not a candidate clade.

Polytomies
----------
Unlike a strictly bifurcating layout, children are stored in CSR form
(``child_offsets`` / ``children``), so multifurcating and unary nodes are
kept exactly as written.  Each internal node contributes one leaf-set, no
matter how many children it has.
"""

import logging

import numpy as np

from exsub._utils import clean_taxon_id


logger = logging.getLogger(__name__)

# Characters that end an unquoted label or a branch length.
_DELIMITERS = ":,);["


class MalformedTreeError(ValueError):
    """Raised when a tree string cannot be read as a rooted, labelled tree."""


class Tree:
    """
    A rooted phylogenetic tree with arbitrary node degree.

    Attributes (all read-only after construction)
    ----------------------------------------------
    n_nodes   : int        Total number of nodes.
    n_leaves  : int        Number of leaf (taxon) nodes.
    root      : int        Node ID of the root (always n_nodes - 1).
    names     : list[str]  Taxon name for each node; '' for internal nodes.
    taxa      : list[str]  Sorted taxon names.

    Arrays
    ------
    parent        : int32  [n_nodes]     Parent ID; -1 for root.
    support       : int64  [n_nodes]     Support label; -1 for leaves and
                                         an unlabelled root.
    distance      : float64[n_nodes]     Branch length to parent; -1.0 if absent.
    child_offsets : int64  [n_nodes+1]   CSR offsets into ``children``.
    children      : int32  [n_nodes-1]   Child IDs, grouped by parent.
    """

    # ================================================================== #
    # Construction                                                         #
    # ================================================================== #

    def __init__(self, newick_string: str) -> None:
        """
        Parse *newick_string* and build the tree arrays.

        Parameters
        ----------
        newick_string : str
            A NEWICK-formatted tree string (trailing ';' optional).

        Raises
        ------
        MalformedTreeError
            If the string is empty or unbalanced, a leaf has no name, a
            non-root internal node has no support label, a support label is
            not a non-negative integer, or a taxon name occurs twice.
        """
        self._parse_newick(newick_string)

        self.n_nodes: int = int(self.parent.shape[0])
        self.n_leaves: int = len([name for name in self.names if name != ""])
        self.root: int = self.n_nodes - 1  # parse_newick invariant

        self._validate()

        # Leaf-sets: built lazily on first query.
        self._leaf_sets: dict = None  # type: ignore[assignment]

    @property
    def taxa(self) -> list:
        """Sorted leaf names."""
        return sorted(self.names[:self.n_leaves])

    # ================================================================== #
    # Public methods                                                       #
    # ================================================================== #

    def is_leaf(self, node: int) -> bool:
        return bool(self.child_offsets[node] == self.child_offsets[node + 1])

    def child_nodes(self, node: int) -> list:
        """Return the child IDs of *node* in NEWICK order."""
        lo = int(self.child_offsets[node])
        hi = int(self.child_offsets[node + 1])
        return [int(c) for c in self.children[lo:hi]]

    def internal_nodes(self) -> list:
        """Return the IDs of all internal nodes in post-order (root last)."""
        return list(range(self.n_leaves, self.n_nodes))

    def leaf_set(self, node: int) -> tuple:
        """
        Return the sorted tuple of taxon names descending from *node*.

        A leaf returns a 1-tuple with its own name.
        """
        if self.is_leaf(node):
            return (self.names[node],)
        return self.leaf_sets()[node]

    def leaf_sets(self) -> dict:
        """
        Return ``{internal node ID: sorted tuple of descendant taxa}``.

        Internal IDs are assigned in post-order, so one ascending pass sees
        every child before its parent.  Dict order is post-order.
        """
        if self._leaf_sets is None:
            below = {}
            for leaf in range(self.n_leaves):
                below[leaf] = (self.names[leaf],)
            for node in self.internal_nodes():
                taxa = []
                for child in self.child_nodes(node):
                    taxa.extend(below[child])
                below[node] = tuple(sorted(taxa))
            self._leaf_sets = {
                node: below[node] for node in self.internal_nodes()
            }
        return self._leaf_sets

    def relabel(self, mapping: dict) -> None:
        """
        Rename leaves in place using *mapping* (old name -> new name).

        Names absent from *mapping* are kept.  Used to apply a NEXUS
        ``TRANSLATE`` table.

        Raises
        ------
        MalformedTreeError
            If two leaves end up with the same name.
        """
        for leaf in range(self.n_leaves):
            old = self.names[leaf]
            if old in mapping:
                self.names[leaf] = clean_taxon_id(mapping[old])
        self._check_duplicate_names()
        self._leaf_sets = None

    def __repr__(self) -> str:
        return f"Tree(n_leaves={self.n_leaves}, n_nodes={self.n_nodes})"

    # ================================================================== #
    # Private instance methods                                             #
    # ================================================================== #

    def _parse_newick(self, newick_string: str) -> None:
        """
        **Private.**  Parse *newick_string* and populate the tree-structure
        arrays as instance attributes.

        Two-pass algorithm
        ------------------
        Pass 1  Count commas and open parens -> exact array sizes.
        Pass 2  Iterative, stack-based character scan; no recursion.

        Node-ID conventions (set once; never change):
          Leaves   : 0 ... n_leaves-1       (left-to-right in NEWICK string)
          Internal : n_leaves ... n_nodes-2 (post-order)
          Root     : n_nodes-1
        """
        s = newick_string.strip()
        n_chars = len(s)
        if n_chars > 0 and s[n_chars - 1] == ";":
            n_chars -= 1
        if n_chars == 0 or s[:n_chars].strip() == "":
            raise MalformedTreeError("Empty tree string.")

        # ---- Pass 1: count commas and open parens ------------------- #
        # Each internal node with k children adds k - 1 commas, so for any
        # rooted tree n_leaves = n_commas + 1, unary nodes included.
        # A quote opens a quoted label only where pass 2 reads a label.
        n_commas = 0
        n_parens = 0
        label_start = True
        k = 0
        while k < n_chars:
            c = s[k]
            if c == "'":
                if not label_start:
                    raise MalformedTreeError(
                        f"Apostrophe inside an unquoted label at position {k}; "
                        "quote the whole label and double the apostrophe."
                    )
                k = Tree._skip_quoted(s, k, n_chars)
                label_start = False
                continue
            if c == "[":
                k = Tree._skip_comment(s, k, n_chars)
                continue
            if c == ",":
                n_commas += 1
                label_start = True
            elif c == "(":
                n_parens += 1
                label_start = True
            elif c == ")":
                label_start = True
            elif c not in " \t\r\n":
                label_start = False
            k += 1

        n_leaves = n_commas + 1
        n_nodes = n_leaves + n_parens

        # ---- Allocate arrays ---------------------------------------- #
        parent = np.full(n_nodes, -1, dtype=np.int32)
        support = np.full(n_nodes, -1, dtype=np.int64)
        distance = np.full(n_nodes, -1.0, dtype=np.float64)
        names = [""] * n_nodes
        child_lists = [[] for _ in range(n_nodes)]

        # ---- Pass 2: iterative stack-based parse -------------------- #
        # Each open paren pushes a child list; ')' pops it into a node.
        stack = []
        top_level = []
        expect_node = True

        leaf_id = 0
        internal_id = n_leaves

        i = 0
        while i < n_chars:
            c = s[i]

            if c in " \t\r\n":
                i += 1
                continue

            if c == "[":
                i = Tree._skip_comment(s, i, n_chars)
                continue

            if c == "(":
                if not expect_node:
                    raise MalformedTreeError(
                        f"Unexpected '(' at position {i}."
                    )
                stack.append([])
                i += 1
                continue

            if c == ",":
                if expect_node:
                    raise MalformedTreeError(
                        f"Leaf without a name before ',' at position {i}."
                    )
                if not stack:
                    raise MalformedTreeError(
                        f"Comma outside parentheses at position {i}."
                    )
                expect_node = True
                i += 1
                continue

            if c == ")":
                if not stack:
                    raise MalformedTreeError(
                        f"Unbalanced ')' at position {i}."
                    )
                if expect_node:
                    raise MalformedTreeError(
                        f"Leaf without a name before ')' at position {i}."
                    )
                kids = stack.pop()
                i += 1

                node_id = internal_id
                internal_id += 1
                child_lists[node_id] = kids
                for kid in kids:
                    parent[kid] = node_id

                label, i = Tree._read_label(s, i, n_chars)
                if label != "":
                    support[node_id] = Tree._parse_support(label, i)
                distance[node_id], i = Tree._read_length(s, i, n_chars)

                (stack[-1] if stack else top_level).append(node_id)
                expect_node = False
                continue

            if c == ";":
                raise MalformedTreeError(
                    f"Unexpected ';' at position {i}."
                )

            # Leaf
            if not expect_node:
                raise MalformedTreeError(
                    f"Missing ',' before label at position {i}."
                )
            label, i = Tree._read_label(s, i, n_chars)
            name = clean_taxon_id(label)
            if name == "":
                raise MalformedTreeError(
                    f"Leaf without a name at position {i}."
                )

            node_id = leaf_id
            leaf_id += 1
            names[node_id] = name
            distance[node_id], i = Tree._read_length(s, i, n_chars)

            (stack[-1] if stack else top_level).append(node_id)
            expect_node = False

        if stack:
            raise MalformedTreeError(
                f"Unbalanced parentheses: {len(stack)} '(' never closed."
            )
        if len(top_level) != 1:
            raise MalformedTreeError(
                f"Expected a single rooted tree, found {len(top_level)} "
                "top-level nodes."
            )

        # ---- CSR child layout --------------------------------------- #
        child_offsets = np.zeros(n_nodes + 1, dtype=np.int64)
        for node_id in range(n_nodes):
            child_offsets[node_id + 1] = (
                child_offsets[node_id] + len(child_lists[node_id])
            )
        children = np.empty(int(child_offsets[n_nodes]), dtype=np.int32)
        for node_id in range(n_nodes):
            lo = int(child_offsets[node_id])
            for j, kid in enumerate(child_lists[node_id]):
                children[lo + j] = kid

        self.names = names
        self.parent = parent
        self.support = support
        self.distance = distance
        self.child_offsets = child_offsets
        self.children = children

    def _validate(self) -> None:
        """
        **Private.**  Check the labelling rules that the parser alone does
        not enforce.
        """
        for node in range(self.n_leaves, self.root):
            if self.support[node] < 0:
                raise MalformedTreeError(
                    f"Internal node {node} over "
                    f"({', '.join(sorted(self._descendant_taxa(node)))}) "
                    "has no support label."
                )
        if self.n_nodes > 1 and self.support[self.root] < 0:
            logger.debug("Root node carries no support label; not a clade.")
        self._check_duplicate_names()

    def _descendant_taxa(self, node: int) -> list:
        taxa = []
        pending = [node]
        while pending:
            current = pending.pop()
            if self.is_leaf(current):
                taxa.append(self.names[current])
            else:
                pending.extend(self.child_nodes(current))
        return taxa

    def _check_duplicate_names(self) -> None:
        seen = {}
        for node_id in range(self.n_leaves):
            name = self.names[node_id]
            if name in seen:
                raise MalformedTreeError(
                    f"Duplicate taxon name '{name}' at leaf IDs "
                    f"{seen[name]} and {node_id}."
                )
            seen[name] = node_id

    # ================================================================== #
    # Private static methods (scanner helpers)                             #
    # ================================================================== #

    @staticmethod
    def _skip_quoted(s: str, i: int, n: int) -> int:
        """Return the index just past the quoted label starting at *i*."""
        j = i + 1
        while j < n:
            if s[j] == "'":
                # '' is an escaped quote inside a quoted label
                if j + 1 < n and s[j + 1] == "'":
                    j += 2
                    continue
                return j + 1
            j += 1
        raise MalformedTreeError(f"Unterminated quoted label at position {i}.")

    @staticmethod
    def _skip_comment(s: str, i: int, n: int) -> int:
        """Return the index just past the ``[...]`` comment starting at *i*."""
        j = s.find("]", i, n)
        if j < 0:
            raise MalformedTreeError(f"Unterminated comment at position {i}.")
        return j + 1

    @staticmethod
    def _read_label(s: str, i: int, n: int):
        """
        Read an optional label starting at *i* (leading blanks skipped).

        Returns ``(label, next_index)``; ``label`` is ``''`` when there is
        none.  Quoted labels are unquoted.
        """
        while i < n and s[i] in " \t\r\n":
            i += 1
        if i < n and s[i] == "'":
            j = Tree._skip_quoted(s, i, n)
            return s[i + 1:j - 1].replace("''", "'"), j
        j = i
        while j < n and s[j] not in _DELIMITERS:
            j += 1
        return s[i:j].strip(), j

    @staticmethod
    def _read_length(s: str, i: int, n: int):
        """Read an optional ``:length`` suffix; -1.0 when absent."""
        while i < n and s[i] in " \t\r\n":
            i += 1
        while i < n and s[i] == "[":
            i = Tree._skip_comment(s, i, n)
        if i >= n or s[i] != ":":
            return -1.0, i
        i += 1
        j = i
        while j < n and s[j] not in _DELIMITERS:
            j += 1
        text = s[i:j].strip()
        try:
            value = float(text)
        except ValueError:
            raise MalformedTreeError(
                f"Invalid branch length '{text}' at position {i}."
            ) from None
        return value, j

    @staticmethod
    def _parse_support(label: str, position: int) -> int:
        """Convert an internal node label to a non-negative integer count."""
        try:
            value = int(label)
        except ValueError:
            try:
                as_float = float(label)
            except ValueError:
                raise MalformedTreeError(
                    f"Support label '{label}' before position {position} "
                    "is not a number."
                ) from None
            if not as_float.is_integer():
                raise MalformedTreeError(
                    f"Support label '{label}' before position {position} "
                    "is not an integer count."
                )
            value = int(as_float)
        if value < 0:
            raise MalformedTreeError(
                f"Support label '{label}' before position {position} "
                "is negative."
            )
        return value

"""
_io.py
======
Reading input trees from NEWICK and NEXUS files or standard input.

Each input contributes its first tree: a concordance analysis writes one
summary tree per file, and the collection step counts every tree it is given
as an independent set of votes.

File formats
------------
  -                              NEWICK on standard input
  *.nwk, *.newick, *.tree        NEWICK
  *.nex.<run>.t, *.nex.<run>.tre NEXUS (MrBayes-style consensus output)
  *.nex, *.nexus                 NEXUS
  *.tre                          NEWICK, unless it matches the NEXUS rule
"""

import re
import sys
from typing import Iterable, Iterator, TextIO, Tuple

from exsub._tree import Tree, MalformedTreeError
from exsub._utils import format_newick
from exsub._logging import log_tree_read, log_extra_trees_ignored


_NEXUS_RUN_RE = re.compile(r"\.nex\.\S+\.t(re)?$", re.IGNORECASE)
_NEXUS_EXT_RE = re.compile(r"\.(nex|nexus)$", re.IGNORECASE)
_NEWICK_EXT_RE = re.compile(r"\.(nwk|newick|tree|tre)$", re.IGNORECASE)

_COMMENT_RE = re.compile(r"\[[^\]]*\]")
_TREES_BLOCK_RE = re.compile(
    r"begin\s+trees\s*;(.*?)end(block)?\s*;", re.IGNORECASE | re.DOTALL
)
_TRANSLATE_RE = re.compile(r"translate\s+(.*?);", re.IGNORECASE | re.DOTALL)
_TREE_STMT_RE = re.compile(
    r"u?tree\s+\*?\s*[^=;]*=\s*([^;]*;)", re.IGNORECASE | re.DOTALL
)


def detect_format(path: str) -> str:
    """
    Return ``'newick'`` or ``'nexus'`` for *path* (``'-'`` is NEWICK).

    Raises
    ------
    ValueError
        If the file name matches no known tree format.

    Examples
    --------
    >>> detect_format('gcpsr.nwk')
    'newick'
    >>> detect_format('concordance.nex.con.tre')
    'nexus'
    """
    if path == "-":
        return "newick"
    name = str(path)
    if _NEXUS_RUN_RE.search(name) or _NEXUS_EXT_RE.search(name):
        return "nexus"
    if _NEWICK_EXT_RE.search(name):
        return "newick"
    raise ValueError(
        f"Cannot tell the tree format of '{name}': expected a .nwk, .newick, "
        ".tree or .tre NEWICK file, a .nex/.nexus or .nex.<run>.t(re) NEXUS "
        "file, or '-' for standard input."
    )


def _split_statements(text: str) -> list:
    """Split NEWICK text into non-empty ';'-terminated statements."""
    text = _COMMENT_RE.sub("", text)
    return [format_newick(part) for part in text.split(";") if part.strip()]


def read_newick(handle: TextIO, source: str = "<newick>") -> Tree:
    """
    Parse the first NEWICK tree in *handle*.

    Raises
    ------
    MalformedTreeError
        If *handle* holds no tree or the first tree is malformed.
    """
    statements = _split_statements(handle.read())
    if not statements:
        raise MalformedTreeError(f"No NEWICK tree found in {source}.")
    if len(statements) > 1:
        log_extra_trees_ignored(source, len(statements) - 1)
    return Tree(statements[0])


def _parse_translate(body: str) -> dict:
    mapping = {}
    for entry in body.split(","):
        entry = entry.strip()
        if not entry:
            continue
        parts = entry.split(None, 1)
        if len(parts) != 2:
            raise MalformedTreeError(f"Invalid TRANSLATE entry '{entry}'.")
        key, value = parts
        mapping[key] = value.strip().strip("'\"")
    return mapping


def read_nexus(handle: TextIO, source: str = "<nexus>") -> Tree:
    """
    Parse the first ``TREE`` statement of the ``TREES`` block in *handle*.

    Bracketed comments (including ``[&R]`` rooting flags and MrBayes
    ``[&prob=...]`` annotations) are discarded, and a ``TRANSLATE`` table,
    if present, is applied to the leaf names.

    Raises
    ------
    MalformedTreeError
        If the text is not NEXUS or contains no tree.
    """
    text = handle.read()
    if not text.lstrip().upper().startswith("#NEXUS"):
        raise MalformedTreeError(f"{source} does not start with #NEXUS.")
    text = _COMMENT_RE.sub("", text)

    block = _TREES_BLOCK_RE.search(text)
    if block is None:
        raise MalformedTreeError(f"No TREES block found in {source}.")
    body = block.group(1)

    statements = _TREE_STMT_RE.findall(body)
    if not statements:
        raise MalformedTreeError(f"No TREE statement found in {source}.")
    if len(statements) > 1:
        log_extra_trees_ignored(source, len(statements) - 1)

    tree = Tree(statements[0])
    translate = _TRANSLATE_RE.search(body)
    if translate is not None:
        tree.relabel(_parse_translate(translate.group(1)))
    return tree


def read_tree(path: str) -> Tuple[Tree, str]:
    """
    Read the first tree from *path* (``'-'`` for standard input).

    Returns
    -------
    (Tree, str)
        The tree and the format it was read as.
    """
    fmt = detect_format(path)
    reader = read_nexus if fmt == "nexus" else read_newick
    if path == "-":
        tree = reader(sys.stdin, source="<stdin>")
    else:
        with open(path, encoding="utf-8") as fh:
            tree = reader(fh, source=str(path))
    log_tree_read(str(path), fmt, tree.n_leaves, tree.n_nodes - tree.n_leaves)
    return tree, fmt


def read_trees(paths: Iterable[str]) -> Iterator[Tree]:
    """Yield the first tree of every input in *paths*, in order."""
    for path in paths:
        tree, _ = read_tree(path)
        yield tree

"""
tests/test_io.py
================
Tests for reading NEWICK and NEXUS inputs.

  concordance.nex.con.tre   NEXUS with a TRANSLATE table and MrBayes-style
                            comments:
                              ((1,2)3,(3,4)2)  1..4 -> strain_A..strain_D
  two_statements.nwk        two NEWICK trees; only the first is read
"""

import io
import logging
import os
import sys

import pytest

_TREES_DIR = os.path.join(os.path.dirname(__file__), "trees")

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from exsub._io import (
    detect_format,
    read_newick,
    read_nexus,
    read_tree,
    read_trees,
)
from exsub._tree import MalformedTreeError


def tree_path(filename: str) -> str:
    return os.path.join(_TREES_DIR, filename)


# ======================================================================== #
# 1. Format detection                                                       #
# ======================================================================== #


@pytest.mark.parametrize(
    "path,expected",
    [
        ("-", "newick"),
        ("gcpsr.nwk", "newick"),
        ("gcpsr.NWK", "newick"),
        ("species.newick", "newick"),
        ("best.tree", "newick"),
        ("raxml.tre", "newick"),
        ("concordance.nex.con.tre", "nexus"),
        ("concordance.nex.run1.t", "nexus"),
        ("alignment.nex", "nexus"),
        ("alignment.nexus", "nexus"),
    ],
)
def test_detect_format(path, expected):
    assert detect_format(path) == expected


@pytest.mark.parametrize("path", ["trees.txt", "trees", "trees.nwk.gz"])
def test_detect_format_unknown(path):
    with pytest.raises(ValueError, match="Cannot tell the tree format"):
        detect_format(path)


# ======================================================================== #
# 2. NEWICK                                                                 #
# ======================================================================== #


class TestReadNewick:
    def test_single_tree(self):
        tree = read_newick(io.StringIO("(((A,B)2,C)1,D);\n"))
        assert tree.taxa == ["A", "B", "C", "D"]

    def test_missing_semicolon(self):
        tree = read_newick(io.StringIO("((A,B)2,C)\n"))
        assert tree.n_leaves == 3

    def test_multiline(self):
        tree = read_newick(io.StringIO("((A,B)2,\n  C);"))
        assert tree.leaf_set(3) == ("A", "B")

    def test_first_of_several(self, caplog):
        with open(tree_path("two_statements.nwk")) as fh:
            with caplog.at_level(logging.WARNING, logger="exsub"):
                tree = read_newick(fh, source="two_statements.nwk")
        assert int(tree.support[4]) == 2
        assert "1 more tree(s)" in caplog.text

    def test_empty(self):
        with pytest.raises(MalformedTreeError, match="No NEWICK tree"):
            read_newick(io.StringIO("  \n"))

    def test_leading_comment(self):
        tree = read_newick(io.StringIO("[tree 1] ((A,B)2,C);"))
        assert tree.n_leaves == 3

    def test_posterior_probabilities_rejected(self):
        with open(tree_path("fractional_support.nwk")) as fh:
            with pytest.raises(MalformedTreeError, match="integer count"):
                read_newick(fh)


# ======================================================================== #
# 3. NEXUS                                                                  #
# ======================================================================== #


class TestReadNexus:
    def test_translate_and_comments(self):
        with open(tree_path("concordance.nex.con.tre")) as fh:
            tree = read_nexus(fh)
        assert tree.taxa == ["strain_A", "strain_B", "strain_C", "strain_D"]
        assert tree.leaf_set(4) == ("strain_A", "strain_B")
        assert int(tree.support[4]) == 3
        assert int(tree.support[5]) == 2

    def test_without_translate(self):
        text = (
            "#NEXUS\n"
            "begin trees;\n"
            "  tree one = [&R] ((A,B)4,C);\n"
            "  tree two = ((A,C)1,B);\n"
            "end;\n"
        )
        tree = read_nexus(io.StringIO(text))
        assert tree.leaf_set(3) == ("A", "B")

    def test_not_nexus(self):
        with pytest.raises(MalformedTreeError, match="#NEXUS"):
            read_nexus(io.StringIO("((A,B)2,C);"))

    def test_no_trees_block(self):
        text = "#NEXUS\nbegin taxa;\n dimensions ntax=2;\nend;\n"
        with pytest.raises(MalformedTreeError, match="TREES block"):
            read_nexus(io.StringIO(text))

    def test_no_tree_statement(self):
        text = "#NEXUS\nbegin trees;\nend;\n"
        with pytest.raises(MalformedTreeError, match="TREE statement"):
            read_nexus(io.StringIO(text))


# ======================================================================== #
# 4. Files and standard input                                               #
# ======================================================================== #


class TestReadTrees:
    def test_read_tree_reports_format(self):
        tree, fmt = read_tree(tree_path("concordance.nex.con.tre"))
        assert fmt == "nexus"
        assert tree.n_leaves == 4

    def test_order_preserved(self):
        paths = [tree_path("two_taxa.nwk"), tree_path("canonical.nwk")]
        trees = list(read_trees(paths))
        assert [t.taxa for t in trees] == [["X", "Y"], ["A", "B", "C", "D"]]

    def test_stdin(self, monkeypatch):
        monkeypatch.setattr(sys, "stdin", io.StringIO("(X,Y)5;\n"))
        (tree,) = read_trees(["-"])
        assert tree.taxa == ["X", "Y"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            list(read_trees([str(tmp_path / "absent.nwk")]))

    def test_logs_each_tree(self, caplog):
        with caplog.at_level(logging.INFO, logger="exsub"):
            list(read_trees([tree_path("canonical.nwk")]))
        assert "Read newick tree from" in caplog.text
        assert "4 taxa, 3 internal nodes" in caplog.text

"""
tests/test_subdivision.py
=========================
Pytest test suite for exhaustive subdivision.

Canonical scenario
------------------
  universe = {A, B, C, D}
  clade 1 = {A,B}    support 2
  clade 2 = {A,B,C}  support 1
  min_support = 2

  A, B : clade 1 is smallest and has support 2 -> accepted.
  C    : clade 2 selected; clade 1 is nested inside it and dropped; support
         1 < 2 but it is the last clade in the working set -> accepted.
  D    : no clade contains D -> left ungrouped.

  result = {2}
"""

import logging
import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from exsub._clades import CladeTable
from exsub._subdivision import subdivide, overlapping_clades
from exsub._utils import is_subset


def make_table(clades):
    """Build a CladeTable from ``[(members, support), ...]`` in id order."""
    table = CladeTable()
    for members, support in clades:
        table.add(members, support)
    return table


# ======================================================================== #
# Fixtures                                                                  #
# ======================================================================== #


@pytest.fixture
def canonical():
    table = make_table([("AB", 2), ("ABC", 1)])
    table.universe.update("ABCD")
    return table


# ======================================================================== #
# 1. Worked scenarios                                                       #
# ======================================================================== #


class TestScenarios:
    def test_canonical(self, canonical):
        result = subdivide(canonical.universe, canonical.clade_ids(), canonical, 2)
        assert result == {2}

    def test_canonical_min_support_one(self, canonical):
        """Both clades meet the threshold; C still pulls in {A,B,C}."""
        result = subdivide(canonical.universe, canonical.clade_ids(), canonical, 1)
        assert result == {2}

    def test_disjoint_species(self):
        table = make_table([("AB", 3), ("CD", 3), ("ABCD", 1)])
        assert subdivide("ABCDE", table.clade_ids(), table, 2) == {1, 2, 3}

    def test_walks_outward_past_weak_clades(self):
        table = make_table([("AB", 1), ("ABC", 1), ("ABCD", 5), ("EF", 5)])
        result = subdivide("ABCDEF", table.clade_ids(), table, 3)
        assert result == {3, 4}

    def test_weak_clade_never_selected_survives(self):
        """Support only matters for clades some taxon actually selects."""
        table = make_table([("AB", 3), ("CD", 3), ("ABCD", 0)])
        assert subdivide("ABCD", table.clade_ids(), table, 2) == {1, 2, 3}

    def test_nested_dropped_regardless_of_support(self):
        table = make_table([("AB", 9), ("ABC", 2)])
        assert subdivide("ABC", table.clade_ids(), table, 1) == {2}


# ======================================================================== #
# 2. Threshold boundary                                                     #
# ======================================================================== #


class TestThreshold:
    def test_equal_to_min_support_accepted(self):
        table = make_table([("AB", 2), ("CD", 5)])
        assert subdivide("ABCD", table.clade_ids(), table, 2) == {1, 2}

    def test_one_below_min_support_retried(self):
        table = make_table([("AB", 1), ("CD", 5)])
        assert subdivide("ABCD", table.clade_ids(), table, 2) == {2}

    def test_last_clade_kept_unconditionally(self):
        table = make_table([("AB", 0)])
        assert subdivide("ABC", table.clade_ids(), table, 10) == {1}

    def test_all_weak_walks_down_to_one(self):
        table = make_table([("AB", 0), ("CD", 0), ("EF", 0)])
        # A drops {A,B}, C drops {C,D}, leaving {E,F} alone for E.
        assert subdivide("ABCDEF", table.clade_ids(), table, 1) == {3}

    def test_min_support_zero_keeps_everything_selected(self):
        table = make_table([("AB", 0), ("CD", 0)])
        assert subdivide("ABCD", table.clade_ids(), table, 0) == {1, 2}

    def test_negative_min_support_rejected(self, canonical):
        with pytest.raises(ValueError):
            subdivide(canonical.universe, canonical.clade_ids(), canonical, -1)


# ======================================================================== #
# 3. Ordering and tie-breaks                                                #
# ======================================================================== #


class TestOrdering:
    def test_equal_size_tie_goes_to_lower_id(self):
        # Both 2-taxon clades contain B; B's turn selects clade 1 and C's
        # turn selects clade 2, so both survive.
        table = make_table([("AB", 1), ("BC", 1)])
        assert subdivide("ABC", table.clade_ids(), table, 1) == {1, 2}

    def test_taxa_processed_lexicographically(self):
        # 'C' sorts before 'a' (ASCII order), so the weak {C,d} is selected
        # and discarded first, leaving {a,b} as the last clade for 'a'.
        table = make_table([(["a", "b"], 0), (["C", "d"], 0)])
        result = subdivide(["a", "b", "C", "d"], table.clade_ids(), table, 1)
        assert result == {1}

    def test_reproducible(self):
        clades = [("AB", 1), ("BC", 2), ("ABC", 3), ("CD", 1), ("ABCD", 2)]
        results = set()
        for _ in range(5):
            table = make_table(clades)
            results.add(frozenset(subdivide("ABCDE", table.clade_ids(), table, 2)))
        assert len(results) == 1


# ======================================================================== #
# 4. Edge cases and invariants                                              #
# ======================================================================== #


class TestEdgeCases:
    def test_no_candidates(self):
        table = CladeTable()
        assert subdivide("ABC", [], table, 1) == set()

    def test_empty_universe(self, canonical):
        assert subdivide([], canonical.clade_ids(), canonical, 1) == set(
            canonical.clade_ids()
        )

    def test_inputs_not_mutated(self, canonical):
        ids = set(canonical.clade_ids())
        members = dict(canonical.members)
        support = dict(canonical.support)
        subdivide(canonical.universe, ids, canonical, 2)
        assert ids == {1, 2}
        assert canonical.members == members
        assert canonical.support == support

    def test_subset_of_candidates(self, canonical):
        result = subdivide(canonical.universe, canonical.clade_ids(), canonical, 2)
        assert result <= set(canonical.clade_ids())

    def test_restricted_candidates(self, canonical):
        assert subdivide(canonical.universe, [1], canonical, 2) == {1}

    def test_unknown_clade_id(self, canonical):
        with pytest.raises(KeyError):
            subdivide(canonical.universe, [99], canonical, 1)

    def test_no_nesting_when_every_taxon_resolves(self):
        table = make_table([("AB", 2), ("ABC", 3), ("DE", 1), ("DEF", 4)])
        result = subdivide("ABCDEF", table.clade_ids(), table, 2)
        assert result == {2, 4}
        for a in result:
            for b in result - {a}:
                assert not is_subset(table.members[a], table.members[b])

    def test_logs_summary(self, canonical, caplog):
        with caplog.at_level(logging.INFO, logger="exsub"):
            subdivide(canonical.universe, canonical.clade_ids(), canonical, 2)
        text = caplog.text
        assert "1 of 2 clades retained" in text
        assert "1 taxa belong to no retained clade: D" in text

    def test_debug_trace(self, canonical, caplog):
        with caplog.at_level(logging.DEBUG, logger="exsub._subdivision"):
            subdivide(canonical.universe, canonical.clade_ids(), canonical, 3)
        assert "widening" in caplog.text


# ======================================================================== #
# 5. Overlap detection                                                      #
# ======================================================================== #


class TestOverlappingClades:
    def test_overlap_found(self):
        table = make_table([("ABC", 1), ("CD", 1), ("AB", 1)])
        assert overlapping_clades([1, 2, 3], table) == [
            (("A", "B", "C"), ("C", "D"))
        ]

    def test_nested_and_disjoint_ignored(self):
        table = make_table([("ABC", 1), ("AB", 1), ("DE", 1)])
        assert overlapping_clades(table.clade_ids(), table) == []

from __future__ import annotations

import random

from taxontree.taxdump import TaxDump
from taxontree.tree import TaxonTree

from conftest import NODES

RECORDS = [(taxid, parent, rank) for taxid, parent, rank, _ in NODES]


def test_every_mentioned_taxid_is_a_key() -> None:
    tree = TaxonTree.from_records([(63221, 9606, "subspecies")])
    assert 63221 in tree
    assert 9606 in tree
    assert tree.children[63221] == set()
    assert tree.children[9606] == {63221}


def test_keys_are_reachable_as_children() -> None:
    tree = TaxonTree.from_records(RECORDS)
    all_children = set().union(*tree.children.values())
    # The whole-taxonomy root is its own child through the self-loop record
    assert set(tree.children) == all_children
    assert len(tree) == len(NODES)


def test_build_is_order_independent() -> None:
    shuffled = RECORDS[:]
    random.Random(7).shuffle(shuffled)
    assert TaxonTree.from_records(shuffled).children == TaxonTree.from_records(RECORDS).children


def test_children_of_is_sorted_numerically() -> None:
    tree = TaxonTree.from_records([(741158, 9606, ""), (63221, 9606, ""), (100, 9606, "")])
    assert tree.children_of(9606) == [100, 63221, 741158]
    assert tree.children_of(42) == []


def test_ranks_only_kept_when_requested() -> None:
    assert TaxonTree.from_records(RECORDS).ranks == {}

    tree = TaxonTree.from_records(RECORDS, with_rank=True)
    assert tree.rank_of(9606) == "species"
    assert tree.rank_of(1) == "no rank"
    assert tree.rank_of(42) == ""


def test_from_lines_skips_malformed_lines() -> None:
    lines = [
        "9606\t|\t9605\t|\tspecies\t|\t",
        "not a record",
        "x\t|\t9605\t|\tspecies\t|\t",
    ]
    tree = TaxonTree.from_lines(lines)
    assert set(tree.children) == {9605, 9606}
    assert tree.stats == {"records_read": 1, "records_skipped": 2}


def test_from_taxdump(taxdump: TaxDump) -> None:
    tree = TaxonTree.from_taxdump(taxdump, with_rank=True)
    assert tree.children_of(9605) == [9606, 1425170]
    assert tree.rank_of(63221) == "subspecies"
    assert tree.stats["records_skipped"] == 2
    assert tree.stats["records_read"] == taxdump.stats["records_read"] == len(NODES)

"""Taxonomy tree construction from NCBI relation records.

This module builds the adjacency structure of the taxonomy from the
child/parent records of nodes.dmp. Records may arrive in any order: a
child can be read before its parent is first seen and the other way
round, so every taxid mentioned is registered as soon as it appears.

The tree is built once and never mutated afterwards. Traversal state
lives in the printer, not here.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from taxontree.taxdump import NodeRecord, parse_node_line

if TYPE_CHECKING:
    from collections.abc import Iterable

    from taxontree.taxdump import TaxDump

logger = logging.getLogger(__name__)


class TaxonTree:
    """Adjacency table of the taxonomy.

    Attributes:
        children: Mapping from taxid to the set of its direct children.
            Every taxid seen as a child or a parent is a key, possibly
            with an empty set, so membership doubles as an existence check.
        ranks: Mapping from taxid to rank label (only filled when ranks
            were requested at build time).
    """

    def __init__(self) -> None:
        """Initialize an empty tree."""
        self.children: dict[int, set[int]] = {}
        self.ranks: dict[int, str] = {}

        # Statistics
        self.stats: dict[str, int] = {
            "records_read": 0,
            "records_skipped": 0,
        }

    def __contains__(self, taxid: object) -> bool:
        return taxid in self.children

    def __len__(self) -> int:
        return len(self.children)

    def add_relation(
        self, child: int, parent: int, rank: str = "", *, with_rank: bool = False
    ) -> None:
        """Record that ``child`` is a direct child of ``parent``."""
        if parent not in self.children:
            self.children[parent] = set()
        self.children[parent].add(child)
        if child not in self.children:
            self.children[child] = set()
        if with_rank:
            self.ranks[child] = rank

    def children_of(self, taxid: int) -> list[int]:
        """Get the direct children of a taxid, sorted ascending.

        Unknown taxids have no children.
        """
        return sorted(self.children.get(taxid, ()))

    def rank_of(self, taxid: int) -> str:
        return self.ranks.get(taxid, "")

    @classmethod
    def from_records(
        cls,
        records: Iterable[NodeRecord | tuple[int, int, str]],
        *,
        with_rank: bool = False,
    ) -> TaxonTree:
        """Build a tree from (child, parent, rank) records.

        Args:
            records: Parsed relation records, in any order.
            with_rank: If True, keep the rank of every child.

        Returns:
            A populated TaxonTree.
        """
        tree = cls()
        for child, parent, rank in records:
            tree.stats["records_read"] += 1
            tree.add_relation(child, parent, rank, with_rank=with_rank)
        return tree

    @classmethod
    def from_lines(cls, lines: Iterable[str], *, with_rank: bool = False) -> TaxonTree:
        """Build a tree from raw tab-delimited relation lines.

        Lines with fewer than 6 fields or non-integer taxids are skipped.
        """
        tree = cls()
        for line in lines:
            record = parse_node_line(line)
            if record is None:
                tree.stats["records_skipped"] += 1
                continue
            tree.stats["records_read"] += 1
            tree.add_relation(record.child, record.parent, record.rank, with_rank=with_rank)
        return tree

    @classmethod
    def from_taxdump(cls, taxdump: TaxDump, *, with_rank: bool = False) -> TaxonTree:
        """Build a tree from the nodes.dmp of a taxdump directory."""
        tree = cls.from_records(taxdump.iter_node_records(), with_rank=with_rank)
        tree.stats["records_skipped"] = taxdump.stats["records_skipped"]
        logger.debug(
            "built tree with %d taxids from %s (%d records, %d skipped)",
            len(tree),
            taxdump.nodes_file,
            tree.stats["records_read"],
            tree.stats["records_skipped"],
        )
        return tree

    def __repr__(self) -> str:
        return f"TaxonTree(taxids={len(self.children)}, ranks={len(self.ranks)})"

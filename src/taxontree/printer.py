"""Subtree listing for requested taxids.

This module resolves requested taxids against the tree and the
deleted/merged tables, walks each subtree depth-first and writes it either
as an indented outline or as one nested JSON object.

Both output formats are driven by the same traversal. ``walk`` yields a
stream of ENTER/LEAVE events; each event carries enough lookahead
(``has_children`` and ``is_last``) for the JSON writer to place braces and
commas without buffering the subtree.

Example output (outline, ``indent="  "``, ranks and names shown)::

    9606 [species] Homo sapiens
      63221 [subspecies] Homo sapiens neanderthalensis
      741158 [subspecies] Homo sapiens subsp. 'Denisova'
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from typing import IO, TYPE_CHECKING, NamedTuple

from taxontree.taxdump import AuxiliaryTables

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from taxontree.tree import TaxonTree

logger = logging.getLogger(__name__)

ENTER = "enter"
LEAVE = "leave"


@dataclass
class ListOptions:
    """Output options for a listing.

    Attributes:
        indent: String repeated once per depth level ("" gives a flat list).
        show_rank: Append " [rank]" to every entry.
        show_name: Append " name" to every entry.
        json_format: Write one nested JSON object instead of an outline.
        line_buffered: Flush the output after every line.
    """

    indent: str = "  "
    show_rank: bool = False
    show_name: bool = False
    json_format: bool = False
    line_buffered: bool = False


class Visit(NamedTuple):
    """A traversal event.

    ``is_last`` tells whether the entry is the last one at its level.
    For entries with children the value carried by LEAVE is authoritative.
    """

    kind: str
    taxid: int
    depth: int
    has_children: bool
    is_last: bool


class _Frame:
    """Pending children of one node on the traversal stack."""

    __slots__ = ("taxid", "depth", "children", "index")

    def __init__(self, taxid: int, depth: int, children: list[int]) -> None:
        self.taxid = taxid
        self.depth = depth
        self.children = children
        self.index = 0

    def peek(self, visited: set[int]) -> int | None:
        """Return the next child still to emit, without consuming it."""
        while self.index < len(self.children):
            child = self.children[self.index]
            if child == self.taxid:
                self.index += 1
                continue
            if child in visited:
                logger.debug("taxid %d reached again under %d, skipped", child, self.taxid)
                self.index += 1
                continue
            return child
        return None


def walk(tree: TaxonTree, root: int, *, last: bool = True) -> Iterator[Visit]:
    """Walk the subtree under ``root`` depth-first, in pre-order.

    Children are visited in ascending taxid order. Every taxid is emitted
    at most once per walk, which keeps cycles and cross-links in malformed
    input from looping or duplicating output. A node is never emitted as
    its own child.

    Args:
        tree: The taxonomy tree.
        root: The taxid to start from (depth 0).
        last: Whether the root entry is the last one at its level.

    Yields:
        Visit events: ENTER for every node, and LEAVE after the subtree of
        every node that has children.
    """
    visited = {root}
    top = _Frame(root, 0, tree.children_of(root))
    if top.peek(visited) is None:
        yield Visit(ENTER, root, 0, False, last)
        return

    yield Visit(ENTER, root, 0, True, last)
    stack = [top]
    while stack:
        frame = stack[-1]
        child = frame.peek(visited)
        if child is None:
            stack.pop()
            is_last = stack[-1].peek(visited) is None if stack else last
            yield Visit(LEAVE, frame.taxid, frame.depth, True, is_last)
            continue

        frame.index += 1
        visited.add(child)
        sub = _Frame(child, frame.depth + 1, tree.children_of(child))
        if sub.peek(visited) is None:
            yield Visit(ENTER, child, sub.depth, False, frame.peek(visited) is None)
        else:
            yield Visit(ENTER, child, sub.depth, True, False)
            stack.append(sub)


def resolve_root(taxid: int, tree: TaxonTree, tables: AuxiliaryTables) -> int | None:
    """Resolve a requested taxid to the taxid to list.

    Args:
        taxid: The requested taxid.
        tree: The taxonomy tree.
        tables: Deleted and merged taxid tables.

    Returns:
        The taxid itself if it is in the tree, the surviving taxid if it was
        merged, or None if it was deleted or is unknown.
    """
    if taxid in tree:
        return taxid
    if taxid in tables.deleted:
        logger.warning("taxid %d was deleted", taxid)
        return None
    if taxid in tables.merged:
        new_taxid = tables.merged[taxid]
        logger.warning("taxid %d was merged into %d", taxid, new_taxid)
        return new_taxid
    logger.warning("taxid %d not found", taxid)
    return None


class TreePrinter:
    """Writes the subtrees of requested taxids to a text stream."""

    def __init__(
        self,
        tree: TaxonTree,
        tables: AuxiliaryTables | None = None,
        options: ListOptions | None = None,
        output: IO[str] | None = None,
    ) -> None:
        self.tree = tree
        self.tables = tables if tables is not None else AuxiliaryTables()
        self.options = options if options is not None else ListOptions()
        self.output = output if output is not None else sys.stdout

    def label(self, taxid: int) -> str:
        """Format a taxid with its optional rank and name."""
        text = str(taxid)
        if self.options.show_rank:
            text += f" [{self.tree.rank_of(taxid)}]"
        if self.options.show_name:
            text += f" {self.tables.name_of(taxid)}"
        return text

    def resolve_roots(self, taxids: Iterable[int]) -> list[int]:
        """Resolve requested taxids in order, dropping the unusable ones."""
        roots = []
        for taxid in taxids:
            root = resolve_root(taxid, self.tree, self.tables)
            if root is not None:
                roots.append(root)
        return roots

    def iter_lines(self, roots: list[int]) -> Iterator[str]:
        """Generate the output lines (newline-terminated) for resolved roots."""
        json_format = self.options.json_format
        if json_format:
            yield "{\n"
        for i, root in enumerate(roots):
            for visit in walk(self.tree, root, last=i == len(roots) - 1):
                if json_format:
                    yield self._json_line(visit)
                elif visit.kind == ENTER:
                    yield f"{self.options.indent * visit.depth}{self.label(visit.taxid)}\n"
        if json_format:
            yield "}\n"

    def _json_line(self, visit: Visit) -> str:
        pad = self.options.indent * (visit.depth + 1)
        comma = "" if visit.is_last else ","
        if visit.kind == LEAVE:
            return f"{pad}}}{comma}\n"
        key = json.dumps(self.label(visit.taxid), ensure_ascii=False)
        if visit.has_children:
            return f"{pad}{key}: {{\n"
        return f"{pad}{key}: {{}}{comma}\n"

    def print_roots(self, taxids: Iterable[int]) -> list[int]:
        """Resolve the requested taxids and write their subtrees.

        Returns:
            The resolved roots that were written.
        """
        roots = self.resolve_roots(taxids)
        for line in self.iter_lines(roots):
            self.output.write(line)
            if self.options.line_buffered:
                self.output.flush()
        return roots


def list_taxids(
    tree: TaxonTree,
    tables: AuxiliaryTables,
    taxids: Iterable[int],
    *,
    options: ListOptions | None = None,
    output: IO[str] | None = None,
) -> list[int]:
    """List the subtrees of ``taxids`` to ``output`` (stdout by default)."""
    return TreePrinter(tree, tables, options, output).print_roots(taxids)

"""NCBI taxonomy dump parser.

This module provides access to the files of an NCBI taxdump directory
(nodes.dmp, names.dmp, delnodes.dmp and merged.dmp). The dump files use
``\\t|\\t`` as the column separator and end every line with ``\\t|``.

Files may also be gzip-compressed (``nodes.dmp.gz`` and so on).

Reference: https://ftp.ncbi.nih.gov/pub/taxonomy/taxdump_readme.txt
"""

from __future__ import annotations

import gzip
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

NODES_FILE = "nodes.dmp"
NAMES_FILE = "names.dmp"
DELNODES_FILE = "delnodes.dmp"
MERGED_FILE = "merged.dmp"

SCIENTIFIC_NAME = "scientific name"

# Taxids are 32-bit signed integers
TAXID_PATTERN = re.compile(r"[+-]?[0-9]+")
TAXID_MIN = -(2**31)
TAXID_MAX = 2**31 - 1


class NodeRecord(NamedTuple):
    """One parsed line of nodes.dmp."""

    child: int
    parent: int
    rank: str


@dataclass
class AuxiliaryTables:
    """Decoration and identifier-history tables.

    Attributes:
        names: Scientific name by taxid (empty unless names were requested).
        deleted: Taxids removed from the taxonomy.
        merged: Old taxid -> taxid it was merged into.
    """

    names: dict[int, str] = field(default_factory=dict)
    deleted: set[int] = field(default_factory=set)
    merged: dict[int, int] = field(default_factory=dict)

    def name_of(self, taxid: int) -> str:
        return self.names.get(taxid, "")


def open_text(path: str | Path) -> IO[str]:
    """Open a plain or gzip-compressed file for reading text.

    Undecodable bytes are replaced, so a corrupt line fails field parsing
    instead of aborting the read.
    """
    path = Path(path)
    if path.suffix == ".gz":
        return gzip.open(path, "rt", encoding="utf-8", errors="replace")
    return open(path, encoding="utf-8", errors="replace")


def split_record(line: str, n: int = 6) -> list[str]:
    """Split a line on tabs into at most ``n`` fields."""
    return line.rstrip("\r\n").split("\t", n - 1)


def parse_taxid(text: str) -> int | None:
    """Parse a taxid field, or return None if it is not a 32-bit integer."""
    if not TAXID_PATTERN.fullmatch(text):
        return None
    taxid = int(text)
    if not TAXID_MIN <= taxid <= TAXID_MAX:
        return None
    return taxid


def parse_node_line(line: str) -> NodeRecord | None:
    """Parse a relation line into a NodeRecord.

    Field 0 is the child taxid, field 2 the parent taxid and field 4 the
    rank. Lines with fewer than 6 fields or non-integer taxids yield None.
    """
    items = split_record(line, 6)
    if len(items) < 6:
        return None
    child = parse_taxid(items[0])
    parent = parse_taxid(items[2])
    if child is None or parent is None:
        return None
    return NodeRecord(child, parent, items[4])


def _dump_columns(line: str) -> list[str]:
    line = line.rstrip("\r\n")
    if line.endswith("\t|"):
        line = line[:-2]
    return line.split("\t|\t")


def _locate(data_dir: Path, filename: str, override: str | Path | None) -> Path:
    if override:
        return Path(override)
    path = data_dir / filename
    if not path.exists():
        gz_path = data_dir / (filename + ".gz")
        if gz_path.exists():
            return gz_path
    return path


class TaxDump:
    """Reader for an NCBI taxdump directory.

    Example:
        >>> dump = TaxDump("~/.taxontree")
        >>> for record in dump.iter_node_records():
        ...     print(record.child, record.parent, record.rank)
    """

    def __init__(
        self,
        data_dir: str | Path,
        *,
        nodes_file: str | Path | None = None,
        names_file: str | Path | None = None,
        delnodes_file: str | Path | None = None,
        merged_file: str | Path | None = None,
    ) -> None:
        """Initialize the dump reader.

        Args:
            data_dir: Directory containing the dump files.
            nodes_file: Explicit path to nodes.dmp.
            names_file: Explicit path to names.dmp.
            delnodes_file: Explicit path to delnodes.dmp.
            merged_file: Explicit path to merged.dmp.
        """
        self.path = Path(data_dir).expanduser()

        self.nodes_file = _locate(self.path, NODES_FILE, nodes_file)
        self.names_file = _locate(self.path, NAMES_FILE, names_file)
        self.delnodes_file = _locate(self.path, DELNODES_FILE, delnodes_file)
        self.merged_file = _locate(self.path, MERGED_FILE, merged_file)

        # Statistics
        self.stats: dict[str, int] = {
            "records_read": 0,
            "records_skipped": 0,
        }

        # The relation table is required for everything else
        if not self.nodes_file.exists():
            raise FileNotFoundError(f"{NODES_FILE} not found: {self.nodes_file}")

    def iter_node_lines(self) -> Iterator[str]:
        """Iterate over the raw lines of nodes.dmp."""
        with open_text(self.nodes_file) as f:
            yield from f

    def iter_node_records(self) -> Iterator[NodeRecord]:
        """Iterate over the well-formed records of nodes.dmp.

        Malformed lines are skipped and counted in ``stats``.

        Yields:
            NodeRecord objects.
        """
        for line in self.iter_node_lines():
            record = parse_node_line(line)
            if record is None:
                self.stats["records_skipped"] += 1
                continue
            self.stats["records_read"] += 1
            yield record

    def load_names(self) -> dict[int, str]:
        """Load scientific names keyed by taxid."""
        names: dict[int, str] = {}
        with open_text(self.names_file) as f:
            for line in f:
                items = _dump_columns(line)
                if len(items) < 4 or items[3] != SCIENTIFIC_NAME:
                    continue
                taxid = parse_taxid(items[0])
                if taxid is None:
                    continue
                names[taxid] = items[1]
        logger.debug("loaded %d scientific names from %s", len(names), self.names_file)
        return names

    def load_deleted(self) -> set[int]:
        """Load the set of deleted taxids."""
        deleted: set[int] = set()
        with open_text(self.delnodes_file) as f:
            for line in f:
                items = _dump_columns(line)
                taxid = parse_taxid(items[0])
                if taxid is not None:
                    deleted.add(taxid)
        logger.debug("loaded %d deleted taxids from %s", len(deleted), self.delnodes_file)
        return deleted

    def load_merged(self) -> dict[int, int]:
        """Load the merged taxid map (old -> new)."""
        merged: dict[int, int] = {}
        with open_text(self.merged_file) as f:
            for line in f:
                items = _dump_columns(line)
                if len(items) < 2:
                    continue
                old, new = parse_taxid(items[0]), parse_taxid(items[1])
                if old is not None and new is not None:
                    merged[old] = new
        logger.debug("loaded %d merged taxids from %s", len(merged), self.merged_file)
        return merged

    def load_auxiliary(self, *, with_names: bool = False) -> AuxiliaryTables:
        """Load the deleted and merged tables, plus names when requested.

        Args:
            with_names: If True, also read names.dmp.

        Returns:
            The populated AuxiliaryTables.
        """
        return AuxiliaryTables(
            names=self.load_names() if with_names else {},
            deleted=self.load_deleted(),
            merged=self.load_merged(),
        )

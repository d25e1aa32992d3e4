"""Shared fixtures: a small hominid taxdump written in NCBI format."""
from __future__ import annotations

import logging
from pathlib import Path

import pytest

from taxontree.logs import reset_logging
from taxontree.taxdump import AuxiliaryTables, TaxDump
from taxontree.tree import TaxonTree

# (taxid, parent, rank, scientific name)
NODES = [
    (1, 1, "no rank", "root"),
    (9604, 1, "family", "Hominidae"),
    (9605, 9604, "genus", "Homo"),
    (9606, 9605, "species", "Homo sapiens"),
    (63221, 9606, "subspecies", "Homo sapiens neanderthalensis"),
    (741158, 9606, "subspecies", "Homo sapiens subsp. 'Denisova'"),
    (1425170, 9605, "species", "Homo heidelbergensis"),
    (9596, 9604, "genus", "Pan"),
    (9597, 9596, "species", "Pan paniscus"),
    (9598, 9596, "species", "Pan troglodytes"),
]

DELETED = [12345]
MERGED = {63222: 63221, 9607: 9606}


def dmp_line(*columns: object) -> str:
    return "\t|\t".join(str(c) for c in columns) + "\t|\n"


def write_taxdump(data_dir: Path, nodes=NODES) -> Path:
    data_dir.mkdir(parents=True, exist_ok=True)
    # Children before parents to exercise order independence
    with open(data_dir / "nodes.dmp", "w", encoding="utf-8") as f:
        for taxid, parent, rank, _ in reversed(nodes):
            f.write(dmp_line(taxid, parent, rank, "", 0))
        f.write("garbage line\n")
        f.write(dmp_line("x", 1, "species", "", 0))
    with open(data_dir / "names.dmp", "w", encoding="utf-8") as f:
        for taxid, _, _, name in nodes:
            f.write(dmp_line(taxid, name, "", "scientific name"))
        f.write(dmp_line(9606, "human", "", "genbank common name"))
    with open(data_dir / "delnodes.dmp", "w", encoding="utf-8") as f:
        for taxid in DELETED:
            f.write(dmp_line(taxid))
    with open(data_dir / "merged.dmp", "w", encoding="utf-8") as f:
        for old, new in MERGED.items():
            f.write(dmp_line(old, new))
    return data_dir


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    level = root.level
    yield
    reset_logging()
    root.setLevel(level)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return write_taxdump(tmp_path / "taxdump")


@pytest.fixture
def taxdump(data_dir: Path) -> TaxDump:
    return TaxDump(data_dir)


@pytest.fixture
def tree() -> TaxonTree:
    return TaxonTree.from_records(
        [(taxid, parent, rank) for taxid, parent, rank, _ in NODES], with_rank=True
    )


@pytest.fixture
def tables() -> AuxiliaryTables:
    return AuxiliaryTables(
        names={taxid: name for taxid, _, _, name in NODES},
        deleted=set(DELETED),
        merged=dict(MERGED),
    )

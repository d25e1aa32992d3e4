from __future__ import annotations

from pathlib import Path

import pytest

from taxontree.config import Config
from taxontree.loading import load_all
from taxontree.taxdump import TaxDump

from conftest import MERGED


@pytest.mark.parametrize("threads", [1, 2, 4])
def test_load_all_builds_tree_and_tables(taxdump: TaxDump, threads: int) -> None:
    tree, tables = load_all(taxdump, with_names=True, with_rank=True, threads=threads)
    assert tree.children_of(9606) == [63221, 741158]
    assert tree.rank_of(9606) == "species"
    assert tables.name_of(9606) == "Homo sapiens"
    assert tables.merged == MERGED


def test_load_all_without_decorations(taxdump: TaxDump) -> None:
    tree, tables = load_all(taxdump)
    assert tree.ranks == {}
    assert tables.names == {}
    assert 12345 in tables.deleted


def test_missing_auxiliary_file_is_fatal(data_dir: Path) -> None:
    (data_dir / "merged.dmp").unlink()
    with pytest.raises(FileNotFoundError):
        load_all(TaxDump(data_dir))


def test_config_uses_environment_data_dir(monkeypatch, data_dir: Path) -> None:
    monkeypatch.setenv("TAXONTREE_DB", str(data_dir))
    config = Config()
    assert config.data_dir == data_dir
    assert config.taxdump().nodes_file == data_dir / "nodes.dmp"


def test_config_explicit_nodes_file(tmp_path: Path, data_dir: Path) -> None:
    nodes = tmp_path / "elsewhere.dmp"
    nodes.write_bytes((data_dir / "nodes.dmp").read_bytes())
    config = Config(data_dir=data_dir, nodes_file=nodes)
    assert config.taxdump().nodes_file == nodes


def test_config_output_file(tmp_path: Path) -> None:
    config = Config(out_file=str(tmp_path / "out.txt"))
    with config.open_output() as out:
        out.write("9606\n")
    assert (tmp_path / "out.txt").read_text(encoding="utf-8") == "9606\n"

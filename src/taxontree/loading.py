"""Parallel load phase.

The auxiliary tables (names, deleted, merged) and the relation tree come
from different files and fill disjoint structures, so they are loaded on
a thread pool and joined before any listing starts.
"""

from __future__ import annotations

import concurrent.futures
import logging
import time
from typing import TYPE_CHECKING

from taxontree.tree import TaxonTree

if TYPE_CHECKING:
    from taxontree.taxdump import AuxiliaryTables, TaxDump

logger = logging.getLogger(__name__)


def load_all(
    taxdump: TaxDump,
    *,
    with_names: bool = False,
    with_rank: bool = False,
    threads: int = 2,
) -> tuple[TaxonTree, AuxiliaryTables]:
    """Load the relation tree and the auxiliary tables concurrently.

    Args:
        taxdump: The dump directory to read from.
        with_names: If True, also load scientific names.
        with_rank: If True, keep the rank of every taxid.
        threads: Number of worker threads (1 loads sequentially).

    Returns:
        The built TaxonTree and the AuxiliaryTables.

    Raises:
        OSError: If a dump file cannot be opened or read.
    """
    started = time.perf_counter()
    with concurrent.futures.ThreadPoolExecutor(max_workers=max(1, threads)) as ex:
        tables_future = ex.submit(taxdump.load_auxiliary, with_names=with_names)
        tree_future = ex.submit(TaxonTree.from_taxdump, taxdump, with_rank=with_rank)
        tree = tree_future.result()
        tables = tables_future.result()

    logger.info(
        "loaded %d taxids (%d deleted, %d merged) in %.2fs",
        len(tree),
        len(tables.deleted),
        len(tables.merged),
        time.perf_counter() - started,
    )
    return tree, tables

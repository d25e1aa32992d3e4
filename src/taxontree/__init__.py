"""Taxontree - list subtrees of the NCBI taxonomy as outlines or JSON."""

__version__ = "0.1.0"

# Dump file access and auxiliary tables
from taxontree.taxdump import (
    AuxiliaryTables,
    NodeRecord,
    TaxDump,
    open_text,
    parse_node_line,
)

# Relation tree
from taxontree.tree import TaxonTree

# Listing
from taxontree.printer import (
    ListOptions,
    TreePrinter,
    Visit,
    list_taxids,
    resolve_root,
    walk,
)

from taxontree.config import Config
from taxontree.loading import load_all

__all__ = [
    # Dump files
    "AuxiliaryTables",
    "NodeRecord",
    "TaxDump",
    "open_text",
    "parse_node_line",
    # Tree
    "TaxonTree",
    # Listing
    "ListOptions",
    "TreePrinter",
    "Visit",
    "list_taxids",
    "resolve_root",
    "walk",
    # Running
    "Config",
    "load_all",
]

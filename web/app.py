#!/usr/bin/env python3
"""Taxontree Web - list taxonomy subtrees over HTTP.

Run with:
    TAXONTREE_DB=~/.taxontree python web/app.py

Then visit http://localhost:8080/api/list?ids=9606&rank=1&name=1
"""

import sys
from pathlib import Path

from flask import Flask, Response, jsonify, request, stream_with_context

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from taxontree.cli import parse_taxids
from taxontree.config import Config
from taxontree.loading import load_all
from taxontree.printer import ListOptions, TreePrinter
from taxontree.taxdump import AuxiliaryTables
from taxontree.tree import TaxonTree

app = Flask(__name__)

# Global data (loaded once at startup)
tree: TaxonTree | None = None
tables: AuxiliaryTables | None = None

TRUE_VALUES = {"1", "true", "yes", "on"}


def get_flag(name: str) -> bool:
    """Read a boolean query parameter."""
    return request.args.get(name, "").strip().lower() in TRUE_VALUES


@app.route('/health')
def health():
    """Health check endpoint for debugging."""
    return jsonify({
        'status': 'ok',
        'tree_loaded': tree is not None,
        'taxids': len(tree) if tree is not None else 0,
        'names_loaded': bool(tables and tables.names),
        'ranks_loaded': bool(tree and tree.ranks),
    })


@app.route('/api/list')
def list_subtrees():
    """Stream the subtrees of the requested taxids."""
    if tree is None or tables is None:
        return jsonify({'error': 'Taxonomy not loaded'}), 503

    try:
        taxids = parse_taxids(request.args.getlist('ids'))
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    if not taxids:
        return jsonify({'error': 'Parameter ids needed'}), 400

    options = ListOptions(
        indent=request.args.get('indent', '  '),
        show_rank=get_flag('rank'),
        show_name=get_flag('name'),
        json_format=get_flag('json'),
    )
    printer = TreePrinter(tree, tables, options)
    roots = printer.resolve_roots(taxids)
    if not roots:
        return jsonify({'error': 'No requested taxid found', 'ids': taxids}), 404

    mimetype = 'application/json' if options.json_format else 'text/plain'
    return Response(stream_with_context(printer.iter_lines(roots)), mimetype=mimetype)


def load_data(config: Config | None = None) -> None:
    """Load taxonomy data at startup."""
    global tree, tables

    config = config or Config()
    print(f"Loading taxdump from {config.data_dir}...")
    tree, tables = load_all(
        config.taxdump(),
        with_names=True,
        with_rank=True,
        threads=config.threads,
    )
    print("Data loaded!")


if __name__ == '__main__':
    config = Config()
    config.setup_logging()

    print("\n" + "=" * 50)
    print("Starting Taxontree Web Server...")
    print("=" * 50 + "\n")

    load_data(config)

    print("\n" + "=" * 50)
    print("Server ready!")
    print("Visit: http://127.0.0.1:8080/api/list?ids=9606")
    print("Health check: http://127.0.0.1:8080/health")
    print("=" * 50 + "\n")

    app.run(debug=False, port=8080, host='127.0.0.1')

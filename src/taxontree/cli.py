"""Command line interface.

Usage:
    taxontree list --ids 9606 -n -r --indent "    "
    taxontree list --ids 9605,239934 --json -o tree.json
    taxontree download --data-dir ~/.taxontree
"""

from __future__ import annotations

import argparse
import logging
import sys
import tarfile
from pathlib import Path

import requests

from taxontree import __version__
from taxontree.config import Config, default_data_dir, default_threads
from taxontree.download import TAXDUMP_URL, download_taxdump
from taxontree.loading import load_all
from taxontree.printer import ListOptions, TreePrinter

logger = logging.getLogger(__name__)


def parse_taxids(values: list[str]) -> list[int]:
    """Parse comma-separated taxid lists, keeping order and duplicates.

    Raises:
        ValueError: If an item is not an integer.
    """
    taxids = []
    for value in values:
        for item in value.split(","):
            item = item.strip()
            if not item:
                continue
            try:
                taxids.append(int(item))
            except ValueError:
                raise ValueError(f"invalid taxid: {item!r}") from None
    return taxids


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taxontree",
        description="List taxonomic subtrees of NCBI taxids",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--data-dir", type=Path, default=default_data_dir(),
                        help="directory containing nodes.dmp, names.dmp, delnodes.dmp and merged.dmp")
    common.add_argument("-v", "--verbose", action="store_true", help="print debug messages")
    common.add_argument("-q", "--quiet", action="store_true", help="only print errors")
    common.add_argument("--log-file", type=Path, default=None, help="also write debug log to this file")

    sub = parser.add_subparsers(dest="command", required=True)

    lst = sub.add_parser("list", parents=[common], help="list taxonomic tree of given taxids")
    lst.add_argument("--ids", action="append", default=[], metavar="TAXIDS",
                     help="taxid(s), multiple values should be separated by comma")
    lst.add_argument("--indent", default="  ", help="indent string (default: two spaces)")
    lst.add_argument("-r", "--show-rank", action="store_true", help="output rank")
    lst.add_argument("-n", "--show-name", action="store_true", help="output scientific name")
    lst.add_argument("--json", action="store_true", dest="json_format",
                     help="output in JSON format")
    lst.add_argument("--nodes-file", type=Path, default=None, help="explicit nodes.dmp path")
    lst.add_argument("--names-file", type=Path, default=None, help="explicit names.dmp path")
    lst.add_argument("--delnodes-file", type=Path, default=None, help="explicit delnodes.dmp path")
    lst.add_argument("--merged-file", type=Path, default=None, help="explicit merged.dmp path")
    lst.add_argument("-j", "--threads", type=int, default=default_threads(),
                     help="number of threads for loading data")
    lst.add_argument("-o", "--out-file", default="-", help='output file ("-" for stdout, ".gz" for gzip)')
    lst.add_argument("--line-buffered", action="store_true", help="flush output after every line")
    lst.add_argument("files", nargs="*", help=argparse.SUPPRESS)

    dl = sub.add_parser("download", parents=[common], help="download the NCBI taxdump")
    dl.add_argument("--url", default=TAXDUMP_URL, help="taxdump.tar.gz location")

    return parser


def make_config(args: argparse.Namespace) -> Config:
    """Build the run configuration from parsed arguments of any subcommand."""
    return Config(
        data_dir=args.data_dir,
        nodes_file=getattr(args, "nodes_file", None),
        names_file=getattr(args, "names_file", None),
        delnodes_file=getattr(args, "delnodes_file", None),
        merged_file=getattr(args, "merged_file", None),
        threads=getattr(args, "threads", default_threads()),
        out_file=getattr(args, "out_file", "-"),
        line_buffered=getattr(args, "line_buffered", False),
        verbose=args.verbose,
        quiet=args.quiet,
        log_file=args.log_file,
    )


def run_list(args: argparse.Namespace, config: Config) -> int:
    try:
        taxids = parse_taxids(args.ids)
    except ValueError as e:
        logger.error("%s", e)
        return 2
    if not taxids:
        logger.error("flag --ids needed")
        return 2
    if config.threads < 1:
        logger.error("the number of threads must be positive")
        return 2
    if args.files:
        logger.warning("no positional arguments needed")
    options = ListOptions(
        indent=args.indent,
        show_rank=args.show_rank,
        show_name=args.show_name,
        json_format=args.json_format,
        line_buffered=config.line_buffered,
    )

    try:
        tree, tables = load_all(
            config.taxdump(),
            with_names=options.show_name,
            with_rank=options.show_rank,
            threads=config.threads,
        )
        with config.open_output() as output:
            TreePrinter(tree, tables, options, output).print_roots(taxids)
    except OSError as e:
        logger.error("%s", e)
        return 1
    return 0


def run_download(args: argparse.Namespace, config: Config) -> int:
    try:
        paths = download_taxdump(config.data_dir, url=args.url)
    except (OSError, KeyError, tarfile.TarError, requests.RequestException) as e:
        logger.error("download failed: %s", e)
        return 1
    for path in paths:
        logger.info("saved %s", path)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = make_config(args)
    config.setup_logging()

    if args.command == "download":
        return run_download(args, config)
    return run_list(args, config)


if __name__ == "__main__":
    sys.exit(main())

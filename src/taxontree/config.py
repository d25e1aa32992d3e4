"""Run configuration shared by the command line and the web server."""

from __future__ import annotations

import contextlib
import gzip
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, TYPE_CHECKING

from taxontree.logs import configure_logging
from taxontree.taxdump import TaxDump

if TYPE_CHECKING:
    from collections.abc import Iterator

# Environment variable overriding the default data directory
DATA_DIR_ENV = "TAXONTREE_DB"
DEFAULT_DATA_DIR = Path("~/.taxontree")


def default_data_dir() -> Path:
    env = os.environ.get(DATA_DIR_ENV)
    if env:
        return Path(env).expanduser()
    return DEFAULT_DATA_DIR.expanduser()


def default_threads() -> int:
    return min(os.cpu_count() or 1, 4)


@dataclass
class Config:
    """Settings for one invocation.

    Attributes:
        data_dir: Directory holding the taxdump files.
        nodes_file: Explicit nodes.dmp path (defaults to data_dir).
        names_file: Explicit names.dmp path.
        delnodes_file: Explicit delnodes.dmp path.
        merged_file: Explicit merged.dmp path.
        threads: Worker threads for the load phase.
        out_file: Output path, "-" for stdout; a ".gz" suffix writes gzip.
        line_buffered: Flush the output after every line.
        verbose: Show debug diagnostics.
        quiet: Only show errors.
        log_file: Optional debug log file.
    """

    data_dir: Path = field(default_factory=default_data_dir)
    nodes_file: Path | None = None
    names_file: Path | None = None
    delnodes_file: Path | None = None
    merged_file: Path | None = None
    threads: int = field(default_factory=default_threads)
    out_file: str = "-"
    line_buffered: bool = False
    verbose: bool = False
    quiet: bool = False
    log_file: Path | None = None

    def setup_logging(self) -> None:
        """Configure diagnostics from the verbosity settings."""
        configure_logging(verbose=self.verbose, quiet=self.quiet, log_file=self.log_file)

    def taxdump(self) -> TaxDump:
        """Open the taxdump directory described by this config.

        Raises:
            FileNotFoundError: If nodes.dmp cannot be found.
        """
        return TaxDump(
            self.data_dir,
            nodes_file=self.nodes_file,
            names_file=self.names_file,
            delnodes_file=self.delnodes_file,
            merged_file=self.merged_file,
        )

    @contextlib.contextmanager
    def open_output(self) -> Iterator[IO[str]]:
        """Open the output stream; stdout is flushed but never closed."""
        if self.out_file == "-":
            try:
                yield sys.stdout
            finally:
                sys.stdout.flush()
            return

        path = Path(self.out_file)
        if path.suffix == ".gz":
            fh = gzip.open(path, "wt", encoding="utf-8")
        else:
            fh = open(path, "w", encoding="utf-8")
        with fh:
            yield fh

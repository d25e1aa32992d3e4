"""Download of the NCBI taxdump archive.

Fetches taxdump.tar.gz from the NCBI FTP mirror over HTTPS and unpacks
the four files used for listing into the data directory.
"""

from __future__ import annotations

import logging
import shutil
import tarfile
import tempfile
from pathlib import Path

import requests

from taxontree.taxdump import DELNODES_FILE, MERGED_FILE, NAMES_FILE, NODES_FILE

logger = logging.getLogger(__name__)

TAXDUMP_URL = "https://ftp.ncbi.nih.gov/pub/taxonomy/taxdump.tar.gz"
TAXDUMP_MEMBERS = (NODES_FILE, NAMES_FILE, DELNODES_FILE, MERGED_FILE)

USER_AGENT = "taxontree/0.1.0 (taxonomy subtree lister)"
CHUNK_SIZE = 1 << 20


def fetch_archive(
    url: str,
    dest: Path,
    *,
    session: requests.Session | None = None,
    timeout: int = 120,
) -> Path:
    """Stream ``url`` into the file ``dest``.

    Raises:
        requests.HTTPError: If the server answers with an error status.
    """
    http = session or requests.Session()
    with http.get(url, stream=True, timeout=timeout, headers={"User-Agent": USER_AGENT}) as response:
        response.raise_for_status()
        total = 0
        with open(dest, "wb") as f:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                f.write(chunk)
                total += len(chunk)
    logger.info("downloaded %s (%.1f MB)", url, total / 1e6)
    return dest


def extract_taxdump(archive: Path, data_dir: Path) -> list[Path]:
    """Extract the dump files used for listing from a taxdump archive.

    Returns:
        Paths of the extracted files.

    Raises:
        KeyError: If the archive lacks one of the required files.
    """
    data_dir.mkdir(parents=True, exist_ok=True)
    extracted = []
    with tarfile.open(archive, "r:gz") as tar:
        for name in TAXDUMP_MEMBERS:
            member = tar.getmember(name)
            src = tar.extractfile(member)
            if src is None:
                raise KeyError(f"{name} is not a regular file in {archive}")
            target = data_dir / name
            with src, open(target, "wb") as dst:
                shutil.copyfileobj(src, dst)
            extracted.append(target)
            logger.debug("extracted %s", target)
    return extracted


def download_taxdump(
    data_dir: str | Path,
    *,
    url: str = TAXDUMP_URL,
    session: requests.Session | None = None,
) -> list[Path]:
    """Download the taxdump archive and unpack it into ``data_dir``.

    Args:
        data_dir: Destination directory (created if missing).
        url: Archive location.
        session: Optional requests session to reuse.

    Returns:
        Paths of the extracted dump files.
    """
    data_dir = Path(data_dir).expanduser()
    with tempfile.TemporaryDirectory() as tmp:
        archive = fetch_archive(url, Path(tmp) / "taxdump.tar.gz", session=session)
        return extract_taxdump(archive, data_dir)

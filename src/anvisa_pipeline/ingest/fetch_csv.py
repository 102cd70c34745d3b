"""Download the petitions CSV export into a local cache directory."""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import urlparse

import requests

log = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "dados.csv"


def cache_path_for(url: str, out_dir: Path) -> Path:
    """Return the local cache path used for `url`.

    The last path segment of the URL names the file; URLs without one
    fall back to ``dados.csv``.
    """
    name = Path(urlparse(url).path).name or DEFAULT_FILE_NAME
    return out_dir / name


def download_csv(url: str, out_dir: Path, user_agent: str, force: bool = False) -> Path:
    """Download or return the cached CSV export for `url`.

    Args:
        url: Remote location of the CSV export.
        out_dir: Local directory to cache the downloaded file.
        user_agent: User-Agent header value to send with the request.
        force: Download again even if a non-empty cached copy exists.

    Returns:
        Path to the downloaded (or cached) CSV file.

    Raises:
        requests.HTTPError if the remote request fails (non-2xx status).
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = cache_path_for(url, out_dir)

    if not force and out_path.exists() and out_path.stat().st_size > 0:
        log.info("Cache hit: %s", out_path)
        return out_path

    log.info("Downloading %s", url)
    r = requests.get(url, headers={"User-Agent": user_agent}, timeout=60)
    r.raise_for_status()
    out_path.write_bytes(r.content)
    log.info("Saved: %s (%d bytes)", out_path, out_path.stat().st_size)
    return out_path

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Callable

import httpx

from .github.client import GitHubRestClient


class DownloadStatus(str, Enum):
    REJECTED = "rejected"
    ALREADY_PRESENT = "already_present"
    DOWNLOADED = "downloaded"
    FAILED = "failed"


def download_archive(
    client: GitHubRestClient,
    url: str,
    filename: str,
    *,
    archive_dir: str | Path,
    prefix: str = "kifu-",
    on_message: Callable[[str], None] | None = None,
    on_warning: Callable[[str], None] | None = None,
) -> DownloadStatus:
    """Fetch one archive into ``archive_dir``.

    Filenames without ``prefix`` are rejected before any filesystem access.
    An archive already on disk counts as satisfied and makes no request.
    Failures are reported and leave no partial file behind.
    """
    if not filename.startswith(prefix):
        return DownloadStatus.REJECTED

    target = Path(archive_dir) / filename
    if target.exists():
        if on_message:
            on_message(f"already downloaded {filename}, skipping.")
        return DownloadStatus.ALREADY_PRESENT

    target.parent.mkdir(parents=True, exist_ok=True)
    if on_message:
        on_message(f"download {filename} to {archive_dir} ...")
    try:
        client.download(url, target)
    except httpx.HTTPError as exc:
        target.unlink(missing_ok=True)
        if on_warning:
            on_warning(f"download failed for {filename} ({url}): {exc}")
        return DownloadStatus.FAILED
    return DownloadStatus.DOWNLOADED

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from .config import SyncConfig
from .dispatch import dispatch_log
from .github.client import GitHubRestClient
from .listing import ListingResult, list_artifacts


@dataclass(frozen=True)
class SyncSummary:
    listing: ListingResult
    downloads: int
    unzipped: int


def run_sync(
    config: SyncConfig,
    *,
    token: str | None = None,
    workdir: str | Path = ".",
    client: GitHubRestClient | None = None,
    on_message: Callable[[str], None] | None = None,
    on_warning: Callable[[str], None] | None = None,
) -> SyncSummary:
    """List artifacts into the log file, then download and unzip from it.

    A failed listing page ends the listing phase only; whatever was logged
    before the failure is still dispatched.
    """
    created_client = client is None
    if client is None:
        client = GitHubRestClient(
            token=token, base_url=config.base_url, timeout=config.timeout
        )

    log_path = config.logfile_path(workdir)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with log_path.open("w", encoding="utf-8") as log:
            listing = list_artifacts(
                client, config, log, on_message=on_message, on_warning=on_warning
            )
        with log_path.open("r", encoding="utf-8") as log:
            result = dispatch_log(
                log,
                client,
                config,
                workdir=workdir,
                on_message=on_message,
                on_warning=on_warning,
            )
    finally:
        if created_client:
            client.close()

    return SyncSummary(
        listing=listing, downloads=result.downloads, unzipped=result.unzipped
    )

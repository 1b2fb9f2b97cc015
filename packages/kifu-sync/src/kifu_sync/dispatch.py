from __future__ import annotations

import re
import zipfile
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Iterable

from .config import SyncConfig
from .download import DownloadStatus, download_archive
from .github.client import GitHubRestClient
from .unzip import extract_archive

# "name": "kifu-N9_20220720154803",
NAME_PATTERN = re.compile(r'name": "(.+)",')
# "archive_download_url": "https://api.github.com/repos/OWNER/REPO/actions/artifacts/ID/zip",
URL_PATTERN = re.compile(r'archive_download_url": "(http.+zip)')
INDEX_PATTERN = re.compile(r"N(\d+)_")


@dataclass(frozen=True)
class DispatchState:
    seen: tuple[bool, ...]
    remaining: int
    pending: str | None = None

    @classmethod
    def initial(cls, *, dedup_size: int, remaining: int) -> "DispatchState":
        return cls(seen=(False,) * dedup_size, remaining=remaining)

    @property
    def exhausted(self) -> bool:
        return self.remaining <= 0

    def mark(self, idx: int) -> "DispatchState":
        seen = self.seen[:idx] + (True,) + self.seen[idx + 1 :]
        return replace(self, seen=seen)


@dataclass(frozen=True)
class PendingDownload:
    filename: str
    url: str


@dataclass(frozen=True)
class LineOutcome:
    state: DispatchState
    download: PendingDownload | None = None
    warning: str | None = None


def feed_line(state: DispatchState, line: str) -> LineOutcome:
    """Advance the dispatcher by one log line."""
    name = NAME_PATTERN.search(line)
    if name:
        num = INDEX_PATTERN.search(name.group(1))
        if not num:
            return LineOutcome(replace(state, pending=None))
        idx = int(num.group(1))
        size = len(state.seen)
        if idx >= size:
            return LineOutcome(
                replace(state, pending=None),
                warning=f"ERROR: idx:{idx} >= {size}",
            )
        if state.seen[idx]:
            return LineOutcome(replace(state, pending=None))
        marked = state.mark(idx)
        return LineOutcome(replace(marked, pending=name.group(1) + ".zip"))

    url = URL_PATTERN.search(line)
    if not url or state.pending is None:
        return LineOutcome(state)

    download = PendingDownload(filename=state.pending, url=url.group(1))
    return LineOutcome(
        replace(state, pending=None, remaining=state.remaining - 1),
        download=download,
    )


@dataclass
class DispatchResult:
    downloads: int = 0
    unzipped: int = 0


def dispatch_log(
    lines: Iterable[str],
    client: GitHubRestClient,
    config: SyncConfig,
    *,
    workdir: str | Path = ".",
    on_message: Callable[[str], None] | None = None,
    on_warning: Callable[[str], None] | None = None,
) -> DispatchResult:
    """Download and unzip every eligible archive named in the artifact log."""
    archive_dir = config.archive_path(workdir)
    extract_dir = config.extract_path(workdir)
    state = DispatchState.initial(
        dedup_size=config.dedup_size, remaining=config.max_archives
    )
    result = DispatchResult()

    for line in lines:
        outcome = feed_line(state, line)
        state = outcome.state
        if outcome.warning and on_warning:
            on_warning(outcome.warning)
        if outcome.download is None:
            continue

        filename = outcome.download.filename
        status = download_archive(
            client,
            outcome.download.url,
            filename,
            archive_dir=archive_dir,
            prefix=config.name_prefix,
            on_message=on_message,
            on_warning=on_warning,
        )
        if status is not DownloadStatus.REJECTED:
            result.downloads += 1
        if status is DownloadStatus.DOWNLOADED:
            if on_message:
                on_message(f"unzip {filename} to {extract_dir} ...")
            try:
                extract_archive(
                    archive_dir / filename, extract_dir, prefix=config.unzip_prefix
                )
            except (zipfile.BadZipFile, ValueError) as exc:
                if on_warning:
                    on_warning(f"unzip failed for {filename}: {exc}")
            else:
                result.unzipped += 1

        if state.exhausted:
            break

    return result

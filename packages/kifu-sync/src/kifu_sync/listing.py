from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping, TextIO

import httpx

from .config import SyncConfig
from .github.client import GitHubRestClient

Reporter = Callable[[str], None]


@dataclass(frozen=True)
class ArtifactRef:
    name: str
    archive_download_url: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, object]) -> "ArtifactRef":
        return cls(
            name=str(payload.get("name") or ""),
            archive_download_url=str(payload.get("archive_download_url") or ""),
        )

    def log_lines(self) -> list[str]:
        # The dispatcher scrapes these two lines back out of the log.
        return [
            f'  "name": "{self.name}",',
            f'  "archive_download_url": "{self.archive_download_url}",',
        ]


@dataclass(frozen=True)
class ListingError:
    page: int
    status_code: int | None
    detail: str

    def describe(self) -> str:
        status = self.status_code if self.status_code is not None else "transport error"
        return f"Failed to fetch page {self.page}: {status}\nResponse body: {self.detail}"


@dataclass(frozen=True)
class ListingResult:
    pages: int
    artifacts: int
    error: ListingError | None = None


def _noop(_: str) -> None:
    return None


def list_artifacts(
    client: GitHubRestClient,
    config: SyncConfig,
    log: TextIO,
    *,
    on_message: Reporter | None = None,
    on_warning: Reporter | None = None,
) -> ListingResult:
    """Page through the artifact listing and write name/url line pairs to ``log``.

    Stops at ``config.max_pages``, at the first empty page, or at the first
    failed page. A failed page is reported, never retried.
    """
    message = on_message or _noop
    warn = on_warning or _noop
    pages = 0
    artifacts = 0

    for page in range(1, config.max_pages + 1):
        try:
            response = client.list_artifacts_page(
                config.owner, config.repo, page=page, per_page=config.per_page
            )
        except (httpx.HTTPError, ValueError) as exc:
            error = ListingError(page=page, status_code=None, detail=str(exc))
            warn(error.describe())
            return ListingResult(pages=pages, artifacts=artifacts, error=error)

        if not response.ok:
            error = ListingError(
                page=page, status_code=response.status_code, detail=response.text
            )
            warn(error.describe())
            return ListingResult(pages=pages, artifacts=artifacts, error=error)

        pages += 1
        data = response.data if isinstance(response.data, dict) else {}
        items = data.get("artifacts") or []
        message(f"page {page}: {len(items)} artifacts")
        if not items:
            break

        for item in items:
            ref = ArtifactRef.from_payload(item)
            for line in ref.log_lines():
                log.write(line + "\n")
            artifacts += 1

    return ListingResult(pages=pages, artifacts=artifacts)

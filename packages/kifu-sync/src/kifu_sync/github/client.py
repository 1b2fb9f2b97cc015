from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import httpx


@dataclass(frozen=True)
class GitHubResponse:
    data: Any
    headers: Mapping[str, str]
    status_code: int | None = None
    text: str = ""

    @property
    def ok(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 300


class GitHubRestClient:
    """Blocking GitHub REST client.

    One request per call: no retries and no rate limiting. When ``token`` is
    empty the requests go out unauthenticated.
    """

    def __init__(
        self,
        token: str | None = None,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "kifu-sync",
        }
        if token:
            headers["Authorization"] = f"token {token}"
        self._client = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
        )

    def __enter__(self) -> "GitHubRestClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
    ) -> GitHubResponse:
        response = self._client.request(method, path, params=params)
        data = response.json() if response.is_success else None
        return GitHubResponse(
            data=data,
            headers=response.headers,
            status_code=response.status_code,
            text=response.text,
        )

    def list_artifacts_page(
        self, owner: str, repo: str, *, page: int, per_page: int = 100
    ) -> GitHubResponse:
        return self.request(
            "GET",
            f"/repos/{owner}/{repo}/actions/artifacts",
            params={"per_page": per_page, "page": page},
        )

    def download(self, url: str, target: Path) -> int:
        """Stream ``url`` into ``target``; raises ``httpx.HTTPError`` on failure."""
        written = 0
        with self._client.stream("GET", url) as response:
            response.raise_for_status()
            with target.open("wb") as fh:
                for chunk in response.iter_bytes():
                    fh.write(chunk)
                    written += len(chunk)
        return written

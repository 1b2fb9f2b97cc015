from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class SyncConfig(BaseModel):
    """Pinned defaults for the kifu artifact sync."""

    owner: str = "o-jill"
    repo: str = "ruversi"
    base_url: str = "https://api.github.com"
    timeout: float = 30.0

    per_page: int = Field(default=100, ge=1, le=100)
    max_pages: int = Field(default=3, ge=1)

    # Stop after this many archives have been dispatched from the log.
    max_archives: int = Field(default=200, ge=1)
    # Artifact names carry an index N<digits>_; indexes >= dedup_size are discarded.
    dedup_size: int = Field(default=100, ge=1)

    name_prefix: str = "kifu-"
    unzip_prefix: str = "kifu"

    logfile: str = "ikkatsu.log"
    archive_dir: str = "archive"
    extract_dir: str = "kifu"

    @property
    def repo_full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def logfile_path(self, workdir: str | Path = ".") -> Path:
        return Path(workdir) / self.logfile

    def archive_path(self, workdir: str | Path = ".") -> Path:
        return Path(workdir) / self.archive_dir

    def extract_path(self, workdir: str | Path = ".") -> Path:
        return Path(workdir) / self.extract_dir

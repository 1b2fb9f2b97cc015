from __future__ import annotations

import shutil
import zipfile
from pathlib import Path


def _normalize_member(name: str) -> str:
    raw = name.replace("\\", "/").strip()
    while raw.startswith("/"):
        raw = raw[1:]
    parts = [p for p in raw.split("/") if p not in {"", "."}]
    if not parts:
        raise ValueError(f"invalid archive member: {name!r}")
    if any(p == ".." for p in parts):
        raise ValueError(f"path traversal is not allowed: {name!r}")
    return "/".join(parts)


def extract_archive(
    archive_path: str | Path, dest: str | Path, *, prefix: str = "kifu"
) -> list[Path]:
    """Extract every member of ``archive_path`` under ``dest``.

    Member subdirectories are recreated and existing files are overwritten.
    Archives whose filename lacks ``prefix`` are left alone.
    """
    archive_path = Path(archive_path)
    if not archive_path.name.startswith(prefix):
        return []

    dest = Path(dest)
    written: list[Path] = []
    with zipfile.ZipFile(archive_path) as zf:
        for info in zf.infolist():
            target = dest / _normalize_member(info.filename)
            if info.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            with zf.open(info) as src, target.open("wb") as out:
                shutil.copyfileobj(src, out)
            written.append(target)
    return written

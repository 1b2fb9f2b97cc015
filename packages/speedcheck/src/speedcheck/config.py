from __future__ import annotations

import os
import shlex
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_RFENS: tuple[str, ...] = (
    "8/8/8/3Aa3/3aA3/8/8/8 b",
    "8/8/8/3aA3/3Aa3/8/8/8 b",
    "A1A1A3/1c4/Aa1dA/1c4/A1a1a3/2a2a2/2a3a1/2A4A b",
)


def features_from_env() -> str:
    return os.environ.get("FEATURES", "")


class BenchConfig(BaseModel):
    """Pinned defaults for the engine speed checks."""

    # Each position (search) or duel (game) is run this many times.
    runs: int = Field(default=6, ge=1)

    search_depth: int = 11
    game_depth: int = 7
    duel_level: int = 2

    evfile: str = "data/evaltable.txt"
    rfens: tuple[str, ...] = DEFAULT_RFENS

    # Extra cargo arguments, e.g. "--features=avx".
    features: str = Field(default_factory=features_from_env)

    def feature_args(self) -> list[str]:
        return shlex.split(self.features)


def result_log_path(
    workdir: str | Path = ".", *, now: datetime | None = None
) -> Path:
    stamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S")
    return Path(workdir) / f"speedcheck{stamp}.txt"

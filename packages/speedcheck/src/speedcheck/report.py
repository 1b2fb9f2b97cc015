from __future__ import annotations

from collections.abc import Sequence

from .parsing import GameSample, SearchSegment
from .stats import summarize


def search_report(segment: SearchSegment) -> list[str]:
    stats = segment.stats()
    return [
        f"speed: {segment.speed():.2f} nodes/msec",
        f"{segment.nodes} nodes / {stats.mean:.2f} +- {stats.stdev:.2f} msec "
        f"({stats.minimum} -- {stats.maximum})",
    ]


def game_report(sample: GameSample) -> str:
    return f"{sample.msec_per_game:.2f} msec/game = {sample.msec} / {sample.games}"


def game_summary(samples: Sequence[GameSample]) -> list[str]:
    if not samples:
        return []
    stats = summarize([s.msec_per_game for s in samples])
    games = sum(s.games for s in samples)
    return [
        f"games: {games} in {stats.count} runs",
        f"{stats.mean:.2f} +- {stats.stdev:.2f} msec/game "
        f"({stats.minimum:.2f} -- {stats.maximum:.2f})",
    ]

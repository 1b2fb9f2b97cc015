"""Line-pattern extraction for engine benchmark output.

Search runs end with a line such as::

    val:26.44183 257230 nodes. @@d6[]a4@@b6[]a2@@b8 337msec

and duel runs print a summary such as::

    total,8,win,4,draw,0,lose,4,balance,0,8,50.00%,R,+0.0

Saved result logs wrap search lines in ``Begin RFEN:<rfen>`` / ``End RFEN:<rfen>``
markers and follow each duel's output with an ``elapsed,<seconds>`` line.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from .stats import SampleStats, safe_ratio, summarize

SEARCH_PATTERN = re.compile(r" (\d+) nodes\. .+ (\d+)msec")
GAME_TOTAL_PATTERN = re.compile(r"^total,(\d+),")

SEARCH_PREFIX = "val:"
BEGIN_PREFIX = "Begin RFEN:"
END_PREFIX = "End RFEN:"
TOTAL_PREFIX = "total,"
ELAPSED_PREFIX = "elapsed,"


class BenchmarkParseError(RuntimeError):
    pass


@dataclass(frozen=True)
class SearchSample:
    nodes: int
    elapsed_msec: int


@dataclass
class SearchSegment:
    label: str
    nodes: int = 0
    elapsed: list[int] = field(default_factory=list)

    def add(self, sample: SearchSample) -> None:
        self.nodes = sample.nodes
        self.elapsed.append(sample.elapsed_msec)

    def stats(self) -> SampleStats:
        if not self.elapsed:
            raise BenchmarkParseError(f"no search results for RFEN:{self.label}")
        return summarize(self.elapsed)

    def speed(self) -> float:
        """Throughput in nodes per millisecond."""
        return safe_ratio(self.nodes, self.stats().mean)


@dataclass(frozen=True)
class GameSample:
    elapsed_sec: float
    games: int

    @property
    def msec(self) -> float:
        # Wall time rounded half-up to 0.1 ms.
        return math.floor(self.elapsed_sec * 10000 + 0.5) / 10

    @property
    def msec_per_game(self) -> float:
        return safe_ratio(self.msec, self.games)

    @property
    def sec_per_game(self) -> float:
        return safe_ratio(self.elapsed_sec, self.games)


def parse_search_line(line: str) -> SearchSample:
    m = SEARCH_PATTERN.search(line)
    if not m:
        raise BenchmarkParseError(f"no node count / elapsed time in: {line!r}")
    return SearchSample(nodes=int(m.group(1)), elapsed_msec=int(m.group(2)))


def parse_game_total(line: str) -> int:
    m = GAME_TOTAL_PATTERN.match(line)
    if not m:
        raise BenchmarkParseError(f"no game count in: {line!r}")
    return int(m.group(1))


def find_game_total(lines: Iterable[str]) -> int:
    """Game count from the first ``total,`` record in ``lines``; 1 if none."""
    for line in lines:
        if line.startswith(TOTAL_PREFIX):
            return parse_game_total(line)
    return 1


def iter_search_segments(lines: Iterable[str]) -> Iterator[SearchSegment]:
    """Yield each search segment as its ``End RFEN:`` marker is reached.

    Any line carrying a node count and elapsed time is a sample, the same rule
    the live runner applies. ``Begin RFEN:`` discards anything collected since
    the previous boundary.
    """
    segment = SearchSegment(label="")
    for raw in lines:
        line = raw.rstrip("\r\n")
        if line.startswith(SEARCH_PREFIX) or SEARCH_PATTERN.search(line):
            segment.add(parse_search_line(line))
        elif line.startswith(BEGIN_PREFIX):
            segment = SearchSegment(label=line[len(BEGIN_PREFIX) :])
        elif line.startswith(END_PREFIX):
            segment.stats()
            yield segment
            segment = SearchSegment(label="")


def iter_game_samples(lines: Iterable[str]) -> Iterator[GameSample]:
    """Yield one sample per ``elapsed,<seconds>`` line.

    The game count comes from the latest ``total,`` record since the previous
    sample.
    """
    games: int | None = None
    for raw in lines:
        line = raw.rstrip("\r\n")
        if line.startswith(TOTAL_PREFIX):
            games = parse_game_total(line)
        elif line.startswith(ELAPSED_PREFIX):
            value = line[len(ELAPSED_PREFIX) :].strip()
            try:
                elapsed = float(value)
            except ValueError as exc:
                raise BenchmarkParseError(f"bad elapsed time in: {line!r}") from exc
            yield GameSample(elapsed_sec=elapsed, games=games if games is not None else 1)
            games = None

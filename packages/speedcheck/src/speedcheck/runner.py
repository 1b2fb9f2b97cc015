from __future__ import annotations

import os
import shlex
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from .config import BenchConfig
from .parsing import (
    ELAPSED_PREFIX,
    GameSample,
    SearchSegment,
    find_game_total,
    parse_search_line,
)
from .report import game_report


class CommandFailedError(RuntimeError):
    def __init__(self, cmd: list[str], returncode: int, stderr: str = "") -> None:
        message = f"`{fmt_cmd(cmd)}` is failed. (exit {returncode})"
        if stderr.strip():
            message = f"{message}\n{stderr.rstrip()}"
        super().__init__(message)
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr


@dataclass(frozen=True)
class CmdResult:
    cmd: list[str]
    returncode: int
    stdout: str
    duration_s: float
    stderr: str = ""


Executor = Callable[[list[str]], CmdResult]


def fmt_cmd(cmd: list[str]) -> str:
    return " ".join(shlex.quote(c) for c in cmd)


def run_cmd(cmd: list[str]) -> CmdResult:
    start = time.monotonic()
    p = subprocess.run(
        cmd,
        text=True,
        capture_output=True,
        env=os.environ.copy(),
    )
    end = time.monotonic()
    return CmdResult(
        cmd=cmd,
        returncode=int(p.returncode),
        stdout=p.stdout or "",
        duration_s=end - start,
        stderr=p.stderr or "",
    )


def exec_command(cmd: list[str]) -> CmdResult:
    """Run ``cmd``; a non-zero exit raises CommandFailedError."""
    result = run_cmd(cmd)
    if result.returncode != 0:
        raise CommandFailedError(cmd, result.returncode, result.stderr)
    return result


def search_command(config: BenchConfig, rfen: str) -> list[str]:
    return [
        "cargo",
        "run",
        "--release",
        *config.feature_args(),
        "--",
        "--rfen",
        rfen,
        "--depth",
        str(config.search_depth),
        "--ev1",
        config.evfile,
    ]


def build_command(config: BenchConfig) -> list[str]:
    return ["cargo", "build", "--release", *config.feature_args()]


def duel_command(config: BenchConfig) -> list[str]:
    return [
        "cargo",
        "run",
        "--release",
        *config.feature_args(),
        "--",
        "--silent",
        "--duel",
        str(config.duel_level),
        "--depth",
        str(config.game_depth),
        "--ev1",
        config.evfile,
        "--ev2",
        config.evfile,
    ]


class ResultLog:
    """Append-only benchmark log, replayable by the summarizer."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def write_lines(self, lines: list[str]) -> None:
        with self.path.open("a", encoding="utf-8") as fh:
            for line in lines:
                fh.write(line + "\n")

    def echo(self, line: str) -> None:
        self.write_lines([line])


def _last_line(text: str) -> str:
    lines = [line for line in text.splitlines() if line.strip()]
    return lines[-1] if lines else ""


def run_search(
    config: BenchConfig,
    log: ResultLog,
    *,
    execute: Executor = exec_command,
    on_message: Callable[[str], None] | None = None,
) -> list[SearchSegment]:
    segments: list[SearchSegment] = []
    for rfen in config.rfens:
        segment = SearchSegment(label=rfen)
        log.echo(f"Begin RFEN:{rfen}")
        if on_message:
            on_message(f"Begin RFEN:{rfen}")
        for j in range(config.runs):
            line = _last_line(execute(search_command(config, rfen)).stdout)
            log.echo(line)
            sample = parse_search_line(line)
            segment.add(sample)
            if on_message:
                on_message(f" {j}: {sample.nodes} nodes {sample.elapsed_msec}msec")
        log.echo(f"End RFEN:{rfen}")
        if on_message:
            on_message(f"End RFEN:{rfen}")
        segments.append(segment)
    return segments


def run_game(
    config: BenchConfig,
    log: ResultLog,
    *,
    execute: Executor = exec_command,
    on_message: Callable[[str], None] | None = None,
) -> list[GameSample]:
    execute(build_command(config))

    samples: list[GameSample] = []
    for _ in range(config.runs):
        result = execute(duel_command(config))
        lines = result.stdout.splitlines()
        sample = GameSample(
            elapsed_sec=result.duration_s,
            games=find_game_total(reversed(lines)),
        )
        log.write_lines(lines + [f"{ELAPSED_PREFIX}{sample.elapsed_sec!r}"])
        samples.append(sample)
        if on_message:
            on_message(game_report(sample))
    return samples

from datetime import datetime

import pytest

import speedcheck.runner as runner
from speedcheck.config import BenchConfig, result_log_path
from speedcheck.parsing import iter_game_samples, iter_search_segments
from speedcheck.report import game_report, search_report
from speedcheck.runner import (
    CmdResult,
    CommandFailedError,
    ResultLog,
    duel_command,
    exec_command,
    run_game,
    run_search,
    search_command,
)

DUEL_OUTPUT = "\n".join(
    [
        "total,8,win,4,draw,0,lose,4,balance,0,8,50.00%,R,+0.0",
        "ev1 @@,win,0,draw,0,lose,4",
        "ev1 [],win,4,draw,0,lose,0",
        "ev1:data/evaltable.txt",
        "ev2:data/evaltable.txt",
    ]
)


class ScriptedExecutor:
    def __init__(self, search_msecs=(), duration=0.0, stdout=""):
        self.msecs = list(search_msecs)
        self.duration = duration
        self.stdout = stdout
        self.commands: list[list[str]] = []

    def __call__(self, cmd: list[str]) -> CmdResult:
        self.commands.append(cmd)
        if "--rfen" in cmd:
            msec = self.msecs.pop(0)
            out = f"Hello, reversi world!\nval:1.5 1000 nodes. @@d6 {msec}msec\n"
            return CmdResult(cmd=cmd, returncode=0, stdout=out, duration_s=0.1)
        return CmdResult(
            cmd=cmd, returncode=0, stdout=self.stdout, duration_s=self.duration
        )


def test_search_command_passes_features_and_depth():
    config = BenchConfig(features="--features=avx")
    cmd = search_command(config, "8/8/8/3Aa3/3aA3/8/8/8 b")
    assert cmd[:4] == ["cargo", "run", "--release", "--features=avx"]
    assert cmd[cmd.index("--depth") + 1] == "11"
    assert cmd[cmd.index("--rfen") + 1] == "8/8/8/3Aa3/3aA3/8/8/8 b"
    assert cmd[-2:] == ["--ev1", "data/evaltable.txt"]


def test_features_read_from_environment(monkeypatch):
    monkeypatch.setenv("FEATURES", "--features=avx")
    assert BenchConfig().feature_args() == ["--features=avx"]
    monkeypatch.delenv("FEATURES")
    assert "--features=avx" not in duel_command(BenchConfig())


def test_result_log_path_is_timestamped(tmp_path):
    path = result_log_path(tmp_path, now=datetime(2024, 1, 2, 3, 4, 5))
    assert path == tmp_path / "speedcheck20240102030405.txt"


def test_search_run_matches_replay(tmp_path):
    config = BenchConfig(runs=3, rfens=("8/8/8/3Aa3/3aA3/8/8/8 b", "8/8/8/3aA3/3Aa3/8/8/8 b"))
    log = ResultLog(tmp_path / "speedcheck.txt")
    execute = ScriptedExecutor(search_msecs=[10, 20, 30, 5, 5, 5])

    segments = run_search(config, log, execute=execute)

    assert len(execute.commands) == 6
    assert [s.elapsed for s in segments] == [[10, 20, 30], [5, 5, 5]]
    live = [search_report(s) for s in segments]
    assert live[0] == [
        "speed: 50.00 nodes/msec",
        "1000 nodes / 20.00 +- 8.16 msec (10 -- 30)",
    ]
    with log.path.open(encoding="utf-8") as fh:
        replayed = [search_report(s) for s in iter_search_segments(fh)]
    assert replayed == live


def test_game_run_reports_per_run_and_matches_replay(tmp_path):
    config = BenchConfig(runs=2)
    log = ResultLog(tmp_path / "speedcheck.txt")
    execute = ScriptedExecutor(duration=4.0, stdout=DUEL_OUTPUT)
    messages: list[str] = []

    samples = run_game(config, log, execute=execute, on_message=messages.append)

    assert execute.commands[0][:3] == ["cargo", "build", "--release"]
    assert len(execute.commands) == 3
    assert [s.games for s in samples] == [8, 8]
    assert samples[0].sec_per_game == pytest.approx(0.5)
    assert messages == ["500.00 msec/game = 4000.0 / 8"] * 2
    with log.path.open(encoding="utf-8") as fh:
        replayed = list(iter_game_samples(fh))
    assert replayed == samples
    assert [game_report(s) for s in replayed] == messages


def test_exec_command_raises_on_failure(monkeypatch):
    def fake_run(cmd):
        return CmdResult(cmd=cmd, returncode=101, stdout="", duration_s=0.0)

    monkeypatch.setattr(runner, "run_cmd", fake_run)
    with pytest.raises(CommandFailedError) as excinfo:
        exec_command(["cargo", "build", "--release"])
    assert excinfo.value.returncode == 101
    assert "`cargo build --release` is failed." in str(excinfo.value)


def test_failed_search_aborts_run(tmp_path):
    def failing(cmd):
        raise CommandFailedError(cmd, 1)

    with pytest.raises(CommandFailedError):
        run_search(BenchConfig(runs=1), ResultLog(tmp_path / "x.txt"), execute=failing)


class FixedOutputExecutor:
    def __init__(self, stdout: str):
        self.stdout = stdout

    def __call__(self, cmd: list[str]) -> CmdResult:
        return CmdResult(cmd=cmd, returncode=0, stdout=self.stdout, duration_s=0.1)


def test_search_line_without_val_prefix_replays(tmp_path):
    config = BenchConfig(runs=2, rfens=("8/8/8/3Aa3/3aA3/8/8/8 b",))
    log = ResultLog(tmp_path / "speedcheck.txt")
    execute = FixedOutputExecutor("Some(1.5) 1000 nodes. @@d6 10msec\n")

    live = [search_report(s) for s in run_search(config, log, execute=execute)]

    with log.path.open(encoding="utf-8") as fh:
        replayed = [search_report(s) for s in iter_search_segments(fh)]
    assert live == [["speed: 100.00 nodes/msec", "1000 nodes / 10.00 +- 0.00 msec (10 -- 10)"]]
    assert replayed == live


def test_search_ignores_trailing_blank_lines(tmp_path):
    config = BenchConfig(runs=1, rfens=("8/8/8/3Aa3/3aA3/8/8/8 b",))
    log = ResultLog(tmp_path / "speedcheck.txt")
    execute = FixedOutputExecutor("Hello\nval:1.5 1000 nodes. @@d6 25msec\n\n  \n")

    (segment,) = run_search(config, log, execute=execute)

    assert segment.elapsed == [25]
    with log.path.open(encoding="utf-8") as fh:
        (replayed,) = list(iter_search_segments(fh))
    assert replayed.elapsed == [25]


def test_command_failure_carries_stderr(monkeypatch):
    def fake_run(cmd):
        return CmdResult(
            cmd=cmd,
            returncode=101,
            stdout="",
            duration_s=0.0,
            stderr="error[E0425]: cannot find value `x` in this scope\n",
        )

    monkeypatch.setattr(runner, "run_cmd", fake_run)
    with pytest.raises(CommandFailedError) as excinfo:
        exec_command(["cargo", "build", "--release"])
    assert "error[E0425]" in excinfo.value.stderr
    assert "error[E0425]: cannot find value `x` in this scope" in str(excinfo.value)


def test_run_cmd_captures_stderr(monkeypatch):
    seen = {}

    class Completed:
        returncode = 0
        stdout = "out\n"
        stderr = "warning: unused variable\n"

    def fake_subprocess_run(cmd, **kwargs):
        seen.update(kwargs)
        return Completed()

    monkeypatch.setattr(runner.subprocess, "run", fake_subprocess_run)
    result = runner.run_cmd(["cargo", "build", "--release"])

    assert seen["capture_output"] is True
    assert "cwd" not in seen
    assert result.stdout == "out\n"
    assert result.stderr == "warning: unused variable\n"

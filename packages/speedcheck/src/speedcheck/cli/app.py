import sys

import typer
from rich import print

from ..config import BenchConfig, result_log_path
from ..parsing import BenchmarkParseError, iter_game_samples, iter_search_segments
from ..report import game_report, game_summary, search_report
from ..runner import CommandFailedError, ResultLog, run_game, run_search

runner_app = typer.Typer(add_completion=False, pretty_exceptions_show_locals=False)
summarizer_app = typer.Typer(add_completion=False, pretty_exceptions_show_locals=False)

RUNNER_MODES = {
    "search": "measure searching speed.",
    "learn": "[no longer supported!] measure learning speed.",
    "game": "measure game(duel) speed.",
    "help": "show this help.",
}
SUMMARIZER_MODES = {
    "search": "summarize a saved search speed log.",
    "learn": "[no longer supported!] summarize learning speed.",
    "game": "summarize a saved game(duel) speed log.",
    "help": "show this help.",
}


def _emit(line: str) -> None:
    typer.echo(line)


def _help(prog: str, modes: dict[str, str]) -> None:
    typer.echo(f"{prog} <mode>")
    typer.echo("mode:")
    for name, text in modes.items():
        typer.echo(f"  {name} : {text}")


def _fail(exc: Exception) -> None:
    typer.secho(str(exc), fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@runner_app.command()
def run(
    mode: str = typer.Argument("help", help="search, learn, game or help"),
    workdir: str = typer.Option(".", help="Directory for the speedcheck log"),
):
    """Run the engine repeatedly and report its speed."""
    if mode not in {"search", "learn", "game"}:
        _help("benchmark-runner", RUNNER_MODES)
        return
    if mode == "learn":
        typer.echo("deprecated.")
        return

    config = BenchConfig()
    log = ResultLog(result_log_path(workdir))
    print(f"[bold]features[/bold]: {config.features}")
    print(f"[bold]log[/bold] {log.path}")
    try:
        if mode == "search":
            segments = run_search(config, log, on_message=_emit)
            for segment in segments:
                for line in search_report(segment):
                    typer.echo(line)
        else:
            samples = run_game(config, log, on_message=_emit)
            for line in game_summary(samples):
                typer.echo(line)
    except (CommandFailedError, BenchmarkParseError) as exc:
        _fail(exc)


@summarizer_app.command()
def summarize(
    mode: str = typer.Argument("help", help="search, learn, game or help"),
):
    """Summarize a saved speedcheck log read from standard input."""
    if mode not in {"search", "learn", "game"}:
        _help("benchmark-summarizer", SUMMARIZER_MODES)
        return
    if mode == "learn":
        typer.echo("deprecated.")
        return

    try:
        if mode == "search":
            for segment in iter_search_segments(sys.stdin):
                for line in search_report(segment):
                    typer.echo(line)
        else:
            samples = []
            for sample in iter_game_samples(sys.stdin):
                samples.append(sample)
                typer.echo(game_report(sample))
            for line in game_summary(samples):
                typer.echo(line)
    except BenchmarkParseError as exc:
        _fail(exc)

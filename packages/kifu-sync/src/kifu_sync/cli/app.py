import sys

import typer
from rich import print
from rich.markup import escape

from ..config import SyncConfig
from ..github.auth import select_auth_token
from ..sync import run_sync

app = typer.Typer(add_completion=False, pretty_exceptions_show_locals=False)


def _info(message: str) -> None:
    print(escape(message))


def _warn(message: str) -> None:
    typer.secho(message, fg=typer.colors.YELLOW, err=True)


@app.command()
def sync(
    owner: str | None = typer.Option(None, help="Repository owner"),
    repo: str | None = typer.Option(None, help="Repository name"),
    max_pages: int | None = typer.Option(
        None, help="Limit listing pages (100 artifacts each)"
    ),
    max_archives: int | None = typer.Option(
        None, help="Stop after this many archives"
    ),
    workdir: str = typer.Option(
        ".", help="Directory holding the log, archive/ and kifu/"
    ),
):
    """Download and unzip kifu archives from CI artifacts.

    The bearer token is read from the first line of standard input.
    """
    overrides = {
        key: value
        for key, value in {
            "owner": owner,
            "repo": repo,
            "max_pages": max_pages,
            "max_archives": max_archives,
        }.items()
        if value is not None
    }
    try:
        config = SyncConfig(**overrides)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    token = select_auth_token(sys.stdin)
    print(f"[bold]Syncing[/bold] {escape(config.repo_full_name)} -> {escape(str(workdir))}")
    summary = run_sync(
        config,
        token=token,
        workdir=workdir,
        on_message=_info,
        on_warning=_warn,
    )
    print(f"downloaded: {summary.downloads}")
    print(f"unzipped: {summary.unzipped}")

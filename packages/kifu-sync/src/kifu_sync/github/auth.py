import os
import subprocess
from typing import TextIO


def select_auth_token(stream: TextIO | None = None) -> str | None:
    """Pick the bearer token for artifact requests.

    The first line of ``stream`` wins; an empty line falls back to
    ``GITHUB_TOKEN`` and then to ``gh auth token``. Returns None when nothing
    is available, in which case requests go out unauthenticated.
    """
    if stream is not None:
        token = (stream.readline() or "").strip()
        if token:
            return token

    token = os.getenv("GITHUB_TOKEN")
    if token:
        return token

    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            check=False,
            capture_output=True,
            text=True,
        )
        token = (result.stdout or "").strip()
        if result.returncode == 0 and token:
            return token
    except FileNotFoundError:
        pass

    return None

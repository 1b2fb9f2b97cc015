from .auth import select_auth_token
from .client import GitHubResponse, GitHubRestClient

__all__ = ["select_auth_token", "GitHubRestClient", "GitHubResponse"]

from octoform.clients.base import BaseHTTPClient
from octoform.clients.github import GitHubClient

__all__ = ["BaseHTTPClient", "GitHubClient"]

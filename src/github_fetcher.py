from __future__ import annotations

import asyncio
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Any

from utils.paths import normalize_path

LOG = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_RAW_URL = "https://raw.githubusercontent.com"
DEFAULT_USER_AGENT = "repo-tree-mcp"


class GitHubFetchError(RuntimeError):
    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


@dataclass(frozen=True)
class HttpResponse:
    status: int
    reason: str
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def _http_get(url: str, *, headers: dict[str, str], timeout: float) -> HttpResponse:
    req = urllib.request.Request(url, headers=headers)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return HttpResponse(status=int(resp.status), reason=str(resp.reason or ""), body=resp.read())
    except urllib.error.HTTPError as exc:
        # urlopen raises for 4xx/5xx; keep the status so callers can report it.
        return HttpResponse(status=int(exc.code), reason=str(exc.reason or ""), body=b"")


class GitHubFetcher:
    def __init__(
        self,
        *,
        api_base_url: str = DEFAULT_API_URL,
        raw_base_url: str = DEFAULT_RAW_URL,
        timeout_seconds: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.api_base_url = api_base_url.rstrip("/")
        self.raw_base_url = raw_base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent

    def file_url(self, owner: str, repo: str, branch: str, file_path: str) -> str:
        quoted_path = urllib.parse.quote(normalize_path(file_path))
        return f"{self.raw_base_url}/{owner}/{repo}/{branch}/{quoted_path}"

    def tree_url(self, owner: str, repo: str, branch: str) -> str:
        quoted_branch = urllib.parse.quote(branch, safe="")
        return f"{self.api_base_url}/repos/{owner}/{repo}/git/trees/{quoted_branch}?recursive=1"

    def _get(self, url: str, *, accept: str, failure: str) -> HttpResponse:
        headers = {"Accept": accept, "User-Agent": self.user_agent}
        LOG.debug("GET %s", url)
        try:
            response = _http_get(url, headers=headers, timeout=self.timeout_seconds)
        except OSError as exc:
            reason = getattr(exc, "reason", exc)
            raise GitHubFetchError(f"{failure}: {reason}") from exc
        if not response.ok:
            raise GitHubFetchError(f"{failure}: {response.status} {response.reason}".rstrip(), status=response.status)
        return response

    def _fetch_file_content_sync(self, owner: str, repo: str, branch: str, file_path: str) -> str:
        url = self.file_url(owner, repo, branch, file_path)
        response = self._get(url, accept="text/plain, */*", failure="Failed to fetch file")
        return response.body.decode("utf-8", errors="replace")

    def _fetch_directory_tree_sync(self, owner: str, repo: str, branch: str) -> dict[str, Any]:
        url = self.tree_url(owner, repo, branch)
        response = self._get(
            url,
            accept="application/vnd.github+json",
            failure="Failed to fetch directory tree",
        )
        try:
            decoded = json.loads(response.body.decode("utf-8", errors="replace"))
        except json.JSONDecodeError as exc:
            raise GitHubFetchError(f"Failed to fetch directory tree: invalid JSON ({exc.msg})") from exc
        if not isinstance(decoded, dict):
            raise GitHubFetchError("Failed to fetch directory tree: expected a JSON object")
        return decoded

    async def fetch_file_content(self, owner: str, repo: str, branch: str, file_path: str) -> str:
        return await asyncio.to_thread(self._fetch_file_content_sync, owner, repo, branch, file_path)

    async def fetch_directory_tree(self, owner: str, repo: str, branch: str, _dir_path: str = "") -> dict[str, Any]:
        # The recursive listing always covers the whole branch; the directory is applied by the renderers.
        return await asyncio.to_thread(self._fetch_directory_tree_sync, owner, repo, branch)

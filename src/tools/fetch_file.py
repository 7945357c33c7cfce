from __future__ import annotations

from github_fetcher import GitHubFetcher
from utils.paths import normalize_path
from utils.repo_identifier import RepoIdentifier


async def run(fetcher: GitHubFetcher, *, repo: RepoIdentifier, file_path: str) -> str:
    cleaned = file_path.strip()
    if not normalize_path(cleaned):
        raise ValueError("`file_path` is required")
    return await fetcher.fetch_file_content(repo.owner, repo.repo, repo.branch, cleaned)

from __future__ import annotations

import logging

from github_fetcher import GitHubFetcher
from tree_builder import entries_from_payload
from tree_formatter import render_plain
from utils.repo_identifier import RepoIdentifier

LOG = logging.getLogger(__name__)


async def run(fetcher: GitHubFetcher, *, repo: RepoIdentifier, dir_path: str) -> str:
    payload = await fetcher.fetch_directory_tree(repo.owner, repo.repo, repo.branch, dir_path)
    if payload.get("truncated"):
        LOG.warning("Tree listing for %s was truncated upstream; rendering partial listing.", repo.slug)
    return render_plain(entries_from_payload(payload), dir_path)

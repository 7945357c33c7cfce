from __future__ import annotations

import logging

from enhanced_tree_formatter import RenderOptions, render_enhanced
from github_fetcher import GitHubFetcher
from tree_builder import entries_from_payload
from utils.repo_identifier import RepoIdentifier

LOG = logging.getLogger(__name__)


async def run(
    fetcher: GitHubFetcher,
    *,
    repo: RepoIdentifier,
    dir_path: str,
    options: RenderOptions,
) -> str:
    payload = await fetcher.fetch_directory_tree(repo.owner, repo.repo, repo.branch, dir_path)
    if payload.get("truncated"):
        LOG.warning("Tree listing for %s was truncated upstream; rendering partial listing.", repo.slug)
    return render_enhanced(entries_from_payload(payload), dir_path, options)

from __future__ import annotations

from dataclasses import dataclass

FORMAT_ERROR = "Invalid repoIdentifier format. Expected: ownerName/repoName/branchName"
EMPTY_PART_ERROR = "Invalid repoIdentifier: owner, repo, and branch must not be empty"


@dataclass(frozen=True)
class RepoIdentifier:
    owner: str
    repo: str
    branch: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}/{self.branch}"


def parse_repo_identifier(value: str) -> RepoIdentifier:
    parts = value.split("/")
    if len(parts) != 3:
        raise ValueError(FORMAT_ERROR)

    owner, repo, branch = parts
    if not owner or not repo or not branch:
        raise ValueError(EMPTY_PART_ERROR)

    return RepoIdentifier(owner=owner, repo=repo, branch=branch)


def resolve_repo(
    fixed: RepoIdentifier | None,
    *,
    owner_name: str | None = None,
    repo_name: str | None = None,
    branch_name: str | None = None,
    default_branch: str = "main",
) -> RepoIdentifier:
    if fixed is not None:
        return fixed

    owner = (owner_name or "").strip()
    repo = (repo_name or "").strip()
    if not owner or not repo:
        raise ValueError("`owner_name` and `repo_name` are required")
    branch = (branch_name or "").strip() or default_branch
    return RepoIdentifier(owner=owner, repo=repo, branch=branch)

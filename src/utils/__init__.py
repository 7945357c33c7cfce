from .paths import normalize_path
from .repo_identifier import RepoIdentifier, parse_repo_identifier, resolve_repo

__all__ = ["normalize_path", "RepoIdentifier", "parse_repo_identifier", "resolve_repo"]

from __future__ import annotations

import argparse
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml
from fastmcp import FastMCP

from enhanced_tree_formatter import RenderOptions
from github_fetcher import DEFAULT_API_URL, DEFAULT_RAW_URL, DEFAULT_USER_AGENT, GitHubFetcher
from tools import fetch_file, fetch_sub_tree, fetch_subdir_tree
from utils.repo_identifier import RepoIdentifier, parse_repo_identifier, resolve_repo


LOG = logging.getLogger(__name__)

SERVER_NAME = "Repo_Tree_MCP"
TRANSPORTS = ("stdio", "http")
DEFAULT_PORT = 5000


@dataclass(frozen=True)
class ServerSettings:
    repo_identifier: RepoIdentifier | None = None
    default_branch: str = "main"
    github_api_url: str = DEFAULT_API_URL
    github_raw_url: str = DEFAULT_RAW_URL
    request_timeout_seconds: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    transport: str = "stdio"
    http_host: str = "127.0.0.1"
    http_port: int = DEFAULT_PORT
    log_level: str = "ERROR"


class RepoTreeEngine:
    def __init__(self, settings: ServerSettings, fetcher: GitHubFetcher | None = None) -> None:
        self.settings = settings
        self.repo_identifier = settings.repo_identifier
        self.default_branch = settings.default_branch
        self.fetcher = fetcher or GitHubFetcher(
            api_base_url=settings.github_api_url,
            raw_base_url=settings.github_raw_url,
            timeout_seconds=settings.request_timeout_seconds,
            user_agent=settings.user_agent,
        )

    def resolve_repo(
        self,
        owner_name: str | None = None,
        repo_name: str | None = None,
        branch_name: str | None = None,
    ) -> RepoIdentifier:
        return resolve_repo(
            self.repo_identifier,
            owner_name=owner_name,
            repo_name=repo_name,
            branch_name=branch_name,
            default_branch=self.default_branch,
        )

    def _log_call(self, *, tool: str, target: str, started: float, error: BaseException | None = None) -> None:
        duration_ms = int((time.perf_counter() - started) * 1000)
        if error is None:
            LOG.info("%s %s completed in %sms", tool, target, duration_ms)
        else:
            LOG.warning("%s %s failed after %sms: %s", tool, target, duration_ms, error)

    async def run_fetch_file(
        self,
        *,
        file_path: str,
        owner_name: str | None = None,
        repo_name: str | None = None,
        branch_name: str | None = None,
    ) -> str:
        repo = self.resolve_repo(owner_name, repo_name, branch_name)
        target = f"{repo.slug}:{file_path}"
        started = time.perf_counter()
        try:
            content = await fetch_file.run(self.fetcher, repo=repo, file_path=file_path)
        except Exception as exc:
            self._log_call(tool="fetch-file", target=target, started=started, error=exc)
            raise
        self._log_call(tool="fetch-file", target=target, started=started)
        return content

    async def run_fetch_subdir_tree(
        self,
        *,
        dir_path: str,
        owner_name: str | None = None,
        repo_name: str | None = None,
        branch_name: str | None = None,
    ) -> str:
        repo = self.resolve_repo(owner_name, repo_name, branch_name)
        target = f"{repo.slug}:{dir_path or '.'}"
        started = time.perf_counter()
        try:
            tree = await fetch_subdir_tree.run(self.fetcher, repo=repo, dir_path=dir_path)
        except Exception as exc:
            self._log_call(tool="fetch-subdir-tree", target=target, started=started, error=exc)
            raise
        self._log_call(tool="fetch-subdir-tree", target=target, started=started)
        return tree

    async def run_fetch_sub_tree(
        self,
        *,
        dir_path: str,
        show_size: bool | None = None,
        max_depth: int | None = None,
        show_stats: bool | None = None,
        file_ext_filter: list[str] | None = None,
        owner_name: str | None = None,
        repo_name: str | None = None,
        branch_name: str | None = None,
    ) -> str:
        repo = self.resolve_repo(owner_name, repo_name, branch_name)
        options = RenderOptions.from_tool_args(
            show_size=show_size,
            max_depth=max_depth,
            show_stats=show_stats,
            file_ext_filter=file_ext_filter,
        )
        target = f"{repo.slug}:{dir_path or '.'}"
        started = time.perf_counter()
        try:
            tree = await fetch_sub_tree.run(self.fetcher, repo=repo, dir_path=dir_path, options=options)
        except Exception as exc:
            self._log_call(tool="fetch-sub-tree", target=target, started=started, error=exc)
            raise
        self._log_call(tool="fetch-sub-tree", target=target, started=started)
        return tree


def load_config(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        return {}
    raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    return raw or {}


def resolve_server_home(environ: Mapping[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ
    return Path(env.get("REPO_TREE_MCP_HOME", Path(__file__).resolve().parents[1].as_posix())).resolve()


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="repo-tree-mcp", description="GitHub file and tree MCP server")
    parser.add_argument(
        "--repoIdentifier",
        dest="repo_identifier",
        help="Fix every tool to one repository, as ownerName/repoName/branchName",
    )
    parser.add_argument("--transport", choices=TRANSPORTS, default="stdio", help="transport type (default: stdio)")
    parser.add_argument("--port", type=int, default=None, help=f"port for HTTP transport (default: {DEFAULT_PORT})")
    parser.add_argument("--config", dest="config_path", default=None, help="path to config.yaml")
    return parser


def parse_cli_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.transport == "stdio" and args.port is not None:
        parser.error("The --port flag is not allowed when using --transport stdio.")
    if args.repo_identifier is not None:
        try:
            parse_repo_identifier(args.repo_identifier)
        except ValueError as exc:
            parser.error(str(exc))
    return args


def build_settings(
    config: Mapping[str, Any],
    args: argparse.Namespace | None = None,
    environ: Mapping[str, str] | None = None,
) -> ServerSettings:
    env = os.environ if environ is None else environ

    raw_identifier = str(config.get("repo_identifier") or "").strip()
    env_identifier = env.get("REPO_TREE_MCP_REPO_IDENTIFIER", "").strip()
    if env_identifier:
        raw_identifier = env_identifier
    if args is not None and args.repo_identifier:
        raw_identifier = args.repo_identifier
    repo_identifier = parse_repo_identifier(raw_identifier) if raw_identifier else None

    log_level = str(config.get("log_level", "ERROR"))
    env_log_level = env.get("REPO_TREE_MCP_LOG_LEVEL", "").strip()
    if env_log_level:
        log_level = env_log_level

    transport = "stdio"
    http_port = int(config.get("http_port", DEFAULT_PORT))
    if args is not None:
        transport = args.transport
        if args.port is not None:
            http_port = args.port

    return ServerSettings(
        repo_identifier=repo_identifier,
        default_branch=str(config.get("default_branch", "main")),
        github_api_url=str(config.get("github_api_url", DEFAULT_API_URL)),
        github_raw_url=str(config.get("github_raw_url", DEFAULT_RAW_URL)),
        request_timeout_seconds=float(config.get("request_timeout_seconds", 30)),
        user_agent=str(config.get("user_agent", DEFAULT_USER_AGENT)),
        transport=transport,
        http_host=str(config.get("http_host", "127.0.0.1")),
        http_port=http_port,
        log_level=log_level.upper(),
    )


def build_mcp(engine: RepoTreeEngine) -> FastMCP:
    mcp = FastMCP(SERVER_NAME)
    fixed = engine.repo_identifier
    tree_options_help = "Supports file sizes, depth limits, statistics, and extension filtering."

    if fixed is not None:

        @mcp.tool(
            name="fetch-file",
            description=f"Fetches file content from GitHub repository {fixed.slug}",
        )
        async def tool_fetch_file(file_path: str) -> str:
            return await engine.run_fetch_file(file_path=file_path)

        @mcp.tool(
            name="fetch-subdir-tree",
            description=f"Fetches directory tree from GitHub repository {fixed.slug}",
        )
        async def tool_fetch_subdir_tree(dir_path: str = "") -> str:
            return await engine.run_fetch_subdir_tree(dir_path=dir_path)

        @mcp.tool(
            name="fetch-sub-tree",
            description=(
                f"Fetches enhanced directory tree with options from GitHub repository {fixed.slug}. "
                + tree_options_help
            ),
        )
        async def tool_fetch_sub_tree(
            dir_path: str = "",
            show_size: bool = False,
            max_depth: int | None = None,
            show_stats: bool = True,
            file_ext_filter: list[str] | None = None,
        ) -> str:
            return await engine.run_fetch_sub_tree(
                dir_path=dir_path,
                show_size=show_size,
                max_depth=max_depth,
                show_stats=show_stats,
                file_ext_filter=file_ext_filter,
            )

        return mcp

    @mcp.tool(name="fetch-file", description="Fetches file content from a GitHub repository")
    async def tool_fetch_file_any(
        owner_name: str,
        repo_name: str,
        file_path: str,
        branch_name: str | None = None,
    ) -> str:
        return await engine.run_fetch_file(
            file_path=file_path,
            owner_name=owner_name,
            repo_name=repo_name,
            branch_name=branch_name,
        )

    @mcp.tool(name="fetch-subdir-tree", description="Fetches directory tree from a GitHub repository")
    async def tool_fetch_subdir_tree_any(
        owner_name: str,
        repo_name: str,
        dir_path: str = "",
        branch_name: str | None = None,
    ) -> str:
        return await engine.run_fetch_subdir_tree(
            dir_path=dir_path,
            owner_name=owner_name,
            repo_name=repo_name,
            branch_name=branch_name,
        )

    @mcp.tool(
        name="fetch-sub-tree",
        description="Fetches enhanced directory tree with options from a GitHub repository. " + tree_options_help,
    )
    async def tool_fetch_sub_tree_any(
        owner_name: str,
        repo_name: str,
        dir_path: str = "",
        branch_name: str | None = None,
        show_size: bool = False,
        max_depth: int | None = None,
        show_stats: bool = True,
        file_ext_filter: list[str] | None = None,
    ) -> str:
        return await engine.run_fetch_sub_tree(
            dir_path=dir_path,
            show_size=show_size,
            max_depth=max_depth,
            show_stats=show_stats,
            file_ext_filter=file_ext_filter,
            owner_name=owner_name,
            repo_name=repo_name,
            branch_name=branch_name,
        )

    return mcp


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_cli_args(argv)
    server_home = resolve_server_home()
    config_path = Path(args.config_path) if args.config_path else server_home / "config.yaml"
    settings = build_settings(load_config(config_path), args)

    # Keep stdio transport quiet for MCP clients that are sensitive to noisy startup logs.
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.ERROR))

    engine = RepoTreeEngine(settings)
    mcp = build_mcp(engine)
    if settings.repo_identifier is not None:
        LOG.info("Tools fixed to repository %s", settings.repo_identifier.slug)

    if settings.transport == "http":
        LOG.info("%s running on HTTP at http://%s:%s/mcp", SERVER_NAME, settings.http_host, settings.http_port)
        mcp.run(
            transport="http",
            host=settings.http_host,
            port=settings.http_port,
            show_banner=False,
            log_level=settings.log_level,
        )
    else:
        mcp.run(show_banner=False, log_level=settings.log_level)


if __name__ == "__main__":
    main()

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from tree_builder import Entry, TreeNode, build_tree
from tree_formatter import EMPTY_DIRECTORY, display_name, render_root
from tree_stats import TreeStats, collect_stats, subtree_totals

KB = 1024
MB = 1024 * KB
GB = 1024 * MB


@dataclass(frozen=True)
class RenderOptions:
    show_size: bool = False
    max_depth: int | None = None
    show_stats: bool | None = True
    file_ext_filter: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if self.max_depth is not None:
            if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int) or self.max_depth < 1:
                raise ValueError("max_depth must be a positive integer")
        if self.file_ext_filter is not None:
            object.__setattr__(self, "file_ext_filter", tuple(self.file_ext_filter) or None)

    @classmethod
    def from_tool_args(
        cls,
        *,
        show_size: bool | None = None,
        max_depth: int | None = None,
        show_stats: bool | None = None,
        file_ext_filter: Sequence[str] | str | None = None,
    ) -> "RenderOptions":
        if isinstance(file_ext_filter, str):
            file_ext_filter = file_ext_filter.split(",")
        extensions = [ext.strip() for ext in file_ext_filter or [] if isinstance(ext, str) and ext.strip()]
        return cls(
            show_size=bool(show_size),
            max_depth=max_depth,
            show_stats=show_stats is not False,
            file_ext_filter=tuple(extensions) or None,
        )


def format_size(num_bytes: int) -> str:
    if num_bytes == 0:
        return "0B"
    if num_bytes < KB:
        return f"{num_bytes}B"
    if num_bytes < MB:
        return f"{num_bytes / KB:.1f}KB"
    if num_bytes < GB:
        return f"{num_bytes / MB:.1f}MB"
    return f"{num_bytes / GB:.1f}GB"


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


def format_summary(stats: TreeStats) -> str:
    parts = [
        f"📊 Summary: {stats.total_dirs} {_plural(stats.total_dirs, 'directory', 'directories')}",
        f"{stats.total_files} {_plural(stats.total_files, 'file', 'files')}",
    ]
    if stats.total_size > 0:
        parts.append(f"{format_size(stats.total_size)} total")
    if stats.filtered_extensions:
        parts.append(f"(filtered: {', '.join(stats.filtered_extensions)})")
    if stats.depth_limited is not None:
        parts.append(f"(depth limited to {stats.depth_limited})")
    return ", ".join(parts)


def _sized_label(node: TreeNode, max_depth: int | None) -> str:
    name = display_name(node)
    if node.is_directory:
        file_count, total_size = subtree_totals(node, max_depth)
        if file_count == 0:
            return name
        return f"{name} ({file_count} {_plural(file_count, 'file', 'files')}, {format_size(total_size)})"
    if node.size is None:
        return name
    return f"{name} ({format_size(node.size)})"


def render_enhanced(
    entries: Iterable[Entry | Mapping[str, Any]],
    dir_path: str,
    options: RenderOptions | None = None,
) -> str:
    """Render the listing under `dir_path` with optional sizes and a summary.

    Directories are listed before files. The extension filter and depth bound
    are applied while the tree is built, so excluded entries never reach the
    size annotations or the summary line.
    """
    options = options or RenderOptions()
    items = list(entries)
    if not items:
        return EMPTY_DIRECTORY

    root = build_tree(
        items,
        dir_path,
        directories_first=True,
        ext_filter=options.file_ext_filter,
        max_depth=options.max_depth,
    )
    if not root.children:
        return EMPTY_DIRECTORY

    if options.show_size:
        lines = render_root(root, lambda node: _sized_label(node, options.max_depth))
    else:
        lines = render_root(root)
    result = "\n".join(lines)

    if options.show_stats is not False:
        stats = collect_stats(root, max_depth=options.max_depth, ext_filter=options.file_ext_filter)
        result += "\n\n" + format_summary(stats)
    return result

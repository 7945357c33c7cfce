from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

from tree_builder import TreeNode


@dataclass
class TreeStats:
    total_files: int = 0
    total_dirs: int = 0
    total_size: int = 0
    filtered_extensions: list[str] | None = None
    depth_limited: int | None = None


def iter_within_depth(node: TreeNode, max_depth: int | None = None) -> Iterator[TreeNode]:
    """Yield every descendant of `node` down to `max_depth`, pre-order.

    Nodes deeper than the bound are skipped together with their subtrees.
    """
    for child in node.children:
        if max_depth is not None and child.depth > max_depth:
            continue
        yield child
        if child.is_directory:
            yield from iter_within_depth(child, max_depth)


def subtree_totals(node: TreeNode, max_depth: int | None = None) -> tuple[int, int]:
    file_count = 0
    total_size = 0
    for descendant in iter_within_depth(node, max_depth):
        if not descendant.is_directory:
            file_count += 1
            total_size += descendant.size or 0
    return file_count, total_size


def collect_stats(
    root: TreeNode,
    *,
    max_depth: int | None = None,
    ext_filter: Sequence[str] | None = None,
) -> TreeStats:
    stats = TreeStats()
    for node in iter_within_depth(root, max_depth):
        if node.is_directory:
            stats.total_dirs += 1
        else:
            stats.total_files += 1
            stats.total_size += node.size or 0

    if ext_filter:
        stats.filtered_extensions = list(ext_filter)
    if max_depth is not None:
        stats.depth_limited = max_depth
    return stats

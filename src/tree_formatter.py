from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping

from tree_builder import Entry, TreeNode, build_tree

EMPTY_DIRECTORY = "(empty directory)"

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE_PREFIX = "│   "
SPACE_PREFIX = "    "


def display_name(node: TreeNode) -> str:
    return f"{node.name}/" if node.is_directory else node.name


def render_branches(
    node: TreeNode,
    prefix: str = "",
    label: Callable[[TreeNode], str] = display_name,
) -> list[str]:
    lines: list[str] = []
    last_index = len(node.children) - 1
    for index, child in enumerate(node.children):
        is_last = index == last_index
        lines.append(f"{prefix}{LAST_BRANCH if is_last else BRANCH}{label(child)}")
        if child.children:
            child_prefix = prefix + (SPACE_PREFIX if is_last else PIPE_PREFIX)
            lines.extend(render_branches(child, child_prefix, label))
    return lines


def render_root(root: TreeNode, label: Callable[[TreeNode], str] = display_name) -> list[str]:
    # Top-level entries carry no connector; only their descendants do.
    lines: list[str] = []
    for child in root.children:
        lines.append(label(child))
        lines.extend(render_branches(child, "", label))
    return lines


def render_plain(entries: Iterable[Entry | Mapping[str, Any]], dir_path: str) -> str:
    """Render the listing under `dir_path` as a `tree`-style outline.

    Files are listed before directories at every level. No sizes, no depth
    bound and no summary line.
    """
    items = list(entries)
    if not items:
        return EMPTY_DIRECTORY

    root = build_tree(items, dir_path, directories_first=False)
    if not root.children:
        return EMPTY_DIRECTORY

    return "\n".join(render_root(root))

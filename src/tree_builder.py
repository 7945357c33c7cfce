from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from utils.paths import normalize_path

BLOB = "blob"
TREE = "tree"


@dataclass(frozen=True)
class Entry:
    path: str
    type: str = BLOB
    size: int | None = None
    sha: str = ""

    @property
    def is_directory(self) -> bool:
        return self.type == TREE

    @classmethod
    def from_payload(cls, item: Mapping[str, Any]) -> "Entry":
        # Submodule pointers ("commit") and other unknown kinds are listed as plain files.
        kind = TREE if item.get("type") == TREE else BLOB
        raw_size = item.get("size")
        size = int(raw_size) if isinstance(raw_size, (int, float)) and not isinstance(raw_size, bool) else None
        if kind == TREE:
            size = None
        return cls(
            path=str(item.get("path", "")),
            type=kind,
            size=size,
            sha=str(item.get("sha", "")),
        )


def entries_from_payload(payload: Mapping[str, Any] | Sequence[Any]) -> list[Entry]:
    """Accept the upstream tree response (`{"tree": [...]}`) or a bare item list."""
    if isinstance(payload, Mapping):
        items = payload.get("tree") or []
    else:
        items = payload
    return [as_entry(item) for item in items if isinstance(item, (Entry, Mapping))]


def as_entry(item: Entry | Mapping[str, Any]) -> Entry:
    if isinstance(item, Entry):
        return item
    return Entry.from_payload(item)


@dataclass
class TreeNode:
    name: str
    is_directory: bool
    depth: int
    size: int | None = None
    children: list["TreeNode"] = field(default_factory=list)
    _by_name: dict[str, "TreeNode"] = field(default_factory=dict, repr=False, compare=False)

    def child(self, name: str) -> "TreeNode | None":
        return self._by_name.get(name)

    def add_child(self, node: "TreeNode") -> None:
        self._by_name[node.name] = node
        self.children.append(node)

    def promote_to_directory(self) -> None:
        # A name seen with descendants stays a directory for good.
        self.is_directory = True
        self.size = None


def matches_ext_filter(file_name: str, ext_filter: Sequence[str] | None) -> bool:
    if not ext_filter:
        return True
    return any(file_name.endswith(ext) for ext in ext_filter)


def relative_to_dir(entry_path: str, dir_path: str) -> str:
    """Return `entry_path` relative to `dir_path`, or "" when it is not beneath it.

    The directory marker itself (`entry_path == dir_path`) also yields "".
    """
    path = normalize_path(entry_path)
    if not dir_path:
        return path
    prefix = dir_path + "/"
    if not path.startswith(prefix):
        return ""
    return path[len(prefix) :]


def _insert(root: TreeNode, parts: list[str], entry: Entry, max_depth: int | None) -> None:
    truncated = max_depth is not None and len(parts) > max_depth
    if truncated:
        parts = parts[:max_depth]

    node = root
    last_index = len(parts) - 1
    for index, name in enumerate(parts):
        is_leaf = index == last_index
        implies_directory = not is_leaf or truncated or entry.is_directory
        child = node.child(name)
        if child is None:
            child = TreeNode(
                name=name,
                is_directory=implies_directory,
                depth=node.depth + 1,
                size=None if implies_directory else entry.size,
            )
            node.add_child(child)
        elif implies_directory and not child.is_directory:
            child.promote_to_directory()
        node = child


def _sort_children(node: TreeNode, directories_first: bool) -> None:
    if directories_first:
        node.children.sort(key=lambda child: (not child.is_directory, child.name))
    else:
        node.children.sort(key=lambda child: (child.is_directory, child.name))
    for child in node.children:
        if child.children:
            _sort_children(child, directories_first)


def build_tree(
    entries: Iterable[Entry | Mapping[str, Any]],
    dir_path: str,
    *,
    directories_first: bool,
    ext_filter: Sequence[str] | None = None,
    max_depth: int | None = None,
) -> TreeNode:
    """Fold a flat path listing into a tree rooted at `dir_path`.

    The returned root is synthetic (depth 0, empty name); its children are the
    entries directly beneath `dir_path`. With `ext_filter` set, file leaves
    that match none of the suffixes are dropped and directories only appear
    as ancestors of surviving files. With `max_depth` set, nothing deeper
    than the bound is inserted.
    """
    base = normalize_path(dir_path)
    root = TreeNode(name="", is_directory=True, depth=0)

    for raw in entries:
        entry = as_entry(raw)
        rel_path = relative_to_dir(entry.path, base)
        if not rel_path:
            continue
        parts = rel_path.split("/")
        if ext_filter:
            if entry.is_directory:
                continue
            if not matches_ext_filter(parts[-1], ext_filter):
                continue
        _insert(root, parts, entry, max_depth)

    _sort_children(root, directories_first)
    return root

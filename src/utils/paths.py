from __future__ import annotations

import re

_MULTI_SLASH = re.compile(r"/+")


def normalize_path(path: str) -> str:
    """Collapse a repository path to `a/b/c` form.

    Backslashes become forward slashes, leading and trailing slashes are
    dropped and runs of slashes collapse to one. `""` and `"///"` both
    normalize to `""`.
    """
    normalized = path.replace("\\", "/")
    normalized = normalized.strip("/")
    return _MULTI_SLASH.sub("/", normalized)

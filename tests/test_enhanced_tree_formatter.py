from __future__ import annotations

import pytest

from enhanced_tree_formatter import RenderOptions, format_size, format_summary, render_enhanced
from tree_builder import Entry
from tree_formatter import EMPTY_DIRECTORY, render_plain
from tree_stats import TreeStats


def _project_entries() -> list[Entry]:
    return [
        Entry("src", type="tree"),
        Entry("src/index.ts", size=1024),
        Entry("src/utils.ts", size=2048),
        Entry("README.md", size=50),
    ]


@pytest.mark.parametrize(
    ("num_bytes", "expected"),
    [
        (0, "0B"),
        (1, "1B"),
        (1023, "1023B"),
        (1024, "1.0KB"),
        (1536, "1.5KB"),
        (5242880, "5.0MB"),
        (1024**3, "1.0GB"),
    ],
)
def test_format_size(num_bytes: int, expected: str) -> None:
    assert format_size(num_bytes) == expected


def test_empty_inputs_render_reserved_literal_under_any_options() -> None:
    options = RenderOptions(show_size=True, max_depth=2, file_ext_filter=(".ts",))
    assert render_enhanced([], "") == EMPTY_DIRECTORY
    assert render_enhanced([], "", options) == EMPTY_DIRECTORY
    assert render_enhanced(_project_entries(), "missing", options) == EMPTY_DIRECTORY


def test_directories_first_with_sizes_and_summary() -> None:
    result = render_enhanced(_project_entries(), "", RenderOptions(show_size=True))
    expected = "\n".join(
        [
            "src/ (2 files, 3.0KB)",
            "├── index.ts (1.0KB)",
            "└── utils.ts (2.0KB)",
            "README.md (50B)",
            "",
            "📊 Summary: 1 directory, 3 files, 3.0KB total",
        ]
    )
    assert result == expected


def test_summary_is_appended_by_default() -> None:
    entries = [Entry("file1.ts", size=1024), Entry("file2.ts", size=2048)]
    result = render_enhanced(entries, "")
    assert result == "file1.ts\nfile2.ts\n\n📊 Summary: 0 directories, 2 files, 3.0KB total"


def test_show_stats_false_hides_summary() -> None:
    result = render_enhanced([Entry("file1.ts", size=100)], "", RenderOptions(show_stats=False))
    assert result == "file1.ts"


def test_unset_show_stats_keeps_summary() -> None:
    result = render_enhanced([Entry("a.ts", size=1)], "", RenderOptions(show_stats=None))
    assert result == "a.ts\n\n📊 Summary: 0 directories, 1 file, 1B total"


def test_max_depth_lists_cutoff_directory_without_children() -> None:
    entries = [Entry("a/b/c.ts", size=10)]
    result = render_enhanced(entries, "", RenderOptions(max_depth=1))
    assert result == "a/\n\n📊 Summary: 1 directory, 0 files, (depth limited to 1)"
    assert "b/" not in result
    assert "c.ts" not in result


def test_max_depth_excludes_deep_files_from_sizes() -> None:
    entries = [
        Entry("src", type="tree"),
        Entry("src/components", type="tree"),
        Entry("src/components/Button.tsx", size=8192),
        Entry("src/utils/helpers.ts", size=2048),
        Entry("README.md", size=1024),
    ]
    result = render_enhanced(entries, "", RenderOptions(show_size=True, max_depth=2))
    expected = "\n".join(
        [
            "src/",
            "├── components/",
            "└── utils/",
            "README.md (1.0KB)",
            "",
            "📊 Summary: 3 directories, 1 file, 1.0KB total, (depth limited to 2)",
        ]
    )
    assert result == expected


def test_extension_filter_excludes_files_from_listing_and_counts() -> None:
    entries = [
        Entry("file1.ts", size=100),
        Entry("file2.js", size=200),
        Entry("file3.md", size=300),
    ]
    result = render_enhanced(entries, "", RenderOptions(file_ext_filter=(".ts", ".js")))
    expected = "file1.ts\nfile2.js\n\n📊 Summary: 0 directories, 2 files, 300B total, (filtered: .ts, .js)"
    assert result == expected


def test_extension_filter_never_shows_emptied_directories() -> None:
    entries = [
        Entry("docs", type="tree"),
        Entry("docs/guide.md", size=10),
        Entry("src/app.ts", size=20),
    ]
    result = render_enhanced(entries, "", RenderOptions(show_size=True, file_ext_filter=(".ts",)))
    assert "docs" not in result
    assert result.startswith("src/ (1 file, 20B)\n└── app.ts (20B)")


def test_directory_wins_merge_in_enhanced_render() -> None:
    entries = [Entry("lib", size=10), Entry("lib/a.py", size=5)]
    result = render_enhanced(entries, "", RenderOptions(show_size=True, show_stats=False))
    assert result == "lib/ (1 file, 5B)\n└── a.py (5B)"


def test_directory_without_files_gets_no_annotation() -> None:
    entries = [Entry("empty", type="tree"), Entry("notes.txt", size=0)]
    result = render_enhanced(entries, "", RenderOptions(show_size=True, show_stats=False))
    assert result == "empty/\nnotes.txt (0B)"


def test_file_without_size_gets_no_annotation() -> None:
    result = render_enhanced([Entry("vendor")], "", RenderOptions(show_size=True, show_stats=False))
    assert result == "vendor"


def test_filter_path_scopes_enhanced_render() -> None:
    entries = _project_entries() + [Entry("tests", type="tree"), Entry("tests/test.ts", size=200)]
    result = render_enhanced(entries, "src", RenderOptions(show_stats=False))
    assert result == "index.ts\nutils.ts"


def test_plain_and_enhanced_agree_on_names() -> None:
    entries = [
        Entry("README.md", size=1),
        Entry("src/a.ts", size=1),
        Entry("src/lib/b.ts", size=1),
        Entry("docs", type="tree"),
    ]
    plain = render_plain(entries, "")
    enhanced = render_enhanced(entries, "", RenderOptions(show_stats=False))

    def names(text: str) -> set[str]:
        return {line.replace("├── ", "").replace("└── ", "").replace("│", "").strip() for line in text.splitlines()}

    assert names(plain) == names(enhanced)
    assert plain != enhanced


def test_format_summary_singular_words() -> None:
    stats = TreeStats(total_files=1, total_dirs=1, total_size=0)
    assert format_summary(stats) == "📊 Summary: 1 directory, 1 file"


def test_render_options_validation() -> None:
    with pytest.raises(ValueError):
        RenderOptions(max_depth=0)
    with pytest.raises(ValueError):
        RenderOptions.from_tool_args(max_depth=-3)

    options = RenderOptions.from_tool_args(file_ext_filter=[" .ts ", "", ".js"])
    assert options.file_ext_filter == (".ts", ".js")
    assert options.show_stats is True
    assert options.show_size is False

    assert RenderOptions.from_tool_args(file_ext_filter=[]).file_ext_filter is None
    assert RenderOptions.from_tool_args(file_ext_filter=".ts,.py").file_ext_filter == (".ts", ".py")
    assert RenderOptions.from_tool_args(show_stats=False).show_stats is False

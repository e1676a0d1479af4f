"""
Tests for the resolver — glob listing and mtime watching.
"""

import asyncio
import os
from pathlib import Path

import pytest

from src.core.services.theme.errors import ResolveError
from src.core.services.theme.resolver import (
    FileWatcher,
    expand_braces,
    resolve,
    strip_parents,
)


class TestExpandBraces:
    def test_no_braces(self):
        assert expand_braces("**/*.scss") == ["**/*.scss"]

    def test_alternation(self):
        assert expand_braces("**/*.{jpg,png,svg,yml}") == [
            "**/*.jpg", "**/*.png", "**/*.svg", "**/*.yml",
        ]

    def test_two_groups(self):
        assert expand_braces("{a,b}/{c,d}") == ["a/c", "a/d", "b/c", "b/d"]

    def test_nested(self):
        assert expand_braces("x.{js,{ts,tsx}}") == ["x.js", "x.ts", "x.tsx"]

    def test_duplicates_removed(self):
        assert expand_braces("{a,a}.txt") == ["a.txt"]


class TestStripParents:
    def test_strips_leading_parents(self):
        assert strip_parents("../../LICENSE") == "LICENSE"

    def test_keeps_plain_path(self):
        assert strip_parents("brands/github.svg") == "brands/github.svg"


class TestResolve:
    def test_styles_exclude_partials(self, theme_root: Path):
        files = resolve("**/[!_]*.scss", theme_root / "src")
        assert files == [
            "assets/stylesheets/main.scss",
            "assets/stylesheets/palette.scss",
        ]

    def test_script_entry_points_only(self, theme_root: Path):
        files = resolve("**/{bundle,search}.ts", theme_root / "src")
        assert files == [
            "assets/javascripts/bundle.ts",
            "assets/javascripts/workers/search.ts",
        ]

    def test_templates(self, theme_root: Path):
        files = resolve("**/*.{html,xml}", theme_root / "src")
        assert files == ["base.html", "partials/footer.html", "sitemap.xml"]

    def test_hidden_directories_included(self, theme_root: Path):
        files = resolve("**/*.{jpg,png,svg,yml}", theme_root / "src")
        assert ".icons/logo.svg" in files
        assert "mkdocs_theme.yml" in files

    def test_parent_reference(self, theme_root: Path):
        root = theme_root / "node_modules" / "@mdi" / "svg" / "svg"
        assert resolve("../LICENSE", root) == ["../LICENSE"]

    def test_literal_missing_file(self, theme_root: Path):
        assert resolve("NOPE", theme_root / "src") == []

    def test_forward_slashes(self, theme_root: Path):
        for f in resolve("**/*", theme_root / "src"):
            assert "\\" not in f

    def test_sorted_and_stable(self, theme_root: Path):
        first = resolve("**/*", theme_root / "src")
        assert first == sorted(first)
        assert resolve("**/*", theme_root / "src") == first

    def test_missing_root(self, tmp_path: Path):
        with pytest.raises(ResolveError, match="not found"):
            resolve("**/*.scss", tmp_path / "missing")

    def test_empty_pattern_after_parents(self, theme_root: Path):
        with pytest.raises(ResolveError, match="Invalid pattern"):
            resolve("../", theme_root / "src")


class TestFileWatcher:
    def _touch(self, path: Path, content: str) -> None:
        path.write_text(content)
        st = path.stat()
        # Force a visible mtime step even on coarse filesystems
        os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + 1_000_000_000))

    def test_no_changes(self, theme_root: Path):
        w = FileWatcher(theme_root / "src")
        w.track(["base.html"])
        assert w.poll() == []

    def test_detects_modification(self, theme_root: Path):
        w = FileWatcher(theme_root / "src")
        w.track(["base.html", "sitemap.xml"])
        self._touch(theme_root / "src" / "sitemap.xml", "<urlset/>")
        assert w.poll() == ["sitemap.xml"]
        assert w.poll() == []

    def test_detects_deletion(self, theme_root: Path):
        w = FileWatcher(theme_root / "src")
        w.track(["sitemap.xml"])
        (theme_root / "src" / "sitemap.xml").unlink()
        assert w.poll() == ["sitemap.xml"]

    def test_untracked_files_ignored(self, theme_root: Path):
        w = FileWatcher(theme_root / "src")
        w.track(["base.html"])
        (theme_root / "src" / "new.html").write_text("<p>")
        assert w.poll() == []

    def test_retrack_keeps_pending_change(self, theme_root: Path):
        w = FileWatcher(theme_root / "src")
        w.track(["sitemap.xml"])
        self._touch(theme_root / "src" / "sitemap.xml", "<urlset/>")
        w.track(["sitemap.xml", "base.html"])
        assert w.poll() == ["sitemap.xml"]

    @pytest.mark.asyncio
    async def test_changes_waits_for_change(self, theme_root: Path):
        w = FileWatcher(theme_root / "src", interval=0.02)
        w.track(["base.html"])

        async def _edit():
            await asyncio.sleep(0.05)
            self._touch(theme_root / "src" / "base.html", "<html>")

        edit = asyncio.create_task(_edit())
        changed = await asyncio.wait_for(w.changes(), timeout=5)
        await edit
        assert changed == ["base.html"]

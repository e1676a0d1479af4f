"""
Shared test fixtures and configuration.

``theme_root`` lays out a small theme project: styles (with a partial),
script entry points, templates, images, a script license file and one
vendor icon set.  ``toolchain`` builds MockTools that echo their input,
so no node tooling is needed.
"""

import asyncio
from pathlib import Path

import pytest

from src.adapters.mock import MockTool
from src.adapters.registry import Toolchain
from src.core.models.build import BuildSettings, IconSet

THEME_FILES = {
    "src/assets/stylesheets/main.scss": "body { color: red; }\n",
    "src/assets/stylesheets/palette.scss": ":root { --accent: blue; }\n",
    "src/assets/stylesheets/_colors.scss": "$red: #f00;\n",
    "src/assets/javascripts/bundle.ts": "console.log('bundle')\n",
    "src/assets/javascripts/workers/search.ts": "self.onmessage = () => {}\n",
    "src/assets/javascripts/helpers.ts": "export const x = 1\n",
    "src/assets/javascripts/LICENSE": "Third-party licenses\n\nMIT\n",
    "src/base.html": (
        "<link rel=\"stylesheet\" href=\"{{ 'assets/stylesheets/main.scss' | url }}\">\r\n"
        "\r\n"
        "<script src=\"assets/javascripts/bundle.ts\"></script>\r\n"
    ),
    "src/partials/footer.html": "<footer>assets/stylesheets/main.scss</footer>\n",
    "src/sitemap.xml": "<urlset></urlset>\n",
    "src/.icons/logo.svg": "<svg width=\"8\" height=\"8\"></svg>",
    "src/mkdocs_theme.yml": "extends: base\n",
    "node_modules/@mdi/svg/svg/account.svg": (
        "<svg width=\"24\" height=\"24\" viewBox=\"0 0 24 24\"><path d=\"M0\"/></svg>"
    ),
    "node_modules/@mdi/svg/svg/home.svg": (
        "<svg width=\"24\" height=\"24\" viewBox=\"0 0 24 24\"><path d=\"M1\"/></svg>"
    ),
    "node_modules/@mdi/svg/LICENSE": "Pictogrammers Free License\n",
}


def write_files(root: Path, files: dict[str, str]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8", newline="")


def snapshot(root: Path) -> dict[str, bytes]:
    """Every file under root, keyed by relative path."""
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


async def wait_until(predicate, timeout: float = 5.0, interval: float = 0.02) -> None:
    """Poll ``predicate`` until it holds, failing the test on timeout."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(interval)


def _strip_dimensions(args: list[str], data: bytes) -> bytes:
    return data.replace(b' width="24" height="24"', b"")


@pytest.fixture
def theme_root(tmp_path: Path) -> Path:
    """A theme project with sources, templates and one vendor icon set."""
    write_files(tmp_path, THEME_FILES)
    return tmp_path


@pytest.fixture
def settings(theme_root: Path) -> BuildSettings:
    return BuildSettings(
        project_root=theme_root,
        icon_sets=[
            IconSet(name="material", package="@mdi/svg/svg",
                    patterns=["*.svg", "../LICENSE"]),
        ],
        poll_interval=0.05,
    )


@pytest.fixture
def toolchain() -> Toolchain:
    return Toolchain(
        style=MockTool("sass"),
        script=MockTool("esbuild"),
        svg=MockTool("svgo", respond=_strip_dimensions),
        html=MockTool("html-minifier-terser"),
    )

"""
Tests for the style and script transform stages.
"""

import hashlib
from pathlib import Path

import pytest

from src.adapters.mock import MockTool
from src.core.models.build import BuildOptions
from src.core.services.theme.errors import TransformError
from src.core.services.theme.transform import (
    TransformStage,
    change_extension,
    content_address,
    script_stage,
    style_stage,
)


def _digest(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()[:8]


class TestHelpers:
    def test_change_extension(self):
        assert change_extension("assets/stylesheets/main.scss", ".css") == "assets/stylesheets/main.css"

    def test_content_address(self):
        data = b"body{color:red}"
        assert content_address("main.css", data) == f"main.{_digest(data)}.min.css"

    def test_content_address_depends_on_content(self):
        assert content_address("a.js", b"1") != content_address("a.js", b"2")


class TestStyleStage:
    @pytest.mark.asyncio
    async def test_entry_points_only(self, settings, toolchain):
        stage = style_stage(settings, toolchain, BuildOptions())
        batch = await stage.run(1)

        assert batch.stage == "styles"
        assert batch.generation == 1
        assert [m.key for m in batch.mappings] == [
            "assets/stylesheets/main.scss",
            "assets/stylesheets/palette.scss",
        ]
        assert [m.value for m in batch.mappings] == [
            "dist/assets/stylesheets/main.css",
            "dist/assets/stylesheets/palette.css",
        ]
        out = settings.output_dir / "assets" / "stylesheets"
        assert (out / "main.css").read_text() == "body { color: red; }\n"
        assert not (out / "_colors.css").exists()

    @pytest.mark.asyncio
    async def test_optimize_content_addressed(self, settings, toolchain):
        stage = style_stage(settings, toolchain, BuildOptions(optimize=True))
        batch = await stage.run(1)

        digest = _digest(b"body { color: red; }\n")
        main = batch.mappings[0]
        assert main.key == "assets/stylesheets/main.scss"
        assert main.value == f"dist/assets/stylesheets/main.{digest}.min.css"
        assert (settings.output_dir / "assets" / "stylesheets" / f"main.{digest}.min.css").is_file()
        assert not (settings.output_dir / "assets" / "stylesheets" / "main.css").exists()

    @pytest.mark.asyncio
    async def test_compiler_failure(self, settings, toolchain):
        toolchain.style.set_failure("palette.scss", "Undefined variable")
        stage = style_stage(settings, toolchain, BuildOptions())
        with pytest.raises(TransformError, match="Undefined variable") as exc_info:
            await stage.run(1)
        assert exc_info.value.source.endswith("palette.scss")


class TestScriptStage:
    @pytest.mark.asyncio
    async def test_entry_points_only(self, settings, toolchain):
        batch = await script_stage(settings, toolchain, BuildOptions()).run(3)

        assert batch.generation == 3
        assert dict((m.key, m.value) for m in batch.mappings) == {
            "assets/javascripts/bundle.ts": "dist/assets/javascripts/bundle.js",
            "assets/javascripts/workers/search.ts": "dist/assets/javascripts/workers/search.js",
        }
        assert not (settings.output_dir / "assets" / "javascripts" / "helpers.js").exists()
        assert toolchain.script.call_count == 2


class TestTransformStage:
    @pytest.mark.asyncio
    async def test_empty_match_is_empty_batch(self, tmp_path: Path):
        (tmp_path / "src").mkdir()
        stage = TransformStage(
            "styles",
            pattern="**/*.scss",
            extension=".css",
            compiler=MockTool("sass"),
            source_dir=tmp_path / "src",
            output_dir=tmp_path / "dist",
            output_root="dist",
        )
        batch = await stage.run(1)
        assert len(batch) == 0

    @pytest.mark.asyncio
    async def test_compiler_output_written(self, tmp_path: Path):
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "a.scss").write_text("a{}")
        stage = TransformStage(
            "styles",
            pattern="*.scss",
            extension=".css",
            compiler=MockTool("sass", respond=lambda args, data: b"compiled"),
            source_dir=tmp_path / "src",
            output_dir=tmp_path / "out",
            output_root="out",
        )
        batch = await stage.run(1)
        assert batch.mappings[0].value == "out/a.css"
        assert (tmp_path / "out" / "a.css").read_bytes() == b"compiled"

    @pytest.mark.asyncio
    async def test_unwritable_output_is_transform_error(self, tmp_path: Path):
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "a.scss").write_text("a{}")
        # A file where the output directory should be
        (tmp_path / "out").write_text("")
        stage = TransformStage(
            "styles",
            pattern="*.scss",
            extension=".css",
            compiler=MockTool("sass"),
            source_dir=tmp_path / "src",
            output_dir=tmp_path / "out",
            output_root="out",
        )
        with pytest.raises(TransformError, match="cannot write") as exc_info:
            await stage.run(1)
        assert exc_info.value.source.endswith("a.scss")

    @pytest.mark.asyncio
    async def test_output_root_with_trailing_slash(self, tmp_path: Path):
        (tmp_path / "src" / "css").mkdir(parents=True)
        (tmp_path / "src" / "css" / "a.scss").write_text("a{}")
        stage = TransformStage(
            "styles",
            pattern="**/*.scss",
            extension=".css",
            compiler=MockTool("sass"),
            source_dir=tmp_path / "src",
            output_dir=tmp_path / "out",
            output_root="out/",
        )
        batch = await stage.run(1)
        assert batch.mappings[0].value == "out/css/a.css"

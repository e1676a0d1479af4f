"""
Tests for configuration loading — theme-build.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest

from src.core.config.loader import ConfigError, find_settings_file, load_settings
from src.core.use_cases.config_check import check_config


@pytest.fixture
def settings_yml(tmp_path: Path) -> Path:
    """Create a theme-build.yml with a custom layout."""
    content = textwrap.dedent("""\
        source_root: theme
        output_root: site
        poll_interval: 0.2
        max_processes: 2
        icon_sets:
          - name: material
            package: "@mdi/svg/svg"
            patterns: ["*.svg", "../LICENSE"]
        tools:
          sass: npx sass
          esbuild: [node, esbuild.js]
    """)
    path = tmp_path / "theme-build.yml"
    path.write_text(content)
    (tmp_path / "theme").mkdir()
    return path


class TestFindSettingsFile:
    def test_in_directory(self, settings_yml: Path):
        assert find_settings_file(settings_yml.parent) == settings_yml.resolve()

    def test_walks_up(self, settings_yml: Path):
        nested = settings_yml.parent / "theme" / "partials"
        nested.mkdir(parents=True)
        assert find_settings_file(nested) == settings_yml.resolve()

    def test_not_found(self, tmp_path: Path):
        assert find_settings_file(tmp_path) is None


class TestLoadSettings:
    def test_custom_layout(self, settings_yml: Path):
        s = load_settings(settings_yml)
        assert s.project_root == settings_yml.parent.resolve()
        assert s.source_dir == (settings_yml.parent / "theme").resolve()
        assert s.output_dir == (settings_yml.parent / "site").resolve()
        assert s.poll_interval == 0.2
        assert s.max_processes == 2
        assert [i.name for i in s.icon_sets] == ["material"]

    def test_tool_commands_split(self, settings_yml: Path):
        s = load_settings(settings_yml)
        assert s.tools == {"sass": ["npx", "sass"], "esbuild": ["node", "esbuild.js"]}

    def test_defaults_for_empty_file(self, tmp_path: Path):
        path = tmp_path / "theme-build.yml"
        path.write_text("")
        s = load_settings(path)
        assert s.source_root == "src"
        assert s.output_root == "dist"
        assert len(s.icon_sets) == 5

    def test_build_wrapper_key(self, tmp_path: Path):
        path = tmp_path / "theme-build.yml"
        path.write_text("build:\n  output_root: public\n")
        assert load_settings(path).output_root == "public"

    def test_no_file_uses_cwd(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        s = load_settings()
        assert s.project_root == tmp_path.resolve()

    def test_explicit_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "theme-build.yml"
        path.write_text("icon_sets: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "theme-build.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_settings(path)

    def test_validation_error(self, tmp_path: Path):
        path = tmp_path / "theme-build.yml"
        path.write_text("poll_interval: 0\n")
        with pytest.raises(ConfigError, match="poll_interval"):
            load_settings(path)


class TestConfigCheck:
    def test_valid(self, settings_yml: Path):
        result = check_config(settings_yml)
        assert result.valid
        assert result.errors == []
        # The icon package is not installed in the temp project
        assert any("not installed" in w for w in result.warnings)

    def test_missing_source_root(self, settings_yml: Path):
        (settings_yml.parent / "theme").rmdir()
        result = check_config(settings_yml)
        assert not result.valid
        assert any("Source root" in e for e in result.errors)

    def test_same_source_and_output(self, tmp_path: Path):
        path = tmp_path / "theme-build.yml"
        path.write_text("source_root: src\noutput_root: src\n")
        (tmp_path / "src").mkdir()
        result = check_config(path)
        assert "Source and output roots must differ." in result.errors

    def test_duplicate_icon_sets(self, tmp_path: Path):
        path = tmp_path / "theme-build.yml"
        path.write_text(textwrap.dedent("""\
            icon_sets:
              - {name: a, package: x}
              - {name: a, package: y}
        """))
        (tmp_path / "src").mkdir()
        result = check_config(path)
        assert any("Duplicate icon set names: a" in e for e in result.errors)

    def test_invalid_file(self, tmp_path: Path):
        path = tmp_path / "theme-build.yml"
        path.write_text("max_processes: 0\n")
        result = check_config(path)
        assert not result.valid
        assert result.settings is None

    def test_to_dict(self, settings_yml: Path):
        d = check_config(settings_yml).to_dict()
        assert d["valid"] is True
        assert d["icon_set_count"] == 1
        assert d["config_path"] == str(settings_yml)

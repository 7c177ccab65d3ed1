"""
Tests for configuration loading — stylebuild.yml parsing and validation.
"""

import json
import textwrap
from pathlib import Path

import pytest

from stylebuild.core.config.loader import (
    ConfigError,
    find_config_file,
    load_config,
    load_package_metadata,
)
from stylebuild.core.models.build import BuildConfig, PackageMeta, StylesheetTarget


@pytest.fixture
def valid_config_yml(tmp_path: Path) -> Path:
    """Create a full stylebuild.yml in a temp directory."""
    content = textwrap.dedent("""\
        package:
          name: xp.css
          version: 0.2.3
          homepage: https://example.org/xp.css
        dist: build
        assets:
          template: "[name]-[hash].[ext]"
        stylesheets:
          - name: XP
            entry: themes/XP/index.scss
            output: XP.css
          - name: GUI
            entry: gui/index.scss
            output: GUI.scoped.css
            scope:
              prefix: .winXP
        docs:
          template: docs/page.html.j2
          highlight_css: highlight.css
    """)
    path = tmp_path / "stylebuild.yml"
    path.write_text(content)
    return path


class TestLoadConfig:
    def test_load_valid(self, valid_config_yml: Path):
        config = load_config(valid_config_yml)
        assert config.package.version == "0.2.3"
        assert config.package.homepage == "https://example.org/xp.css"
        assert config.dist == "build"
        assert config.assets.template == "[name]-[hash].[ext]"
        assert [s.name for s in config.stylesheets] == ["XP", "GUI"]
        assert config.docs is not None
        assert config.docs.template == "docs/page.html.j2"
        assert config.docs.highlight_css == "highlight.css"

    def test_scope_defaults_exceptions(self, valid_config_yml: Path):
        config = load_config(valid_config_yml)
        gui = config.get_stylesheet("GUI")
        assert gui is not None
        assert gui.scope is not None
        assert gui.scope.prefix == ".winXP"
        assert gui.scope.exceptions == ["body", ".surface"]
        assert config.get_stylesheet("XP").scope is None

    def test_metadata_from_package_json(self, tmp_path: Path):
        (tmp_path / "stylebuild.yml").write_text("dist: out\n")
        (tmp_path / "package.json").write_text(json.dumps({
            "version": "1.4.0", "homepage": "https://example.org",
        }))
        config = load_config(tmp_path / "stylebuild.yml")
        assert config.package.version == "1.4.0"
        assert config.dist == "out"

    def test_no_config_file_uses_defaults(self, tmp_path: Path):
        (tmp_path / "package.json").write_text(json.dumps({"version": "2.0.0"}))
        config = load_config(None, root=tmp_path)
        assert config.package.version == "2.0.0"
        assert [s.name for s in config.stylesheets] == ["98", "XP", "GUI"]
        assert config.dist == "dist"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "stylebuild.yml"
        path.write_text("package: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "stylebuild.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_invalid_schema(self, tmp_path: Path):
        path = tmp_path / "stylebuild.yml"
        path.write_text("package:\n  version: 1.0.0\nstylesheets:\n  - name: x\n")
        with pytest.raises(ConfigError, match="Invalid build configuration"):
            load_config(path)


class TestPackageMetadata:
    def test_missing_package_json(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="package.json"):
            load_package_metadata(tmp_path)

    def test_missing_version(self, tmp_path: Path):
        (tmp_path / "package.json").write_text(json.dumps({"name": "x"}))
        with pytest.raises(ConfigError, match="version"):
            load_package_metadata(tmp_path)

    def test_invalid_json(self, tmp_path: Path):
        (tmp_path / "package.json").write_text("{nope")
        with pytest.raises(ConfigError, match="Cannot read"):
            load_package_metadata(tmp_path)


class TestFindConfigFile:
    def test_find_in_current_dir(self, valid_config_yml: Path):
        assert find_config_file(valid_config_yml.parent) == valid_config_yml.resolve()

    def test_find_in_parent(self, valid_config_yml: Path):
        child = valid_config_yml.parent / "themes" / "XP"
        child.mkdir(parents=True)
        assert find_config_file(child) == valid_config_yml.resolve()


class TestBanner:
    def test_banner_uses_version_and_homepage(self):
        config = BuildConfig(package=PackageMeta(version="0.2.3", homepage="https://example.org"))
        target = StylesheetTarget(name="XP", entry="x.scss", output="XP.css")
        assert config.banner_for(target) == "/*! XP.css v0.2.3 - https://example.org */\n"

    def test_scoped_output_advertised_by_base_name(self):
        target = StylesheetTarget(name="GUI", entry="gui/index.scss", output="GUI.scoped.css")
        assert target.banner_name == "GUI.css"

    def test_explicit_banner_label(self):
        target = StylesheetTarget(name="98", entry="x.scss", output="98.css", banner="98.css (legacy)")
        assert target.banner_name == "98.css (legacy)"

    def test_banner_without_homepage(self):
        config = BuildConfig(package=PackageMeta(version="1.0.0"))
        target = StylesheetTarget(name="XP", entry="x.scss", output="XP.css")
        assert config.banner_for(target) == "/*! XP.css v1.0.0 */\n"

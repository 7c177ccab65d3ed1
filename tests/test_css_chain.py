"""
End-to-end tests for the transform chain (libsass included).
"""

import json
import textwrap
from pathlib import Path

import pytest

from stylebuild.core.models.build import ScopeConfig
from stylebuild.core.services.css import (
    ImportResolutionError,
    StyleSyntaxError,
    StylesheetSource,
    build_chain,
    map_path_for,
    write_result,
)
from tests.conftest import write

BANNER = "/*! XP.css v0.2.3 - https://example.org/xp.css */\n"


def _process(entry: Path, dist: Path, output: str, scope: ScopeConfig | None = None):
    source = StylesheetSource(
        text=entry.read_text(),
        origin=entry,
        banner=BANNER,
        destination=dist / output,
    )
    return build_chain(dist, scope=scope).process(source)


class TestBuildChain:
    def test_plain_stage_order(self, tmp_path: Path):
        chain = build_chain(tmp_path)
        assert chain.stage_names == [
            "imports", "nesting", "svg", "variables", "calc", "assets", "minify",
        ]

    def test_scoped_adds_scope_last(self, tmp_path: Path):
        chain = build_chain(tmp_path, scope=ScopeConfig(prefix=".winXP"))
        assert chain.stage_names[-1] == "scope"
        assert len(chain.stage_names) == 8


class TestProcess:
    def test_theme(self, style_project: Path):
        dist = style_project / "dist"
        result = _process(style_project / "themes" / "98" / "index.scss", dist, "98.css")

        assert result.css.startswith(BANNER.rstrip("\n"))
        assert "button{padding:6px}" in result.css
        assert ".window{background:silver url(bg.png)}" in result.css
        assert ".window .title{color:#fff}" in result.css
        assert "--face" not in result.css
        assert result.css.endswith("\n/*# sourceMappingURL=98.css.map */")
        assert (dist / "bg.png").is_file()
        assert result.warnings == []

    def test_variables_resolved(self, style_project: Path):
        result = _process(style_project / "themes" / "XP" / "index.scss",
                          style_project / "dist", "XP.css")
        assert "body{color:#000}" in result.css
        assert ":root" not in result.css

    def test_scoped(self, style_project: Path):
        result = _process(
            style_project / "gui" / "index.scss",
            style_project / "dist",
            "GUI.scoped.css",
            scope=ScopeConfig(prefix=".winXP"),
        )
        assert ".surface.winXP{color:red}" in result.css
        assert ".winXP .button{margin:.5px}" in result.css
        assert "body.winXP{margin:0}" in result.css

    def test_deterministic(self, style_project: Path):
        entry = style_project / "themes" / "98" / "index.scss"
        first = _process(entry, style_project / "dist", "98.css")
        second = _process(entry, style_project / "dist", "98.css")
        assert first.css == second.css
        assert first.map == second.map

    def test_source_map(self, style_project: Path):
        result = _process(style_project / "themes" / "XP" / "index.scss",
                          style_project / "dist", "XP.css")
        data = json.loads(result.map)
        assert data["version"] == 3
        assert data["file"] == "XP.css"
        assert isinstance(data["mappings"], str)

    def test_source_map_points_into_partials(self, style_project: Path):
        theme = style_project / "themes" / "98"
        result = _process(theme / "index.scss", style_project / "dist", "98.css")
        data = json.loads(result.map)

        partial = "../themes/98/partials/_button.scss"
        assert partial in data["sources"]
        assert "../themes/98/index.scss" in data["sources"]
        content = data["sourcesContent"][data["sources"].index(partial)]
        assert content == (theme / "partials" / "_button.scss").read_text()

    def test_css_and_media_imports_inlined(self, tmp_path: Path):
        write(tmp_path / "base.css", "a {\n  color: blue;\n}\n")
        write(tmp_path / "print.css", "a {\n  color: black;\n}\n")
        entry = write(tmp_path / "index.scss", '@import url(base.css);\n@import "print.css" print;\n')

        result = _process(entry, tmp_path / "dist", "out.css")

        assert "a{color:blue}@media print{a{color:#000}}" in result.css
        assert "@import" not in result.css

    def test_repeated_import_inlined_once(self, tmp_path: Path):
        write(tmp_path / "_a.scss", ".a {\n  color: red;\n}\n")
        entry = write(tmp_path / "index.scss", '@import "a";\n@import "a";\n')
        result = _process(entry, tmp_path / "dist", "out.css")
        assert result.css.count(".a{color:red}") == 1

    def test_remote_import_kept(self, tmp_path: Path):
        entry = write(tmp_path / "index.scss", "@import url(https://fonts.example.org/tahoma.css);\n")
        result = _process(entry, tmp_path / "dist", "out.css")
        assert "@import url(https://fonts.example.org/tahoma.css)" in result.css

    def test_missing_import(self, tmp_path: Path):
        entry = write(tmp_path / "index.scss", '.a {\n  color: red;\n}\n@import "nope";\n')
        with pytest.raises(ImportResolutionError) as exc_info:
            _process(entry, tmp_path / "dist", "out.css")
        assert "failed to find 'nope'" in str(exc_info.value)
        assert exc_info.value.source == str(entry.resolve())
        assert exc_info.value.line == 4
        assert exc_info.value.stage == "imports"

    def test_svg_load_survives_libsass(self, tmp_path: Path):
        write(tmp_path / "icon.svg", '<svg xmlns="http://www.w3.org/2000/svg"><path d="M0 0"/></svg>')
        entry = write(tmp_path / "index.scss", '.icon {\n  background: svg-load("icon.svg", fill=#000);\n}\n')

        result = _process(entry, tmp_path / "dist", "out.css")

        assert "svg-load" not in result.css
        assert 'data:image/svg+xml;charset=utf-8,' in result.css
        assert "fill='%23000'" in result.css

    def test_scoped_inside_media(self, tmp_path: Path):
        entry = write(tmp_path / "index.scss", textwrap.dedent("""\
            @media (max-width: 600px) {
              .button {
                margin: 0;
              }
            }
        """))
        result = _process(entry, tmp_path / "dist", "out.css", scope=ScopeConfig(prefix=".winXP"))
        assert "@media (max-width:600px){.winXP .button{margin:0}}" in result.css

    def test_preserved_comment_inside_rule(self, tmp_path: Path):
        entry = write(tmp_path / "index.scss", ".a {\n  color: red;\n  /*! keep */\n  margin: 0;\n}\n")
        result = _process(entry, tmp_path / "dist", "out.css")
        assert ".a{color:red;/*! keep */margin:0}" in result.css

    def test_syntax_error(self, tmp_path: Path):
        entry = write(tmp_path / "index.scss", ".a {\n  color: red;\n")
        with pytest.raises(StyleSyntaxError) as exc_info:
            _process(entry, tmp_path / "dist", "out.css")
        assert exc_info.value.stage == "nesting"


class TestWriteResult:
    def test_writes_pair(self, style_project: Path):
        dist = style_project / "dist"
        result = _process(style_project / "themes" / "XP" / "index.scss", dist, "XP.css")
        css_path, map_path = write_result(result, dist / "XP.css")

        assert map_path == map_path_for(css_path) == dist / "XP.css.map"
        assert css_path.read_text() == result.css
        assert json.loads(map_path.read_text())["file"] == "XP.css"

"""
Tests for the build pipeline — task ordering, failure handling, use case.
"""

from pathlib import Path

from stylebuild.core.models.build import BuildConfig, PackageMeta
from stylebuild.core.services.css import ImportResolutionError
from stylebuild.core.services.pipeline import (
    BuildContext,
    BuildTask,
    StageInfo,
    default_tasks,
    run_pipeline,
)
from stylebuild.core.use_cases.build import run_build
from tests.conftest import write


class _FakeTask(BuildTask):
    def __init__(self, name: str, error: Exception | None = None):
        self.name = name
        self.error = error
        self.ran = False

    def info(self) -> StageInfo:
        return StageInfo(self.name, f"Run {self.name}")

    def run(self, ctx: BuildContext):
        self.ran = True
        yield f"{self.name} started"
        if self.error is not None:
            raise self.error
        yield f"{self.name} done"


def _ctx(tmp_path: Path) -> BuildContext:
    return BuildContext(root=tmp_path, config=BuildConfig(package=PackageMeta(version="1.0.0")))


class TestRunPipeline:
    def test_all_done(self, tmp_path: Path):
        tasks = [_FakeTask("a"), _FakeTask("b")]
        result = run_pipeline(tasks, _ctx(tmp_path))

        assert result.ok
        assert [s.status for s in result.stages] == ["done", "done"]
        assert result.stages[0].log_lines == ["a started", "a done"]
        assert result.dist_dir == str(tmp_path / "dist")
        assert result.failed_stage is None

    def test_failure_skips_rest(self, tmp_path: Path):
        later = _FakeTask("c")
        tasks = [_FakeTask("a"), _FakeTask("b", RuntimeError("boom")), later]
        result = run_pipeline(tasks, _ctx(tmp_path))

        assert not result.ok
        assert [s.status for s in result.stages] == ["done", "error", "skipped"]
        assert not later.ran
        failed = result.failed_stage
        assert failed.name == "b"
        assert failed.error == "boom"
        assert failed.error_type == "RuntimeError"
        assert failed.log_lines == ["b started"]

    def test_stylesheet_error_tagged_with_chain_stage(self, tmp_path: Path):
        error = ImportResolutionError("failed to find 'x'", source="a.scss", line=3)
        result = run_pipeline([_FakeTask("css:XP", error)], _ctx(tmp_path))

        stage = result.stages[0]
        assert stage.error_type == "ImportResolutionError"
        assert stage.detail == {"chain_stage": "imports"}
        assert stage.to_dict()["error"] == "a.scss:3: failed to find 'x'"

    def test_to_dict(self, tmp_path: Path):
        result = run_pipeline([_FakeTask("a")], _ctx(tmp_path))
        data = result.to_dict()
        assert data["ok"] is True
        assert data["stages"][0]["name"] == "a"
        assert "error" not in data["stages"][0]


class TestDefaultTasks:
    def test_order(self):
        config = BuildConfig(package=PackageMeta(version="1.0.0"))
        names = [t.info().name for t in default_tasks(config)]
        assert names == ["css:98", "css:XP", "css:GUI", "docs"]

    def test_no_docs(self):
        config = BuildConfig(package=PackageMeta(version="1.0.0"), docs=None)
        names = [t.info().name for t in default_tasks(config)]
        assert "docs" not in names


class TestRunBuild:
    def test_full_build(self, style_project: Path):
        result = run_build(root=style_project)

        assert result.ok, result.to_dict()
        dist = style_project / "dist"
        for name in ("98.css", "98.css.map", "XP.css", "XP.css.map",
                     "GUI.scoped.css", "GUI.scoped.css.map", "bg.png",
                     "index.html", "extra.png", "docs.css"):
            assert (dist / name).is_file(), name

        assert (dist / "98.css").read_text().startswith(
            "/*! 98.css v0.2.3 - https://example.org/xp.css */"
        )
        assert (dist / "GUI.scoped.css").read_text().startswith(
            "/*! GUI.css v0.2.3 - https://example.org/xp.css */"
        )
        assert "xp.css 0.2.3" in (dist / "index.html").read_text()

    def test_failure_stops_build(self, style_project: Path):
        write(style_project / "themes" / "XP" / "index.scss", '@import "missing";\n')
        result = run_build(root=style_project)

        assert not result.ok
        statuses = {s.name: s.status for s in result.pipeline.stages}
        assert statuses == {
            "css:98": "done", "css:XP": "error", "css:GUI": "skipped", "docs": "skipped",
        }
        assert not (style_project / "dist" / "index.html").exists()

    def test_config_error(self, tmp_path: Path):
        result = run_build(root=tmp_path)
        assert not result.ok
        assert result.pipeline is None
        assert "package.json" in result.error
        assert result.to_dict() == {"ok": False, "error": result.error}

    def test_yaml_config(self, style_project: Path):
        write(style_project / "stylebuild.yml", (
            "dist: out\n"
            "stylesheets:\n"
            "  - name: XP\n"
            "    entry: themes/XP/index.scss\n"
            "    output: XP.css\n"
            "docs: null\n"
        ))
        result = run_build(root=style_project)

        assert result.ok, result.to_dict()
        assert [s.name for s in result.pipeline.stages] == ["css:XP"]
        assert (style_project / "out" / "XP.css").is_file()

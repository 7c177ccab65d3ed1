"""
Build tasks — one per stylesheet, plus the documentation page.

Default order follows the configuration: the themes, then the scoped
base toolkit, then the docs (which embed the compiled styles).
"""

from __future__ import annotations

from stylebuild.core.models.build import BuildConfig, DocsConfig, StylesheetTarget
from stylebuild.core.services.css import StylesheetError, StylesheetSource, build_chain, write_result
from stylebuild.core.services.docs import build_docs

from .base import BuildContext, BuildTask, LogStream, StageInfo


class StylesheetTask(BuildTask):
    """Compile one stylesheet tree into ``<dist>/<output>`` and its map."""

    def __init__(self, target: StylesheetTarget):
        self.target = target

    def info(self) -> StageInfo:
        scoped = f", scoped under {self.target.scope.prefix}" if self.target.scope else ""
        return StageInfo(
            f"css:{self.target.name}",
            f"Build {self.target.output}",
            f"{self.target.entry} → {self.target.output}{scoped}",
        )

    def run(self, ctx: BuildContext) -> LogStream:
        entry = ctx.root / self.target.entry
        destination = ctx.dist_dir / self.target.output

        yield f"Source: {entry}"
        try:
            text = entry.read_text(encoding="utf-8")
        except OSError as e:
            raise StylesheetError(f"cannot read entry stylesheet: {e}", source=str(entry)) from e

        source = StylesheetSource(
            text=text,
            origin=entry,
            banner=ctx.config.banner_for(self.target),
            destination=destination,
        )
        chain = build_chain(ctx.dist_dir, ctx.config.assets.template, self.target.scope)
        yield f"Stages: {' → '.join(chain.stage_names)}"

        result = chain.process(source)
        for warning in result.warnings:
            yield f"⚠ {warning}"
        for asset in result.assets:
            yield f"Copied asset {asset.name}"

        css_path, map_path = write_result(result, destination)
        yield f"Wrote {css_path} ({len(result.css)} bytes)"
        yield f"Wrote {map_path}"


class DocsTask(BuildTask):
    """Render the documentation page and copy its assets."""

    def __init__(self, docs: DocsConfig):
        self.docs = docs

    def info(self) -> StageInfo:
        return StageInfo("docs", "Render Documentation", f"{self.docs.template} → {self.docs.output}")

    def run(self, ctx: BuildContext) -> LogStream:
        template = ctx.root / self.docs.template
        yield f"Template: {template}"

        package = ctx.config.package
        result = build_docs(
            template_path=template,
            source_dir=ctx.root / self.docs.source_dir,
            dist_dir=ctx.dist_dir,
            output_name=self.docs.output,
            context={"version": package.version, "homepage": package.homepage},
            highlight_css=self.docs.highlight_css,
            highlight_style=self.docs.highlight_style,
        )
        yield f"Copied {len(result.assets)} docs assets"
        if result.highlight_css:
            yield f"Wrote {result.highlight_css}"
        yield f"Wrote {result.index}"


def default_tasks(config: BuildConfig) -> list[BuildTask]:
    """Stylesheets in configured order, then the docs page."""
    tasks: list[BuildTask] = [StylesheetTask(t) for t in config.stylesheets]
    if config.docs is not None:
        tasks.append(DocsTask(config.docs))
    return tasks

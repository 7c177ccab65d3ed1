"""
Transform chain — runs the stages in order and emits CSS plus a source map.

Two configurations are built by ``build_chain``: the plain chain used
for the themes, and the scoped chain (plain + selector scoping) used
for the base toolkit so its rules cannot leak onto a host page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from stylebuild.core.models.build import ScopeConfig

from .assets import AssetCopyStage
from .base import ChainState, Stage, StylesheetSource
from .calc import CalcStage
from .imports import ImportStage
from .minify import MinifyStage
from .nesting import NestingStage
from .render import render_stylesheet
from .scope import ScopeStage
from .sourcemap import SourceMapBuilder
from .svg import SvgInlineStage
from .variables import VariablesStage

logger = logging.getLogger(__name__)

MAP_SUFFIX = ".map"


@dataclass
class ChainResult:
    """CSS text and its source map, ready to be written as a pair."""

    css: str
    map: str
    warnings: list[str] = field(default_factory=list)
    assets: list[Path] = field(default_factory=list)


class TransformChain:
    """An ordered list of stages applied to one stylesheet at a time."""

    def __init__(self, stages: list[Stage]):
        self.stages = list(stages)

    @property
    def stage_names(self) -> list[str]:
        return [s.name for s in self.stages]

    def process(self, source: StylesheetSource) -> ChainResult:
        """Run every stage over *source*.

        Raises:
            StylesheetError: From the first stage that fails.
        """
        state = ChainState(source=source, text=source.text)
        for stage in self.stages:
            logger.debug("%s: running %s", source.origin, stage.name)
            stage.apply(state)

        destination = source.destination
        source_map = SourceMapBuilder(file=destination.name, map_dir=destination.resolve().parent)
        css = render_stylesheet(state.require_sheet(), source_map)
        css = f"{css}\n/*# sourceMappingURL={destination.name}{MAP_SUFFIX} */"

        return ChainResult(
            css=css,
            map=source_map.to_json(state.sources),
            warnings=state.warnings,
            assets=state.assets,
        )


def build_chain(
    assets_dir: Path,
    asset_template: str = "[name].[ext]",
    scope: ScopeConfig | None = None,
) -> TransformChain:
    """Assemble the standard chain, scoped when *scope* is given."""
    stages: list[Stage] = [
        ImportStage(),
        NestingStage(),
        SvgInlineStage(),
        VariablesStage(),
        CalcStage(),
        AssetCopyStage(assets_dir, asset_template),
        MinifyStage(),
    ]
    if scope is not None:
        stages.append(ScopeStage(scope.prefix, scope.exceptions))
    return TransformChain(stages)


def map_path_for(destination: Path) -> Path:
    return destination.with_name(destination.name + MAP_SUFFIX)


def write_result(result: ChainResult, destination: Path) -> tuple[Path, Path]:
    """Write the CSS and its map side by side, creating the directory."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    map_path = map_path_for(destination)
    destination.write_text(result.css, encoding="utf-8")
    map_path.write_text(result.map, encoding="utf-8")
    return destination, map_path

"""
Build use case — load configuration and run every build task.

The full vertical slice from "build" to files in the distribution
directory: config → tasks → pipeline → per-stage results.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from stylebuild.core.config.loader import ConfigError, find_config_file, load_config
from stylebuild.core.models.build import BuildConfig
from stylebuild.core.services.pipeline import (
    BuildContext,
    PipelineResult,
    default_tasks,
    run_pipeline,
)

logger = logging.getLogger(__name__)


@dataclass
class BuildRunResult:
    """Result of a full build."""

    pipeline: PipelineResult | None = None
    config: BuildConfig | None = None
    project_root: Path | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.pipeline is not None and self.pipeline.ok

    def to_dict(self) -> dict:
        result: dict = {"ok": self.ok}
        if self.error:
            result["error"] = self.error
            return result

        result["project_root"] = str(self.project_root)
        if self.config:
            result["version"] = self.config.package.version
        if self.pipeline:
            result["pipeline"] = self.pipeline.to_dict()
        return result


def run_build(config_path: Path | None = None, root: Path | None = None) -> BuildRunResult:
    """Run the configured build.

    Args:
        config_path: Optional explicit path to stylebuild.yml.
        root: Directory to search from (default: cwd). Without a config
            file, this directory's package.json supplies the metadata.

    Returns:
        BuildRunResult with the pipeline outcome, or ``error`` set when
        the configuration could not be loaded.
    """
    result = BuildRunResult()

    if config_path is None:
        config_path = find_config_file(root)
    project_root = config_path.parent.resolve() if config_path else (root or Path.cwd()).resolve()
    result.project_root = project_root

    try:
        config = load_config(config_path, project_root)
    except ConfigError as e:
        logger.error("%s", e)
        result.error = str(e)
        return result
    result.config = config

    ctx = BuildContext(root=project_root, config=config)
    result.pipeline = run_pipeline(default_tasks(config), ctx)

    if result.pipeline.ok:
        logger.info("Build finished in %d ms", result.pipeline.total_duration_ms)
    return result

"""
Build pipeline base — an explicit, ordered list of build tasks.

Pipeline model
──────────────
Every task is one independently runnable step (one stylesheet, or the
docs page). Each task:
  - Reads its inputs from the project root.
  - Yields log lines as it runs.
  - Reports its own duration, status, and any error.

The pipeline is driven by ``run_pipeline``:
  for task in tasks:
      for log_line in task.run(ctx):
          ...

Tasks run strictly in sequence so console output and failure reports
stay ordered. The first failing task stops the pipeline; later tasks
are recorded as "skipped". Nothing is retried or rolled back.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Generator

from stylebuild.core.models.build import BuildConfig

logger = logging.getLogger(__name__)


# ── Data Models ─────────────────────────────────────────────────────


LogStream = Generator[str, None, None]


@dataclass
class BuildContext:
    """Everything a task needs to locate its inputs and outputs."""

    root: Path
    config: BuildConfig

    @property
    def dist_dir(self) -> Path:
        return self.root / self.config.dist


@dataclass
class StageInfo:
    """Declaration of a pipeline stage (before execution)."""

    name: str                           # Machine name: "css:98", "docs"
    label: str                          # Human label: "Build 98.css"
    description: str = ""


@dataclass
class StageResult:
    """Result of executing one pipeline stage."""

    name: str
    label: str
    status: str = "pending"             # "pending" | "running" | "done" | "error" | "skipped"
    duration_ms: int = 0
    log_lines: list[str] = field(default_factory=list)
    error: str = ""
    error_type: str = ""                # Exception class name of the failure
    detail: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        data: dict = {
            "name": self.name,
            "label": self.label,
            "status": self.status,
            "duration_ms": self.duration_ms,
        }
        if self.error:
            data["error"] = self.error
            data["error_type"] = self.error_type
        if self.detail:
            data["detail"] = self.detail
        return data


@dataclass
class PipelineResult:
    """Result of a full pipeline execution."""

    stages: list[StageResult] = field(default_factory=list)
    ok: bool = False
    total_duration_ms: int = 0
    dist_dir: str = ""

    @property
    def failed_stage(self) -> StageResult | None:
        for stage in self.stages:
            if stage.status == "error":
                return stage
        return None

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "total_duration_ms": self.total_duration_ms,
            "dist_dir": self.dist_dir,
            "stages": [s.to_dict() for s in self.stages],
        }


# ── Task Interface ──────────────────────────────────────────────────


class BuildTask(ABC):
    """One step of the build.

    Tasks must implement:
      - info()  — stage name and label
      - run()   — do the work, yielding log lines
    """

    @abstractmethod
    def info(self) -> StageInfo:
        """Return the stage declaration for this task."""

    @abstractmethod
    def run(self, ctx: BuildContext) -> LogStream:
        """Execute the task.

        This is a generator: yield one string per log line.

        Raises:
            Exception: Any failure. The pipeline catches it and records
                       it on the StageResult.
        """


# ── Pipeline Runner ─────────────────────────────────────────────────


def run_pipeline(tasks: list[BuildTask], ctx: BuildContext) -> PipelineResult:
    """Run tasks in order, stopping at the first failure.

    Returns:
        PipelineResult with one StageResult per task.
    """
    stages_info = [t.info() for t in tasks]
    result = PipelineResult(dist_dir=str(ctx.dist_dir))

    total_start = time.monotonic()
    all_ok = True

    for index, (task, si) in enumerate(zip(tasks, stages_info)):
        sr = StageResult(name=si.name, label=si.label, status="running")
        stage_start = time.monotonic()
        logger.info("▶ %s", si.label)

        try:
            for line in task.run(ctx):
                logger.debug("[%s] %s", si.name, line)
                sr.log_lines.append(line)
            sr.status = "done"
        except Exception as e:
            sr.status = "error"
            sr.error = str(e)
            sr.error_type = type(e).__name__
            chain_stage = getattr(e, "stage", "")
            if chain_stage:
                sr.detail["chain_stage"] = chain_stage
            logger.error("%s failed: %s", si.label, e)
            all_ok = False

        sr.duration_ms = int((time.monotonic() - stage_start) * 1000)
        result.stages.append(sr)

        if not all_ok:
            for rem in stages_info[index + 1:]:
                result.stages.append(
                    StageResult(name=rem.name, label=rem.label, status="skipped")
                )
            break

    result.ok = all_ok
    result.total_duration_ms = int((time.monotonic() - total_start) * 1000)
    return result

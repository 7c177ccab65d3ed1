"""
Build pipeline — ordered build tasks with per-stage results.
"""

from __future__ import annotations

from .base import (
    BuildContext,
    BuildTask,
    LogStream,
    PipelineResult,
    StageInfo,
    StageResult,
    run_pipeline,
)
from .tasks import DocsTask, StylesheetTask, default_tasks

__all__ = [
    "BuildContext",
    "BuildTask",
    "DocsTask",
    "LogStream",
    "PipelineResult",
    "StageInfo",
    "StageResult",
    "StylesheetTask",
    "default_tasks",
    "run_pipeline",
]

"""Domain models for the build configuration."""

from stylebuild.core.models.build import (
    AssetConfig,
    BuildConfig,
    DocsConfig,
    PackageMeta,
    ScopeConfig,
    StylesheetTarget,
)

__all__ = [
    "AssetConfig",
    "BuildConfig",
    "DocsConfig",
    "PackageMeta",
    "ScopeConfig",
    "StylesheetTarget",
]
